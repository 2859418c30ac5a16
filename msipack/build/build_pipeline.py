"""
构建管道模块

使用管道模式按顺序执行构建步骤：暂存 -> 编译 -> 链接 -> 收尾。
任何一步失败都会终止整个构建，不做重试。
"""

import time
from typing import List, Optional

from ..utils import format_size
from ..utils.logging import info, success, error, debug, LogStage
from .build_context import BuildContext, BuildError, BuildState
from .steps.build_step import BuildStep


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(self, steps: Optional[List[BuildStep]] = None):
        self._steps: List[BuildStep] = list(steps) if steps is not None else []

    def execute(self, context: BuildContext) -> BuildContext:
        """执行构建管道

        Args:
            context: 处于 IDLE 状态的构建上下文

        Returns:
            BuildContext: 状态为 DONE 的构建上下文

        Raises:
            BuildError: 构建失败，上下文状态为 FAILED，暂存目录和残缺的安装包都已删除
        """
        if context.state != BuildState.IDLE:
            raise BuildError(f"构建上下文已被使用 (状态: {context.state.value})")

        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始构建安装包: {context.artifact_path} ({context.arch.value})", stage=LogStage.BUILD)
            debug(
                f"构建配置: app_dir={context.app_out_dir} main_exe={context.main_exe_file_name} "
                f"vm={context.vm.name}",
                stage=LogStage.BUILD,
            )

            for step in self._steps:
                info(f"执行步骤: {step.description}", stage=LogStage.BUILD)
                step.execute(context)

            context.transition(BuildState.DONE)
            context.build_stats['end_time'] = time.time()
            build_time = context.build_stats['end_time'] - context.build_stats['start_time']

            success(f"安装包构建成功: {context.artifact_path}", stage=LogStage.DONE)
            info(f"构建时间: {build_time:.1f}秒")
            info(f"应用大小: {format_size(context.build_stats.get('app_size', 0))}")
            return context

        except Exception as e:
            context.build_stats['end_time'] = time.time()
            self._fail(context)
            error(f"构建失败: {e}", stage=LogStage.BUILD)

            if isinstance(e, BuildError):
                raise
            raise BuildError(f"构建失败: {e}") from e

    def _fail(self, context: BuildContext) -> None:
        """进入 FAILED 状态并释放资源"""
        if context.state not in (BuildState.DONE, BuildState.FAILED):
            context.transition(BuildState.FAILED)

        if context.stage_dir is not None:
            context.stage_dir.cleanup_quietly()

        # 链接开始前已存在的文件不属于本次构建，不能删除
        if context.has_reached(BuildState.LINKING) and context.artifact_path.exists():
            try:
                context.artifact_path.unlink()
                debug(f"已删除未完成的安装包: {context.artifact_path}", stage=LogStage.BUILD)
            except OSError as e:
                error(f"无法删除未完成的安装包 {context.artifact_path}: {e}", stage=LogStage.BUILD)

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
