"""
light 链接步骤模块

把所有目标文件链接为最终的 .msi。
"""

from ...utils import calculate_directory_size, ensure_directory, format_size
from ...utils.logging import info, success, debug, error, LogStage
from ...vm import ExecError
from msipack.build.build_context import (
    BuildCancelledError,
    BuildContext,
    BuildError,
    BuildState,
    ScanError,
    StagingError,
    ToolInvocationError,
)
from .build_step import BuildStep
from .candle_step import tool_path

LIGHT_EXE = "light.exe"


class LightStep(BuildStep):
    """light 链接步骤"""

    def __init__(self):
        super().__init__("light", "链接安装包")

    def get_progress_range(self) -> tuple[int, int]:
        return (70, 90)

    def execute(self, context: BuildContext) -> None:
        """链接安装包"""
        # 链接依赖全部编译结果
        if context.stage_dir is None or not context.source_files:
            raise BuildError("缺少暂存目录或源文件")
        pending = [s for s in context.source_files if s not in context.compiled_sources]
        if pending:
            raise BuildError(f"仍有 {len(pending)} 个源文件未编译，不能链接")

        context.raise_if_cancelled()
        context.transition(BuildState.LINKING)
        progress_start, progress_end = self.get_progress_range()
        context.report_progress("链接", progress_start, f"生成 {context.artifact_path.name}")

        try:
            context.app_size = calculate_directory_size(context.app_out_dir)
        except OSError as e:
            raise ScanError(f"无法计算应用目录大小: {e}") from e
        context.build_stats['app_size'] = context.app_size
        info(f"应用大小: {format_size(context.app_size)}", stage=LogStage.LIGHT)

        ensure_directory(context.artifact_path.parent)
        # 收尾时存在的安装包只能是本次 light.exe 写出的
        if context.artifact_path.exists():
            try:
                context.artifact_path.unlink()
            except OSError as e:
                raise StagingError(f"无法删除旧的安装包 {context.artifact_path}: {e}") from e
            debug(f"已删除旧的安装包: {context.artifact_path}", stage=LogStage.LIGHT)

        vm = context.vm
        args = [
            "-nologo",
            "-pedantic",
            f"-dAppSize={context.app_size}",
            "-spdb",
            "-sacl",
            "-out",
            vm.to_vm_file(context.artifact_path),
        ]
        args.extend(context.config.wix.light_flags)
        args.extend(vm.to_vm_file(p) for p in context.object_files)

        try:
            log = vm.exec(
                tool_path(context, LIGHT_EXE),
                args,
                cwd=context.stage_dir.dir,
                timeout=context.config.toolchain.timeout_sec,
                cancel_event=context.cancel_event,
            )
        except ExecError as e:
            error(f"light 链接失败: {e}", stage=LogStage.LIGHT)
            if e.output:
                error(e.output, stage=LogStage.LIGHT)
            if context.cancel_event.is_set():
                raise BuildCancelledError("链接时构建被取消") from e
            raise ToolInvocationError(
                f"light 链接失败: {e}",
                tool=LIGHT_EXE,
                returncode=e.returncode,
                output=e.output,
            ) from e

        if log.strip():
            debug(log.strip(), stage=LogStage.LIGHT)

        context.report_progress("链接", progress_end, "链接完成")
        success(f"链接完成: {context.artifact_path}", stage=LogStage.LIGHT)
