"""
暂存步骤模块

扫描应用目录、生成 ApplicationFiles.wxs 并写入暂存目录。
"""

from pathlib import Path
from typing import Optional

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from msipack.build.build_context import BuildContext, BuildError, BuildState, StagingError
from msipack.build.scanner import DirectoryScanner
from msipack.build.stage import StageDir
from msipack.build.wxs_generator import GuidFactory, WxsGenerator
from .build_step import BuildStep

GENERATED_SOURCE_NAME = "ApplicationFiles.wxs"


class StagingStep(BuildStep):
    """暂存步骤"""

    def __init__(self, guid_factory: Optional[GuidFactory] = None, sort_children: bool = True):
        super().__init__("stage", "生成 WiX 源文件")
        self.scanner = DirectoryScanner(sort_children)
        self.generator = WxsGenerator(guid_factory)

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 20)

    def execute(self, context: BuildContext) -> None:
        """生成文档并写入暂存目录"""
        context.transition(BuildState.STAGING)
        progress_start, progress_end = self.get_progress_range()
        context.report_progress("生成源文件", progress_start, f"扫描: {context.app_out_dir}")

        if context.stage_dir is None:
            context.stage_dir = StageDir.create(context.target_name, context.arch)

        info(f"扫描应用目录: {context.app_out_dir}", stage=LogStage.SCAN)
        tree = self.scanner.scan(context.app_out_dir)
        directories = tree.count_subdirectories()
        context.build_stats['directories'] = directories
        context.build_stats['components'] = directories + 1
        debug(f"子目录数量: {directories}, 深度: {tree.depth()}", stage=LogStage.SCAN)

        document = self.generator.generate(tree, context.main_exe_file_name, context.arch)

        output_path = context.stage_dir.get_temp_file(GENERATED_SOURCE_NAME)
        try:
            output_path.write_text(document, encoding="utf-8")
        except OSError as e:
            error(f"写入 {output_path} 失败: {e}", stage=LogStage.STAGE)
            raise StagingError(f"无法写入生成的源文件: {e}") from e

        # 调用方提供的列表只复制不修改，多架构构建时不会累积
        context.generated_source = output_path
        context.source_files = [Path(p) for p in context.config.wix.candle_files] + [output_path]

        context.report_progress("生成源文件", progress_end, f"{GENERATED_SOURCE_NAME} 已生成")
        success(
            f"源文件生成完成 - 组件: {context.build_stats['components']}, 大小: {format_size(len(document.encode('utf-8')))}",
            stage=LogStage.GENERATE,
        )
        for source in context.source_files:
            debug(f"源文件: {source}", stage=LogStage.STAGE)
