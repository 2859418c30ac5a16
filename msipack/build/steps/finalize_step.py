"""
收尾步骤模块

删除暂存目录、签名安装包并发出产物创建通知。
"""

from typing import Optional

from ...utils import format_size
from ...utils.logging import info, success, error, LogStage
from msipack.build.artifacts import (
    ArtifactCreatedEvent,
    ArtifactListener,
    Signer,
    NoopSigner,
    compute_safe_artifact_name,
)
from msipack.build.build_context import BuildArtifact, BuildContext, BuildError, BuildState, SigningError
from .build_step import BuildStep


class FinalizeStep(BuildStep):
    """收尾步骤"""

    def __init__(self, signer: Optional[Signer] = None, artifact_listener: Optional[ArtifactListener] = None):
        super().__init__("finalize", "签名并发布安装包")
        self.signer = signer or NoopSigner()
        self.artifact_listener = artifact_listener

    def get_progress_range(self) -> tuple[int, int]:
        return (90, 100)

    def execute(self, context: BuildContext) -> None:
        """收尾"""
        if not context.artifact_path.exists():
            raise BuildError(f"链接完成但未找到安装包: {context.artifact_path}")

        context.transition(BuildState.FINALIZING)
        progress_start, progress_end = self.get_progress_range()
        context.report_progress("收尾", progress_start, "清理暂存目录...")

        if context.stage_dir is not None:
            context.stage_dir.cleanup()

        try:
            self.signer(context.artifact_path)
        except Exception as e:
            error(f"签名失败: {e}", stage=LogStage.SIGN)
            raise SigningError(f"签名失败: {e}") from e

        safe_name = compute_safe_artifact_name(
            context.artifact_name, context.config.product, "msi", context.arch
        )
        context.artifact = BuildArtifact(
            path=context.artifact_path,
            arch=context.arch,
            app_size=context.app_size,
            source_files=list(context.source_files),
            object_files=list(context.object_files),
            safe_artifact_name=safe_name,
        )

        if self.artifact_listener:
            self.artifact_listener(ArtifactCreatedEvent(
                file=context.artifact_path,
                arch=context.arch,
                safe_artifact_name=safe_name,
                target=context.target_name,
                is_write_update_info=False,
            ))

        size = context.artifact_path.stat().st_size
        context.report_progress("收尾", progress_end, f"完成，大小 {format_size(size)}")
        success(f"安装包已生成 - 大小: {format_size(size)}", stage=LogStage.FINALIZE)
        if safe_name:
            info(f"  安全文件名: {safe_name}")
