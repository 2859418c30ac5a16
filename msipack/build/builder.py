"""
构建器主类

按配置中的架构列表依次构建安装包，决定某个架构失败后是否继续。
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config.schema import Arch, MsiPackConfig
from ..utils.logging import info, error, LogStage
from ..vm import VmManager
from .artifacts import ArtifactCollector, ArtifactListener, Signer
from .build_context import BuildError, ProgressCallback
from .target import WixTarget
from .wxs_generator import GuidFactory


@dataclass
class BuildResult:
    """单个架构的构建结果"""
    success: bool
    arch: Arch
    output_path: Optional[Path] = None
    output_size: Optional[int] = None
    build_time: Optional[float] = None
    safe_artifact_name: Optional[str] = None
    error: Optional[str] = None


class Builder:
    """安装包构建器"""

    def __init__(
        self,
        vm: Optional[VmManager] = None,
        signer: Optional[Signer] = None,
        artifact_listener: Optional[ArtifactListener] = None,
        guid_factory: Optional[GuidFactory] = None,
    ):
        self.vm = vm
        self.signer = signer
        self.artifacts = ArtifactCollector()
        self.artifact_listener = artifact_listener
        self.guid_factory = guid_factory

    def _on_artifact_created(self, event) -> None:
        self.artifacts(event)
        if self.artifact_listener:
            self.artifact_listener(event)

    def build(
        self,
        config: MsiPackConfig,
        archs: Optional[List[Arch]] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[BuildResult]:
        """构建所有架构

        Args:
            config: 配置对象
            archs: 覆盖配置中的架构列表
            progress_callback: 进度回调函数

        Returns:
            List[BuildResult]: 每个已尝试架构的结果；fail_fast 时失败后的架构不会出现
        """
        target = WixTarget(
            config,
            vm=self.vm,
            signer=self.signer,
            artifact_listener=self._on_artifact_created,
            guid_factory=self.guid_factory,
            progress_callback=progress_callback,
        )

        results: List[BuildResult] = []
        for arch in archs or config.build.archs:
            start_time = time.time()
            try:
                artifact = target.build(config.build.app_dir, arch)
            except BuildError as e:
                results.append(BuildResult(
                    success=False,
                    arch=arch,
                    build_time=time.time() - start_time,
                    error=str(e),
                ))
                if config.build.fail_fast:
                    error(f"{arch.value} 构建失败，停止后续架构", stage=LogStage.BUILD)
                    break
                info(f"{arch.value} 构建失败，继续下一个架构", stage=LogStage.BUILD)
                continue

            results.append(BuildResult(
                success=True,
                arch=arch,
                output_path=artifact.path,
                output_size=artifact.path.stat().st_size,
                build_time=time.time() - start_time,
                safe_artifact_name=artifact.safe_artifact_name,
            ))

        return results
