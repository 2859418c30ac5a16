"""
构建目标

每种安装包类型实现一个 Target，这里只有 MSI (WiX)。
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ..config.schema import Arch, MsiPackConfig
from ..utils.logging import info, LogStage
from ..vm import VmManager, create_vm_manager
from .artifacts import ArtifactListener, Signer, create_signer, expand_artifact_name
from .build_context import BuildArtifact, BuildContext, ProgressCallback
from .build_pipeline import BuildPipeline
from .steps.candle_step import CandleStep
from .steps.finalize_step import FinalizeStep
from .steps.light_step import LightStep
from .steps.staging_step import StagingStep
from .wxs_generator import GuidFactory


class Target(ABC):
    """构建目标接口"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def build(self, app_out_dir: Union[str, Path], arch: Arch) -> BuildArtifact:
        """为一个架构构建安装包"""
        pass


class WixTarget(Target):
    """基于 WiX 工具链的 MSI 目标

    执行器在构造时注入；未注入时按主机平台选择一次（Windows 本机执行，其他平台走 Wine）。
    """

    def __init__(
        self,
        config: MsiPackConfig,
        out_dir: Optional[Union[str, Path]] = None,
        vm: Optional[VmManager] = None,
        signer: Optional[Signer] = None,
        artifact_listener: Optional[ArtifactListener] = None,
        guid_factory: Optional[GuidFactory] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        super().__init__("msi")
        self.config = config
        self.out_dir = Path(out_dir) if out_dir is not None else Path(config.build.output_dir)
        self.vm = vm or create_vm_manager(wine_binary=config.toolchain.wine_binary)
        self.signer = signer or create_signer(config.signing, self.vm, config.toolchain.timeout_sec)
        self.artifact_listener = artifact_listener
        self.guid_factory = guid_factory
        self.progress_callback = progress_callback
        self._active_context: Optional[BuildContext] = None

    def create_pipeline(self) -> BuildPipeline:
        return BuildPipeline([
            StagingStep(self.guid_factory),
            CandleStep(),
            LightStep(),
            FinalizeStep(self.signer, self.artifact_listener),
        ])

    def build(self, app_out_dir: Union[str, Path], arch: Arch) -> BuildArtifact:
        """构建安装包

        Raises:
            BuildError: 构建失败
        """
        artifact_name = expand_artifact_name(self.config.wix.artifact_name, self.config.product, "msi", arch)
        artifact_path = Path(os.path.abspath(self.out_dir / artifact_name))
        info(f"构建 WIX: {artifact_path} ({arch.value}, 执行器: {self.vm.name})", stage=LogStage.INIT)

        context = BuildContext(
            config=self.config,
            app_out_dir=Path(os.path.abspath(app_out_dir)),
            arch=arch,
            artifact_name=artifact_name,
            artifact_path=artifact_path,
            vm=self.vm,
            target_name=self.name,
            progress_callback=self.progress_callback,
        )

        self._active_context = context
        try:
            self.create_pipeline().execute(context)
        finally:
            self._active_context = None
        return context.artifact

    def cancel(self) -> None:
        """取消正在进行的构建，正在运行的工具进程会被终止"""
        context = self._active_context
        if context is not None:
            context.cancel_event.set()
