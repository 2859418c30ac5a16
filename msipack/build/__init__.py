"""构建服务模块

提供 MSI 安装包构建的核心功能。
"""

from .builder import Builder, BuildResult
from .build_context import (
    BuildArtifact,
    BuildCancelledError,
    BuildContext,
    BuildError,
    BuildState,
    ScanError,
    SigningError,
    StagingError,
    ToolInvocationError,
)
from .identifiers import INSTALL_DIR_ID, generate_id
from .scanner import DirNode, DirectoryScanner, scan_directory
from .target import Target, WixTarget
from .wxs_generator import WxsGenerator, generate_wix_sources

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "Target",
    "WixTarget",

    # 构建状态与错误
    "BuildArtifact",
    "BuildContext",
    "BuildState",
    "BuildError",
    "BuildCancelledError",
    "ScanError",
    "SigningError",
    "StagingError",
    "ToolInvocationError",

    # 源文件生成
    "DirNode",
    "DirectoryScanner",
    "scan_directory",
    "INSTALL_DIR_ID",
    "generate_id",
    "WxsGenerator",
    "generate_wix_sources",
]
