"""
msipack - 基于 WiX 工具链的 MSI 安装包构建工具

Builds Windows MSI installers from an application directory with the WiX toolset.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import MsiPackConfig
from .build.builder import Builder
from .build.target import WixTarget

__all__ = ["MsiPackConfig", "Builder", "WixTarget", "__version__"]
