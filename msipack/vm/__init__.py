"""外部工具执行策略

本机执行与 Wine 执行共用同一接口，构建开始前按主机平台选定一次。
"""

import sys
from typing import Optional

from .manager import ExecError, VmManager
from .wine import WineVmManager


def create_vm_manager(
    target_platform: str = "win32",
    host_platform: Optional[str] = None,
    wine_binary: str = "wine",
) -> VmManager:
    """按主机平台选择执行策略

    Args:
        target_platform: 安装包的目标平台
        host_platform: 构建主机平台，默认取 sys.platform
        wine_binary: 需要 Wine 时使用的可执行文件

    Returns:
        VmManager: 主机与目标平台一致时为本机执行器，否则为 Wine 执行器
    """
    host_platform = host_platform or sys.platform
    if host_platform == target_platform:
        return VmManager()
    return WineVmManager(wine_binary)


__all__ = [
    "ExecError",
    "VmManager",
    "WineVmManager",
    "create_vm_manager",
]
