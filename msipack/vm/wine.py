"""Wine 执行器：在非 Windows 主机上通过 Wine 运行 WiX 工具。"""

from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence

from .manager import PathLike, VmManager, host_environment


class WineVmManager(VmManager):
    """通过 Wine 执行，主机绝对路径映射到 Z: 盘"""

    name = "wine"

    def __init__(self, wine_binary: str = "wine"):
        self.wine_binary = wine_binary

    def to_vm_file(self, file: PathLike) -> str:
        path = str(file)
        if not PurePosixPath(path).is_absolute():
            return path
        return "Z:" + path.replace("/", "\\")

    def command_line(self, file: PathLike, args: Sequence[str]) -> List[str]:
        return [self.wine_binary, str(file), *args]

    def environment(self) -> Optional[Dict[str, str]]:
        return host_environment(WINEDEBUG="-all")
