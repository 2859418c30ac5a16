"""
WiX 标识符生成

目录、组件和文件的 Id 由绝对路径的 MD5 摘要派生，同一路径在任何一次构建中都得到同一 Id。
"""

import hashlib
from pathlib import Path
from typing import Union

# 安装根目录的固定 Id，不做哈希
INSTALL_DIR_ID = "INSTALLDIR"


def generate_id(path: Union[str, Path]) -> str:
    """由绝对路径生成 Id

    WiX 的 Id 不能以数字开头，所以摘要前加下划线。
    """
    # 非 UTF-8 的文件名在 POSIX 上以代理字符出现，按原始字节参与摘要
    digest = hashlib.md5(str(path).encode("utf-8", "surrogateescape")).hexdigest()
    return "_" + digest


def component_id(directory_id: str) -> str:
    return f"{directory_id}_component"


def remove_folder_id(directory_id: str) -> str:
    return f"{directory_id}_uninstall"
