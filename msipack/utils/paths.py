"""
路径工具

提供路径处理相关的工具函数。
"""

import os
import tempfile
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_temp_dir(prefix: str = "msipack_") -> Path:
    """创建一个唯一的临时目录

    Args:
        prefix: 目录前缀

    Returns:
        Path: 临时目录路径
    """
    return Path(tempfile.mkdtemp(prefix=prefix))


def calculate_directory_size(path: Union[str, Path]) -> int:
    """递归计算路径下所有文件的字节总数

    符号链接按其指向的目标计算。路径本身是文件时直接返回文件大小。

    Raises:
        OSError: 路径或其中某个条目无法访问
    """
    path = Path(path)
    if path.is_file():
        return path.stat().st_size
    if not path.is_dir():
        return 0

    total = 0
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir():
                total += calculate_directory_size(entry.path)
            elif entry.is_file():
                total += entry.stat().st_size
    return total


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"
