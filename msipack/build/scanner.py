"""
目录扫描器

扫描应用目录，生成只包含子目录的目录树快照。文件不进入目录树，
生成组件时再从磁盘读取。
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterator, List, Tuple, Union

from .build_context import ScanError


@dataclass(frozen=True)
class DirNode:
    """目录节点（不可变快照）"""
    name: str  # 显示名称，根节点为空字符串
    path: str  # 绝对路径
    children: Tuple['DirNode', ...] = ()

    def iter_nodes(self) -> Iterator['DirNode']:
        """先序遍历，包含自身"""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def depth(self) -> int:
        """目录深度，没有子目录时为 0"""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def count_subdirectories(self) -> int:
        return sum(1 for _ in self.iter_nodes()) - 1


class DirectoryScanner:
    """目录扫描器

    子目录默认按名称排序，保证同一目录树每次生成的文档顺序一致。
    遇到任何无法读取的目录都会中止整个扫描。
    """

    def __init__(self, sort_children: bool = True):
        self.sort_children = sort_children

    def scan(self, root: Union[str, Path]) -> DirNode:
        """扫描目录树

        Args:
            root: 应用目录

        Returns:
            DirNode: 根节点，名称为空字符串

        Raises:
            ScanError: 根目录不存在、不是目录、无法读取或存在符号链接环
        """
        root_path = os.path.abspath(str(root))

        if not os.path.exists(root_path):
            raise ScanError(f"应用目录不存在: {root_path}")
        if not os.path.isdir(root_path):
            raise ScanError(f"应用路径不是目录: {root_path}")

        return self._scan_directory(root_path, "", frozenset())

    def _scan_directory(self, dir_path: str, name: str, ancestors: FrozenSet[str]) -> DirNode:
        real_path = os.path.realpath(dir_path)
        if real_path in ancestors:
            raise ScanError(f"检测到符号链接环: {dir_path} -> {real_path}")
        ancestors = ancestors | {real_path}

        children: List[DirNode] = []
        try:
            with os.scandir(dir_path) as entries:
                subdirs = [(entry.name, entry.path) for entry in entries if entry.is_dir()]
        except OSError as e:
            raise ScanError(f"无法读取目录 {dir_path}: {e}") from e

        if self.sort_children:
            subdirs.sort(key=lambda item: item[0])

        for child_name, child_path in subdirs:
            children.append(self._scan_directory(child_path, child_name, ancestors))

        return DirNode(name=name, path=dir_path, children=tuple(children))


def scan_directory(root: Union[str, Path], sort_children: bool = True) -> DirNode:
    """便捷函数：扫描目录树"""
    return DirectoryScanner(sort_children).scan(root)
