"""
WiX 源文件生成器

把目录树转换为 ApplicationFiles.wxs：
- DirectoryRef(INSTALLDIR) 下按目录树嵌套输出 Directory 元素；
- ComponentGroup(ApplicationFiles) 下为每个目录输出一个平铺的 Component，
  组件内列出该目录中的文件（主程序除外）和一个卸载时删除目录的 RemoveFolder。

输出的空白布局与 WiX 工具链既有的生成结果逐字节一致。
"""

import os
import uuid
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union
from xml.sax.saxutils import escape

from ..config.schema import Arch
from .build_context import ScanError
from .identifiers import INSTALL_DIR_ID, component_id, generate_id, remove_folder_id
from .scanner import DirNode, DirectoryScanner

WIX_NAMESPACE = "http://schemas.microsoft.com/wix/2006/wi"
COMPONENT_GROUP_ID = "ApplicationFiles"

GuidFactory = Callable[[], str]


def default_guid_factory() -> str:
    """每个组件每次构建都生成新的 GUID"""
    return str(uuid.uuid1()).upper()


def _attr(value: str) -> str:
    return escape(value, {'"': "&quot;"})


def _require_utf8(path: str) -> None:
    """文档以 UTF-8 写出，无法编码的文件名（POSIX 上的非 UTF-8 字节）不能打包

    Raises:
        ScanError: 路径包含无法编码的字符
    """
    try:
        path.encode("utf-8")
    except UnicodeEncodeError as e:
        raw = path.encode("utf-8", "surrogateescape")
        raise ScanError(f"路径不是有效的 UTF-8，无法写入 WiX 源文件: {raw!r}") from e


def list_component_files(dir_path: str, main_exe_file_name: str) -> List[str]:
    """读取目录下需要打包的文件名（按名称排序，排除主程序）

    Raises:
        ScanError: 目录无法读取
    """
    try:
        with os.scandir(dir_path) as entries:
            names = [entry.name for entry in entries if entry.is_file()]
    except OSError as e:
        raise ScanError(f"无法读取目录 {dir_path}: {e}") from e

    return sorted(name for name in names if name != main_exe_file_name)


class WxsGenerator:
    """WiX 源文件生成器"""

    def __init__(self, guid_factory: Optional[GuidFactory] = None, tabulation: str = "    "):
        self.guid_factory = guid_factory or default_guid_factory
        self.tabulation = tabulation

    def format_directories(self, directories: Sequence[DirNode], current_tabulation: str) -> str:
        """递归输出 Directory 元素，这是唯一出现嵌套的地方"""
        result = ""

        for directory in directories:
            _require_utf8(directory.path)
            directory_id = generate_id(directory.path)
            sub_dirs = self.format_directories(directory.children, current_tabulation + self.tabulation)

            result += f'{current_tabulation}<Directory Id="{directory_id}" Name="{_attr(directory.name)}"'
            if sub_dirs:
                result += f">\n{sub_dirs}{current_tabulation}</Directory>\n"
            else:
                result += "/>\n"

        return result

    def format_components(
        self,
        directories: Union[DirNode, Iterable[DirNode]],
        preset_directory_id: Optional[str],
        main_exe_file_name: str,
        arch: Arch,
        current_tabulation: str,
    ) -> str:
        """输出平铺的 Component 块，父目录的块在子目录之前"""
        if isinstance(directories, DirNode):
            directories = [directories]

        is_win64 = "no" if arch == Arch.IA32 else "yes"
        tab = self.tabulation
        result = ""

        for directory in directories:
            directory_id = preset_directory_id or generate_id(directory.path)
            guid = self.guid_factory()

            element = (
                f'{current_tabulation}<Component Id="{component_id(directory_id)}" Guid="{guid}" '
                f'Directory="{directory_id}" DiskId="1" KeyPath="yes" Win64="{is_win64}">\n'
            )

            for name in list_component_files(directory.path, main_exe_file_name):
                file_path = os.path.join(directory.path, name)
                _require_utf8(file_path)
                element += (
                    f'{current_tabulation}{tab}<File Id="{generate_id(file_path)}" '
                    f'Name="{_attr(name)}" Vital="yes" Source="{_attr(file_path)}"/>\n'
                )

            element += (
                f'\n{current_tabulation}{tab}<RemoveFolder Id="{remove_folder_id(directory_id)}" '
                f'Directory="{directory_id}" On="uninstall"/>\n'
            )
            element += f"{current_tabulation}</Component>\n\n"

            sub_components = self.format_components(
                directory.children,
                None,
                main_exe_file_name,
                arch,
                current_tabulation,
            )

            result += element + sub_components

        return result

    def generate(self, tree: DirNode, main_exe_file_name: str, arch: Arch) -> str:
        """生成完整的 .wxs 文档

        Args:
            tree: 扫描得到的目录树，根节点映射到 INSTALLDIR
            main_exe_file_name: 主程序文件名，不会出现在任何组件中
            arch: 目标架构，决定 Win64 属性

        Returns:
            str: 文档文本（不带结尾换行）
        """
        current_tabulation = self.tabulation * 3
        generated_dirs = self.format_directories(tree.children, current_tabulation)
        generated_components = self.format_components(
            tree,
            INSTALL_DIR_ID,
            main_exe_file_name,
            arch,
            current_tabulation,
        )

        indent2 = self.tabulation * 2
        indent3 = self.tabulation * 3
        fragment_body = (
            f'\n{indent2}<DirectoryRef Id="{INSTALL_DIR_ID}">\n'
            f"{indent3}{generated_dirs.strip()}\n"
            f"{indent2}</DirectoryRef>\n"
            f"\n"
            f'{indent2}<ComponentGroup Id="{COMPONENT_GROUP_ID}">\n'
            f"{indent3}{generated_components.strip()}\n"
            f"{indent2}</ComponentGroup>"
        )

        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<Wix xmlns="{WIX_NAMESPACE}">\n'
            f"{self.tabulation}<Fragment>\n"
            f"{indent2}{fragment_body.strip()}\n"
            f"{self.tabulation}</Fragment>\n"
            "</Wix>"
        )


def generate_wix_sources(
    app_dir: Union[str, Path],
    main_exe_file_name: str,
    arch: Arch,
    guid_factory: Optional[GuidFactory] = None,
) -> str:
    """便捷函数：扫描应用目录并生成 .wxs 文档"""
    tree = DirectoryScanner().scan(app_dir)
    return WxsGenerator(guid_factory).generate(tree, main_exe_file_name, arch)
