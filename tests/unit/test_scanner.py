"""
目录扫描器单元测试

测试目录树结构、排序、错误处理等核心功能。
"""

import os
from unittest.mock import patch

import pytest

from msipack.build.build_context import ScanError
from msipack.build.scanner import DirNode, DirectoryScanner, scan_directory


@pytest.fixture
def app_dir(tmp_path):
    """app.exe, resources.pak, locales/en.pak, swiftshader/, swiftshader/x/y/"""
    root = tmp_path / "app"
    root.mkdir()
    (root / "app.exe").write_bytes(b"MZ")
    (root / "resources.pak").write_bytes(b"pak")
    (root / "locales").mkdir()
    (root / "locales" / "en.pak").write_bytes(b"en")
    (root / "swiftshader" / "x" / "y").mkdir(parents=True)
    return root


class TestDirNode:
    """DirNode 测试"""

    def test_iter_nodes_preorder(self):
        """测试先序遍历"""
        leaf = DirNode("b", "/r/a/b")
        tree = DirNode("", "/r", (DirNode("a", "/r/a", (leaf,)), DirNode("c", "/r/c")))

        assert [n.name for n in tree.iter_nodes()] == ["", "a", "b", "c"]

    def test_depth_and_count(self):
        """测试深度和子目录计数"""
        tree = DirNode("", "/r", (DirNode("a", "/r/a", (DirNode("b", "/r/a/b"),)),))

        assert tree.depth() == 2
        assert tree.count_subdirectories() == 2
        assert DirNode("", "/r").depth() == 0

    def test_frozen(self):
        """测试节点不可变"""
        node = DirNode("a", "/r/a")
        with pytest.raises(Exception):
            node.name = "b"


class TestDirectoryScanner:
    """DirectoryScanner 测试"""

    def test_scan_records_directories_only(self, app_dir):
        """测试只记录目录，文件不进入目录树"""
        tree = scan_directory(app_dir)

        assert tree.name == ""
        assert tree.path == str(app_dir)
        assert [c.name for c in tree.children] == ["locales", "swiftshader"]
        assert tree.children[0].children == ()
        assert tree.count_subdirectories() == 4

    def test_scan_absolute_paths(self, app_dir):
        """测试节点保存绝对路径"""
        tree = scan_directory(app_dir)

        for node in tree.iter_nodes():
            assert os.path.isabs(node.path)
        assert tree.children[1].children[0].path == os.path.join(str(app_dir), "swiftshader", "x")

    def test_scan_relative_root(self, app_dir, monkeypatch):
        """测试相对路径的根目录会被转换为绝对路径"""
        monkeypatch.chdir(app_dir.parent)
        tree = scan_directory("app")

        assert os.path.isabs(tree.path)
        assert os.path.realpath(tree.path) == os.path.realpath(app_dir)

    def test_children_sorted(self, tmp_path):
        """测试子目录按名称排序"""
        for name in ["zeta", "alpha", "mid"]:
            (tmp_path / name).mkdir()

        tree = DirectoryScanner().scan(tmp_path)
        assert [c.name for c in tree.children] == ["alpha", "mid", "zeta"]

    def test_children_unsorted_keeps_listing(self, tmp_path):
        """测试关闭排序时保留所有子目录"""
        for name in ["zeta", "alpha", "mid"]:
            (tmp_path / name).mkdir()

        tree = DirectoryScanner(sort_children=False).scan(tmp_path)
        assert sorted(c.name for c in tree.children) == ["alpha", "mid", "zeta"]

    def test_snapshot_not_updated(self, tmp_path):
        """测试扫描结果是快照"""
        tree = scan_directory(tmp_path)
        (tmp_path / "later").mkdir()

        assert tree.children == ()

    def test_missing_root(self, tmp_path):
        """测试根目录不存在"""
        with pytest.raises(ScanError):
            scan_directory(tmp_path / "missing")

    def test_root_is_file(self, tmp_path):
        """测试根路径是文件"""
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")

        with pytest.raises(ScanError):
            scan_directory(file_path)

    def test_unreadable_directory_aborts(self, app_dir):
        """测试无法读取的目录会中止整个扫描"""
        (app_dir / "locked").mkdir()
        real_scandir = os.scandir

        def fake_scandir(path):
            if os.path.basename(path) == "locked":
                raise PermissionError("Access denied")
            return real_scandir(path)

        with patch("msipack.build.scanner.os.scandir", side_effect=fake_scandir):
            with pytest.raises(ScanError) as exc_info:
                scan_directory(app_dir)

        assert "locked" in str(exc_info.value)

    def test_symlink_cycle_detected(self, tmp_path):
        """测试符号链接环"""
        (tmp_path / "a").mkdir()
        try:
            os.symlink(str(tmp_path), str(tmp_path / "a" / "loop"), target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("当前平台无法创建符号链接")

        with pytest.raises(ScanError) as exc_info:
            scan_directory(tmp_path)

        assert "符号链接环" in str(exc_info.value)

    def test_symlink_to_sibling_followed(self, tmp_path):
        """测试指向非祖先目录的符号链接会被当作目录"""
        (tmp_path / "real").mkdir()
        try:
            os.symlink(str(tmp_path / "real"), str(tmp_path / "alias"), target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("当前平台无法创建符号链接")

        tree = scan_directory(tmp_path)
        assert [c.name for c in tree.children] == ["alias", "real"]
