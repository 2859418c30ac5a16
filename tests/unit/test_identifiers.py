"""标识符生成单元测试"""

import hashlib

from msipack.build.identifiers import (
    INSTALL_DIR_ID,
    component_id,
    generate_id,
    remove_folder_id,
)


class TestGenerateId:
    """generate_id 测试"""

    def test_deterministic(self):
        """测试同一路径生成同一 Id"""
        assert generate_id("/opt/app/locales") == generate_id("/opt/app/locales")

    def test_distinct_paths(self):
        """测试不同路径生成不同 Id"""
        paths = [f"/opt/app/dir{i}" for i in range(500)]
        assert len({generate_id(p) for p in paths}) == len(paths)

    def test_md5_with_prefix(self):
        """测试 Id 为下划线加 MD5 十六进制"""
        expected = "_" + hashlib.md5("C:\\app\\locales".encode("utf-8")).hexdigest()
        assert generate_id("C:\\app\\locales") == expected

    def test_never_starts_with_digit(self):
        """测试 Id 不以数字开头"""
        for i in range(100):
            assert not generate_id(f"/p/{i}")[0].isdigit()

    def test_accepts_path_objects(self, tmp_path):
        """测试接受 Path 对象"""
        assert generate_id(tmp_path) == generate_id(str(tmp_path))


class TestDerivedIds:
    """派生 Id 测试"""

    def test_suffixes(self):
        assert component_id("_abc") == "_abc_component"
        assert remove_folder_id("_abc") == "_abc_uninstall"

    def test_install_dir(self):
        assert INSTALL_DIR_ID == "INSTALLDIR"
        assert component_id(INSTALL_DIR_ID) == "INSTALLDIR_component"

    def test_undecodable_file_name(self):
        """测试 POSIX 上非 UTF-8 的文件名也能生成 Id"""
        path = "/opt/app/bad\udcff.dat"
        expected = "_" + hashlib.md5(b"/opt/app/bad\xff.dat").hexdigest()

        assert generate_id(path) == expected
