"""命令行接口单元测试"""

import json
import os
import sys

import pytest
from typer.testing import CliRunner

from msipack import __version__
from msipack.cli.main import app
from msipack.config import load_config

runner = CliRunner()


@pytest.fixture
def app_dir(tmp_path):
    root = tmp_path / "win-unpacked"
    root.mkdir()
    (root / "App.exe").write_bytes(b"MZ")
    (root / "data.bin").write_bytes(b"x")
    (root / "plugins").mkdir()
    return root


def write_config(path, app_dir):
    path.write_text(
        "product:\n"
        "  name: App\n"
        "  version: 1.0.0\n"
        "build:\n"
        f"  app_dir: {app_dir.name}\n"
        "  archs: [x64]\n",
        encoding="utf-8",
    )
    return path


class TestGenerateCommand:
    """generate 命令测试"""

    def test_prints_document(self, app_dir):
        result = runner.invoke(app, ["generate", str(app_dir), "--main-exe", "App.exe"])

        assert result.exit_code == 0
        assert result.stdout.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert 'Name="data.bin"' in result.stdout
        assert 'Name="plugins"' in result.stdout
        assert "App.exe" not in result.stdout

    def test_writes_file(self, app_dir, tmp_path):
        output = tmp_path / "out" / "ApplicationFiles.wxs"

        result = runner.invoke(app, ["generate", str(app_dir), "-m", "App.exe", "-a", "ia32", "-o", str(output)])

        assert result.exit_code == 0
        document = output.read_text(encoding="utf-8")
        assert 'Win64="no"' in document
        assert document.endswith("</Wix>")

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["generate", str(tmp_path / "missing"), "-m", "App.exe"])
        assert result.exit_code == 1

    def test_undecodable_file_name(self, app_dir):
        """测试非 UTF-8 文件名给出错误信息而不是异常堆栈"""
        if sys.platform == "win32":
            pytest.skip("Windows 文件名总是 Unicode")
        try:
            with open(os.path.join(os.fsencode(app_dir), b"bad\xff.dat"), "wb") as f:
                f.write(b"x")
        except OSError:
            pytest.skip("文件系统不接受非 UTF-8 文件名")

        result = runner.invoke(app, ["generate", str(app_dir), "-m", "App.exe"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)


class TestValidateCommand:
    """validate 命令测试"""

    def test_valid_config(self, app_dir, tmp_path):
        config_path = write_config(tmp_path / "msipack.yaml", app_dir)

        result = runner.invoke(app, ["validate", "-c", str(config_path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["warnings"] == []

    def test_invalid_config(self, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("product:\n  name: App\n  version: nope\nbuild:\n  app_dir: x\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", "-c", str(config_path), "--json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert data["errors"]

    def test_strict_fails_on_warnings(self, tmp_path):
        """测试 --strict 时主程序缺失也会失败"""
        (tmp_path / "win-unpacked").mkdir()
        config_path = write_config(tmp_path / "msipack.yaml", tmp_path / "win-unpacked")

        relaxed = runner.invoke(app, ["validate", "-c", str(config_path)])
        strict = runner.invoke(app, ["validate", "-c", str(config_path), "--strict"])

        assert relaxed.exit_code == 0
        assert strict.exit_code == 1


class TestOtherCommands:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_example_config_is_loadable(self, tmp_path):
        output = tmp_path / "example.yaml"

        result = runner.invoke(app, ["example", "-o", str(output)])

        assert result.exit_code == 0
        config = load_config(output)
        assert config.product.get_main_exe_file_name() == "ExampleApp.exe"

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "msipack" in result.stdout

    def test_build_with_missing_config(self, tmp_path):
        result = runner.invoke(app, ["build", "-c", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
