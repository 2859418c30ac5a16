"""
工具执行器单元测试

测试路径映射、执行器选择以及真实子进程的退出码、超时和取消处理。
"""

import sys
import threading

import pytest

from msipack.vm import ExecError, VmManager, WineVmManager, create_vm_manager


class TestWineVmManager:
    """Wine 执行器测试"""

    def test_absolute_path_mapped_to_z_drive(self):
        vm = WineVmManager()
        assert vm.to_vm_file("/home/user/app/locales") == "Z:\\home\\user\\app\\locales"

    def test_relative_path_unchanged(self):
        vm = WineVmManager()
        assert vm.to_vm_file("light.exe") == "light.exe"
        assert vm.to_vm_file("wix/candle.exe") == "wix/candle.exe"

    def test_command_line_prefixed_with_wine(self):
        vm = WineVmManager("wine64")
        assert vm.command_line("Z:\\wix\\candle.exe", ["-nologo"]) == ["wine64", "Z:\\wix\\candle.exe", "-nologo"]

    def test_environment_silences_wine(self):
        env = WineVmManager().environment()
        assert env["WINEDEBUG"] == "-all"
        assert "PATH" in env


class TestCreateVmManager:
    """执行器选择测试"""

    def test_windows_host_runs_natively(self):
        vm = create_vm_manager(host_platform="win32")
        assert type(vm) is VmManager
        assert vm.name == "native"

    @pytest.mark.parametrize("host", ["linux", "darwin"])
    def test_other_hosts_use_wine(self, host):
        vm = create_vm_manager(host_platform=host, wine_binary="/usr/bin/wine")
        assert isinstance(vm, WineVmManager)
        assert vm.wine_binary == "/usr/bin/wine"

    def test_native_path_identity(self):
        assert VmManager().to_vm_file("C:\\app\\x.exe") == "C:\\app\\x.exe"


class TestExec:
    """本机执行测试（以当前 Python 解释器作为外部工具）"""

    def test_success_returns_output(self):
        output = VmManager().exec(sys.executable, ["-c", "print('hello')"])
        assert "hello" in output

    def test_stderr_merged(self):
        output = VmManager().exec(sys.executable, ["-c", "import sys; sys.stderr.write('warn')"])
        assert "warn" in output

    def test_cwd(self, tmp_path):
        output = VmManager().exec(sys.executable, ["-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert tmp_path.name in output

    def test_nonzero_exit(self):
        with pytest.raises(ExecError) as exc_info:
            VmManager().exec(sys.executable, ["-c", "print('boom'); raise SystemExit(3)"])

        assert exc_info.value.returncode == 3
        assert "boom" in exc_info.value.output
        assert "退出码 3" in str(exc_info.value)

    def test_missing_binary(self, tmp_path):
        with pytest.raises(ExecError) as exc_info:
            VmManager().exec(str(tmp_path / "missing-tool"), [])

        assert exc_info.value.returncode is None

    def test_timeout_kills_process(self):
        with pytest.raises(ExecError) as exc_info:
            VmManager().exec(sys.executable, ["-c", "import time; time.sleep(30)"], timeout=0.5)

        assert "超时" in str(exc_info.value)

    def test_cancel_kills_process(self):
        cancel_event = threading.Event()
        timer = threading.Timer(0.3, cancel_event.set)
        timer.start()
        try:
            with pytest.raises(ExecError) as exc_info:
                VmManager().exec(
                    sys.executable,
                    ["-c", "import time; time.sleep(30)"],
                    cancel_event=cancel_event,
                )
        finally:
            timer.cancel()

        assert "已取消" in str(exc_info.value)
