"""
本机工具执行器

在 Windows 主机上直接运行 WiX 工具。Wine 执行器在此基础上只替换命令行和路径映射。
"""

import os
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..utils.logging import debug

PathLike = Union[str, Path]

# 轮询子进程时检查取消信号的间隔（秒）
POLL_INTERVAL = 0.2


class ExecError(Exception):
    """外部工具执行失败（启动失败、非零退出、超时或被取消）"""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class VmManager:
    """本机执行策略"""

    name = "native"

    def to_vm_file(self, file: PathLike) -> str:
        """将主机路径映射为执行环境中可用的路径"""
        return str(file)

    def command_line(self, file: PathLike, args: Sequence[str]) -> List[str]:
        return [str(file), *args]

    def environment(self) -> Optional[Dict[str, str]]:
        return None

    def exec(
        self,
        file: PathLike,
        args: Sequence[str],
        cwd: Optional[PathLike] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """执行外部工具并阻塞到进程退出

        Args:
            file: 可执行文件（已经过 to_vm_file 映射）
            args: 参数列表
            cwd: 工作目录
            timeout: 超时时间（秒），为空表示不限制
            cancel_event: 取消信号，置位后终止子进程

        Returns:
            str: 合并后的 stdout/stderr 输出

        Raises:
            ExecError: 启动失败、非零退出、超时或被取消
        """
        cmd = self.command_line(file, args)
        debug(f"执行: {subprocess.list2cmdline(cmd)} (cwd={cwd})")

        creationflags = subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0
        try:
            process = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=self.environment(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                creationflags=creationflags,
            )
        except OSError as e:
            raise ExecError(f"无法启动 {file}: {e}") from e

        deadline = time.monotonic() + timeout if timeout else None
        while True:
            try:
                output, _ = process.communicate(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if cancel_event is not None and cancel_event.is_set():
                    output = self._kill(process)
                    raise ExecError(f"{Path(str(file)).name} 已取消", output=output)
                if deadline is not None and time.monotonic() >= deadline:
                    output = self._kill(process)
                    raise ExecError(f"{Path(str(file)).name} 超时 ({timeout}s)", output=output)

        if process.returncode != 0:
            raise ExecError(
                f"{Path(str(file)).name} 退出码 {process.returncode}",
                returncode=process.returncode,
                output=output or "",
            )
        return output or ""

    @staticmethod
    def _kill(process: subprocess.Popen) -> str:
        process.kill()
        output, _ = process.communicate()
        return output or ""


def host_environment(**overrides: str) -> Dict[str, str]:
    """当前进程环境变量加上覆盖项"""
    env = dict(os.environ)
    env.update(overrides)
    return env
