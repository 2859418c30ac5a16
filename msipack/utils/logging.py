"""
日志工具 - 统一输出门面

提供带时间戳的统一输出接口，封装底层的 Rich Console。
构建管道、各构建步骤和 CLI 都通过这里输出。
"""

import atexit
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Union, Any

from rich.console import Console
from rich.markup import escape


class OutputLevel:
    """输出级别常量"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogStage:
    """日志阶段标记"""
    INIT = "INIT"
    SCAN = "SCAN"
    GENERATE = "GENERATE"
    STAGE = "STAGE"
    CANDLE = "CANDLE"
    LIGHT = "LIGHT"
    SIGN = "SIGN"
    FINALIZE = "FINALIZE"
    BUILD = "BUILD"
    DONE = "DONE"


_LEVEL_ORDER = {
    OutputLevel.DEBUG: 0,
    OutputLevel.INFO: 1,
    OutputLevel.SUCCESS: 1,
    OutputLevel.WARNING: 2,
    OutputLevel.ERROR: 3,
}

_LEVEL_STYLES = {
    OutputLevel.DEBUG: "dim",
    OutputLevel.INFO: "default",
    OutputLevel.SUCCESS: "green",
    OutputLevel.WARNING: "yellow",
    OutputLevel.ERROR: "red bold",
}


class OutputFacade:
    """输出门面

    统一封装所有输出操作，所有输出都包含时间戳，支持彩色输出。
    错误信息写到 stderr，其余写到 stdout；设置了日志文件时同时追加到文件。
    """

    def __init__(self):
        self._lock = threading.RLock()  # 编译步骤可能在线程池中输出
        self._file_handle = None  # type: Optional[Any]
        self._log_level = OutputLevel.INFO
        self._date_format = "%Y-%m-%d %H:%M:%S"
        self._time_format = "%H:%M:%S"

        # 不绑定具体的流，始终写到当前的 sys.stdout / sys.stderr
        self._console = Console(
            color_system="auto",
            markup=True,
            highlight=False,
            log_time=False,
            log_path=False,
        )
        self._error_console = Console(stderr=True, highlight=False)

    def _get_timestamp(self, include_date: bool = False) -> str:
        now = datetime.now()
        if include_date:
            return now.strftime(self._date_format)
        return now.strftime(self._time_format)

    def _should_output(self, level: str) -> bool:
        current_level = _LEVEL_ORDER.get(self._log_level, 1)
        msg_level = _LEVEL_ORDER.get(level, 1)
        return msg_level >= current_level

    def _format_message(self, message: str, level: str = OutputLevel.INFO,
                        stage: Optional[str] = None, include_date: bool = False) -> str:
        """格式化消息（纯文本，用于日志文件）"""
        timestamp = self._get_timestamp(include_date)

        if stage:
            return f"[{timestamp}] [{level}] [{stage}] {message}"
        return f"[{timestamp}] [{level}] {message}"

    def _output(self, message: str, level: str, stage: Optional[str] = None, **kwargs):
        console = self._error_console if level == OutputLevel.ERROR else self._console
        timestamp = self._get_timestamp()
        # 路径里的方括号不能被当作 markup 解析
        message = escape(message)

        if stage:
            formatted_msg = f"[dim]{timestamp}[/dim] [bold]{level}[/bold] [cyan]{stage}[/cyan] {message}"
        else:
            formatted_msg = f"[dim]{timestamp}[/dim] [bold]{level}[/bold] {message}"

        console.print(formatted_msg, style=_LEVEL_STYLES.get(level, "default"), **kwargs)

    def _write_to_file(self, message: str, level: str, stage: Optional[str] = None):
        if not self._file_handle:
            return

        formatted = self._format_message(message, level, stage, include_date=True)
        self._file_handle.write(formatted + "\n")
        self._file_handle.flush()

    def log(self, level: str, message: str, stage: Optional[str] = None, **kwargs):
        """按级别输出一条消息"""
        if not self._should_output(level):
            return

        with self._lock:
            self._output(message, level, stage, **kwargs)
            self._write_to_file(message, level, stage)

    def set_level(self, level: str):
        """设置输出级别"""
        with self._lock:
            if level in _LEVEL_ORDER:
                self._log_level = level

    def set_log_file(self, file_path: Union[str, Path]):
        """设置日志文件（追加模式）"""
        with self._lock:
            self._close_file()
            log_path = Path(file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_path, 'a', encoding='utf-8')

    def _close_file(self):
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def close(self):
        """关闭输出门面"""
        with self._lock:
            self._close_file()


# 全局输出门面实例
_output_facade: Optional[OutputFacade] = None


def get_output_facade() -> OutputFacade:
    """获取全局输出门面实例"""
    global _output_facade
    if _output_facade is None:
        _output_facade = OutputFacade()
    return _output_facade


def debug(message: str, stage: Optional[str] = None, **kwargs):
    """调试信息输出"""
    get_output_facade().log(OutputLevel.DEBUG, message, stage, **kwargs)


def info(message: str, stage: Optional[str] = None, **kwargs):
    """普通信息输出"""
    get_output_facade().log(OutputLevel.INFO, message, stage, **kwargs)


def success(message: str, stage: Optional[str] = None, **kwargs):
    """成功信息输出"""
    get_output_facade().log(OutputLevel.SUCCESS, message, stage, **kwargs)


def warning(message: str, stage: Optional[str] = None, **kwargs):
    """警告信息输出"""
    get_output_facade().log(OutputLevel.WARNING, message, stage, **kwargs)


def error(message: str, stage: Optional[str] = None, **kwargs):
    """错误信息输出"""
    get_output_facade().log(OutputLevel.ERROR, message, stage, **kwargs)


def set_log_level(level: str):
    """设置全局日志级别"""
    get_output_facade().set_level(level)


def set_log_file(file_path: Union[str, Path]):
    """设置全局日志文件"""
    get_output_facade().set_log_file(file_path)


def configure_logging(level: str = OutputLevel.INFO, log_file: Optional[Union[str, Path]] = None):
    """配置日志系统"""
    set_log_level(level)
    if log_file:
        set_log_file(log_file)


def close_logger():
    """关闭日志系统"""
    global _output_facade
    if _output_facade:
        _output_facade.close()
        _output_facade = None


atexit.register(close_logger)
