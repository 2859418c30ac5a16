"""
构建上下文模块

定义构建过程中的共享数据结构、构建状态和异常类。
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from ..config.schema import Arch, MsiPackConfig
from ..utils.logging import debug, LogStage

if TYPE_CHECKING:
    from ..vm import VmManager
    from .stage import StageDir

# 进度回调类型 (stage, current, total, message)
ProgressCallback = Callable[[str, int, int, str], None]


class BuildState(str, Enum):
    """构建状态

    IDLE -> STAGING -> COMPILING(每个源文件一次) -> LINKING -> FINALIZING -> DONE，
    任何一步都可能转到 FAILED，FAILED 为终止状态。
    """
    IDLE = "idle"
    STAGING = "staging"
    COMPILING = "compiling"
    LINKING = "linking"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = (BuildState.DONE, BuildState.FAILED)


class BuildError(Exception):
    """构建错误"""
    pass


class ScanError(BuildError):
    """扫描应用目录失败"""
    pass


class StagingError(BuildError):
    """写入暂存文件或创建暂存目录失败"""
    pass


class ToolInvocationError(BuildError):
    """candle.exe / light.exe 启动失败或返回非零"""

    def __init__(self, message: str, tool: str = "", returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.tool = tool
        self.returncode = returncode
        self.output = output


class SigningError(BuildError):
    """签名失败"""
    pass


class BuildCancelledError(BuildError):
    """构建被取消"""
    pass


@dataclass
class BuildArtifact:
    """构建产物"""
    path: Path
    arch: Arch
    app_size: int
    source_files: List[Path]
    object_files: List[Path]
    safe_artifact_name: Optional[str] = None


@dataclass
class BuildContext:
    """构建上下文，包含构建过程中的共享数据"""
    config: MsiPackConfig
    app_out_dir: Path
    arch: Arch
    artifact_name: str
    artifact_path: Path
    vm: 'VmManager'
    target_name: str = "msi"
    progress_callback: Optional[ProgressCallback] = None
    cancel_event: threading.Event = field(default_factory=threading.Event)

    # 状态机
    state: BuildState = BuildState.IDLE
    transitions: List[Tuple[BuildState, Optional[str]]] = field(default_factory=list)
    # 并行编译时多个线程会记录状态
    _transition_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    # 构建过程中生成的数据
    stage_dir: Optional['StageDir'] = None
    generated_source: Optional[Path] = None
    source_files: List[Path] = field(default_factory=list)
    object_files: List[Path] = field(default_factory=list)
    compiled_sources: List[Path] = field(default_factory=list)
    app_size: int = 0
    artifact: Optional[BuildArtifact] = None

    # 统计信息
    build_stats: Dict[str, Any] = None  # type: ignore

    def __post_init__(self):
        if self.build_stats is None:
            self.build_stats = {
                'start_time': 0,
                'end_time': 0,
                'directories': 0,
                'components': 0,
                'app_size': 0,
            }

    @property
    def main_exe_file_name(self) -> str:
        return self.config.product.get_main_exe_file_name()

    def transition(self, state: BuildState, detail: Optional[str] = None) -> None:
        """切换构建状态

        Raises:
            BuildError: 当前已处于终止状态
        """
        with self._transition_lock:
            if self.state in TERMINAL_STATES:
                raise BuildError(f"构建已结束 ({self.state.value})，不能切换到 {state.value}")
            self.state = state
            self.transitions.append((state, detail))
        debug(f"状态 -> {state.value}" + (f" [{detail}]" if detail else ""), stage=LogStage.BUILD)

    def has_reached(self, state: BuildState) -> bool:
        return any(recorded == state for recorded, _ in self.transitions)

    def raise_if_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise BuildCancelledError("构建已取消")

    def report_progress(self, stage: str, current: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, current, 100, message)
