"""构建暂存目录：存放生成的 .wxs 和 candle 输出，每次构建独占一个。"""

import shutil
from pathlib import Path
from typing import Optional

from ..config.schema import Arch
from ..utils import get_temp_dir
from ..utils.logging import debug, warning, LogStage
from .build_context import StagingError


class StageDir:
    """单次构建的暂存目录"""

    def __init__(self, dir: Path):
        self.dir = dir

    @classmethod
    def create(cls, target_name: str, arch: Arch) -> 'StageDir':
        """创建唯一的暂存目录，多个架构并行构建时互不冲突

        Raises:
            StagingError: 无法创建目录
        """
        try:
            path = get_temp_dir(prefix=f"msipack-{target_name}-{arch.value}-")
        except OSError as e:
            raise StagingError(f"无法创建暂存目录: {e}") from e
        debug(f"暂存目录: {path}", stage=LogStage.STAGE)
        return cls(path)

    def get_temp_file(self, name: str) -> Path:
        return self.dir / name

    @property
    def exists(self) -> bool:
        return self.dir.exists()

    def cleanup(self) -> None:
        """删除暂存目录

        Raises:
            StagingError: 删除失败
        """
        if not self.dir.exists():
            return
        try:
            shutil.rmtree(self.dir)
        except OSError as e:
            raise StagingError(f"无法删除暂存目录 {self.dir}: {e}") from e
        debug(f"已删除暂存目录: {self.dir}", stage=LogStage.FINALIZE)

    def cleanup_quietly(self) -> Optional[Exception]:
        """失败路径上的清理，错误只记录不抛出，以免掩盖原始错误"""
        try:
            self.cleanup()
        except StagingError as e:
            warning(str(e), stage=LogStage.FINALIZE)
            return e
        return None
