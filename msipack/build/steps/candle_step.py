"""
candle 编译步骤模块

对每个源文件调用一次 candle.exe，每个源文件产出一个 .wxsobj。
所有编译都成功后才会进入链接步骤。
"""

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import List

from ...utils.logging import info, success, debug, error, LogStage
from ...vm import ExecError
from msipack.build.build_context import (
    BuildCancelledError,
    BuildContext,
    BuildError,
    BuildState,
    ToolInvocationError,
)
from .build_step import BuildStep

CANDLE_EXE = "candle.exe"
OBJECT_SUFFIX = ".wxsobj"


def tool_path(context: BuildContext, exe_name: str) -> str:
    """工具在执行环境中的路径"""
    wix_dir = context.config.toolchain.wix_dir
    if wix_dir:
        return context.vm.to_vm_file(Path(wix_dir) / exe_name)
    return context.vm.to_vm_file(exe_name)


class CandleStep(BuildStep):
    """candle 编译步骤"""

    def __init__(self):
        super().__init__("candle", "编译 WiX 源文件")

    def get_progress_range(self) -> tuple[int, int]:
        return (20, 70)

    def base_args(self, context: BuildContext) -> List[str]:
        args = [
            "-nologo",
            "-pedantic",
            f"-dAppDir={context.vm.to_vm_file(context.app_out_dir)}",
            f"-dMainExeFileName={context.main_exe_file_name}",
        ]
        args.extend(context.config.wix.candle_flags)
        return args

    def object_path(self, context: BuildContext, source: Path) -> Path:
        return context.stage_dir.dir / Path(source.name).with_suffix(OBJECT_SUFFIX)

    def execute(self, context: BuildContext) -> None:
        """编译所有源文件"""
        if context.stage_dir is None or not context.source_files:
            raise BuildError("缺少暂存目录或源文件")

        jobs = context.config.toolchain.candle_jobs
        info(f"编译 {len(context.source_files)} 个源文件 (并行数 {jobs})", stage=LogStage.CANDLE)

        if jobs > 1 and len(context.source_files) > 1:
            self._compile_parallel(context, jobs)
        else:
            for source in context.source_files:
                self._compile(context, source)

        # 额外的目标文件排在编译产物之前
        context.object_files = [Path(p) for p in context.config.wix.light_files]
        context.object_files.extend(self.object_path(context, s) for s in context.source_files)

        success(f"编译完成 - 目标文件: {len(context.object_files)}", stage=LogStage.CANDLE)

    def _compile(self, context: BuildContext, source: Path) -> Path:
        context.raise_if_cancelled()
        context.transition(BuildState.COMPILING, source.name)

        output = self.object_path(context, source)
        args = self.base_args(context) + ["-out", context.vm.to_vm_file(output), context.vm.to_vm_file(source)]

        try:
            log = context.vm.exec(
                tool_path(context, CANDLE_EXE),
                args,
                cwd=context.stage_dir.dir,
                timeout=context.config.toolchain.timeout_sec,
                cancel_event=context.cancel_event,
            )
        except ExecError as e:
            error(f"candle 编译 {source.name} 失败: {e}", stage=LogStage.CANDLE)
            if e.output:
                error(e.output, stage=LogStage.CANDLE)
            if context.cancel_event.is_set():
                raise BuildCancelledError(f"编译 {source.name} 时构建被取消") from e
            raise ToolInvocationError(
                f"candle 编译 {source.name} 失败: {e}",
                tool=CANDLE_EXE,
                returncode=e.returncode,
                output=e.output,
            ) from e

        if log.strip():
            debug(log.strip(), stage=LogStage.CANDLE)

        context.compiled_sources.append(source)
        done = len(context.compiled_sources)
        progress_start, progress_end = self.get_progress_range()
        current = progress_start + int(done / len(context.source_files) * (progress_end - progress_start))
        context.report_progress("编译", current, f"{source.name} -> {output.name}")
        return output

    def _compile_parallel(self, context: BuildContext, jobs: int) -> None:
        """并行编译；任何一个失败都会取消其余调用"""
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="candle") as executor:
            futures = [executor.submit(self._compile, context, source) for source in context.source_files]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)

            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                context.cancel_event.set()
                for future in pending:
                    future.cancel()
                raise failed[0].exception()
