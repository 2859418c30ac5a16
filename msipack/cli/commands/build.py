"""
Build 命令实现

按配置构建 MSI 安装包。
"""

import traceback
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ...config import load_config, ConfigError, ConfigValidationError
from ...config.schema import Arch
from ...utils import format_size
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def build_command(
    config: str = typer.Option(..., "--config", "-c", help="配置文件路径"),
    arch: Optional[List[Arch]] = typer.Option(None, "--arch", "-a", help="目标架构，可重复，覆盖配置"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="输出目录，覆盖配置"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建 MSI 安装包

    示例:
        msipack build -c msipack.yaml
        msipack build -c msipack.yaml --arch ia32 --arch x64
    """
    from ...build.builder import Builder

    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)
    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        console.print(f"[cyan]正在加载配置文件[/cyan]: {config}")
        config_obj = load_config(Path(config))
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors())
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    if output_dir:
        config_obj.build.output_dir = Path(output_dir).resolve()

    def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
        """进度回调函数，显示进度"""
        if total > 0:
            percentage = (current / total) * 100
            console.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)")

    try:
        results = Builder().build(config_obj, archs=arch or None, progress_callback=progress_callback)
    except Exception as e:
        console.print(f"[red]✗ 构建过程中发生意外错误[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    table = Table(title="构建结果")
    table.add_column("架构", style="cyan")
    table.add_column("状态")
    table.add_column("安装包", style="green")
    table.add_column("大小")

    for result in results:
        if result.success:
            table.add_row(result.arch.value, "[green]✓[/green]", str(result.output_path), format_size(result.output_size or 0))
        else:
            table.add_row(result.arch.value, "[red]✗[/red]", result.error or "", "-")

    console.print(table)

    if not results or not all(r.success for r in results):
        if log_file:
            console.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
        raise typer.Exit(1)
