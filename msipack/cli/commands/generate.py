"""
Generate 命令实现

只扫描应用目录并输出 ApplicationFiles.wxs，不调用 WiX 工具链。
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...build.build_context import BuildError
from ...build.wxs_generator import generate_wix_sources
from ...config.schema import Arch


console = Console()


def generate_command(
    app_dir: str = typer.Argument(..., help="应用目录"),
    main_exe: str = typer.Option(..., "--main-exe", "-m", help="主程序文件名，例如 MyApp.exe"),
    arch: Arch = typer.Option(Arch.X64, "--arch", "-a", help="目标架构"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="输出文件，默认打印到标准输出"),
) -> None:
    """生成 WiX 源文件

    示例:
        msipack generate ./dist/win-unpacked --main-exe MyApp.exe
        msipack generate ./dist/win-unpacked -m MyApp.exe -a ia32 -o ApplicationFiles.wxs
    """
    try:
        document = generate_wix_sources(app_dir, main_exe, arch)
    except BuildError as e:
        console.print(f"[red]生成失败[/red]: {e}")
        raise typer.Exit(1)

    if output is None:
        typer.echo(document)
        return

    output_path = Path(output)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]写入 {output_path} 失败[/red]: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ 已生成[/green]: {output_path}")
