"""
msipack CLI 主入口

提供命令行接口，支持 build/validate/generate 等命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..utils import configure_logging, OutputLevel
from .commands import build, generate, validate


app = typer.Typer(
    name="msipack",
    help="msipack - 基于 WiX 工具链的 MSI 安装包构建工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"msipack v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level=OutputLevel.DEBUG if verbose else OutputLevel.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """msipack - 基于 WiX 工具链的 MSI 安装包构建工具

    使用 --help 查看可用命令的详细信息。
    """
    pass


app.command("build", help="构建 MSI 安装包")(build.build_command)
app.command("validate", help="验证配置文件")(validate.validate_command)
app.command("generate", help="只生成 WiX 源文件")(generate.generate_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    from ..vm import create_vm_manager

    table = Table(title="msipack 系统信息")
    table.add_column("项目", style="cyan")
    table.add_column("值", style="green")

    table.add_row("msipack", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("主机平台", sys.platform)
    table.add_row("工具执行器", create_vm_manager().name)

    console.print(table)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "msipack.yaml",
        "--output", "-o",
        help="输出配置文件路径"
    )
) -> None:
    """生成示例配置文件"""
    from ..config import ConfigError, save_config
    from ..config.schema import Arch, BuildModel, MsiPackConfig, ProductModel, WixModel

    config = MsiPackConfig(
        product=ProductModel(name="Example App", version="1.0.0", product_filename="ExampleApp"),
        build=BuildModel(app_dir="./dist/win-unpacked", output_dir="./dist", archs=[Arch.X64]),
        wix=WixModel(candle_files=["./installer/Product.wxs"]),
    )

    try:
        save_config(config, output)
    except ConfigError as e:
        console.print(f"[red]生成示例配置失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例配置文件已生成: [green]{output}[/green]")
    console.print("请根据需要修改配置文件，然后运行:")
    console.print(f"  [cyan]msipack build -c {output}[/cyan]")


if __name__ == "__main__":
    app()
