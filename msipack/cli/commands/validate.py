"""
Validate 命令实现

验证配置文件，并检查构建前就能发现的问题（应用目录、主程序、WiX 工具）。
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.table import Table

from ...config import ConfigError, ConfigValidationError, MsiPackConfig, load_config


console = Console()


def collect_warnings(config: MsiPackConfig) -> List[str]:
    """配置语法正确但构建时很可能失败的情况"""
    warnings: List[str] = []
    app_dir = Path(config.build.app_dir)
    main_exe = config.product.get_main_exe_file_name()

    if not app_dir.is_dir():
        warnings.append(f"应用目录不存在: {app_dir}")
    elif not (app_dir / main_exe).is_file():
        warnings.append(f"应用目录中没有主程序 {main_exe}")

    for source in config.wix.candle_files:
        if not Path(source).is_file():
            warnings.append(f"candle 源文件不存在: {source}")
    for obj in config.wix.light_files:
        if not Path(obj).is_file():
            warnings.append(f"light 目标文件不存在: {obj}")

    wix_dir = config.toolchain.wix_dir
    if wix_dir:
        for exe in ("candle.exe", "light.exe"):
            if not (Path(wix_dir) / exe).is_file():
                warnings.append(f"WiX 目录中没有 {exe}: {wix_dir}")

    return warnings


def _print_errors(errors: List[Dict[str, Any]]) -> None:
    console.print(f"[red]配置文件验证失败 ({len(errors)} 个错误):[/red]")
    console.print()

    table = Table(title="验证错误")
    table.add_column("位置", style="cyan", no_wrap=True)
    table.add_column("错误信息", style="red")
    table.add_column("输入值", style="yellow")

    for error in errors:
        location = " -> ".join(str(item) for item in error.get('loc', []))
        message = error.get('msg', '未知错误')
        input_value = str(error.get('input', ''))
        if len(input_value) > 47:
            input_value = input_value[:47] + "..."

        table.add_row(location or "根级别", message, input_value or "-")

    console.print(table)


def validate_command(
    config: str = typer.Option(..., "--config", "-c", help="配置文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式的结果"),
    strict: bool = typer.Option(False, "--strict", help="有警告时也返回失败"),
) -> None:
    """验证配置文件

    示例:
        msipack validate -c msipack.yaml
        msipack validate -c msipack.yaml --json
    """
    config_path = Path(config)

    try:
        config_obj = load_config(config_path)
        errors: List[Dict[str, Any]] = []
    except ConfigValidationError as e:
        config_obj = None
        errors = e.errors
    except ConfigError as e:
        config_obj = None
        errors = [{'loc': [], 'msg': str(e), 'type': 'config_error'}]

    warnings = collect_warnings(config_obj) if config_obj is not None else []

    if json_output:
        typer.echo(json.dumps({
            "file": str(config_path),
            "valid": not errors,
            "errors": errors,
            "warnings": warnings,
        }, ensure_ascii=False, indent=2, default=str))
    else:
        console.print(f"正在验证配置文件: [cyan]{config_path}[/cyan]")
        if errors:
            _print_errors(errors)
        else:
            console.print("[green]✓ 配置文件验证通过[/green]")
        for message in warnings:
            console.print(f"[yellow]警告[/yellow]: {message}")

    if errors or (strict and warnings):
        raise typer.Exit(1)
