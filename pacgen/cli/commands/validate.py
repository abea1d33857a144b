"""
Validate 命令实现

先检查包定义的结构，再按 pacman 语法批量校验包名、版本号和依赖关系。
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...build import generator_factory
from ...config import ConfigError, definition_to_package, load_definition, validate_definition


console = Console()


def _grammar_errors(config_path: Path) -> List[Dict[str, Any]]:
    definition = load_definition(config_path)
    package = definition_to_package(definition, config_path.parent)
    violations = generator_factory(package).validate()
    return [
        {'loc': ['pacman'], 'msg': str(v), 'type': 'grammar_violation'}
        for v in violations
    ]


def validate_command(
    config: str = typer.Option(..., "--config", "-c", help="包定义文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式的错误信息"),
) -> None:
    """验证包定义文件

    示例:
        pacgen validate -c foo.pkg.yaml
        pacgen validate -c foo.pkg.yaml --json
    """
    config_path = Path(config)

    if not config_path.exists():
        console.print(f"[red]包定义文件不存在: {escape(str(config_path))}[/red]")
        raise typer.Exit(1)

    if not json_output:
        console.print(f"正在验证包定义: [cyan]{escape(str(config_path))}[/cyan]")

    errors = validate_definition(config_path)
    if not errors:
        try:
            errors = _grammar_errors(config_path)
        except ConfigError as e:
            errors = [{'loc': [], 'msg': str(e), 'type': 'config_error'}]

    if json_output:
        error_data = {
            "file": str(config_path),
            "valid": not errors,
            "errors": errors,
            "error_count": len(errors)
        }
        typer.echo(json.dumps(error_data, ensure_ascii=False, indent=2, default=str))
        if errors:
            raise typer.Exit(1)
        return

    if not errors:
        console.print("[green]✓ 包定义验证通过[/green]")
        return

    console.print(f"[red]包定义验证失败 ({len(errors)} 个错误):[/red]")
    console.print()

    table = Table(title="验证错误")
    table.add_column("位置", style="cyan", no_wrap=True)
    table.add_column("错误信息", style="red")
    table.add_column("输入值", style="yellow")

    for error in errors:
        location = " -> ".join(str(item) for item in error.get('loc', []))
        message = error.get('msg', '未知错误')
        input_value = error.get('input')
        input_text = "" if input_value is None else str(input_value)
        if len(input_text) > 47:
            input_text = input_text[:47] + "..."

        table.add_row(
            escape(location) or "根级别",
            escape(message),
            escape(input_text) or "-"
        )

    console.print(table)
    raise typer.Exit(1)
