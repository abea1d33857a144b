"""
pacgen CLI 主入口

提供命令行接口，支持 build/validate/inspect/info/example 等命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config import ConfigError
from ..utils import configure_logging
from ..utils.logging import OutputLevel
from .commands import build, validate, inspect


# 创建主应用
app = typer.Typer(
    name="pacgen",
    help="pacgen - 从声明式包定义生成 pacman 二进制包",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


# 全局选项
def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"pacgen v{__version__}")
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
        "--verbose",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """pacgen - 从声明式包定义生成 pacman 二进制包

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="构建 pacman 包")(build.build_command)
app.command("validate", help="验证包定义文件")(validate.validate_command)
app.command("inspect", help="检查已构建的包")(inspect.inspect_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    import zstandard
    from ..build.compressor import CompressorFactory, LEVEL_RANGES

    console.print("[bold]pacgen 系统信息[/bold]")
    console.print()

    # 版本信息
    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")

    table.add_row("pacgen", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("zstandard", zstandard.__version__)

    console.print(table)
    console.print()

    # 支持的压缩算法
    algo_table = Table(title="支持的压缩算法")
    algo_table.add_column("算法", style="cyan")
    algo_table.add_column("级别范围", style="green")
    algo_table.add_column("默认级别", style="yellow")

    for algo in CompressorFactory.get_available_algorithms():
        low, high, default = LEVEL_RANGES[algo]
        algo_table.add_row(algo.value, f"{low}-{high}", str(default))

    console.print(algo_table)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "example.pkg.yaml",
        "--output", "-o",
        help="输出包定义文件路径"
    )
) -> None:
    """生成示例包定义文件"""
    from ..config import save_definition
    from ..config.schema import (
        DirectoryEntryModel,
        FileEntryModel,
        PackageDefinition,
        PackageSection,
        SymlinkEntryModel,
    )

    definition = PackageDefinition(
        package=PackageSection(
            name="example",
            version="1.0",
            release=1,
            description="示例包",
            author="Jane Doe <jane@example.org>",
            architecture="any",
            requires=["bash", "coreutils >= 8.0"],
            setup_script="systemctl daemon-reload",
        ),
        files=[
            FileEntryModel(
                path="/usr/bin/example",
                content="#!/bin/sh\necho hello\n",
                mode="0755",
            ),
            FileEntryModel(
                path="/etc/example.conf",
                content="greeting = hello\n",
            ),
        ],
        directories=[
            DirectoryEntryModel(path="/var/lib/example", mode="0700"),
        ],
        symlinks=[
            SymlinkEntryModel(path="/usr/bin/example-hello", target="example"),
        ],
    )

    try:
        save_definition(definition, output)
    except ConfigError as e:
        console.print(f"[red]生成示例包定义失败: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例包定义已生成: [green]{escape(output)}[/green]")
    console.print("请根据需要修改包定义，然后运行:")
    console.print(f"  [cyan]pacgen build -c {escape(output)} -o dist/[/cyan]")


if __name__ == "__main__":
    app()
