"""
Build 命令实现

从包定义文件构建 pacman 包。
"""

import sys
import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...build import BuildError, Builder, PackageValidationError
from ...build.compressor import CompressionAlgorithm, CompressionError
from ...config import ConfigError, ConfigValidationError, definition_to_package, load_definition
from ...utils.logging import set_log_level, set_log_file, use_stderr_only, OutputLevel


console = Console()
err_console = Console(stderr=True)


def _resolve_compression(definition, override: Optional[str]):
    """命令行参数优先；只有算法一致时才沿用包定义中的级别"""
    configured = definition.build.compression
    if override is None:
        return configured.algo, configured.level
    try:
        algo = CompressionAlgorithm(override.lower())
    except ValueError:
        choices = ", ".join(a.value for a in CompressionAlgorithm)
        raise ConfigError(f"不支持的压缩算法: {override}（可选: {choices}）") from None
    level = configured.level if algo == configured.algo else None
    return algo, level


def build_command(
    config: str = typer.Option(..., "--config", "-c", help="包定义文件路径"),
    output: str = typer.Option(".", "--output", "-o", help="输出目录"),
    force: bool = typer.Option(False, "--force", "-f", help="强制覆盖已存在的输出文件"),
    to_stdout: bool = typer.Option(False, "--stdout", help="把包数据写到标准输出而不是文件"),
    suggest_filename: bool = typer.Option(False, "--suggest-filename", help="只打印推荐的文件名"),
    compression: Optional[str] = typer.Option(None, "--compression", help="压缩算法: zstd / xz / gzip"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建 pacman 包

    示例:
        pacgen build -c foo.pkg.yaml -o dist/
        pacgen build -c foo.pkg.yaml --stdout > foo.pkg.tar.zst
        pacgen build -c foo.pkg.yaml --suggest-filename
    """
    config_path = Path(config)
    output_dir = Path(output)

    if to_stdout and suggest_filename:
        err_console.print("[red]--stdout 与 --suggest-filename 不能同时使用[/red]")
        raise typer.Exit(1)

    # stdout 被包数据或文件名占用时，提示信息全部写 stderr
    quiet_stdout = to_stdout or suggest_filename
    out = err_console if quiet_stdout else console

    # 只提升级别，不覆盖全局 --verbose
    if verbose:
        set_log_level(OutputLevel.DEBUG)
    if quiet_stdout:
        use_stderr_only()

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            out.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        if not quiet_stdout:
            out.print(f"[cyan]正在加载包定义[/cyan]: {escape(str(config_path))}")
        definition = load_definition(config_path)
        algo, level = _resolve_compression(definition, compression)
        package = definition_to_package(definition, config_path.parent)
        builder = Builder(compression=algo, level=level)

        if suggest_filename:
            typer.echo(builder.suggest_filename(package))
            return

        if to_stdout:
            data, _ = builder.generate(package)
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
            return

        def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
            """进度回调函数，显示进度"""
            if total > 0:
                percentage = (current / total) * 100
                if message:
                    out.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)")
                else:
                    out.print(f"[blue]{stage}[/blue]: {percentage:.0f}%")

        result = builder.build(
            package,
            output_dir,
            force=force,
            progress_callback=progress_callback if verbose else None,
        )

        if not result.success:
            out.print(f"[red]✗ 构建失败[/red]: {escape(str(result.error))}")
            for message in result.errors:
                out.print(f"  [red]-[/red] {escape(message)}")
            if log_file:
                out.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
            raise typer.Exit(1)

        out.print(f"[green]✓ 包构建完成[/green]: {escape(str(result.output_path))}")
        out.print(f"[blue]文件大小[/blue]: {result.output_size} 字节")

    except PackageValidationError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        for violation in e.violations:
            err_console.print(f"  [red]-[/red] {escape(str(violation))}")
        raise typer.Exit(1)
    except ConfigValidationError as e:
        err_console.print("[red]包定义验证失败:[/red]")
        err_console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        err_console.print(f"[red]配置错误[/red]: {escape(str(e))}")
        raise typer.Exit(1)
    except (BuildError, CompressionError) as e:
        err_console.print(f"[red]构建失败[/red]: {escape(str(e))}")
        if log_file:
            err_console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}", markup=False)
        raise typer.Exit(1)
