"""
Inspect 命令实现

解压已构建的 pacman 包，显示 .PKGINFO 字段、.INSTALL 是否存在以及条目列表。
"""

import json
import tarfile
from pathlib import Path
from typing import Any, Dict

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...build.archive import read_package_members
from ...build.compressor import CompressorFactory, DecompressionError
from ...build.pacman import INSTALL_NAME, MTREE_NAME, PKGINFO_NAME, parse_pkginfo
from ...utils import format_size


console = Console()

_TYPE_NAMES = {
    tarfile.REGTYPE: "file",
    tarfile.DIRTYPE: "dir",
    tarfile.SYMTYPE: "link",
}


def read_package_summary(package_path: Path) -> Dict[str, Any]:
    """读取包文件并汇总元数据

    Raises:
        DecompressionError: 无法识别或解压
        tarfile.TarError: tar 数据损坏
        OSError: 文件读取失败
    """
    data = package_path.read_bytes()
    algorithm = CompressorFactory.detect_algorithm(data)
    members = read_package_members(data)

    pkginfo: Dict[str, Any] = {}
    install_script = None
    files = []
    for member in members:
        if member.name == PKGINFO_NAME and member.content is not None:
            pkginfo = parse_pkginfo(member.content.decode("utf-8"))
        elif member.name == INSTALL_NAME and member.content is not None:
            install_script = member.content.decode("utf-8")
        files.append({
            "path": member.name,
            "type": _TYPE_NAMES.get(member.info.type, "other"),
            "mode": f"{member.info.mode:04o}",
            "size": member.info.size,
            "link": member.info.linkname or None,
        })

    return {
        "file": str(package_path),
        "compression": algorithm.value,
        "size": len(data),
        "pkginfo": pkginfo,
        "has_install": install_script is not None,
        "has_mtree": any(m.name == MTREE_NAME for m in members),
        "install": install_script,
        "files": files,
    }


def inspect_command(
    package: str = typer.Argument(..., help="pacman 包文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_files: bool = typer.Option(False, "--files", help="显示条目列表"),
) -> None:
    """检查已构建的 pacman 包

    示例:
        pacgen inspect foo-1.0-1-x86_64.pkg.tar.zst
        pacgen inspect foo-1.0-1-x86_64.pkg.tar.zst --json
    """
    package_path = Path(package)

    if not package_path.exists():
        console.print(f"[red]包文件不存在: {escape(str(package_path))}[/red]")
        raise typer.Exit(1)

    try:
        summary = read_package_summary(package_path)
    except (DecompressionError, tarfile.TarError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]检查包失败: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(summary, ensure_ascii=False, indent=2))
        return

    _display_summary(summary, show_files)


def _display_summary(summary: Dict[str, Any], show_files: bool) -> None:
    """显示包信息（人类可读格式）"""
    console.print("[bold]包信息[/bold]")
    console.print()

    basic_table = Table(title="基本信息")
    basic_table.add_column("属性", style="cyan")
    basic_table.add_column("值", style="green")

    basic_table.add_row("文件", escape(summary["file"]))
    basic_table.add_row("压缩算法", summary["compression"])
    basic_table.add_row("文件大小", format_size(summary["size"]))
    basic_table.add_row("安装脚本", "有" if summary["has_install"] else "无")
    basic_table.add_row(".MTREE", "有" if summary["has_mtree"] else "无")
    console.print(basic_table)
    console.print()

    pkginfo = summary["pkginfo"]
    if pkginfo:
        info_table = Table(title=PKGINFO_NAME)
        info_table.add_column("键", style="cyan")
        info_table.add_column("值", style="green")
        for key, values in pkginfo.items():
            for value in values:
                info_table.add_row(escape(key), escape(value))
        console.print(info_table)
        console.print()

    if show_files:
        files = summary["files"]
        files_table = Table(title=f"条目列表 ({len(files)} 个条目)")
        files_table.add_column("路径", style="cyan")
        files_table.add_column("类型", style="yellow")
        files_table.add_column("权限", style="yellow")
        files_table.add_column("大小", style="green")

        for entry in files:
            path = entry["path"]
            if entry["link"]:
                path = f"{path} -> {entry['link']}"
            files_table.add_row(
                escape(path),
                entry["type"],
                entry["mode"],
                format_size(entry["size"]),
            )

        console.print(files_table)
        console.print()
