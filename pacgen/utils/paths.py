"""
路径工具

提供路径处理相关的工具函数。
"""

from pathlib import Path, PurePosixPath
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def normalize_install_path(path: str) -> str:
    """规范化包内安装路径

    包定义中的路径必须是绝对路径（以 / 开头），不得包含 . 或 .. 片段。

    Args:
        path: 原始路径，例如 "/usr/bin/foo"

    Returns:
        str: 规范化后的绝对路径，去掉重复和结尾的斜杠

    Raises:
        ValueError: 路径无效
    """
    if not path.startswith("/"):
        raise ValueError(f"路径必须是绝对路径: {path}")

    parts = [p for p in path.split("/") if p]
    if not parts:
        raise ValueError("不能使用根目录 / 作为条目路径")

    for part in parts:
        if part in (".", ".."):
            raise ValueError(f"路径中不允许出现 '{part}': {path}")

    return str(PurePosixPath("/", *parts))


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"
