"""
.MTREE 生成

按 mtree(5) 格式列出包中每个条目的类型、权限、属主和内容摘要，供 pacman 校验
已安装文件。格式与 bsdtar 输出保持一致，整体用 gzip 压缩。
"""

import gzip
from typing import List, Union

from ...package import Directory, Node, NodeMetadata, Package, RegularFile, Symlink
from ...package.filesystem import DEFAULT_FILE_MODE
from ..hashing import HashCalculator
from .layout import METADATA_MODE, MTREE_NAME

MTREE_HEADER = "#mtree\n/set type=file uid=0 gid=0 mode=644\n"

# 除可打印 ASCII 以外，这几个字符在 mtree 中也必须转义
_SPECIAL_CHARS = b"#=\\"


def escape_mtree(text: str) -> str:
    """按 bsdtar 的规则转义路径：非可打印字节和 # = \\ 空格 写成 \\ooo 八进制"""
    out = []
    for byte in text.encode("utf-8"):
        if byte <= 0x20 or byte >= 0x7F or byte in _SPECIAL_CHARS:
            out.append(f"\\{byte:03o}")
        else:
            out.append(chr(byte))
    return "".join(out)


def _ownership_keywords(metadata: NodeMetadata) -> List[str]:
    # 名称形式的属主在构建时没有可靠的数字 ID，只写 uname/gname，
    # 数字 ID 沿用 /set 中的 0。需要 pacman -Qkk 校验 ID 时应写数字 ID。
    keywords = []
    for id_key, name_key, value in (
        ("uid", "uname", metadata.owner),
        ("gid", "gname", metadata.group),
    ):
        if isinstance(value, str):
            keywords.append(f"{name_key}={escape_mtree(value)}")
        elif value != 0:
            keywords.append(f"{id_key}={value}")
    return keywords


def make_mtree_line(path: str, node: Node) -> str:
    """生成单个条目的 mtree 行（不含换行符）"""
    keywords = [f"./{escape_mtree(path)}", f"time={node.metadata.mtime or 0}.0"]

    if node.mode != DEFAULT_FILE_MODE:
        keywords.append(f"mode={node.mode:o}")
    keywords.extend(_ownership_keywords(node.metadata))

    if isinstance(node, RegularFile):
        keywords.append(f"size={len(node.content)}")
        keywords.append(f"md5digest={HashCalculator.hash_data(node.content, 'md5')}")
        keywords.append(f"sha256digest={HashCalculator.hash_data(node.content, 'sha256')}")
    elif isinstance(node, Directory):
        keywords.append("type=dir")
    elif isinstance(node, Symlink):
        keywords.append("type=link")
        keywords.append(f"link={escape_mtree(node.target)}")
    else:
        raise TypeError(f"未知的节点类型: {type(node).__name__}")

    return " ".join(keywords)


def make_mtree(pkg: Package) -> str:
    """生成未压缩的 .MTREE 文本

    覆盖文件树中的所有条目（包括 .PKGINFO 和 .INSTALL），.MTREE 自身除外。
    """
    lines = [MTREE_HEADER]
    for path, node in pkg.walk_fs_with_relative_paths():
        if path == MTREE_NAME:
            continue
        lines.append(make_mtree_line(path, node) + "\n")
    return "".join(lines)


def compress_mtree(text: Union[str, bytes]) -> bytes:
    if isinstance(text, str):
        text = text.encode("utf-8")
    # mtime=0 保证输出可复现
    return gzip.compress(text, mtime=0)


def write_mtree(pkg: Package) -> RegularFile:
    """生成 .MTREE 并插入到文件树根目录"""
    member = RegularFile(
        content=compress_mtree(make_mtree(pkg)),
        metadata=NodeMetadata(mode=METADATA_MODE, mtime=pkg.build_time),
    )
    pkg.fs_root.entries[MTREE_NAME] = member
    return member
