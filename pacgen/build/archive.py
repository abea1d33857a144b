"""
归档序列化

把载荷文件树写成 tar 并压缩；同时提供读取已构建包的辅助函数。
只处理树中的三种节点，符号链接按链接本身存储，从不跟随。
"""

import io
import tarfile
from dataclasses import dataclass
from typing import List, Optional, Union

from ..package import Directory, Node, RegularFile, Symlink
from .compressor import Compressor, CompressorFactory


@dataclass
class ArchiveMember:
    """已构建包中的一个条目"""
    name: str
    info: tarfile.TarInfo
    content: Optional[bytes] = None


def _apply_ownership(info: tarfile.TarInfo, owner: Union[int, str], group: Union[int, str]) -> None:
    if isinstance(owner, int):
        info.uid = owner
        info.uname = "root" if owner == 0 else ""
    else:
        info.uid = 0
        info.uname = owner
    if isinstance(group, int):
        info.gid = group
        info.gname = "root" if group == 0 else ""
    else:
        info.gid = 0
        info.gname = group


def make_tarinfo(path: str, node: Node) -> tarfile.TarInfo:
    """为节点生成 tar 头信息"""
    info = tarfile.TarInfo(name=path)
    info.mtime = node.metadata.mtime or 0
    info.mode = node.mode
    _apply_ownership(info, node.metadata.owner, node.metadata.group)

    if isinstance(node, RegularFile):
        info.type = tarfile.REGTYPE
        info.size = len(node.content)
    elif isinstance(node, Directory):
        info.type = tarfile.DIRTYPE
    elif isinstance(node, Symlink):
        info.type = tarfile.SYMTYPE
        info.linkname = node.target
    else:
        raise TypeError(f"未知的节点类型: {type(node).__name__}")
    return info


def serialize_tree(root: Directory, compressor: Compressor) -> bytes:
    """把文件树序列化为压缩后的 tar 归档

    根目录本身不写入，条目名不带 "./" 前缀，顺序与 Directory.walk 一致。

    Args:
        root: 文件树根目录
        compressor: 压缩器

    Returns:
        bytes: 压缩后的归档数据

    Raises:
        CompressionError: 压缩失败
        OSError: tar 写入失败
    """
    with io.BytesIO() as buffer:
        with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as tar:
            for path, node in root.walk():
                info = make_tarinfo(path, node)
                if isinstance(node, RegularFile):
                    tar.addfile(info, io.BytesIO(node.content))
                else:
                    tar.addfile(info)
        tar_data = buffer.getvalue()

    return compressor.compress(tar_data)


def read_package_members(data: bytes) -> List[ArchiveMember]:
    """读取已构建包的全部条目

    Args:
        data: 包文件内容（任意受支持的压缩格式）

    Returns:
        List[ArchiveMember]: 条目列表，顺序与归档中一致

    Raises:
        DecompressionError: 无法识别或解压
        tarfile.TarError: tar 数据损坏
    """
    algorithm = CompressorFactory.detect_algorithm(data)
    tar_data = CompressorFactory.create_compressor(algorithm).decompress(data)

    members: List[ArchiveMember] = []
    with tarfile.open(fileobj=io.BytesIO(tar_data), mode="r:") as tar:
        for info in tar.getmembers():
            content = None
            if info.isfile():
                extracted = tar.extractfile(info)
                if extracted is not None:
                    with extracted:
                        content = extracted.read()
            members.append(ArchiveMember(name=info.name, info=info, content=content))
    return members
