"""构建服务模块

提供 pacman 包构建的核心功能。
"""

from .build_context import BuildContext, BuildError, MissingMappingError
from .builder import Builder, BuildResult, PackageValidationError
from .compressor import (
    Compressor,
    CompressorFactory,
    CompressionAlgorithm,
    CompressionError,
    DecompressionError,
    ZstdCompressor,
    XzCompressor,
    GzipCompressor,
)
from .archive import ArchiveMember, read_package_members, serialize_tree
from .pacman import PacmanGenerator, generator_factory

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "BuildContext",
    "BuildError",
    "MissingMappingError",
    "PackageValidationError",

    # 生成器
    "PacmanGenerator",
    "generator_factory",

    # 压缩相关
    "Compressor",
    "CompressorFactory",
    "CompressionAlgorithm",
    "CompressionError",
    "DecompressionError",
    "ZstdCompressor",
    "XzCompressor",
    "GzipCompressor",

    # 归档
    "ArchiveMember",
    "read_package_members",
    "serialize_tree",
]
