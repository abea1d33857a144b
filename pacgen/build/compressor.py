"""
压缩器抽象接口和实现

为包归档提供统一的压缩/解压接口，支持 Zstd、XZ 和 Gzip。
所有实现对相同输入产生逐字节相同的输出。
"""

import gzip
import lzma
import zlib
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import zstandard as zstd


class CompressionAlgorithm(str, Enum):
    """压缩算法枚举"""
    ZSTD = "zstd"
    XZ = "xz"
    GZIP = "gzip"


# 文件头魔术字节
_MAGIC = {
    CompressionAlgorithm.ZSTD: b"\x28\xb5\x2f\xfd",
    CompressionAlgorithm.XZ: b"\xfd7zXZ\x00",
    CompressionAlgorithm.GZIP: b"\x1f\x8b",
}

# 各算法的级别范围 (最小, 最大, 默认)
LEVEL_RANGES = {
    CompressionAlgorithm.ZSTD: (1, 22, 19),
    CompressionAlgorithm.XZ: (0, 9, 6),
    CompressionAlgorithm.GZIP: (1, 9, 9),
}


class CompressionError(Exception):
    """压缩相关错误"""
    pass


class DecompressionError(Exception):
    """解压相关错误"""
    pass


class Compressor(ABC):
    """压缩器抽象基类"""

    def __init__(self, level: Optional[int] = None):
        low, high, default = LEVEL_RANGES[self.get_algorithm()]
        if level is None:
            level = default
        if not low <= level <= high:
            raise CompressionError(
                f"{self.get_algorithm().value} 压缩级别必须在 {low}-{high} 之间: {level}"
            )
        self.level = level

    @abstractmethod
    def get_algorithm(self) -> CompressionAlgorithm:
        """获取压缩算法"""
        pass

    @property
    @abstractmethod
    def extension(self) -> str:
        """归档文件名后缀（不含 tar 部分），例如 zst"""
        pass

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        """压缩数据

        Raises:
            CompressionError: 压缩失败
        """
        pass

    @abstractmethod
    def decompress(self, data: bytes) -> bytes:
        """解压数据

        Raises:
            DecompressionError: 解压失败
        """
        pass


class ZstdCompressor(Compressor):
    """Zstd 压缩器（pacman 默认格式）"""

    def __init__(self, level: Optional[int] = None):
        super().__init__(level)
        self._cctx = zstd.ZstdCompressor(level=self.level, write_content_size=True)
        self._dctx = zstd.ZstdDecompressor()

    def get_algorithm(self) -> CompressionAlgorithm:
        return CompressionAlgorithm.ZSTD

    @property
    def extension(self) -> str:
        return "zst"

    def compress(self, data: bytes) -> bytes:
        try:
            return self._cctx.compress(data)
        except zstd.ZstdError as e:
            raise CompressionError(f"Zstd 压缩失败: {e}") from e

    def decompress(self, data: bytes) -> bytes:
        try:
            # decompressobj 不依赖帧头中的内容大小
            return self._dctx.decompressobj().decompress(data)
        except zstd.ZstdError as e:
            raise DecompressionError(f"Zstd 解压失败: {e}") from e


class XzCompressor(Compressor):
    """XZ 压缩器"""

    def get_algorithm(self) -> CompressionAlgorithm:
        return CompressionAlgorithm.XZ

    @property
    def extension(self) -> str:
        return "xz"

    def compress(self, data: bytes) -> bytes:
        try:
            return lzma.compress(data, format=lzma.FORMAT_XZ, check=lzma.CHECK_CRC64, preset=self.level)
        except lzma.LZMAError as e:
            raise CompressionError(f"XZ 压缩失败: {e}") from e

    def decompress(self, data: bytes) -> bytes:
        try:
            return lzma.decompress(data, format=lzma.FORMAT_XZ)
        except lzma.LZMAError as e:
            raise DecompressionError(f"XZ 解压失败: {e}") from e


class GzipCompressor(Compressor):
    """Gzip 压缩器"""

    def get_algorithm(self) -> CompressionAlgorithm:
        return CompressionAlgorithm.GZIP

    @property
    def extension(self) -> str:
        return "gz"

    def compress(self, data: bytes) -> bytes:
        # mtime=0 保证输出可复现
        return gzip.compress(data, compresslevel=self.level, mtime=0)

    def decompress(self, data: bytes) -> bytes:
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise DecompressionError(f"Gzip 解压失败: {e}") from e


class CompressorFactory:
    """压缩器工厂"""

    _registry = {
        CompressionAlgorithm.ZSTD: ZstdCompressor,
        CompressionAlgorithm.XZ: XzCompressor,
        CompressionAlgorithm.GZIP: GzipCompressor,
    }

    @staticmethod
    def create_compressor(
        algorithm: CompressionAlgorithm = CompressionAlgorithm.ZSTD,
        level: Optional[int] = None,
    ) -> Compressor:
        """创建压缩器

        Args:
            algorithm: 压缩算法
            level: 压缩级别，None 表示使用算法默认值

        Returns:
            Compressor: 压缩器实例

        Raises:
            CompressionError: 不支持的算法或级别
        """
        try:
            compressor_cls = CompressorFactory._registry[CompressionAlgorithm(algorithm)]
        except (KeyError, ValueError):
            raise CompressionError(f"不支持的压缩算法: {algorithm}") from None
        return compressor_cls(level)

    @staticmethod
    def get_available_algorithms() -> list[CompressionAlgorithm]:
        """获取可用的压缩算法列表（首选在前）"""
        return list(CompressorFactory._registry)

    @staticmethod
    def detect_algorithm(data: bytes) -> CompressionAlgorithm:
        """根据魔术字节识别压缩算法

        Raises:
            DecompressionError: 无法识别
        """
        for algorithm, magic in _MAGIC.items():
            if data.startswith(magic):
                return algorithm
        raise DecompressionError("无法识别的压缩格式")
