"""
哈希工具

为 .MTREE 清单计算文件内容摘要。
"""

import hashlib
from typing import Union


class HashCalculator:
    """哈希计算器"""

    def __init__(self, algorithm: str = "sha256"):
        """初始化哈希计算器

        Args:
            algorithm: 哈希算法名称

        Raises:
            ValueError: 不支持的算法
        """
        self.algorithm = algorithm.lower()
        if self.algorithm not in hashlib.algorithms_available:
            raise ValueError(f"不支持的哈希算法: {algorithm}")

        self._hasher = hashlib.new(self.algorithm)

    def update(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._hasher.update(data)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()

    @classmethod
    def hash_data(cls, data: Union[bytes, str], algorithm: str = "sha256") -> str:
        """便捷方法：计算数据哈希

        Args:
            data: 要计算哈希的数据
            algorithm: 哈希算法

        Returns:
            str: 十六进制哈希值
        """
        calculator = cls(algorithm)
        calculator.update(data)
        return calculator.hexdigest()
