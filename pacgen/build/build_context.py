"""
构建上下文模块

定义构建过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..package import Package

if TYPE_CHECKING:
    from .compressor import Compressor

# 进度回调类型: (阶段, 当前, 总数, 消息)
ProgressCallback = Callable[[str, int, int, str], None]


@dataclass
class BuildContext:
    """构建上下文

    一次构建独占 package（以及其中的文件树），各步骤按顺序读写它，
    步骤结束后不得保留对它的引用。
    """
    package: Package
    compressor: "Compressor"
    progress_callback: Optional[ProgressCallback] = None

    # 构建过程中生成的数据
    archive_data: Optional[bytes] = None

    # 统计信息
    build_stats: Dict[str, Any] = None  # type: ignore

    def __post_init__(self):
        if self.build_stats is None:
            self.build_stats = {
                'start_time': 0,
                'end_time': 0,
                'installed_size': 0,
                'entry_count': 0,
                'archive_size': 0,
                'compression_ratio': 0.0,
            }

    def report_progress(self, stage: str, percent: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, percent, 100, message)


class BuildError(Exception):
    """构建错误"""
    pass


class MissingMappingError(BuildError):
    """枚举值没有对应的目标格式表示（说明前置校验有遗漏）"""
    pass
