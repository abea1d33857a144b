"""
pacman 包生成器

对外提供三个操作：推荐文件名、批量校验、构建归档。
"""

from typing import Any, Dict, List, Optional

from ...package import GrammarViolation, Package
from ...utils.logging import get_stage_logger, LogStage
from ..build_context import BuildContext, ProgressCallback
from ..build_pipeline import BuildPipeline
from ..compressor import CompressionAlgorithm, Compressor, CompressorFactory
from .layout import ARCH_MAP, GENERATED_MEMBERS, PACMAN_GRAMMAR, arch_string, full_version_string

logger = get_stage_logger(LogStage.INIT)


class PacmanGenerator:
    """pacman 包生成器

    每个实例对应一个包。构建期间独占 package.fs_root，
    多个实例可以在不同线程中并发构建各自的包。
    """

    def __init__(
        self,
        package: Package,
        compression: CompressionAlgorithm = CompressionAlgorithm.ZSTD,
        level: Optional[int] = None,
    ):
        """初始化生成器

        Args:
            package: 要构建的包
            compression: 归档压缩算法
            level: 压缩级别，None 表示算法默认值

        Raises:
            CompressionError: 不支持的算法或级别
        """
        self.package = package
        self.compressor: Compressor = CompressorFactory.create_compressor(compression, level)
        self.pipeline = BuildPipeline()
        self.last_build_stats: Dict[str, Any] = {}

    def recommended_file_name(self) -> str:
        """推荐的输出文件名

        在 build() 成功之后调用，此时名称、版本和架构都已校验过。
        """
        pkg = self.package
        return (
            f"{pkg.name}-{full_version_string(pkg)}-{arch_string(pkg.architecture)}"
            f".pkg.tar.{self.compressor.extension}"
        )

    def validate(self) -> List[GrammarViolation]:
        """按 pacman 语法校验包，返回全部错误（空列表表示通过）"""
        errors = self.package.validate_with(PACMAN_GRAMMAR, ARCH_MAP)
        for e in errors:
            logger.debug(f"校验失败: {e}")
        return errors

    def build(self, progress_callback: Optional[ProgressCallback] = None) -> bytes:
        """构建 pacman 包

        Args:
            progress_callback: 进度回调

        Returns:
            bytes: 压缩后的包归档

        Raises:
            BuildError: 任一步骤失败，错误信息标明失败的条目
        """
        pkg = self.package
        pkg.prepare_build()
        self._discard_generated_members()

        context = BuildContext(
            package=pkg,
            compressor=self.compressor,
            progress_callback=progress_callback,
        )
        self.pipeline.execute(context)
        self.last_build_stats = context.build_stats
        return context.archive_data

    def _discard_generated_members(self) -> None:
        """移除上一次构建留下的元数据条目，保证重复构建结果一致"""
        for name in GENERATED_MEMBERS:
            if self.package.fs_root.entries.pop(name, None) is not None:
                logger.debug(f"移除上次构建生成的 {name}")


def generator_factory(package: Package) -> PacmanGenerator:
    """为包创建默认配置的生成器"""
    return PacmanGenerator(package)
