"""
构建器主类

负责把包校验、构建并写入输出目录。
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..package import GrammarViolation, Package
from ..utils import ensure_directory, format_size
from ..utils.logging import info, success, error, LogStage
from .build_context import BuildError, ProgressCallback
from .compressor import CompressionAlgorithm
from .pacman import PacmanGenerator


class PackageValidationError(BuildError):
    """包未通过格式校验，violations 包含全部错误"""

    def __init__(self, violations: List[GrammarViolation]):
        super().__init__(f"包校验失败（{len(violations)} 个错误）")
        self.violations = violations


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    output_path: Optional[Path] = None
    output_size: Optional[int] = None
    build_time: Optional[float] = None
    error: Optional[str] = None
    errors: List[str] = field(default_factory=list)


class Builder:
    """包构建器

    在生成器之上提供"校验 → 构建 → 写文件"的完整流程。
    """

    def __init__(
        self,
        compression: CompressionAlgorithm = CompressionAlgorithm.ZSTD,
        level: Optional[int] = None,
    ):
        self.compression = compression
        self.level = level

    def create_generator(self, package: Package) -> PacmanGenerator:
        return PacmanGenerator(package, compression=self.compression, level=self.level)

    def suggest_filename(self, package: Package) -> str:
        """返回推荐的文件名，包未通过校验时抛出 PackageValidationError"""
        generator = self.create_generator(package)
        violations = generator.validate()
        if violations:
            raise PackageValidationError(violations)
        return generator.recommended_file_name()

    def generate(
        self,
        package: Package,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Tuple[bytes, str]:
        """校验并构建包

        Returns:
            Tuple[bytes, str]: (归档数据, 推荐文件名)

        Raises:
            PackageValidationError: 校验失败
            BuildError: 构建失败
        """
        generator = self.create_generator(package)
        violations = generator.validate()
        if violations:
            error(f"包校验失败: {len(violations)} 个错误", stage=LogStage.VALIDATE)
            raise PackageValidationError(violations)

        data = generator.build(progress_callback)
        return data, generator.recommended_file_name()

    def build(
        self,
        package: Package,
        output_dir: Path,
        force: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildResult:
        """构建包并写入输出目录

        Args:
            package: 要构建的包
            output_dir: 输出目录
            force: 是否覆盖已存在的文件
            progress_callback: 进度回调函数

        Returns:
            BuildResult: 构建结果，失败时 success 为 False
        """
        start_time = time.time()
        try:
            data, file_name = self.generate(package, progress_callback)

            output_path = Path(output_dir) / file_name
            if output_path.exists() and not force:
                raise BuildError(f"输出文件已存在: {output_path}（使用 --force 覆盖）")

            ensure_directory(output_path.parent)
            info(f"写入文件: {output_path}", stage=LogStage.WRITE)
            _write_atomic(output_path, data)
            success(f"包构建成功: {output_path.name} ({format_size(len(data))})", stage=LogStage.DONE)

            return BuildResult(
                success=True,
                output_path=output_path,
                output_size=len(data),
                build_time=time.time() - start_time,
            )

        except PackageValidationError as e:
            return BuildResult(
                success=False,
                error=str(e),
                errors=[str(v) for v in e.violations],
                build_time=time.time() - start_time,
            )
        except (BuildError, OSError) as e:
            error(f"构建失败: {e}", stage=LogStage.ERROR)
            return BuildResult(
                success=False,
                error=str(e),
                build_time=time.time() - start_time,
            )


def _write_atomic(output_path: Path, data: bytes) -> None:
    """先写同目录下的临时文件再替换，失败时不留下不完整的包"""
    temp_path = output_path.with_name(f".{output_path.name}.part")
    try:
        temp_path.write_bytes(data)
        temp_path.replace(output_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
