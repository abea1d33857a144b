"""
归档组装步骤模块

把完整的文件树序列化为压缩后的 tar 归档。
"""

from ...utils import format_size
from ...utils.logging import info, success, error, LogStage
from pacgen.build.archive import serialize_tree
from pacgen.build.build_context import BuildContext, BuildError
from .build_step import BuildStep


class ArchiveStep(BuildStep):
    """归档组装步骤"""

    def __init__(self):
        super().__init__("archive", "组装并压缩包归档")

    def get_progress_range(self) -> tuple[int, int]:
        return (60, 100)

    def execute(self, context: BuildContext) -> None:
        algorithm = context.compressor.get_algorithm().value
        info(f"压缩归档 - 算法: {algorithm}, 级别: {context.compressor.level}", stage=LogStage.ARCHIVE)

        progress_start, progress_end = self.get_progress_range()
        context.report_progress("压缩归档", progress_start, "写入 tar...")

        try:
            archive_data = serialize_tree(context.package.fs_root, context.compressor)
        except Exception as e:
            error(f"归档失败: {e}", stage=LogStage.ARCHIVE)
            raise BuildError(f"归档失败 ({algorithm}): {e}") from e

        context.archive_data = archive_data
        context.build_stats['archive_size'] = len(archive_data)

        installed = context.build_stats.get('installed_size', 0)
        ratio = (1 - len(archive_data) / installed) * 100 if installed > 0 else 0.0
        context.build_stats['compression_ratio'] = ratio

        context.report_progress("压缩归档", progress_end, f"完成，大小 {format_size(len(archive_data))}")
        success(f"归档完成 - 大小: {format_size(len(archive_data))}", stage=LogStage.ARCHIVE)
