"""
.MTREE 生成步骤模块

为文件树中的全部条目（含已生成的 .PKGINFO/.INSTALL）生成校验清单。
"""

from ...utils import format_size
from ...utils.logging import success, error, LogStage
from pacgen.build.build_context import BuildContext, BuildError
from pacgen.build.pacman.layout import MTREE_NAME
from pacgen.build.pacman.mtree import write_mtree
from .build_step import BuildStep


class MtreeStep(BuildStep):
    """.MTREE 生成步骤"""

    def __init__(self):
        super().__init__("mtree", f"生成 {MTREE_NAME}")

    def get_progress_range(self) -> tuple[int, int]:
        return (30, 60)

    def execute(self, context: BuildContext) -> None:
        progress_start, progress_end = self.get_progress_range()
        context.report_progress("生成清单", progress_start, "计算文件摘要...")

        try:
            member = write_mtree(context.package)
        except Exception as e:
            error(f"写入 {MTREE_NAME} 失败: {e}", stage=LogStage.MTREE)
            raise BuildError(f"写入 {MTREE_NAME} 失败: {e}") from e

        entry_count = sum(1 for _ in context.package.walk_fs_with_relative_paths())
        context.build_stats['entry_count'] = entry_count
        context.build_stats['mtree_size'] = len(member.content)

        context.report_progress("生成清单", progress_end, f"{MTREE_NAME} 已生成")
        success(
            f"{MTREE_NAME} 已生成 - 条目数: {entry_count}, 大小: {format_size(len(member.content))}",
            stage=LogStage.MTREE,
        )
