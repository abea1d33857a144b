"""
.PKGINFO 生成步骤模块

生成包元数据并插入文件树。
"""

from ...utils import format_size
from ...utils.logging import success, debug, error, LogStage
from pacgen.build.build_context import BuildContext, BuildError
from pacgen.build.pacman.layout import PKGINFO_NAME
from pacgen.build.pacman.pkginfo import installed_size, write_pkginfo
from .build_step import BuildStep


class PkginfoStep(BuildStep):
    """.PKGINFO 生成步骤"""

    def __init__(self):
        super().__init__("pkginfo", f"生成 {PKGINFO_NAME}")

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 20)

    def execute(self, context: BuildContext) -> None:
        """生成 .PKGINFO"""
        progress_start, progress_end = self.get_progress_range()
        context.report_progress("生成元数据", progress_start, f"生成 {PKGINFO_NAME}...")

        try:
            member = write_pkginfo(context.package)
        except Exception as e:
            error(f"写入 {PKGINFO_NAME} 失败: {e}", stage=LogStage.PKGINFO)
            raise BuildError(f"写入 {PKGINFO_NAME} 失败: {e}") from e

        size = installed_size(context.package)
        context.build_stats['installed_size'] = size
        context.build_stats['pkginfo_size'] = len(member.content)

        context.report_progress("生成元数据", progress_end, f"{PKGINFO_NAME} 已生成")
        success(f"{PKGINFO_NAME} 已生成 - 安装大小: {format_size(size)}", stage=LogStage.PKGINFO)
        debug(f"{PKGINFO_NAME} 内容:\n{member.content.decode('utf-8')}", stage=LogStage.PKGINFO)
