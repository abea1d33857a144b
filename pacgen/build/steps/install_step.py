"""
.INSTALL 生成步骤模块

根据 setup/cleanup 脚本生成生命周期钩子。
"""

from ...utils.logging import info, debug, LogStage
from pacgen.build.build_context import BuildContext
from pacgen.build.pacman.install import write_install
from pacgen.build.pacman.layout import INSTALL_NAME
from .build_step import BuildStep


class InstallScriptStep(BuildStep):
    """.INSTALL 生成步骤"""

    def __init__(self):
        super().__init__("install", f"生成 {INSTALL_NAME}")

    def get_progress_range(self) -> tuple[int, int]:
        return (20, 30)

    def execute(self, context: BuildContext) -> None:
        progress_start, progress_end = self.get_progress_range()
        context.report_progress("生成元数据", progress_start, f"生成 {INSTALL_NAME}...")

        member = write_install(context.package)
        if member is None:
            info(f"没有生命周期脚本，跳过 {INSTALL_NAME}", stage=LogStage.INSTALL)
            context.build_stats['install_size'] = 0
        else:
            context.build_stats['install_size'] = len(member.content)
            info(f"{INSTALL_NAME} 已生成", stage=LogStage.INSTALL)
            debug(f"{INSTALL_NAME} 内容:\n{member.content.decode('utf-8')}", stage=LogStage.INSTALL)

        context.report_progress("生成元数据", progress_end, "")
