"""
构建管道模块

使用管道模式按固定顺序执行构建步骤：.PKGINFO → .INSTALL → .MTREE → 归档。
"""

import time
from typing import List, Optional

from ..utils.logging import info, debug, error, LogStage
from .build_context import BuildContext, BuildError
from .steps.build_step import BuildStep
from .steps.pkginfo_step import PkginfoStep
from .steps.install_step import InstallScriptStep
from .steps.mtree_step import MtreeStep
from .steps.archive_step import ArchiveStep


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(self):
        self._steps: List[BuildStep] = []
        self._init_default_steps()

    def _init_default_steps(self):
        """初始化默认的构建步骤"""
        # 顺序不可调整：.MTREE 必须覆盖前两步插入的条目
        self._steps = [
            PkginfoStep(),
            InstallScriptStep(),
            MtreeStep(),
            ArchiveStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有构建步骤"""
        return self._steps.copy()

    def execute(self, context: BuildContext) -> BuildContext:
        """执行构建管道

        Args:
            context: 构建上下文，执行期间独占其中的包和文件树

        Returns:
            BuildContext: 构建上下文，包含归档数据和统计信息

        Raises:
            BuildError: 构建失败，不产生任何部分输出
        """
        context.build_stats['start_time'] = time.time()
        pkg = context.package

        info(f"开始构建: {pkg.name} {pkg.version}", stage=LogStage.INIT)
        debug(
            f"构建参数: algorithm={context.compressor.get_algorithm().value} "
            f"level={context.compressor.level} build_time={pkg.build_time}",
            stage=LogStage.INIT,
        )

        try:
            for step in self._steps:
                debug(f"执行步骤: {step.description}", stage=LogStage.INIT)
                step.execute(context)
        except BuildError:
            context.archive_data = None
            context.build_stats['end_time'] = time.time()
            raise
        except Exception as e:
            context.archive_data = None
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.ERROR)
            raise BuildError(f"构建失败: {e}") from e

        context.build_stats['end_time'] = time.time()
        build_time = context.build_stats['end_time'] - context.build_stats['start_time']
        debug(f"构建耗时: {build_time:.2f}秒", stage=LogStage.DONE)
        return context

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        # 检查步骤的进度范围是否连续
        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
