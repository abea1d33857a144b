"""通用工具模块"""

from .logging import (
    configure_logging,
    get_stage_logger,
    set_log_level,
    set_log_file,
    StageLogger,
    LogStage,
    OutputLevel,
)

from .paths import (
    ensure_directory,
    normalize_install_path,
    format_size,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "get_stage_logger",
    "set_log_level",
    "set_log_file",
    "StageLogger",
    "LogStage",
    "OutputLevel",

    # 路径相关
    "ensure_directory",
    "normalize_install_path",
    "format_size",
]
