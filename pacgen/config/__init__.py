"""包定义模块

提供 YAML 包定义的加载、验证、保存以及到 Package 模型的转换。
"""

from .schema import PackageDefinition
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    definition_to_package,
    load_definition,
    load_package,
    validate_definition,
    save_definition,
    config_loader
)

__all__ = [
    # 主要类
    "PackageDefinition",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "definition_to_package",
    "load_definition",
    "load_package",
    "validate_definition",
    "save_definition",

    # 单例
    "config_loader",
]
