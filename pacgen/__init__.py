"""
pacgen - pacman 二进制包生成器

Builds Arch Linux pacman packages (.pkg.tar.zst) from a declarative package definition.
"""

__version__ = "0.1.0"
__author__ = "Project Team"
__license__ = "MIT"

# 导出主要 API
from .package import Package
from .build import Builder, PacmanGenerator, generator_factory

__all__ = ["Package", "PacmanGenerator", "generator_factory", "Builder", "__version__"]
