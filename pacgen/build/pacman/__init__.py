"""pacman 包格式

生成 .PKGINFO、.INSTALL、.MTREE 三个元数据条目，并组装为 pacman 可安装的归档。
"""

from .generator import PacmanGenerator, generator_factory
from .install import make_install, write_install
from .layout import (
    ARCH_MAP,
    GENERATED_MEMBERS,
    INSTALL_NAME,
    METADATA_MODE,
    MTREE_NAME,
    PACMAN_GRAMMAR,
    PKGINFO_NAME,
    RESERVED_DATA_PREFIX,
    arch_string,
    full_version_string,
)
from .mtree import escape_mtree, make_mtree, write_mtree
from .pkginfo import compile_backup_markers, make_pkginfo, normalize_description, parse_pkginfo, write_pkginfo
from .relations import compile_package_requirements

__all__ = [
    # 生成器
    "PacmanGenerator",
    "generator_factory",

    # 格式常量
    "ARCH_MAP",
    "GENERATED_MEMBERS",
    "INSTALL_NAME",
    "METADATA_MODE",
    "MTREE_NAME",
    "PACMAN_GRAMMAR",
    "PKGINFO_NAME",
    "RESERVED_DATA_PREFIX",
    "arch_string",
    "full_version_string",

    # 元数据条目
    "compile_backup_markers",
    "compile_package_requirements",
    "escape_mtree",
    "make_install",
    "make_mtree",
    "make_pkginfo",
    "normalize_description",
    "parse_pkginfo",
    "write_install",
    "write_mtree",
    "write_pkginfo",
]
