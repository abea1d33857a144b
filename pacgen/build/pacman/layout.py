"""
pacman 包格式常量

保留条目名、语法定义、架构映射以及完整版本号的格式化。
这些对象在导入时创建一次，之后只读共享。
"""

from types import MappingProxyType
from typing import Mapping

from ...package import Architecture, Package, RegexSet
from ..build_context import MissingMappingError

# 生成的元数据条目（位于归档根目录）
PKGINFO_NAME = ".PKGINFO"
INSTALL_NAME = ".INSTALL"
MTREE_NAME = ".MTREE"
GENERATED_MEMBERS = (PKGINFO_NAME, INSTALL_NAME, MTREE_NAME)

# 生成条目的权限：所有人可读，属主可写，无执行位
METADATA_MODE = 0o644

# 构建工具自身投放的数据文件，不参与 backup 标记
RESERVED_DATA_PREFIX = "usr/share/pacgen/"

TOOL_NAME = "pacgen"

_NAME_RX = r"[a-z0-9@._+][a-z0-9@._+-]*"
_VERSION_RX = r"[a-zA-Z0-9._]+"

PACMAN_GRAMMAR = RegexSet(
    package_name=_NAME_RX,
    package_version=_VERSION_RX,
    related_name=r"(?:except:)?(?:group:)?" + _NAME_RX,
    # 允许带 epoch 和 release
    related_version=r"(?:[0-9]+:)?" + _VERSION_RX + r"(?:-[1-9][0-9]*)?",
    format_name="pacman",
)

ARCH_MAP: Mapping[Architecture, str] = MappingProxyType({
    Architecture.ANY: "any",
    Architecture.I386: "i686",
    Architecture.X86_64: "x86_64",
    Architecture.ARMV5: "arm",
    Architecture.ARMV6H: "armv6h",
    Architecture.ARMV7H: "armv7h",
    Architecture.AARCH64: "aarch64",
})


def arch_string(architecture: Architecture) -> str:
    """架构在 pacman 中的名称

    Raises:
        MissingMappingError: 架构没有对应名称
    """
    try:
        return ARCH_MAP[architecture]
    except KeyError:
        raise MissingMappingError(f"架构 {architecture.value} 没有对应的 pacman 名称") from None


def full_version_string(pkg: Package) -> str:
    """完整版本号 "[epoch:]version-release"，epoch 为 0 时省略"""
    version = f"{pkg.version}-{pkg.release}"
    if pkg.epoch > 0:
        version = f"{pkg.epoch}:{version}"
    return version
