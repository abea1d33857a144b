"""
.PKGINFO 生成

按固定顺序输出包元数据：名称、版本、描述、大小、架构、依赖关系、backup 标记
以及描述构建策略的 makepkgopt 标记。
"""

import re
from typing import Dict, List

from ...package import NodeMetadata, Package, RegularFile
from .layout import (
    GENERATED_MEMBERS,
    METADATA_MODE,
    PACMAN_GRAMMAR,
    PKGINFO_NAME,
    RESERVED_DATA_PREFIX,
    TOOL_NAME,
    arch_string,
    full_version_string,
)
from .relations import compile_package_requirements

_WHITESPACE_RX = re.compile(r"\s+")

# 这些 makepkgopt 并非真实的 makepkg 选项，只是用 makepkg 的术语描述本工具的行为
MAKEPKG_OPTIONS = (
    "!strip",
    "docs",
    "libtool",
    "staticlibs",
    "emptydirs",
    "!zipman",
    "!purge",
    "!upx",
    "!debug",
)

UNKNOWN_PACKAGER = "Unknown Packager"


def normalize_description(description: str) -> str:
    """与 makepkg 相同：去掉首尾空白，连续空白合并为一个空格"""
    return _WHITESPACE_RX.sub(" ", description.strip())


def compile_backup_markers(pkg: Package) -> str:
    """为需要在升级时保留本地修改的文件生成 backup 行

    只考虑普通文件，跳过 RESERVED_DATA_PREFIX 下的文件和生成的元数据条目。
    结果按路径排序，与遍历顺序无关。
    """
    lines: List[str] = []
    for path, node in pkg.walk_fs_with_relative_paths():
        if not isinstance(node, RegularFile):
            continue
        if path in GENERATED_MEMBERS or path.startswith(RESERVED_DATA_PREFIX):
            continue
        lines.append(f"backup = {path}\n")
    lines.sort()
    return "".join(lines)


def make_pkginfo(pkg: Package) -> str:
    """生成 .PKGINFO 内容

    Raises:
        GrammarViolation: 依赖关系不合法
        MissingMappingError: 架构没有 pacman 名称
    """
    # 先完成所有可能失败的部分，避免写出不完整的内容
    arch = arch_string(pkg.architecture)
    replaces = compile_package_requirements("replaces", pkg.replaces, PACMAN_GRAMMAR)
    conflicts = compile_package_requirements("conflict", pkg.conflicts, PACMAN_GRAMMAR)
    provides = compile_package_requirements("provides", pkg.provides, PACMAN_GRAMMAR)
    requires = compile_package_requirements("depend", pkg.requires, PACMAN_GRAMMAR)

    contents = f"# Generated by {TOOL_NAME}\n"
    contents += f"pkgname = {pkg.name}\n"
    contents += f"pkgver = {full_version_string(pkg)}\n"
    contents += f"pkgdesc = {normalize_description(pkg.description)}\n"
    contents += "url = \n"
    # 打包者同样折叠空白，换行会被解析成新的字段
    contents += f"packager = {normalize_description(pkg.author) or UNKNOWN_PACKAGER}\n"
    contents += f"size = {installed_size(pkg)}\n"
    contents += f"arch = {arch}\n"
    contents += "license = custom:none\n"
    contents += replaces + conflicts + provides
    contents += compile_backup_markers(pkg)
    contents += requires

    # 用本工具构建，所以构建依赖本工具
    contents += f"makedepend = {TOOL_NAME}\n"
    for option in MAKEPKG_OPTIONS:
        contents += f"makepkgopt = {option}\n"
    return contents


def installed_size(pkg: Package) -> int:
    """安装大小，不计入生成的元数据条目"""
    total = pkg.fs_root.installed_size_in_bytes()
    for name in GENERATED_MEMBERS:
        node = pkg.fs_root.entries.get(name)
        if isinstance(node, RegularFile):
            total -= len(node.content)
    return total


def write_pkginfo(pkg: Package) -> RegularFile:
    """生成 .PKGINFO 并插入到文件树根目录（覆盖已有条目）"""
    member = RegularFile(
        content=make_pkginfo(pkg).encode("utf-8"),
        metadata=NodeMetadata(mode=METADATA_MODE, mtime=pkg.build_time),
    )
    pkg.fs_root.entries[PKGINFO_NAME] = member
    return member


def parse_pkginfo(text: str) -> Dict[str, List[str]]:
    """解析 .PKGINFO，同一个键可以出现多次，按出现顺序保存

    注释行和空行被忽略。
    """
    fields: Dict[str, List[str]] = {}
    for line in text.splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        key, sep, value = line.partition(" = ")
        if not sep:
            # 行尾空格被去掉的空值行，例如 "url ="
            key, sep, value = line.partition(" =")
            if not sep:
                continue
        fields.setdefault(key.strip(), []).append(value)
    return fields
