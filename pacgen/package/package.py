"""
与格式无关的包模型

描述包名、版本、依赖关系、生命周期脚本以及载荷文件树。
生成器只读取这里的数据，唯一会修改的是 fs_root 中的保留条目。
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple

from .filesystem import Directory, Node
from .validation import GrammarViolation, RegexSet, validate_package


class Architecture(str, Enum):
    """支持的 CPU 架构"""
    ANY = "any"
    I386 = "i386"
    X86_64 = "x86_64"
    ARMV5 = "armv5"
    ARMV6H = "armv6h"
    ARMV7H = "armv7h"
    AARCH64 = "aarch64"

    @classmethod
    def parse(cls, text: str) -> "Architecture":
        """解析架构名称，支持常见别名

        Raises:
            ValueError: 未知架构
        """
        key = text.strip().lower()
        if key in _ARCH_ALIASES:
            return _ARCH_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"未知的架构: {text}") from None


_ARCH_ALIASES = {
    "i686": Architecture.I386,
    "x86": Architecture.I386,
    "amd64": Architecture.X86_64,
    "x64": Architecture.X86_64,
    "arm": Architecture.ARMV5,
    "arm64": Architecture.AARCH64,
}


class ActionType(str, Enum):
    """生命周期动作"""
    SETUP = "setup"
    CLEANUP = "cleanup"


@dataclass
class VersionConstraint:
    """版本约束，例如 >= 1.0"""
    relation: str
    version: str


# name、name>=1.0、name >= 1.0
_RELATION_RX = re.compile(r"^\s*([^\s<>=]+)\s*(?:(<=|>=|<|>|=)\s*(\S+))?\s*$")


@dataclass
class PackageRelation:
    """对另一个包的依赖类关系

    constraints 为空表示不限版本；每个约束单独生成一行。
    """
    related_package: str
    constraints: List[VersionConstraint] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "PackageRelation":
        """解析 "name"、"name >= 1.0" 形式的关系字符串

        Raises:
            ValueError: 字符串无法解析
        """
        match = _RELATION_RX.match(text)
        if not match:
            raise ValueError(f"无法解析依赖关系: {text!r}")
        name, relation, version = match.groups()
        constraints = [VersionConstraint(relation, version)] if relation else []
        return cls(related_package=name, constraints=constraints)


def merge_relations(texts: Iterable[str]) -> List[PackageRelation]:
    """解析关系字符串并合并同名条目，保持首次出现的顺序"""
    merged: Dict[str, PackageRelation] = {}
    for text in texts:
        relation = PackageRelation.parse(text)
        existing = merged.get(relation.related_package)
        if existing is None:
            merged[relation.related_package] = relation
        else:
            existing.constraints.extend(relation.constraints)
    return list(merged.values())


@dataclass
class Package:
    """包描述

    构建期间视为不可变的唯一数据源。build_time 用作所有条目的修改时间，
    保证相同输入得到逐字节相同的归档。
    """
    name: str
    version: str
    release: int = 1
    epoch: int = 0
    description: str = ""
    author: str = ""
    architecture: Architecture = Architecture.ANY
    requires: List[PackageRelation] = field(default_factory=list)
    provides: List[PackageRelation] = field(default_factory=list)
    conflicts: List[PackageRelation] = field(default_factory=list)
    replaces: List[PackageRelation] = field(default_factory=list)
    actions: Dict[ActionType, str] = field(default_factory=dict)
    fs_root: Directory = field(default_factory=Directory)
    build_time: int = 0

    def script(self, action: ActionType) -> str:
        """返回生命周期脚本内容，未定义时返回空字符串"""
        return self.actions.get(action, "")

    def all_relations(self) -> Iterator[PackageRelation]:
        for relations in (self.requires, self.provides, self.conflicts, self.replaces):
            yield from relations

    def prepare_build(self) -> None:
        """构建前的规范化处理，每次构建调用一次"""
        self.fs_root.apply_default_mtime(self.build_time)

    def walk_fs_with_relative_paths(self) -> Iterator[Tuple[str, Node]]:
        return self.fs_root.walk()

    def validate_with(
        self,
        grammar: RegexSet,
        arch_map: Mapping[Architecture, str],
    ) -> List[GrammarViolation]:
        """按目标格式的语法批量校验，返回全部错误"""
        return validate_package(self, grammar, arch_map)
