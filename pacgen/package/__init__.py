"""包模型模块

提供与格式无关的包描述、载荷文件树和语法校验。
"""

from .filesystem import (
    Directory,
    Node,
    NodeMetadata,
    RegularFile,
    Symlink,
    node_size,
)
from .package import (
    ActionType,
    Architecture,
    Package,
    PackageRelation,
    VersionConstraint,
    merge_relations,
)
from .validation import (
    GrammarViolation,
    RegexSet,
    VERSION_RELATIONS,
    validate_package,
)

__all__ = [
    # 文件树
    "Directory",
    "Node",
    "NodeMetadata",
    "RegularFile",
    "Symlink",
    "node_size",

    # 包模型
    "ActionType",
    "Architecture",
    "Package",
    "PackageRelation",
    "VersionConstraint",
    "merge_relations",

    # 校验
    "GrammarViolation",
    "RegexSet",
    "VERSION_RELATIONS",
    "validate_package",
]
