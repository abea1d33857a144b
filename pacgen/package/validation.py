"""
包格式语法校验

每种包格式用一组正则表达式描述包名、版本号和依赖关系的合法形式。
批量校验返回全部错误，单项校验在第一个错误处抛出。
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Mapping

if TYPE_CHECKING:
    from .package import Architecture, Package, PackageRelation

# 包管理器通用的版本比较运算符
VERSION_RELATIONS = ("<", "<=", "=", ">=", ">")


class GrammarViolation(ValueError):
    """名称或版本号不符合目标包格式的语法"""
    pass


@dataclass(frozen=True)
class RegexSet:
    """某一包格式的语法定义

    各字段为不带锚点的正则表达式，匹配时要求整串匹配。
    实例创建后只读，可在多个构建之间共享。
    """
    package_name: str
    package_version: str
    related_name: str
    related_version: str
    format_name: str
    _compiled: Dict[str, "re.Pattern[str]"] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        for key in ("package_name", "package_version", "related_name", "related_version"):
            self._compiled[key] = re.compile(getattr(self, key))

    def matches(self, key: str, value: str) -> bool:
        return self._compiled[key].fullmatch(value) is not None


def check_related_name(grammar: RegexSet, relation: "PackageRelation") -> None:
    """检查依赖关系中的包名

    Raises:
        GrammarViolation: 包名不合法
    """
    if not grammar.matches("related_name", relation.related_package):
        raise GrammarViolation(
            f'关联包名 "{relation.related_package}" 不符合 {grammar.format_name} 包的要求'
        )


def check_related_version(grammar: RegexSet, relation: "PackageRelation", index: int) -> None:
    """检查依赖关系中第 index 个版本约束

    Raises:
        GrammarViolation: 运算符或版本号不合法
    """
    constraint = relation.constraints[index]
    if constraint.relation not in VERSION_RELATIONS:
        raise GrammarViolation(
            f'"{relation.related_package} {constraint.relation} {constraint.version}" 中的比较运算符无效'
        )
    if not grammar.matches("related_version", constraint.version):
        raise GrammarViolation(
            f'"{relation.related_package} {constraint.relation} {constraint.version}" 中的版本号'
            f"不符合 {grammar.format_name} 包的要求"
        )


def validate_package(
    pkg: "Package",
    grammar: RegexSet,
    arch_map: Mapping["Architecture", str],
) -> List[GrammarViolation]:
    """批量校验包的所有字段

    Args:
        pkg: 要校验的包
        grammar: 目标格式语法
        arch_map: 目标格式支持的架构映射

    Returns:
        List[GrammarViolation]: 全部错误，空列表表示校验通过
    """
    errors: List[GrammarViolation] = []

    if not grammar.matches("package_name", pkg.name):
        errors.append(GrammarViolation(
            f'包名 "{pkg.name}" 不符合 {grammar.format_name} 包的要求'
        ))
    if not grammar.matches("package_version", pkg.version):
        errors.append(GrammarViolation(
            f'版本号 "{pkg.version}" 不符合 {grammar.format_name} 包的要求'
        ))

    for relation in pkg.all_relations():
        try:
            check_related_name(grammar, relation)
        except GrammarViolation as e:
            errors.append(e)
        for i in range(len(relation.constraints)):
            try:
                check_related_version(grammar, relation, i)
            except GrammarViolation as e:
                errors.append(e)

    if pkg.architecture not in arch_map:
        errors.append(GrammarViolation(
            f'架构 "{pkg.architecture.value}" 不被 {grammar.format_name} 包支持'
        ))

    return errors
