"""依赖关系编译：把 requires/conflicts/provides/replaces 渲染为 .PKGINFO 行"""

from typing import List, Sequence

from ...package import PackageRelation, RegexSet
from ...package.validation import check_related_name, check_related_version


def compile_package_requirements(
    label: str,
    relations: Sequence[PackageRelation],
    grammar: RegexSet,
) -> str:
    """渲染一组依赖关系

    无版本约束时输出 "<label> = <name>"，否则每个约束输出一行
    "<label> = <name><op><version>"。输出顺序与输入一致。

    Args:
        label: 字段名，例如 "depend"
        relations: 依赖关系列表
        grammar: 目标格式语法

    Returns:
        str: 以换行结尾的多行文本，无关系时为空字符串

    Raises:
        GrammarViolation: 遇到的第一个不合法名称或版本号
    """
    lines: List[str] = []
    for relation in relations:
        check_related_name(grammar, relation)
        name = relation.related_package
        if not relation.constraints:
            lines.append(f"{label} = {name}\n")
            continue
        for i, constraint in enumerate(relation.constraints):
            check_related_version(grammar, relation, i)
            lines.append(f"{label} = {name}{constraint.relation}{constraint.version}\n")
    return "".join(lines)
