"""
包模型单元测试

测试架构解析、依赖关系解析与合并、批量语法校验。
"""

import pytest

from pacgen.build.pacman import ARCH_MAP, PACMAN_GRAMMAR
from pacgen.package import (
    ActionType,
    Architecture,
    GrammarViolation,
    Package,
    PackageRelation,
    VersionConstraint,
    merge_relations,
)


class TestArchitecture:
    """Architecture 测试"""

    @pytest.mark.parametrize("text,expected", [
        ("any", Architecture.ANY),
        ("x86_64", Architecture.X86_64),
        ("AMD64", Architecture.X86_64),
        ("i686", Architecture.I386),
        ("arm64", Architecture.AARCH64),
        (" armv7h ", Architecture.ARMV7H),
    ])
    def test_parse(self, text, expected):
        assert Architecture.parse(text) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="未知的架构"):
            Architecture.parse("sparc")


class TestPackageRelation:
    """PackageRelation 测试"""

    def test_parse_plain(self):
        relation = PackageRelation.parse("bar")
        assert relation.related_package == "bar"
        assert relation.constraints == []

    @pytest.mark.parametrize("text", ["bar>=2.0", "bar >= 2.0", "  bar>= 2.0 "])
    def test_parse_with_constraint(self, text):
        relation = PackageRelation.parse(text)
        assert relation.related_package == "bar"
        assert relation.constraints == [VersionConstraint(">=", "2.0")]

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            PackageRelation.parse("bar >=")
        with pytest.raises(ValueError):
            PackageRelation.parse("")

    def test_merge_relations(self):
        """同名关系合并为一个，约束按出现顺序保留"""
        relations = merge_relations(["bar >= 1.0", "baz", "bar < 2.0"])

        assert [r.related_package for r in relations] == ["bar", "baz"]
        assert relations[0].constraints == [
            VersionConstraint(">=", "1.0"),
            VersionConstraint("<", "2.0"),
        ]


class TestPackage:
    """Package 测试"""

    def test_defaults(self):
        pkg = Package(name="foo", version="1.0")
        assert pkg.release == 1
        assert pkg.epoch == 0
        assert pkg.architecture == Architecture.ANY
        assert pkg.script(ActionType.SETUP) == ""
        assert pkg.fs_root.entries == {}

    def test_prepare_build_stamps_mtime(self, foo_package):
        foo_package.build_time = 1700000000
        foo_package.prepare_build()

        for _, node in foo_package.walk_fs_with_relative_paths():
            assert node.metadata.mtime == 1700000000

    def test_all_relations(self):
        pkg = Package(
            name="foo",
            version="1.0",
            requires=merge_relations(["a"]),
            provides=merge_relations(["b"]),
            conflicts=merge_relations(["c"]),
            replaces=merge_relations(["d"]),
        )
        assert [r.related_package for r in pkg.all_relations()] == ["a", "b", "c", "d"]


class TestValidation:
    """批量语法校验测试"""

    def test_valid_package(self, foo_package):
        assert foo_package.validate_with(PACMAN_GRAMMAR, ARCH_MAP) == []

    def test_collects_all_errors(self):
        """包名和版本号同时不合法时两个错误都要报告"""
        pkg = Package(name="Foo", version="1.0-1")
        errors = pkg.validate_with(PACMAN_GRAMMAR, ARCH_MAP)

        assert len(errors) == 2
        assert all(isinstance(e, GrammarViolation) for e in errors)
        assert "Foo" in str(errors[0])
        assert "1.0-1" in str(errors[1])

    @pytest.mark.parametrize("name", ["foo", "lib32-foo", "foo+bar", "@scope", "0ad", "a.b_c"])
    def test_valid_names(self, name):
        assert Package(name=name, version="1").validate_with(PACMAN_GRAMMAR, ARCH_MAP) == []

    @pytest.mark.parametrize("name", ["-foo", "Foo", "foo bar", "foo/bar", ""])
    def test_invalid_names(self, name):
        assert len(Package(name=name, version="1").validate_with(PACMAN_GRAMMAR, ARCH_MAP)) == 1

    @pytest.mark.parametrize("version", ["1.0-1", "1:1.0", "1.0~rc1", ""])
    def test_invalid_versions(self, version):
        assert len(Package(name="foo", version=version).validate_with(PACMAN_GRAMMAR, ARCH_MAP)) == 1

    def test_relation_errors(self):
        pkg = Package(
            name="foo",
            version="1.0",
            requires=merge_relations(["Bad", "ok >= 1:2.0-3", "worse >= 2.0-0"]),
            conflicts=[PackageRelation("x", [VersionConstraint("~=", "1.0")])],
        )
        errors = pkg.validate_with(PACMAN_GRAMMAR, ARCH_MAP)

        messages = [str(e) for e in errors]
        assert len(errors) == 3
        assert any("Bad" in m for m in messages)
        assert any("worse" in m for m in messages)
        assert any("比较运算符" in m for m in messages)

    def test_group_and_except_prefixes(self):
        pkg = Package(
            name="foo",
            version="1.0",
            requires=merge_relations(["group:base-devel", "except:foo-bar", "except:group:baz"]),
        )
        assert pkg.validate_with(PACMAN_GRAMMAR, ARCH_MAP) == []

    def test_unmapped_architecture(self):
        pkg = Package(name="foo", version="1.0", architecture=Architecture.AARCH64)
        arch_map = {Architecture.ANY: "any"}

        errors = pkg.validate_with(PACMAN_GRAMMAR, arch_map)
        assert len(errors) == 1
        assert "aarch64" in str(errors[0])
