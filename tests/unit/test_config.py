"""
包定义单元测试

测试 Schema 验证、YAML 加载器以及到 Package 模型的转换。
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from ruamel.yaml import YAML

from pacgen.build.compressor import CompressionAlgorithm
from pacgen.config import (
    ConfigError,
    ConfigLoader,
    ConfigValidationError,
    definition_to_package,
    load_definition,
    load_package,
    save_definition,
    validate_definition,
)
from pacgen.config.schema import (
    CompressionModel,
    DirectoryEntryModel,
    FileEntryModel,
    PackageDefinition,
    PackageSection,
    SymlinkEntryModel,
)
from pacgen.package import ActionType, Architecture, Directory, RegularFile, Symlink


def _minimal(**extra):
    data = {"package": {"name": "foo", "version": "1.0"}}
    data.update(extra)
    return data


def _write_yaml(path: Path, data) -> Path:
    yaml = YAML()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)
    return path


class TestPackageSection:
    """PackageSection 测试"""

    def test_defaults(self):
        section = PackageSection(name="foo", version="1.0")
        assert section.release == 1
        assert section.epoch == 0
        assert section.architecture == Architecture.ANY
        assert section.requires == []

    def test_numeric_version(self):
        assert PackageSection(name="foo", version=2.5).version == "2.5"

    def test_architecture_alias(self):
        assert PackageSection(name="foo", version="1", architecture="amd64").architecture == Architecture.X86_64

    def test_unknown_architecture(self):
        with pytest.raises(ValidationError):
            PackageSection(name="foo", version="1", architecture="sparc")

    def test_unparseable_relation(self):
        with pytest.raises(ValidationError):
            PackageSection(name="foo", version="1", requires=["bar >="])

    def test_negative_epoch(self):
        with pytest.raises(ValidationError):
            PackageSection(name="foo", version="1", epoch=-1)


class TestEntryModels:
    """文件/目录/符号链接条目测试"""

    @pytest.mark.parametrize("mode,expected", [("0755", 0o755), ("644", 0o644), ("0o600", 0o600), (0o700, 0o700)])
    def test_mode(self, mode, expected):
        assert FileEntryModel(path="/a", content="", mode=mode).mode == expected

    @pytest.mark.parametrize("mode", ["0999", "rwx", "17777", True])
    def test_invalid_mode(self, mode):
        with pytest.raises(ValidationError):
            FileEntryModel(path="/a", content="", mode=mode)

    def test_path_normalized(self):
        assert FileEntryModel(path="/usr//bin/foo/", content="").path == "/usr/bin/foo"

    @pytest.mark.parametrize("path", ["usr/bin/foo", "/usr/../etc", "/"])
    def test_invalid_path(self, path):
        with pytest.raises(ValidationError):
            FileEntryModel(path=path, content="")

    def test_exactly_one_content_source(self):
        with pytest.raises(ValidationError):
            FileEntryModel(path="/a")
        with pytest.raises(ValidationError):
            FileEntryModel(path="/a", content="x", content_from="./x")

    def test_owner(self):
        entry = DirectoryEntryModel(path="/srv/http", owner="http", group="33")
        assert entry.owner == "http"
        assert entry.group == 33

    def test_symlink_needs_target(self):
        with pytest.raises(ValidationError):
            SymlinkEntryModel(path="/a", target="")


class TestCompressionModel:
    """CompressionModel 测试"""

    def test_default(self):
        model = CompressionModel()
        assert model.algo == CompressionAlgorithm.ZSTD
        assert model.level is None

    def test_level_range_per_algorithm(self):
        assert CompressionModel(algo="zstd", level=22).level == 22
        with pytest.raises(ValidationError):
            CompressionModel(algo="xz", level=22)
        with pytest.raises(ValidationError):
            CompressionModel(algo="gzip", level=0)


class TestPackageDefinition:
    """PackageDefinition 测试"""

    def test_minimal(self):
        definition = PackageDefinition.from_dict(_minimal())
        assert definition.files == []
        assert definition.build.timestamp == 0

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            PackageDefinition.from_dict(_minimal(unknown=1))

    def test_duplicate_paths(self):
        data = _minimal(
            files=[{"path": "/etc/foo", "content": ""}],
            symlinks=[{"path": "/etc/foo/", "target": "bar"}],
        )
        with pytest.raises(ValidationError, match="路径重复声明"):
            PackageDefinition.from_dict(data)

    def test_to_dict_roundtrip(self):
        data = _minimal(
            files=[{"path": "/usr/bin/foo", "content": "x", "mode": "0755"}],
            build={"compression": {"algo": "xz"}},
        )
        dumped = PackageDefinition.from_dict(data).to_dict()

        assert dumped["files"][0]["mode"] == "0755"
        assert dumped["build"]["compression"]["algo"] == "xz"
        assert PackageDefinition.from_dict(dumped) == PackageDefinition.from_dict(data)


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_from_file(self, tmp_path):
        path = _write_yaml(tmp_path / "foo.pkg.yaml", _minimal())
        definition = ConfigLoader().load_from_file(path)
        assert definition.package.name == "foo"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="不存在"):
            load_definition(tmp_path / "missing.yaml")

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "foo.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ConfigError, match=".yaml"):
            load_definition(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="为空"):
            load_definition(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_definition(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("package: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="YAML"):
            load_definition(path)

    def test_validation_error(self, tmp_path):
        path = _write_yaml(tmp_path / "bad.yaml", {"package": {"name": "foo"}, "extra": True})

        with pytest.raises(ConfigValidationError) as exc_info:
            load_definition(path)

        error = exc_info.value
        assert len(error.errors) == 2
        assert "字段 'package -> version'" in error.format_errors()
        parsed = json.loads(error.format_errors_json())
        assert {tuple(e["loc"]) for e in parsed} == {("package", "version"), ("extra",)}

    def test_validate_definition(self, tmp_path):
        good = _write_yaml(tmp_path / "good.yaml", _minimal())
        assert validate_definition(good) == []

        errors = validate_definition(tmp_path / "missing.yaml")
        assert errors[0]["type"] == "config_error"

    def test_save_and_reload(self, tmp_path):
        definition = PackageDefinition.from_dict(_minimal(
            directories=[{"path": "/var/lib/foo", "mode": "0700"}],
        ))
        path = tmp_path / "out" / "foo.pkg.yaml"

        save_definition(definition, path)

        assert load_definition(path) == definition


class TestDefinitionToPackage:
    """包定义到 Package 的转换测试"""

    def test_package_fields(self):
        definition = PackageDefinition.from_dict({
            "package": {
                "name": "foo",
                "version": "1.0",
                "release": 2,
                "epoch": 1,
                "description": "Foo tool",
                "author": "Jane Doe <jane@example.org>",
                "architecture": "x86_64",
                "requires": ["bar >= 2.0", "baz", "bar < 3.0"],
                "provides": ["foo-bin"],
                "setup_script": "echo setup",
            },
            "build": {"timestamp": 1234},
        })
        pkg = definition_to_package(definition)

        assert (pkg.name, pkg.version, pkg.release, pkg.epoch) == ("foo", "1.0", 2, 1)
        assert pkg.architecture == Architecture.X86_64
        assert [r.related_package for r in pkg.requires] == ["bar", "baz"]
        assert len(pkg.requires[0].constraints) == 2
        assert pkg.script(ActionType.SETUP) == "echo setup"
        assert pkg.script(ActionType.CLEANUP) == ""
        assert pkg.build_time == 1234

    def test_tree_entries(self):
        definition = PackageDefinition.from_dict(_minimal(
            files=[{"path": "/usr/bin/foo", "content": "#!/bin/sh\n", "mode": "0755", "owner": "root"}],
            directories=[{"path": "/var/lib/foo", "mode": "0700", "owner": "foo", "group": "foo"}],
            symlinks=[{"path": "/usr/bin/foo2", "target": "foo"}],
        ))
        root = definition_to_package(definition).fs_root

        foo = root.lookup("usr/bin/foo")
        assert isinstance(foo, RegularFile)
        assert foo.content == b"#!/bin/sh\n"
        assert foo.mode == 0o755

        state = root.lookup("var/lib/foo")
        assert isinstance(state, Directory)
        assert state.mode == 0o700
        assert state.metadata.owner == "foo"

        assert isinstance(root.lookup("usr/bin/foo2"), Symlink)

    def test_content_is_dedented(self):
        definition = PackageDefinition.from_dict(_minimal(files=[
            {"path": "/etc/a", "content": "    [section]\n      key = 1\n"},
            {"path": "/etc/b", "content": "    keep\n", "raw": True},
        ]))
        root = definition_to_package(definition).fs_root

        assert root.lookup("etc/a").content == b"[section]\n  key = 1\n"
        assert root.lookup("etc/b").content == b"    keep\n"

    def test_content_from_relative_to_definition(self, tmp_path):
        (tmp_path / "payload").mkdir()
        (tmp_path / "payload" / "foo").write_bytes(b"\x00binary\xff")
        path = _write_yaml(tmp_path / "foo.pkg.yaml", _minimal(
            files=[{"path": "/usr/bin/foo", "content_from": "payload/foo"}],
        ))

        pkg = load_package(path)
        assert pkg.fs_root.lookup("usr/bin/foo").content == b"\x00binary\xff"

    def test_content_from_missing(self, tmp_path):
        definition = PackageDefinition.from_dict(_minimal(
            files=[{"path": "/usr/bin/foo", "content_from": "nope"}],
        ))
        with pytest.raises(ConfigError, match="nope"):
            definition_to_package(definition, tmp_path)

    def test_file_under_file(self):
        definition = PackageDefinition.from_dict(_minimal(files=[
            {"path": "/etc/foo", "content": ""},
            {"path": "/etc/foo/bar", "content": ""},
        ]))
        with pytest.raises(ConfigError):
            definition_to_package(definition)

    @pytest.mark.parametrize("extra", [
        {"directories": [{"path": "/a/b"}], "files": [{"path": "/a", "content": ""}]},
        {"files": [{"path": "/a/b", "content": ""}], "symlinks": [{"path": "/a", "target": "x"}]},
    ])
    def test_entry_over_directory(self, extra):
        definition = PackageDefinition.from_dict(_minimal(**extra))
        with pytest.raises(ConfigError, match="冲突"):
            definition_to_package(definition)
