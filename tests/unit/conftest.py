"""
单元测试公共夹具
"""

import pytest

from pacgen.package import (
    ActionType,
    Architecture,
    Directory,
    NodeMetadata,
    Package,
    RegularFile,
    Symlink,
    merge_relations,
)
from pacgen.utils.logging import close_logger


@pytest.fixture(autouse=True)
def reset_output():
    """每个测试使用新的输出门面，避免日志级别和输出目标互相影响"""
    close_logger()
    yield
    close_logger()


def make_foo_package(**overrides) -> Package:
    """foo 1.0-1 x86_64：一个配置文件、一个可执行文件和一个符号链接"""
    fields = dict(
        name="foo",
        version="1.0",
        release=1,
        architecture=Architecture.X86_64,
        description="Foo tool",
        requires=merge_relations(["bar >= 2.0"]),
    )
    fields.update(overrides)
    pkg = Package(**fields)
    pkg.fs_root.insert("etc/foo.conf", RegularFile(content=b"foo=1\n"))
    pkg.fs_root.insert("usr/bin/foo", RegularFile(
        content=b"#!/bin/sh\necho foo\n",
        metadata=NodeMetadata(mode=0o755),
    ))
    pkg.fs_root.insert("usr/bin/foo2", Symlink(target="foo"))
    return pkg


@pytest.fixture
def foo_package() -> Package:
    return make_foo_package()


@pytest.fixture
def scripted_package() -> Package:
    return make_foo_package(actions={
        ActionType.SETUP: "systemctl daemon-reload",
        ActionType.CLEANUP: "rm -rf /var/lib/foo",
    })


@pytest.fixture
def empty_dir() -> Directory:
    return Directory()


@pytest.fixture
def make_package():
    """返回可覆盖字段的 foo 包工厂"""
    return make_foo_package
