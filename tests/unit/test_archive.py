"""
归档序列化单元测试
"""

import tarfile

import pytest

from pacgen.build import CompressorFactory, CompressionAlgorithm, DecompressionError, read_package_members, serialize_tree
from pacgen.build.archive import make_tarinfo
from pacgen.package import Directory, NodeMetadata, RegularFile, Symlink


class TestMakeTarinfo:
    """tar 头信息测试"""

    def test_regular_file(self):
        info = make_tarinfo("etc/foo.conf", RegularFile(content=b"abc", metadata=NodeMetadata(mtime=9)))

        assert info.name == "etc/foo.conf"
        assert info.type == tarfile.REGTYPE
        assert info.size == 3
        assert info.mode == 0o644
        assert info.mtime == 9
        assert (info.uid, info.gid, info.uname, info.gname) == (0, 0, "root", "root")

    def test_named_owner(self):
        info = make_tarinfo("srv/http", Directory(metadata=NodeMetadata(owner="http", group="http")))

        assert info.type == tarfile.DIRTYPE
        assert info.uname == "http"
        assert info.gname == "http"

    def test_numeric_owner(self):
        info = make_tarinfo("srv/x", RegularFile(metadata=NodeMetadata(owner=33, group=33)))
        assert (info.uid, info.gid) == (33, 33)
        assert info.uname == ""

    def test_symlink(self):
        info = make_tarinfo("usr/bin/foo2", Symlink(target="foo"))
        assert info.type == tarfile.SYMTYPE
        assert info.linkname == "foo"
        assert info.mode == 0o777

    def test_unknown_node(self):
        with pytest.raises((TypeError, AttributeError)):
            make_tarinfo("x", object())


class TestSerializeTree:
    """serialize_tree 测试"""

    def test_roundtrip_members(self, foo_package):
        compressor = CompressorFactory.create_compressor(CompressionAlgorithm.GZIP)
        data = serialize_tree(foo_package.fs_root, compressor)

        members = read_package_members(data)
        names = [m.name for m in members]
        assert names == ["etc", "etc/foo.conf", "usr", "usr/bin", "usr/bin/foo", "usr/bin/foo2"]
        assert members[1].content == b"foo=1\n"
        assert members[0].content is None

    def test_no_root_or_dot_prefix(self, foo_package):
        compressor = CompressorFactory.create_compressor(CompressionAlgorithm.ZSTD)
        names = [m.name for m in read_package_members(serialize_tree(foo_package.fs_root, compressor))]

        assert all(not name.startswith("./") and name not in (".", "") for name in names)

    def test_unknown_format(self):
        with pytest.raises(DecompressionError):
            read_package_members(b"not a package")
