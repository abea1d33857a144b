"""
载荷文件树单元测试
"""

import pytest

from pacgen.package import Directory, NodeMetadata, RegularFile, Symlink, node_size
from pacgen.package.filesystem import split_path


class TestNodes:
    """节点默认值测试"""

    def test_default_modes(self):
        assert RegularFile().mode == 0o644
        assert Directory().mode == 0o755
        assert Symlink(target="x").mode == 0o777

    def test_explicit_mode(self):
        assert RegularFile(metadata=NodeMetadata(mode=0o600)).mode == 0o600
        # 符号链接的权限不可修改
        assert Symlink(target="x", metadata=NodeMetadata(mode=0o600)).mode == 0o777

    def test_node_size(self):
        assert node_size(RegularFile(content=b"12345")) == 5
        assert node_size(Symlink(target="abc")) == 3
        assert node_size(Directory()) == 0

    def test_node_size_unknown_type(self):
        with pytest.raises(TypeError):
            node_size("not a node")


class TestDirectory:
    """Directory 测试"""

    def test_insert_creates_parents(self, empty_dir):
        empty_dir.insert("usr/bin/foo", RegularFile(content=b"x"))

        assert isinstance(empty_dir.lookup("usr"), Directory)
        assert isinstance(empty_dir.lookup("usr/bin"), Directory)
        assert empty_dir.lookup("usr/bin/foo").content == b"x"

    def test_insert_accepts_absolute_path(self, empty_dir):
        empty_dir.insert("/etc/foo.conf", RegularFile())
        assert empty_dir.lookup("etc/foo.conf") is not None

    def test_insert_through_file_fails(self, empty_dir):
        empty_dir.insert("etc", RegularFile())
        with pytest.raises(ValueError, match="不是目录"):
            empty_dir.insert("etc/foo.conf", RegularFile())

    def test_insert_directory_keeps_children(self, empty_dir):
        """显式目录覆盖隐式目录的元数据，但不丢失已有子项"""
        empty_dir.insert("var/lib/foo/state", RegularFile())
        empty_dir.insert("var/lib/foo", Directory(metadata=NodeMetadata(mode=0o700)))

        foo_dir = empty_dir.lookup("var/lib/foo")
        assert foo_dir.mode == 0o700
        assert "state" in foo_dir.entries

    @pytest.mark.parametrize("node", [RegularFile(), Symlink(target="x")])
    def test_insert_over_directory_fails(self, empty_dir, node):
        empty_dir.insert("a/b", RegularFile())
        with pytest.raises(ValueError, match="冲突"):
            empty_dir.insert("a", node)
        assert empty_dir.lookup("a/b") is not None

    def test_insert_directory_over_file_fails(self, empty_dir):
        empty_dir.insert("a", RegularFile(content=b"x"))
        with pytest.raises(ValueError, match="冲突"):
            empty_dir.insert("a", Directory())
        assert isinstance(empty_dir.lookup("a"), RegularFile)

    def test_insert_replaces_file(self, empty_dir):
        empty_dir.insert("a", RegularFile(content=b"old"))
        empty_dir.insert("a", RegularFile(content=b"new"))
        assert empty_dir.lookup("a").content == b"new"

    def test_insert_rejects_dot_segments(self, empty_dir):
        with pytest.raises(ValueError):
            empty_dir.insert("usr/../etc/passwd", RegularFile())
        with pytest.raises(ValueError):
            empty_dir.insert("/", RegularFile())

    def test_lookup_missing(self, empty_dir):
        empty_dir.insert("etc/foo.conf", RegularFile())
        assert empty_dir.lookup("etc/bar.conf") is None
        assert empty_dir.lookup("etc/foo.conf/child") is None

    def test_walk_order(self, empty_dir):
        """父目录先于子项，同级按名称排序"""
        empty_dir.insert("usr/bin/b", RegularFile())
        empty_dir.insert("usr/bin/a", RegularFile())
        empty_dir.insert("etc/x", RegularFile())
        empty_dir.entries[".PKGINFO"] = RegularFile()

        paths = [path for path, _ in empty_dir.walk()]
        assert paths == [".PKGINFO", "etc", "etc/x", "usr", "usr/bin", "usr/bin/a", "usr/bin/b"]

    def test_installed_size(self, empty_dir):
        empty_dir.insert("a", RegularFile(content=b"1234"))
        empty_dir.insert("d/b", RegularFile(content=b"56"))
        empty_dir.insert("d/link", Symlink(target="b"))

        assert empty_dir.installed_size_in_bytes() == 7

    def test_apply_default_mtime(self, empty_dir):
        empty_dir.insert("a", RegularFile())
        empty_dir.insert("b", RegularFile(metadata=NodeMetadata(mtime=42)))

        empty_dir.apply_default_mtime(1000)

        assert empty_dir.metadata.mtime == 1000
        assert empty_dir.lookup("a").metadata.mtime == 1000
        assert empty_dir.lookup("b").metadata.mtime == 42


class TestSplitPath:
    """split_path 测试"""

    def test_split(self):
        assert split_path("/usr//bin/foo/") == ["usr", "bin", "foo"]

    @pytest.mark.parametrize("path", ["", "/", ".", "a/./b", "a/../b"])
    def test_invalid(self, path):
        with pytest.raises(ValueError):
            split_path(path)
