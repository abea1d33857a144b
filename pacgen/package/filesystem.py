"""
载荷文件系统树

定义包内容的节点模型（普通文件、目录、符号链接），以及树的插入、遍历和安装大小统计。
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, Union

# 默认权限
DEFAULT_FILE_MODE = 0o644
DEFAULT_DIRECTORY_MODE = 0o755
SYMLINK_MODE = 0o777


@dataclass
class NodeMetadata:
    """节点元数据

    owner/group 可以是数字 ID，也可以是用户名/组名。
    mode 为 None 时使用节点类型的默认权限。
    """
    mode: Optional[int] = None
    owner: Union[int, str] = 0
    group: Union[int, str] = 0
    mtime: Optional[int] = None


@dataclass
class RegularFile:
    """普通文件"""
    content: bytes = b""
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    @property
    def mode(self) -> int:
        return DEFAULT_FILE_MODE if self.metadata.mode is None else self.metadata.mode


@dataclass
class Symlink:
    """符号链接（权限固定为 0777）"""
    target: str
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    @property
    def mode(self) -> int:
        return SYMLINK_MODE


@dataclass
class Directory:
    """目录，entries 以条目名为键"""
    entries: Dict[str, "Node"] = field(default_factory=dict)
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    @property
    def mode(self) -> int:
        return DEFAULT_DIRECTORY_MODE if self.metadata.mode is None else self.metadata.mode

    def insert(self, path: str, node: "Node") -> None:
        """在相对路径处插入节点，自动创建缺失的上级目录

        Args:
            path: 归档内相对路径（允许以 / 开头）
            node: 要插入的节点

        Raises:
            ValueError: 路径无效，上级路径已被非目录节点占用，
                或目录与非目录节点占用同一路径
        """
        parts = split_path(path)
        parent = self
        for i, name in enumerate(parts[:-1]):
            child = parent.entries.get(name)
            if child is None:
                child = Directory()
                parent.entries[name] = child
            elif not isinstance(child, Directory):
                raise ValueError(f"无法插入 {path}: {'/'.join(parts[:i + 1])} 不是目录")
            parent = child

        name = parts[-1]
        existing = parent.entries.get(name)
        if isinstance(existing, Directory) and isinstance(node, Directory):
            # 显式声明的目录覆盖隐式目录的元数据，保留已有子项
            existing.metadata = node.metadata
            existing.entries.update(node.entries)
            return
        if existing is not None and isinstance(existing, Directory) != isinstance(node, Directory):
            raise ValueError(f"无法插入 {path}: 目录与非目录节点冲突")
        parent.entries[name] = node

    def lookup(self, path: str) -> Optional["Node"]:
        """按相对路径查找节点，不存在时返回 None"""
        node: Node = self
        for name in split_path(path):
            if not isinstance(node, Directory):
                return None
            child = node.entries.get(name)
            if child is None:
                return None
            node = child
        return node

    def walk(self, prefix: str = "") -> Iterator[Tuple[str, "Node"]]:
        """深度优先遍历，同级条目按名称排序，父目录先于子项

        Yields:
            Tuple[str, Node]: (相对路径, 节点)，不包含根目录本身
        """
        for name in sorted(self.entries):
            node = self.entries[name]
            path = f"{prefix}{name}"
            yield path, node
            if isinstance(node, Directory):
                yield from node.walk(prefix=path + "/")

    def installed_size_in_bytes(self) -> int:
        """统计安装后占用的字节数（文件内容 + 符号链接目标长度）"""
        total = 0
        for _, node in self.walk():
            total += node_size(node)
        return total

    def apply_default_mtime(self, timestamp: int) -> None:
        """为所有未设置修改时间的节点填充时间戳"""
        if self.metadata.mtime is None:
            self.metadata.mtime = timestamp
        for _, node in self.walk():
            if node.metadata.mtime is None:
                node.metadata.mtime = timestamp


Node = Union[RegularFile, Directory, Symlink]


def node_size(node: Node) -> int:
    """单个节点计入安装大小的字节数"""
    if isinstance(node, RegularFile):
        return len(node.content)
    elif isinstance(node, Symlink):
        return len(node.target.encode("utf-8"))
    elif isinstance(node, Directory):
        return 0
    raise TypeError(f"未知的节点类型: {type(node).__name__}")


def split_path(path: str) -> list[str]:
    """把归档路径拆分为组成部分

    Raises:
        ValueError: 路径为空或包含 . / .. 片段
    """
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise ValueError(f"路径无效: {path!r}")
    for part in parts:
        if part in (".", ".."):
            raise ValueError(f"路径中不允许出现 '{part}': {path}")
    return parts
