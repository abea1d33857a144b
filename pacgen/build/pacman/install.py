""".INSTALL 生成：把 setup/cleanup 脚本包装为 pacman 的生命周期钩子"""

from typing import Optional

from ...package import ActionType, NodeMetadata, Package, RegularFile
from .layout import INSTALL_NAME, METADATA_MODE


def make_install(pkg: Package) -> str:
    """生成 .INSTALL 内容，没有任何脚本时返回空字符串

    升级总是完整地重新执行安装脚本，post_upgrade 只是调用 post_install。
    """
    contents = ""
    script = pkg.script(ActionType.SETUP)
    if script:
        contents += f"post_install() {{\n{script}\n}}\npost_upgrade() {{\npost_install\n}}\n"
    script = pkg.script(ActionType.CLEANUP)
    if script:
        contents += f"post_remove() {{\n{script}\n}}\n"
    return contents


def write_install(pkg: Package) -> Optional[RegularFile]:
    """生成 .INSTALL 并插入文件树；包不需要生命周期钩子时不插入任何条目"""
    contents = make_install(pkg)
    if not contents:
        return None

    member = RegularFile(
        content=contents.encode("utf-8"),
        metadata=NodeMetadata(mode=METADATA_MODE, mtime=pkg.build_time),
    )
    pkg.fs_root.entries[INSTALL_NAME] = member
    return member
