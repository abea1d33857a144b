"""
包定义加载器

负责从 YAML 文件加载包定义、进行结构验证，并转换为 Package 模型。
"""

import json
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..package import (
    ActionType,
    Directory,
    NodeMetadata,
    Package,
    RegularFile,
    Symlink,
    merge_relations,
)
from ..utils.logging import debug, LogStage
from .schema import PackageDefinition


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')
            input_val = error.get('input', '')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
                if input_val and not isinstance(input_val, (dict, list)):
                    formatted.append(f"  输入值: {input_val}")
            else:
                formatted.append(f"根级别: {msg}")

        return "\n".join(formatted)

    def format_errors_json(self) -> str:
        """格式化错误信息为 JSON 格式"""
        return json.dumps(self.errors, ensure_ascii=False, indent=2, default=str)


def _validation_errors(e: ValidationError) -> List[Dict[str, Any]]:
    # ctx 里可能带有异常对象，只保留可序列化的字段
    return [
        {'loc': list(err.get('loc', ())), 'msg': err.get('msg', ''), 'type': err.get('type', ''),
         'input': err.get('input')}
        for err in e.errors()
    ]


class ConfigLoader:
    """包定义加载器"""

    def __init__(self):
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.yaml.width = 4096  # 避免长行自动换行

    def load_from_file(self, config_path: Union[str, Path]) -> PackageDefinition:
        """从文件加载包定义

        Args:
            config_path: 包定义文件路径

        Returns:
            PackageDefinition: 验证后的包定义

        Raises:
            ConfigError: 文件读取或 YAML 解析错误
            ConfigValidationError: 结构验证错误
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigError(f"包定义文件不存在: {config_path}")

        if not config_path.is_file():
            raise ConfigError(f"包定义路径不是文件: {config_path}")

        if config_path.suffix.lower() not in ['.yaml', '.yml']:
            raise ConfigError(f"包定义文件必须是 .yaml 或 .yml 格式: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw_data = self.yaml.load(f)
        except YAMLError as e:
            raise ConfigError(f"YAML 解析错误: {e}") from e
        except OSError as e:
            raise ConfigError(f"文件读取错误: {e}") from e

        if raw_data is None:
            raise ConfigError("包定义文件为空")

        if not isinstance(raw_data, dict):
            raise ConfigError("包定义文件根级别必须是对象/字典格式")

        debug(f"已读取包定义: {config_path}", stage=LogStage.INIT)
        return self.load_from_dict(raw_data)

    def load_from_dict(self, data: Dict[str, Any]) -> PackageDefinition:
        """从字典加载包定义

        Raises:
            ConfigValidationError: 结构验证错误
        """
        try:
            return PackageDefinition.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError("包定义验证失败", _validation_errors(e)) from e

    def save_to_file(self, definition: PackageDefinition, output_path: Union[str, Path]) -> None:
        """保存包定义到文件

        Raises:
            ConfigError: 保存错误
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                self.yaml.dump(definition.to_dict(), f)
        except (OSError, YAMLError) as e:
            raise ConfigError(f"保存包定义文件失败: {e}") from e

    def validate_file(self, config_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """验证包定义文件并返回错误列表，空列表表示验证通过"""
        try:
            self.load_from_file(config_path)
            return []
        except ConfigValidationError as e:
            return e.errors
        except ConfigError as e:
            return [{
                'loc': [],
                'msg': str(e),
                'type': 'config_error'
            }]


def _file_content(entry, base_path: Optional[Path]) -> bytes:
    if entry.content is not None:
        text = entry.content if entry.raw else textwrap.dedent(entry.content)
        return text.encode('utf-8')

    source = Path(entry.content_from)
    if not source.is_absolute():
        source = (base_path or Path.cwd()) / source
    try:
        return source.read_bytes()
    except OSError as e:
        raise ConfigError(f"无法读取 {entry.path} 的内容文件 {source}: {e}") from e


def definition_to_package(
    definition: PackageDefinition,
    base_path: Optional[Path] = None,
) -> Package:
    """把包定义转换为 Package 模型

    Args:
        definition: 已验证的包定义
        base_path: content_from 相对路径的基准目录，默认当前目录

    Returns:
        Package: 包模型，文件树中包含全部声明的条目

    Raises:
        ConfigError: 内容文件无法读取，或条目路径互相冲突
    """
    section = definition.package

    actions = {}
    if section.setup_script:
        actions[ActionType.SETUP] = section.setup_script
    if section.cleanup_script:
        actions[ActionType.CLEANUP] = section.cleanup_script

    pkg = Package(
        name=section.name,
        version=section.version,
        release=section.release,
        epoch=section.epoch,
        description=section.description,
        author=section.author,
        architecture=section.architecture,
        requires=merge_relations(section.requires),
        provides=merge_relations(section.provides),
        conflicts=merge_relations(section.conflicts),
        replaces=merge_relations(section.replaces),
        actions=actions,
        build_time=definition.build.timestamp,
    )

    try:
        # 先插入目录，使显式声明的元数据不被隐式目录覆盖
        for entry in definition.directories:
            pkg.fs_root.insert(entry.path, Directory(
                metadata=NodeMetadata(mode=entry.mode, owner=entry.owner, group=entry.group),
            ))
        for entry in definition.files:
            pkg.fs_root.insert(entry.path, RegularFile(
                content=_file_content(entry, base_path),
                metadata=NodeMetadata(mode=entry.mode, owner=entry.owner, group=entry.group),
            ))
        for entry in definition.symlinks:
            pkg.fs_root.insert(entry.path, Symlink(
                target=entry.target,
                metadata=NodeMetadata(owner=entry.owner, group=entry.group),
            ))
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return pkg


# 全局加载器实例
config_loader = ConfigLoader()


def load_definition(config_path: Union[str, Path]) -> PackageDefinition:
    """便捷函数：加载包定义文件"""
    return config_loader.load_from_file(config_path)


def validate_definition(config_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """便捷函数：验证包定义文件"""
    return config_loader.validate_file(config_path)


def load_package(config_path: Union[str, Path]) -> Package:
    """便捷函数：加载包定义文件并转换为 Package"""
    config_path = Path(config_path)
    definition = config_loader.load_from_file(config_path)
    return definition_to_package(definition, config_path.parent)


def save_definition(definition: PackageDefinition, output_path: Union[str, Path]) -> None:
    """便捷函数：保存包定义文件"""
    config_loader.save_to_file(definition, output_path)
