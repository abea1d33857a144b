"""
包定义 Schema

使用 Pydantic 定义严格的 YAML 包定义模型，只做结构检查。
pacman 语法（包名、版本号等）的校验由生成器的 validate() 负责。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ..build.compressor import LEVEL_RANGES, CompressionAlgorithm
from ..package import Architecture, PackageRelation
from ..utils.paths import normalize_install_path

MAX_MODE = 0o7777


def _parse_mode(v: Any) -> Optional[int]:
    """权限可以写成八进制字符串（"0755"）或整数"""
    if v is None:
        return None
    if isinstance(v, bool):
        raise ValueError("权限必须是八进制字符串或整数")
    if isinstance(v, str):
        text = v.strip()
        if text.lower().startswith("0o"):
            text = text[2:]
        try:
            v = int(text, 8)
        except ValueError:
            raise ValueError(f"权限不是有效的八进制数: {v!r}") from None
    if not isinstance(v, int):
        raise ValueError("权限必须是八进制字符串或整数")
    if not 0 <= v <= MAX_MODE:
        raise ValueError(f"权限超出范围 0000-7777: {oct(v)}")
    return v


def _parse_owner(v: Any) -> Union[int, str]:
    """属主可以是数字 ID 或名称，纯数字字符串按 ID 处理"""
    if isinstance(v, bool):
        raise ValueError("属主必须是名称或数字 ID")
    if isinstance(v, int):
        if v < 0:
            raise ValueError(f"ID 不能为负数: {v}")
        return v
    if isinstance(v, str):
        text = v.strip()
        if not text:
            raise ValueError("属主名称不能为空")
        return int(text) if text.isdigit() else text
    raise ValueError("属主必须是名称或数字 ID")


class PackageSection(BaseModel):
    """包信息"""
    name: str = Field(..., description="包名", min_length=1)
    version: str = Field(..., description="上游版本号", min_length=1)
    release: int = Field(1, description="发布号", ge=0)
    epoch: int = Field(0, description="epoch", ge=0)
    description: str = Field("", description="包描述")
    author: str = Field("", description="打包者")
    architecture: Architecture = Field(Architecture.ANY, description="目标架构")
    requires: List[str] = Field(default_factory=list, description="依赖")
    provides: List[str] = Field(default_factory=list, description="提供")
    conflicts: List[str] = Field(default_factory=list, description="冲突")
    replaces: List[str] = Field(default_factory=list, description="替代")
    setup_script: str = Field("", description="安装/升级后执行的脚本")
    cleanup_script: str = Field("", description="卸载后执行的脚本")

    model_config = {"extra": "forbid"}

    @field_validator('version', mode='before')
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        # YAML 会把 1.0 解析成浮点数
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('architecture', mode='before')
    @classmethod
    def parse_architecture(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Architecture.parse(v)
        return v

    @field_validator('requires', 'provides', 'conflicts', 'replaces')
    @classmethod
    def validate_relations(cls, v: List[str]) -> List[str]:
        for text in v:
            PackageRelation.parse(text)
        return v


class _EntryModel(BaseModel):
    path: str = Field(..., description="安装路径（绝对路径）")
    owner: Union[int, str] = Field(0, description="属主")
    group: Union[int, str] = Field(0, description="属组")

    model_config = {"extra": "forbid"}

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        return normalize_install_path(v)

    @field_validator('owner', 'group', mode='before')
    @classmethod
    def validate_owner(cls, v: Any) -> Union[int, str]:
        return _parse_owner(v)


class FileEntryModel(_EntryModel):
    """普通文件条目"""
    content: Optional[str] = Field(None, description="文件内容")
    content_from: Optional[str] = Field(None, description="从本地文件读取内容（相对于包定义文件）")
    raw: bool = Field(False, description="为 true 时不对 content 去除公共缩进")
    mode: Optional[int] = Field(None, description="权限，默认 0644")

    @field_validator('mode', mode='before')
    @classmethod
    def validate_mode(cls, v: Any) -> Optional[int]:
        return _parse_mode(v)

    @model_validator(mode='after')
    def validate_source(self) -> 'FileEntryModel':
        if (self.content is None) == (self.content_from is None):
            raise ValueError("content 和 content_from 必须且只能指定一个")
        return self


class DirectoryEntryModel(_EntryModel):
    """目录条目"""
    mode: Optional[int] = Field(None, description="权限，默认 0755")

    @field_validator('mode', mode='before')
    @classmethod
    def validate_mode(cls, v: Any) -> Optional[int]:
        return _parse_mode(v)


class SymlinkEntryModel(_EntryModel):
    """符号链接条目"""
    target: str = Field(..., description="链接目标", min_length=1)


class CompressionModel(BaseModel):
    """压缩配置"""
    algo: CompressionAlgorithm = Field(CompressionAlgorithm.ZSTD, description="压缩算法")
    level: Optional[int] = Field(None, description="压缩级别，默认使用算法推荐值")

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def validate_compression_level(self) -> 'CompressionModel':
        """验证压缩级别对算法的适用性"""
        if self.level is not None:
            low, high, _ = LEVEL_RANGES[self.algo]
            if not low <= self.level <= high:
                raise ValueError(f"{self.algo.value} 压缩级别必须在 {low}-{high} 之间")
        return self


class BuildModel(BaseModel):
    """构建配置"""
    compression: CompressionModel = Field(default_factory=CompressionModel, description="压缩配置")
    timestamp: int = Field(0, description="所有条目的修改时间（Unix 时间戳）", ge=0)

    model_config = {"extra": "forbid"}


class PackageDefinition(BaseModel):
    """包定义根模型"""

    package: PackageSection = Field(..., description="包信息")
    files: List[FileEntryModel] = Field(default_factory=list, description="文件列表")
    directories: List[DirectoryEntryModel] = Field(default_factory=list, description="目录列表")
    symlinks: List[SymlinkEntryModel] = Field(default_factory=list, description="符号链接列表")
    build: BuildModel = Field(default_factory=BuildModel, description="构建配置")

    model_config = {
        "extra": "forbid",  # 禁止额外字段
        "validate_assignment": True,
    }

    @model_validator(mode='after')
    def validate_unique_paths(self) -> 'PackageDefinition':
        """同一路径只能声明一次"""
        seen = set()
        for entry in [*self.files, *self.directories, *self.symlinks]:
            if entry.path in seen:
                raise ValueError(f"路径重复声明: {entry.path}")
            seen.add(entry.path)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj):
            if isinstance(obj, dict):
                # 权限写回为八进制字符串
                return {
                    k: f"{v:04o}" if k == "mode" and isinstance(v, int) else convert_values(v)
                    for k, v in obj.items()
                }
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, Path):
                return str(obj)
            else:
                return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageDefinition':
        """从字典创建包定义实例"""
        return cls.model_validate(data)
