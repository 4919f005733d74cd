"""集中配置管理

支持从 YAML 文件加载 + 编程式覆盖（CLI 选项）。
配置对象由入口显式构造并逐层传入，不使用进程级全局状态。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from grammarsync.core.exceptions import ConfigError
from grammarsync.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """运行配置"""

    # 路径
    languages_file: str = "languages.yml"
    grammars_dir: str = "grammars"
    wasm_dir: str = "wasm"
    dir_prefix: str = "tree-sitter-"

    # 构建
    build_tool: str = "tree-sitter"

    # 执行
    max_workers: int = 0  # 0 表示每个语法仓库一个线程
    git_timeout: int = 600  # 秒，0 表示不限
    build_timeout: int = 600

    # 放不到字段里的配置项
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path | None) -> Config:
        """从 YAML 文件加载配置；未指定或文件不存在时返回默认值"""
        if not path:
            return cls()
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, OSError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path}: {e}") from e
        if not data:
            return cls()
        known = {f.name for f in fields(cls)} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        cfg = cls(**matched)
        cfg.extra = {k: v for k, v in data.items() if k not in known}
        cfg.validate()
        logger.debug("配置已加载: %s", path)
        return cfg

    def override(self, **changes: Any) -> Config:
        """返回应用了非 None 覆盖项的新配置"""
        cfg = replace(self, **{k: v for k, v in changes.items() if v is not None})
        cfg.validate()
        return cfg

    def validate(self) -> None:
        for name in ("max_workers", "git_timeout", "build_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} 必须是非负整数: {value!r}")
        for name in ("languages_file", "grammars_dir", "wasm_dir", "dir_prefix", "build_tool"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigError(f"{name} 必须是字符串: {value!r}")
            if not value and name != "dir_prefix":
                raise ConfigError(f"{name} 不能为空")

    def workspace_for(self, name: str) -> Path:
        """语法仓库的本地工作目录"""
        return Path(self.grammars_dir) / f"{self.dir_prefix}{name}"

    def wasm_output_for(self, name: str) -> Path:
        """WebAssembly 产物路径（绝对路径，构建进程的 cwd 是工作目录）"""
        return (Path(self.wasm_dir) / f"{self.dir_prefix}{name}.wasm").resolve()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
