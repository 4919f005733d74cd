"""YAML 注册表基类

负责加载、保存和按键增改查。写出时按键名排序，
并在文件头部加上"自动生成"注释，保证相同内容写出的字节完全一致。

子类只需指定 section_key 和 header。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from grammarsync.core.exceptions import ConfigError
from grammarsync.utils.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)


class YamlRegistry:
    """YAML 文件注册表基类

    子类用法:
        class MyRegistry(YamlRegistry):
            section_key = "items"
    """

    section_key: str = "entries"
    header: str = ""

    def __init__(self, registry_file: str | Path) -> None:
        self.registry_file = Path(registry_file)
        try:
            self._data: dict[str, Any] = load_yaml(self.registry_file)
        except (yaml.YAMLError, OSError, ValueError) as e:
            raise ConfigError(f"注册表文件无效: {self.registry_file}: {e}") from e
        section = self._data.get(self.section_key)
        if section is None:
            return
        if not isinstance(section, dict):
            raise ConfigError(
                f"注册表 {self.registry_file} 的 '{self.section_key}' 必须是映射"
            )
        for name, entry in section.items():
            if not isinstance(entry, dict):
                raise ConfigError(f"注册表条目 '{name}' 必须是映射")

    def _section(self) -> dict[str, dict[str, Any]]:
        """获取当前 section 字典（自动创建）"""
        result: dict[str, dict[str, Any]] = self._data.setdefault(self.section_key, {})
        return result

    def _save(self) -> None:
        """按键名排序后持久化"""
        self._data[self.section_key] = dict(sorted(self._section().items()))
        save_yaml(self.registry_file, self._data, header=self.header)
        logger.debug("注册表已保存: %s", self.registry_file)

    def _put(self, name: str, entry: dict[str, Any]) -> dict[str, Any]:
        """写入条目并保存"""
        self._section()[name] = entry
        self._save()
        return entry

    def _get_raw(self, name: str) -> dict[str, Any] | None:
        return self._section().get(name)

    def _list_raw(self) -> list[dict[str, Any]]:
        """按键名顺序列出所有条目（带 name 字段）"""
        # 条目身份以注册表键为准，条目内的 name 字段不生效
        return [{**v, "name": str(k)} for k, v in sorted(self._section().items())]
