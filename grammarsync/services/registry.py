"""语法仓库注册表

职责：
- 登记 / 更新语法仓库（name → git 地址 + 可选固定 commit）
- 按名称查询、按名称顺序列出
"""

from __future__ import annotations

import logging
import re

from grammarsync.core.exceptions import GrammarNotFoundError, ValidationError
from grammarsync.core.models import Language
from grammarsync.core.registry import YamlRegistry

logger = logging.getLogger(__name__)

_SAFE_NAME_RE = re.compile(r"^[a-zA-Z0-9_.\-]+$")
_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@\-]+$")

REGISTRY_HEADER = (
    "# Automatically generated, DO NOT EDIT! Use `grammarsync add` to modify.\n\n"
)


def validate_language(language: Language) -> None:
    """校验名称、地址和 commit，名称会成为目录名的一部分"""
    if not language.name or not _SAFE_NAME_RE.match(language.name):
        raise ValidationError(f"语法名称包含非法字符: {language.name!r}")
    if not language.git:
        raise ValidationError(f"语法仓库 {language.name} 必须指定 git 地址")
    if language.git.startswith("-"):
        raise ValidationError(f"git 地址无效: {language.git}")
    if language.hash and (language.hash.startswith("-") or not _SAFE_REF_RE.match(language.hash)):
        raise ValidationError(f"hash 包含非法字符: {language.hash}")


class LanguageRegistry(YamlRegistry):
    """语法仓库注册表"""

    section_key = "languages"
    header = REGISTRY_HEADER

    def upsert(self, language: Language) -> bool:
        """登记或更新语法仓库，只覆盖有差异的字段

        返回是否发生了变化；内容完全一致时不重写文件。
        """
        validate_language(language)
        existing = self.get(language.name)
        if existing is None:
            self._put(language.name, language.to_dict())
            logger.info("语法仓库已登记: %s (%s)", language.name, language.git)
            return True

        changed = False
        if existing.git != language.git:
            existing.git = language.git
            changed = True
        if existing.hash != language.hash:
            existing.hash = language.hash
            changed = True

        if not changed and self.registry_file.exists():
            logger.info("语法仓库未变化: %s", language.name)
            return False
        self._put(language.name, existing.to_dict())
        logger.info("语法仓库已更新: %s (%s@%s)", language.name, existing.git, existing.hash or "HEAD")
        return True

    def get(self, name: str) -> Language | None:
        entry = self._get_raw(name)
        if entry is None:
            return None
        return Language.from_dict(name, entry)

    def list_all(self) -> list[Language]:
        """按名称顺序列出全部语法仓库"""
        return [Language.from_dict(item["name"], item) for item in self._list_raw()]

    def require(self, name: str) -> Language:
        """按名称获取，未登记时抛 GrammarNotFoundError"""
        language = self.get(name)
        if language is None:
            raise GrammarNotFoundError(name)
        return language
