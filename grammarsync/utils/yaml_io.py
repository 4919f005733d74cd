"""YAML 文件统一读写工具

注册表和配置文件共用：统一 encoding="utf-8"、空值保护、原子写入，
并支持在写出的文件头部附加注释（如"自动生成，请勿编辑"）。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 注册表只是一份小清单，超过该大小基本可以确定是误指定了文件
MAX_YAML_SIZE = 10 * 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """原子写入文件：先写同目录临时文件再 rename

    异常:
        OSError: 文件写入或移动失败
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            # 临时文件清理失败不影响原异常抛出
            pass
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    返回:
        dict: 解析后的字典。文件不存在或为空时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        OSError: 读取失败
        ValueError: 文件过大，或顶层不是映射
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_YAML_SIZE:
        raise ValueError(
            f"YAML 文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_YAML_SIZE} 字节"
        )

    try:
        with open(p, encoding="utf-8") as f:
            result = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", path, e)
        raise
    except OSError as e:
        logger.error("读取文件失败: %s, 错误: %s", path, e)
        raise

    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ValueError(
            f"{path} 顶层必须是映射 (实际类型: {type(result).__name__})"
        )
    return result


def dump_yaml(data: Any, header: str = "") -> str:
    """序列化为 YAML 文本，header 原样放在最前面"""
    body = yaml.safe_dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )
    return f"{header}{body}"


def save_yaml(path: str | Path, data: Any, header: str = "") -> None:
    """原子写入 YAML 文件

    参数:
        path: YAML 文件路径
        data: 要保存的数据
        header: 写在文件开头的文本（通常是注释行），调用方负责换行

    异常:
        OSError: 文件写入失败
        yaml.YAMLError: 序列化失败
    """
    p = Path(path)
    try:
        atomic_write(p, dump_yaml(data, header))
    except yaml.YAMLError as e:
        logger.error("序列化 YAML 数据失败: %s, 错误: %s", path, e)
        raise
    except OSError as e:
        logger.error("写入文件失败: %s, 错误: %s", path, e)
        raise
