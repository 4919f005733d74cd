"""grammarsync 命令行接口

全局选项（注册表路径、仓库根目录等）在 main group 上解析为 Config，
经 click 上下文传给各子命令；子命令按领域拆分在 cmd_* 模块中注册。
"""

from __future__ import annotations

import os

import click

from grammarsync import __version__
from grammarsync.core.config import Config
from grammarsync.core.exceptions import ConfigError
from grammarsync.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=None, help="配置文件路径（YAML，可选）")
@click.option("--file", "-f", "languages_file", default=None, help="语法仓库注册表路径 [默认: ./languages.yml]")
@click.option("--directory", "-d", "grammars_dir", default=None, help="语法仓库本地根目录 [默认: ./grammars]")
@click.option("--wasm-dir", default=None, help="WebAssembly 产物目录 [默认: ./wasm]")
@click.option("--jobs", "-j", "max_workers", type=click.IntRange(min=0), default=None,
              help="最大并发数，0 表示每个语法仓库一个线程")
@click.pass_context
def main(
    ctx: click.Context, config_path: str | None, languages_file: str | None,
    grammars_dir: str | None, wasm_dir: str | None, max_workers: int | None,
) -> None:
    """grammarsync - tree-sitter 语法仓库拉取与构建工具"""
    setup_logging(
        level=os.getenv("GRAMMARSYNC_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("GRAMMARSYNC_LOG_JSON", "") == "1",
    )
    try:
        ctx.obj = Config.from_file(config_path).override(
            languages_file=languages_file, grammars_dir=grammars_dir,
            wasm_dir=wasm_dir, max_workers=max_workers,
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


# 注册各领域子命令
from grammarsync.cli.cmd_grammar import register as _reg_grammar  # noqa: E402

_reg_grammar(main)
