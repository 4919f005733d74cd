"""CLI — 语法仓库登记、拉取与列表"""

from __future__ import annotations

import click

from grammarsync.core.config import Config
from grammarsync.core.exceptions import ConfigError, GrammarSyncError, ValidationError
from grammarsync.core.models import FetchReport, Language
from grammarsync.services.orchestrator import Orchestrator
from grammarsync.services.progress import EchoProgress
from grammarsync.services.registry import LanguageRegistry


def register(group: click.Group) -> None:
    group.add_command(add)
    group.add_command(fetch)
    group.add_command(list_languages)


def _load_registry(cfg: Config) -> LanguageRegistry:
    try:
        return LanguageRegistry(cfg.languages_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def _finish(ctx: click.Context, report: FetchReport) -> None:
    """输出汇总；有失败或未登记的名称时以非零状态退出"""
    for name in report.not_found:
        click.echo(f"语法仓库未注册: {name}", err=True)
    s = report.summary()
    if s["total"]:
        click.echo(
            f"完成: {s['total']} 个, 同步成功 {s['synced']}, "
            f"构建成功 {s['built']}, 失败 {s['failed']}"
        )
    if not report.success:
        ctx.exit(1)


@click.command()
@click.option("--name", "-n", required=True, help="语言名称，如 'rust'")
@click.option("--git", "-g", "git_url", required=True,
              help="语法仓库地址，如 'https://github.com/tree-sitter/tree-sitter-rust.git'")
@click.option("--hash", "revision", default=None, help="检出的固定 commit")
@click.option("--wasm", "-w", is_flag=True, help="同步后构建 WebAssembly")
@click.option("--verbose", "-v", is_flag=True, help="输出每个阶段的开始事件")
@click.pass_context
def add(ctx: click.Context, name: str, git_url: str, revision: str | None, wasm: bool, verbose: bool) -> None:
    """登记或更新语法仓库，然后立即拉取"""
    cfg: Config = ctx.obj
    registry = _load_registry(cfg)
    try:
        registry.upsert(Language(name=name, git=git_url, hash=revision))
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"写入注册表失败: {e}") from e

    orchestrator = Orchestrator(registry, cfg, observer=EchoProgress(verbose=verbose))
    try:
        report = orchestrator.fetch_one(name, wasm=wasm)
    except GrammarSyncError as e:
        raise click.ClickException(str(e)) from e
    _finish(ctx, report)


@click.command()
@click.option("--name", "-n", default=None, help="只拉取指定语言，如 'rust'")
@click.option("--all", "fetch_all", is_flag=True, help="拉取注册表中的全部语言")
@click.option("--wasm", "-w", is_flag=True, help="同步后构建 WebAssembly")
@click.option("--verbose", "-v", is_flag=True, help="输出每个阶段的开始事件")
@click.pass_context
def fetch(ctx: click.Context, name: str | None, fetch_all: bool, wasm: bool, verbose: bool) -> None:
    """拉取语法仓库（指定 --name 或 --all）"""
    if not name and not fetch_all:
        raise click.UsageError("请指定 --name 或使用 --all")
    if name and fetch_all:
        raise click.UsageError("--name 与 --all 不能同时使用")

    cfg: Config = ctx.obj
    orchestrator = Orchestrator(_load_registry(cfg), cfg, observer=EchoProgress(verbose=verbose))
    try:
        if name:
            report = orchestrator.fetch_one(name, wasm=wasm)
        else:
            click.echo("更新全部语法仓库")
            report = orchestrator.fetch_all(wasm=wasm)
    except GrammarSyncError as e:
        raise click.ClickException(str(e)) from e
    _finish(ctx, report)


@click.command(name="list")
@click.pass_context
def list_languages(ctx: click.Context) -> None:
    """列出已登记的语法仓库"""
    languages = _load_registry(ctx.obj).list_all()
    if not languages:
        click.echo("没有已登记的语法仓库。")
        return
    for lang in languages:
        click.echo(f"  {lang.name:20s} {lang.git}  hash={lang.hash or '-'}")
