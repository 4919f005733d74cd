"""批量编排器

把一组语法仓库分派给并发的同步任务，全部完成后再为同步成功的
仓库分派构建任务（启用构建时）。单个任务的失败只影响它自己：
所有已分派的任务都会运行到结束，结果按名称对应回各自的语法仓库。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TypeVar

from grammarsync.core.config import Config
from grammarsync.core.exceptions import GrammarNotFoundError, ValidationError
from grammarsync.core.models import (
    BuildOutcome,
    FetchReport,
    GrammarResult,
    Language,
    Status,
    SyncOutcome,
)
from grammarsync.services.build.builder import WasmBuilder
from grammarsync.services.progress import PHASE_BUILD, PHASE_SYNC, LoggingProgress, ProgressObserver
from grammarsync.services.registry import LanguageRegistry
from grammarsync.services.sync.git import GitClient
from grammarsync.services.sync.synchronizer import RepositorySynchronizer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Orchestrator:
    """同步 / 构建编排器

    依赖全部通过构造参数注入，测试时可替换为 mock。
    """

    def __init__(
        self,
        registry: LanguageRegistry,
        config: Config,
        synchronizer: RepositorySynchronizer | None = None,
        builder: WasmBuilder | None = None,
        observer: ProgressObserver | None = None,
    ) -> None:
        self.registry = registry
        self.config = config
        self.synchronizer = synchronizer or RepositorySynchronizer(
            GitClient(timeout=config.git_timeout),
        )
        self.builder = builder or WasmBuilder(
            tool=config.build_tool, timeout=config.build_timeout,
        )
        self.observer: ProgressObserver = observer or LoggingProgress()

    def fetch_one(self, name: str, *, wasm: bool = False) -> FetchReport:
        """同步（并按需构建）单个语法仓库，未登记时不做任何同步"""
        try:
            language = self.registry.require(name)
        except GrammarNotFoundError as e:
            logger.error("%s", e)
            return FetchReport(not_found=[name])
        return FetchReport(results=self.run([language], wasm=wasm))

    def fetch_all(self, *, wasm: bool = False) -> FetchReport:
        """同步（并按需构建）注册表中的全部语法仓库"""
        languages = self.registry.list_all()
        if not languages:
            logger.warning("注册表中没有语法仓库: %s", self.registry.registry_file)
        logger.info("更新全部语法仓库 (%d 个)", len(languages))
        return FetchReport(results=self.run(languages, wasm=wasm))

    def run(self, languages: Sequence[Language], *, wasm: bool = False) -> list[GrammarResult]:
        """并发执行同步与构建，返回结果与输入顺序一致"""
        if not languages:
            return []
        names = [lang.name for lang in languages]
        if len(set(names)) != len(names):
            raise ValidationError(f"语法仓库名称重复: {names}")

        workers = min(self.config.max_workers or len(languages), len(languages))
        builds: dict[str, BuildOutcome] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="grammar") as pool:
            sync_futures = {
                lang.name: pool.submit(self._sync_one, lang) for lang in languages
            }
            syncs = self._join(sync_futures, self._sync_crashed)

            if wasm:
                build_futures = {
                    lang.name: pool.submit(self._build_one, lang, syncs[lang.name].workspace)
                    for lang in languages if syncs[lang.name].success
                }
                builds = self._join(build_futures, self._build_crashed)

        results = [
            GrammarResult(sync=syncs[lang.name], build=builds.get(lang.name))
            for lang in languages
        ]
        self._log_summary(results)
        return results

    # ------------------------------------------------------------------
    # 单个任务
    # ------------------------------------------------------------------

    def _sync_one(self, language: Language) -> SyncOutcome:
        self.observer.started(language.name, PHASE_SYNC)
        outcome = self.synchronizer.synchronize(
            language, self.config.workspace_for(language.name),
        )
        if outcome.success:
            self.observer.succeeded(language.name, PHASE_SYNC, outcome.commit[:12])
        else:
            self.observer.failed(language.name, PHASE_SYNC, outcome.reason)
        return outcome

    def _build_one(self, language: Language, workspace: Path) -> BuildOutcome:
        self.observer.started(language.name, PHASE_BUILD)
        outcome = self.builder.build(
            language, workspace, self.config.wasm_output_for(language.name),
        )
        if outcome.success:
            self.observer.succeeded(language.name, PHASE_BUILD, str(outcome.output))
        else:
            self.observer.failed(language.name, PHASE_BUILD, outcome.reason)
        return outcome

    # ------------------------------------------------------------------
    # 任务汇合
    # ------------------------------------------------------------------

    @staticmethod
    def _join(
        futures: dict[str, Future[T]],
        on_crash: Callable[[str, BaseException], T],
    ) -> dict[str, T]:
        """等待全部任务，按完成顺序收集；任务自身抛出的异常转换为失败结果"""
        by_future = {f: name for name, f in futures.items()}
        results: dict[str, T] = {}
        for future in as_completed(by_future):
            name = by_future[future]
            exc = future.exception()
            results[name] = future.result() if exc is None else on_crash(name, exc)
        return results

    def _sync_crashed(self, name: str, exc: BaseException) -> SyncOutcome:
        reason = f"任务执行异常: {exc!r}"
        logger.error("同步任务异常 %s", name, exc_info=exc)
        self.observer.failed(name, PHASE_SYNC, reason)
        return SyncOutcome.failed(name, self.config.workspace_for(name), reason)

    def _build_crashed(self, name: str, exc: BaseException) -> BuildOutcome:
        reason = f"任务执行异常: {exc!r}"
        logger.error("构建任务异常 %s", name, exc_info=exc)
        self.observer.failed(name, PHASE_BUILD, reason)
        return BuildOutcome(
            name=name, status=Status.FAILED,
            output=self.config.wasm_output_for(name), reason=reason,
        )

    @staticmethod
    def _log_summary(results: list[GrammarResult]) -> None:
        failed = [r.name for r in results if not r.success]
        if failed:
            logger.warning(
                "汇总: %d 成功, %d 失败 (%s)",
                len(results) - len(failed), len(failed), ", ".join(failed),
            )
        else:
            logger.info("汇总: %d 个语法仓库全部成功", len(results))
