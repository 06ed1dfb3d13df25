# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Batch reconciliation engine.

Turns a selection of tree nodes into cache entries, one node at a time.

Processing order:
    1. Every selected file, in selection order.
    2. Every selected directory, in selection order. A directory summary is
       rolled up from the summaries of its descendants, so files go first.

Per item:
    - Already summarized and not marked for refresh: ``CACHED``, no calls.
    - Unsummarizable file, or directory with no summarized descendants
      (even after recovery): ``SKIPPED``.
    - Fetch or generation failure: logged, ``FAILED``; the run continues.
    - Otherwise: ``SUMMARIZED``, followed by the throttling delay.

A progress event follows every item, so ``processed`` rises by one per item
until it reaches ``total``. Directory recovery (summarizing selected files
below a directory that has no summarized descendants yet) happens inside the
directory's item and is not counted separately.

Runs are sequential by design: providers rate-limit, and progress stays
monotonic. Cancellation is cooperative and checked between items; a cancelled
run leaves every entry written so far in place.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field

from repolens.cache.cache_keys import display_key
from repolens.clients.protocols import ProtocolContentFetcher
from repolens.constants import PROVIDER_CALL_DELAY_SECONDS
from repolens.diff.tree_diff import split_changes
from repolens.enums.enum_batch import EnumBatchState, EnumItemOutcome
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import (
    MissingCredentialsError,
    RepoLensError,
)
from repolens.models.model_batch import (
    ModelBatchDeleteResult,
    ModelBatchProgress,
    ModelBatchResult,
    ModelItemResult,
)
from repolens.models.model_child_summary import ModelChildSummary
from repolens.models.model_repo_change import ModelRepoChange
from repolens.models.model_repo_node import ModelRepoNode
from repolens.models.model_repo_reference import ModelRepoReference
from repolens.models.model_summary_record import ModelSummaryRecord
from repolens.reconcile.pending_updates import PendingUpdates
from repolens.summaries.generator import CredentialsInput, SummaryGenerator, resolve_api_key
from repolens.summaries.summarizability import is_summarizable

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ModelBatchProgress], None]
CancelCheck = Callable[[], bool]


@dataclass
class _RunState:
    """Mutable bookkeeping of one run."""

    total: int
    summaries: dict[str, ModelSummaryRecord]
    processed: int = 0
    items: list[ModelItemResult] = field(default_factory=list)


class BatchReconciler:
    """Sequential summarizer for a selection of nodes of one repository.

    Args:
        generator: Cache-first summary generator.
        content_fetcher: Source of current file content.
        repo: Repository the nodes belong to; ``branch`` is passed to the fetcher.
        credentials: Provider credentials (or a bare key for ``provider``).
        provider: Generation backend.
        call_delay_seconds: Pause after each item that reached the provider
            path. ``0`` disables throttling.
        sleep: Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        generator: SummaryGenerator,
        content_fetcher: ProtocolContentFetcher,
        repo: ModelRepoReference,
        credentials: CredentialsInput,
        provider: EnumSummaryProvider = EnumSummaryProvider.GROQ,
        call_delay_seconds: float = PROVIDER_CALL_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._generator = generator
        self._content_fetcher = content_fetcher
        self._repo = repo
        self._credentials = credentials
        self._provider = provider
        self._call_delay_seconds = max(call_delay_seconds, 0.0)
        self._sleep = sleep
        self._state = EnumBatchState.IDLE
        self._last_result: ModelBatchResult | None = None

    @property
    def state(self) -> EnumBatchState:
        return self._state

    @property
    def last_result(self) -> ModelBatchResult | None:
        """Result of the most recent finished run (completed or cancelled)."""
        return self._last_result

    def _display_key(self, path: str) -> str:
        return display_key(self._repo.owner, self._repo.repo, path)

    # ------------------------------------------------------------------
    # Pre-flight
    # ------------------------------------------------------------------

    async def validate_credentials(self) -> None:
        """Check the provider key before a run.

        Raises:
            MissingCredentialsError: No key, or the provider rejected it.
        """
        api_key = resolve_api_key(self._credentials, self._provider)
        validate = getattr(self._generator.provider_client, "validate_api_key", None)
        if validate is None:
            return
        if not await validate(self._provider, api_key):
            raise MissingCredentialsError(
                self._provider.value,
                f"Invalid {self._provider.label} API key. "
                "Please check your API key and try again.",
            )

    # ------------------------------------------------------------------
    # Summarization
    # ------------------------------------------------------------------

    async def reconcile(
        self,
        selected: Iterable[str],
        refresh: Iterable[str],
        root: ModelRepoNode,
        cached_summaries: Mapping[str, ModelSummaryRecord],
        on_progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> ModelBatchResult:
        """Summarize the selected nodes and return the final tally.

        Args:
            selected: Paths to process; paths missing from ``root`` are ignored.
            refresh: Paths to regenerate even when a summary exists.
            root: Current snapshot.
            cached_summaries: Known summaries keyed by ``owner/repo:path``.
                Not mutated; the result carries the updated map.
            on_progress: Called after every item.
            should_cancel: Checked before every item.

        Raises:
            Exception: Whatever ``on_progress`` raises; the run is stopped
                and left ``ABORTED``.
        """
        async with contextlib.aclosing(
            self.iter_progress(selected, refresh, root, cached_summaries, should_cancel)
        ) as progress_iter:
            async for progress in progress_iter:
                if on_progress is None:
                    continue
                try:
                    on_progress(progress)
                except Exception:
                    await progress_iter.aclose()
                    self._state = EnumBatchState.ABORTED
                    logger.exception(
                        "Progress callback failed; reconciliation of %s aborted",
                        self._repo.full_name,
                    )
                    raise
        if self._last_result is None:
            raise RuntimeError("Reconciliation finished without a result")
        return self._last_result

    async def iter_progress(
        self,
        selected: Iterable[str],
        refresh: Iterable[str],
        root: ModelRepoNode,
        cached_summaries: Mapping[str, ModelSummaryRecord],
        should_cancel: CancelCheck | None = None,
    ) -> AsyncGenerator[ModelBatchProgress, None]:
        """Async-iterator form of ``reconcile``; read ``last_result`` afterwards."""
        if self._state is EnumBatchState.RUNNING:
            raise RuntimeError("A reconciliation run is already in progress")

        selected_paths = list(dict.fromkeys(selected))
        refresh_paths = set(refresh)
        file_nodes: list[ModelRepoNode] = []
        dir_nodes: list[ModelRepoNode] = []
        for path in selected_paths:
            node = root.find_by_path(path)
            if node is None:
                logger.debug("Ignoring selected path %r: not in the tree", path)
                continue
            (file_nodes if node.is_file else dir_nodes).append(node)

        run = _RunState(
            total=len(file_nodes) + len(dir_nodes), summaries=dict(cached_summaries)
        )
        selected_set = set(selected_paths)
        self._state = EnumBatchState.RUNNING
        self._last_result = None
        logger.info(
            "Reconciling %s: %d files and %d directories",
            self._repo.full_name,
            len(file_nodes),
            len(dir_nodes),
        )

        try:
            for node in [*file_nodes, *dir_nodes]:
                if should_cancel is not None and should_cancel():
                    logger.info(
                        "Reconciliation of %s cancelled after %d of %d items",
                        self._repo.full_name,
                        run.processed,
                        run.total,
                    )
                    self._finish(run, EnumBatchState.CANCELLED)
                    return

                if node.is_file:
                    result, throttle = await self._process_file(node, refresh_paths, run)
                else:
                    result, throttle = await self._process_directory(
                        node, refresh_paths, selected_set, run
                    )
                run.items.append(result)
                run.processed += 1
                yield ModelBatchProgress.at(run.processed, run.total, node.path)
                if throttle:
                    await self._throttle()
        except (GeneratorExit, asyncio.CancelledError):
            # consumer stopped iterating, or the task was cancelled
            self._finish(run, EnumBatchState.CANCELLED)
            raise
        except Exception:
            self._state = EnumBatchState.ABORTED
            logger.exception("Reconciliation of %s aborted", self._repo.full_name)
            raise

        result = self._finish(run, EnumBatchState.COMPLETED)
        logger.info(
            "Reconciled %s: %d summarized, %d cached, %d skipped, %d failed",
            self._repo.full_name,
            result.summarized,
            result.cached,
            result.skipped,
            result.failed,
        )

    def _finish(self, run: _RunState, state: EnumBatchState) -> ModelBatchResult:
        self._state = state
        self._last_result = ModelBatchResult(
            state=state,
            total=run.total,
            processed=run.processed,
            items=tuple(run.items),
            summaries=run.summaries,
        )
        return self._last_result

    async def _throttle(self) -> None:
        if self._call_delay_seconds > 0:
            await self._sleep(self._call_delay_seconds)

    async def _summarize_file(
        self, node: ModelRepoNode, force_refresh: bool
    ) -> ModelSummaryRecord:
        content = await self._content_fetcher.fetch_file_content(
            self._repo.owner, self._repo.repo, node.path, self._repo.branch
        )
        return await self._generator.summarize_file(
            content,
            node.name,
            self._credentials,
            provider=self._provider,
            owner=self._repo.owner,
            repo=self._repo.repo,
            path=node.path,
            force_refresh=force_refresh,
        )

    async def _process_file(
        self, node: ModelRepoNode, refresh: set[str], run: _RunState
    ) -> tuple[ModelItemResult, bool]:
        key = self._display_key(node.path)
        if key in run.summaries and node.path not in refresh:
            return self._item(node, EnumItemOutcome.CACHED, from_cache=True), False
        if not is_summarizable(node.name):
            logger.info("Skipping %s: file type cannot be summarized", node.path)
            return self._item(node, EnumItemOutcome.SKIPPED), False

        try:
            record = await self._summarize_file(node, node.path in refresh)
        except RepoLensError as exc:
            logger.exception("Error summarizing file %s", node.path)
            return self._item(node, EnumItemOutcome.FAILED, error=str(exc)), True

        run.summaries[key] = record
        return (
            self._item(node, EnumItemOutcome.SUMMARIZED, from_cache=record.from_cache),
            True,
        )

    async def _process_directory(
        self,
        node: ModelRepoNode,
        refresh: set[str],
        selected: set[str],
        run: _RunState,
    ) -> tuple[ModelItemResult, bool]:
        key = self._display_key(node.path)
        if key in run.summaries and node.path not in refresh:
            return self._item(node, EnumItemOutcome.CACHED, from_cache=True), False

        children = self._collect_child_summaries(node, run.summaries)
        if not children:
            children = await self._recover_children(node, refresh, selected, run)
        if not children:
            logger.warning(
                "No summarized children found for directory %s. Skipping.", node.path or "/"
            )
            return self._item(node, EnumItemOutcome.SKIPPED), False

        try:
            record = await self._generator.summarize_directory(
                node.name,
                node.path,
                children,
                self._credentials,
                provider=self._provider,
                owner=self._repo.owner,
                repo=self._repo.repo,
                force_refresh=node.path in refresh,
            )
        except RepoLensError as exc:
            logger.exception("Error summarizing directory %s", node.path)
            return self._item(node, EnumItemOutcome.FAILED, error=str(exc)), True

        run.summaries[key] = record
        return (
            self._item(node, EnumItemOutcome.SUMMARIZED, from_cache=record.from_cache),
            True,
        )

    def _collect_child_summaries(
        self, directory: ModelRepoNode, summaries: Mapping[str, ModelSummaryRecord]
    ) -> list[ModelChildSummary]:
        """Summaries of every descendant, depth-first pre-order."""
        children: list[ModelChildSummary] = []
        for descendant in directory.iter_descendants():
            record = summaries.get(self._display_key(descendant.path))
            if record is not None:
                children.append(
                    ModelChildSummary(
                        kind=descendant.kind,
                        name=descendant.name,
                        path=descendant.path,
                        summary=record.text,
                    )
                )
        return children

    async def _recover_children(
        self,
        directory: ModelRepoNode,
        refresh: set[str],
        selected: set[str],
        run: _RunState,
    ) -> list[ModelChildSummary]:
        """Summarize selected, unsummarized file descendants of ``directory``."""
        candidates = [
            descendant
            for descendant in directory.iter_descendants()
            if descendant.is_file
            and descendant.path in selected
            and is_summarizable(descendant.name)
            and self._display_key(descendant.path) not in run.summaries
        ]
        if not candidates:
            return []

        logger.info(
            "Summarizing %d files first for directory %s", len(candidates), directory.path or "/"
        )
        children: list[ModelChildSummary] = []
        for file_node in candidates:
            try:
                record = await self._summarize_file(file_node, file_node.path in refresh)
            except RepoLensError:
                logger.exception("Error summarizing file %s", file_node.path)
            else:
                run.summaries[self._display_key(file_node.path)] = record
                children.append(
                    ModelChildSummary(
                        kind=EnumNodeKind.FILE,
                        name=file_node.name,
                        path=file_node.path,
                        summary=record.text,
                    )
                )
            await self._throttle()
        return children

    @staticmethod
    def _item(
        node: ModelRepoNode,
        outcome: EnumItemOutcome,
        *,
        from_cache: bool = False,
        error: str | None = None,
    ) -> ModelItemResult:
        return ModelItemResult(
            path=node.path, kind=node.kind, outcome=outcome, from_cache=from_cache, error=error
        )

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    async def reconcile_deletions(
        self, deleted_nodes: Iterable[ModelRepoNode]
    ) -> ModelBatchDeleteResult:
        """Delete the cache entries of deleted nodes, concurrently, without rollback."""
        nodes = list(deleted_nodes)
        if not nodes:
            return ModelBatchDeleteResult()
        result = await self._generator.cache.batch_delete_summary_keys(
            self._repo.owner,
            self._repo.repo,
            [(node.path, node.kind) for node in nodes],
        )
        logger.info(
            "Deleted cache entries for %d nodes of %s (%d keys failed)",
            len(nodes),
            self._repo.full_name,
            len(result.failed),
        )
        return result

    async def apply_changes(
        self,
        changes: Iterable[ModelRepoChange],
        root: ModelRepoNode,
        cached_summaries: Mapping[str, ModelSummaryRecord],
        pending: PendingUpdates | None = None,
        on_progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> ModelBatchResult:
        """Reconcile the cache with a diff of ``root`` against an older snapshot.

        Deleted nodes lose their cache entries; added and updated nodes are
        re-summarized with refresh forced. Paths that did not fail are
        resolved from ``pending``.
        """
        to_update, deleted = split_changes(list(changes))
        summaries = dict(cached_summaries)
        if deleted:
            await self.reconcile_deletions(deleted)
            for node in deleted:
                summaries.pop(self._display_key(node.path), None)

        paths = [node.path for node in to_update]
        result = await self.reconcile(
            paths, paths, root, summaries, on_progress, should_cancel
        )
        if pending is not None:
            done = [
                item.path for item in result.items if item.outcome is not EnumItemOutcome.FAILED
            ]
            pending.resolve([*done, *(node.path for node in deleted)])
        return result


__all__ = ["BatchReconciler", "CancelCheck", "ProgressCallback"]
