# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""
repolens command line.

Usage:
    python -m repolens check main.py photo.png Makefile
    python -m repolens diff previous.json current.json --json
    python -m repolens summarize octo/demo src/main.py --refresh
    python -m repolens reconcile octo/demo previous.json --pending pending.json
    python -m repolens cache-stats octo/demo

Snapshots are ``ModelRepoNode`` JSON documents; ``reconcile --save-snapshot``
writes the fetched tree so it can serve as the next run's previous snapshot.

Configuration comes from ``REPOLENS_*`` environment variables (see
``repolens.settings``).

Exit Codes:
    0 - Success
    1 - Operation failed (or: a name is not summarizable, a batch item failed)
    2 - Usage error: bad arguments, unreadable snapshot, invalid repository
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from repolens.diff.tree_diff import detect_changes
from repolens.enums.enum_change_type import EnumChangeType
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import InvalidRepoReferenceError, RepoLensError
from repolens.models.model_batch import ModelBatchProgress
from repolens.models.model_repo_node import ModelRepoNode
from repolens.models.model_repo_reference import ModelRepoReference
from repolens.reconcile.pending_updates import PendingUpdates
from repolens.services import RepoLensServices, build_services
from repolens.settings import RepoLensSettings
from repolens.summaries.summarizability import is_summarizable
from repolens.utils.logging_config import configure_logging

JSON_INDENT_SPACES = 2

_CHANGE_MARKERS = {"added": "+", "updated": "~", "deleted": "-"}


class UsageError(Exception):
    """Bad input detected after argument parsing (exit code 2)."""


def _load_snapshot(path: str) -> ModelRepoNode:
    try:
        return ModelRepoNode.model_validate_json(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise UsageError(f"Cannot read snapshot {path}: {exc}") from exc
    except ValidationError as exc:
        raise UsageError(f"Invalid snapshot {path}: {exc}") from exc


def _parse_repo(identifier: str, branch: str | None = None) -> ModelRepoReference:
    try:
        return ModelRepoReference.parse(identifier, branch=branch)
    except InvalidRepoReferenceError as exc:
        raise UsageError(str(exc)) from exc


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=JSON_INDENT_SPACES, default=str))


def _print_progress(progress: ModelBatchProgress) -> None:
    print(
        f"[{progress.processed}/{progress.total}] {progress.percent:5.1f}% "
        f"{progress.current_path or '/'}"
    )


# =============================================================================
# Commands
# =============================================================================


def cmd_check(parsed: argparse.Namespace) -> int:
    results = {name: is_summarizable(name) for name in parsed.names}
    if parsed.json:
        _print_json(results)
    else:
        for name, ok in results.items():
            print(f"{name}: {'summarizable' if ok else 'not summarizable'}")
    return 0 if all(results.values()) else 1


def cmd_diff(parsed: argparse.Namespace) -> int:
    previous = _load_snapshot(parsed.previous)
    current = _load_snapshot(parsed.current)
    changes = sorted(
        detect_changes(current, previous), key=lambda c: (c.path, c.change_type.value)
    )
    if parsed.json:
        _print_json([change.model_dump(mode="json") for change in changes])
    elif not changes:
        print("No changes")
    else:
        for change in changes:
            print(f"{_CHANGE_MARKERS[change.change_type.value]} {change.path}")
    return 0


async def cmd_summarize(parsed: argparse.Namespace, services: RepoLensServices) -> int:
    ref = _parse_repo(parsed.repo, parsed.branch)
    provider = parsed.provider or services.settings.default_provider
    content = await services.github.fetch_file_content(
        ref.owner, ref.repo, parsed.path, ref.branch
    )
    record = await services.generator.summarize_file(
        content,
        parsed.path.rsplit("/", 1)[-1],
        services.credentials,
        provider=provider,
        owner=ref.owner,
        repo=ref.repo,
        path=parsed.path,
        force_refresh=parsed.refresh,
    )
    if parsed.json:
        _print_json({"path": parsed.path, **record.model_dump(mode="json")})
    else:
        source = "cache" if record.from_cache else record.provider.label
        print(f"{parsed.path} ({source}, {record.generated_at.isoformat()})")
        print()
        print(record.text)
    return 0


async def cmd_reconcile(parsed: argparse.Namespace, services: RepoLensServices) -> int:
    ref = _parse_repo(parsed.repo, parsed.branch)
    previous = _load_snapshot(parsed.previous)
    current = await services.github.fetch_repo_tree(ref.owner, ref.repo, ref.branch)

    pending_path = Path(parsed.pending) if parsed.pending else None
    pending = PendingUpdates(ref.owner, ref.repo)
    if pending_path is not None and pending_path.exists():
        try:
            loaded = PendingUpdates.load(pending_path.read_bytes())
        except ValidationError as exc:
            raise UsageError(f"Invalid pending updates file {pending_path}: {exc}") from exc
        if not loaded.matches(ref.owner, ref.repo):
            raise UsageError(
                f"Pending updates file {pending_path} belongs to "
                f"{loaded.owner}/{loaded.repo}, not {ref.full_name}"
            )
        pending = loaded

    changes = detect_changes(current, previous)
    pending.record_changes(changes)
    print(f"{len(changes)} changes, {len(pending)} pending updates")

    reconciler = services.reconciler(ref, provider=parsed.provider)
    await reconciler.validate_credentials()
    cached = await services.cache.load_all_cached_summaries(ref.owner, ref.repo)
    deleted = [c for c in changes if c.change_type is EnumChangeType.DELETED]
    result = await reconciler.apply_changes(
        [*pending.as_changes(), *deleted],
        current,
        cached,
        pending=pending,
        on_progress=_print_progress,
    )

    if pending_path is not None:
        pending_path.write_text(pending.dump(), encoding="utf-8")
    if parsed.save_snapshot:
        Path(parsed.save_snapshot).write_text(current.model_dump_json(), encoding="utf-8")

    print(
        f"{result.state.value}: {result.summarized} summarized, {result.cached} cached, "
        f"{result.skipped} skipped, {result.failed} failed"
    )
    return 1 if result.has_failures else 0


async def cmd_cache_stats(parsed: argparse.Namespace, services: RepoLensServices) -> int:
    ref = _parse_repo(parsed.repo)
    counts = await services.cache.count_cached_summaries(ref.owner, ref.repo)
    if parsed.json:
        _print_json({"repo": ref.full_name, **counts.model_dump()})
    else:
        print(f"Cached summaries for {ref.full_name}:")
        print(f"  Total: {counts.total}")
        print(f"  Files: {counts.files}")
        print(f"  Directories: {counts.directories}")
    return 0


_ASYNC_COMMANDS = {
    "summarize": cmd_summarize,
    "reconcile": cmd_reconcile,
    "cache-stats": cmd_cache_stats,
}


async def _run_async(
    parsed: argparse.Namespace, services: RepoLensServices | None
) -> int:
    owned = services is None
    active = services or build_services(RepoLensSettings())
    try:
        return await _ASYNC_COMMANDS[parsed.command](parsed, active)
    finally:
        if owned:
            await active.close()


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m repolens",
        description="Cached LLM summaries for GitHub repository trees",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Check whether file names can be summarized")
    check.add_argument("names", nargs="+", metavar="NAME")
    check.add_argument("--json", action="store_true", help="Output as JSON")

    diff = sub.add_parser("diff", help="Diff two tree snapshots")
    diff.add_argument("previous", metavar="PREVIOUS.json")
    diff.add_argument("current", metavar="CURRENT.json")
    diff.add_argument("--json", action="store_true", help="Output as JSON")

    providers = [p.value for p in EnumSummaryProvider]

    summarize = sub.add_parser("summarize", help="Summarize one file")
    summarize.add_argument("repo", metavar="OWNER/REPO")
    summarize.add_argument("path", metavar="PATH")
    summarize.add_argument("--branch", default=None)
    summarize.add_argument("--provider", type=EnumSummaryProvider, choices=providers)
    summarize.add_argument("--refresh", action="store_true", help="Bypass the cache")
    summarize.add_argument("--json", action="store_true", help="Output as JSON")

    reconcile = sub.add_parser(
        "reconcile", help="Re-summarize what changed since a previous snapshot"
    )
    reconcile.add_argument("repo", metavar="OWNER/REPO")
    reconcile.add_argument("previous", metavar="PREVIOUS.json")
    reconcile.add_argument("--branch", default=None)
    reconcile.add_argument("--provider", type=EnumSummaryProvider, choices=providers)
    reconcile.add_argument("--pending", metavar="FILE", help="Pending updates file")
    reconcile.add_argument(
        "--save-snapshot", metavar="FILE", help="Write the fetched tree to FILE"
    )

    stats = sub.add_parser("cache-stats", help="Count cached summaries")
    stats.add_argument("repo", metavar="OWNER/REPO")
    stats.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def main(
    args: list[str] | None = None,
    *,
    services: RepoLensServices | None = None,
) -> int:
    """Run the CLI and return the exit code.

    Args:
        args: Arguments (defaults to ``sys.argv[1:]``).
        services: Pre-built services; built from settings when omitted.
    """
    parser = _create_parser()
    try:
        parsed = parser.parse_args(args)
    except SystemExit as exc:
        return int(exc.code or 0)

    configure_logging(parsed.log_level)
    try:
        if parsed.command == "check":
            return cmd_check(parsed)
        if parsed.command == "diff":
            return cmd_diff(parsed)
        return asyncio.run(_run_async(parsed, services))
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except RepoLensError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
