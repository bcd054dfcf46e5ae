"""Run the whole pipeline for one directory.

scan -> start git query -> start tree walks -> classify -> count variables
-> wait for the deadline -> attach git data -> sort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import ScanError
from .classifier import LayoutColumn, classify, count_matches
from .collector import CollectionBatch
from .entries import KIND_FILE, FileEntry, GitChange, scan_directory
from .matchers import MatchContext, uses_git
from .sorting import SORT_DEEP_MODIFICATION_TIME

if TYPE_CHECKING:
    from ..config.model import Config

logger = logging.getLogger(__name__)


@dataclass
class Analysis:
    """Result of analyzing one directory.

    ``changes`` totals the git line counts of every entry; it is ``None`` when
    no git data was collected. ``disk_usage_files`` sums the sizes of the
    plain files directly in ``path``.
    """

    path: Path
    columns: list[LayoutColumn]
    variables: dict[str, int] = field(default_factory=dict)
    changes: GitChange | None = None
    disk_usage_files: int = 0
    entries: list[FileEntry] = field(default_factory=list)
    context: MatchContext | None = field(default=None, repr=False)


def _resolve_root(path: Path) -> Path:
    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as exc:
        raise ScanError(f"{path}: No such file or directory") from exc
    except OSError as exc:
        raise ScanError(f"{path}: {exc.strerror or exc}") from exc
    if not resolved.is_dir():
        raise ScanError(f"{path}: Not a directory")
    return resolved


def analyze_path(path: Path, config: Config, *, now_ns: int | None = None) -> Analysis:
    """Scan ``path`` and build its columns according to ``config``.

    Raises ``ScanError`` when ``path`` cannot be listed. Collection problems
    only leave metadata absent.
    """
    root = _resolve_root(Path(path))
    entries = scan_directory(root)

    collector = config.collector
    batch = CollectionBatch(root, collector.timeout)

    needs_git = collector.git_diff or any(
        uses_git(column.matchers) or uses_git(column.exclude) for column in config.columns
    ) or any(uses_git(node) for node in config.info.variables.values()) or any(
        uses_git(rule.matchers) for rule in config.colors.styles
    )
    if needs_git:
        batch.start_git()

    # Queued before classification, which may block on the git job.
    deep = any(column.sort.key == SORT_DEEP_MODIFICATION_TIME for column in config.columns)
    batch.start_tree(entries, disk_usage=collector.disk_usage, deep_mtime=deep)

    context = MatchContext(now_ns=now_ns, git_changes=batch.git_changes)
    columns = classify(entries, config.columns, context)

    variables = {
        name: count_matches(entries, matcher, context)
        for name, matcher in config.info.variables.items()
    }

    batch.finish()
    if collector.git_diff:
        batch.apply_git(entries)

    for column in columns:
        column.sort()

    git_changes = batch.git_changes() if collector.git_diff else None
    changes = None
    if git_changes is not None:
        changes = GitChange()
        for change in git_changes.values():
            changes = changes + change

    disk_usage_files = sum(entry.size for entry in entries if entry.kind == KIND_FILE)

    logger.debug(
        "Analyzed %s: %d entries, %d claimed",
        root,
        len(entries),
        sum(column.total_count for column in columns),
    )
    return Analysis(
        path=root,
        columns=columns,
        variables=variables,
        changes=changes,
        disk_usage_files=disk_usage_files,
        entries=entries,
        context=context,
    )


__all__ = [
    "Analysis",
    "analyze_path",
]
