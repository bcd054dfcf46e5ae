"""Distribute scanned entries across the configured columns.

Each entry goes to the first column whose ``matchers`` match and whose
``exclude`` does not; an excluded entry keeps trying the following columns.
Entries claimed by no column are dropped.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entries import FileEntry
from .matchers import MatchContext, MatcherNode, evaluate
from .sorting import sort_entries

if TYPE_CHECKING:
    from ..config.model import ColumnSpec


@dataclass
class LayoutColumn:
    """Members of one configured column, sorted after collection."""

    spec: ColumnSpec
    entries: list[FileEntry] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.entries)

    def sort(self) -> None:
        self.entries = sort_entries(
            self.entries,
            self.spec.sort,
            git_changes_first=self.spec.git_changes_first,
        )


def column_accepts(spec: ColumnSpec, entry: FileEntry, context: MatchContext) -> bool:
    if evaluate(spec.exclude, entry, context):
        return False
    if entry.is_hidden and not spec.include_hidden:
        return False
    return evaluate(spec.matchers, entry, context)


def first_matching_column(
    entry: FileEntry,
    columns: Sequence[ColumnSpec],
    context: MatchContext,
) -> int | None:
    """Return the index of the column that claims ``entry``."""
    for index, spec in enumerate(columns):
        if column_accepts(spec, entry, context):
            return index
    return None


def classify(
    entries: Iterable[FileEntry],
    columns: Sequence[ColumnSpec],
    context: MatchContext,
) -> list[LayoutColumn]:
    """Assign entries to columns (unsorted; call :meth:`LayoutColumn.sort`)."""
    layout = [LayoutColumn(spec=spec) for spec in columns]
    for entry in entries:
        index = first_matching_column(entry, columns, context)
        if index is not None:
            layout[index].entries.append(entry)
    return layout


def count_matches(entries: Iterable[FileEntry], matcher: MatcherNode, context: MatchContext) -> int:
    """Number of ``entries`` (hidden included) that satisfy ``matcher``."""
    return sum(1 for entry in entries if evaluate(matcher, entry, context))


__all__ = [
    "LayoutColumn",
    "column_accepts",
    "first_matching_column",
    "classify",
    "count_matches",
]
