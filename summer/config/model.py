"""Resolved configuration values.

Everything here is immutable once loaded; matchers are already compiled and
colors already parsed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..display.styles import Style, parse_style
from ..summarizer.collector import DEFAULT_TIMEOUT_SECONDS
from ..summarizer.matchers import NEVER, AnyMatcher, AnyOfMatcher, MatcherNode, TypeMatcher
from ..summarizer.sorting import SortSpec

COLORS_AUTO = "auto"
COLORS_ALWAYS = "always"
COLORS_NEVER = "never"
COLORS_WHEN = (COLORS_AUTO, COLORS_ALWAYS, COLORS_NEVER)

DEFAULT_COLUMN_PADDING = 4


@dataclass(frozen=True)
class ColumnSpec:
    matchers: MatcherNode
    label: str | None = None
    exclude: MatcherNode = NEVER
    include_hidden: bool = False
    max_name_width: int | None = None
    git_changes_first: bool = True
    color: Style | None = None
    sort: SortSpec = SortSpec()


@dataclass(frozen=True)
class GridSpec:
    max_rows: int | None = None
    max_name_width: int | None = None
    column_padding: int = DEFAULT_COLUMN_PADDING


@dataclass(frozen=True)
class CollectorSpec:
    disk_usage: bool = True
    git_diff: bool = True
    # Seconds; ``None`` waits for every job.
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class Indicator:
    text: str
    color: Style | None = None


@dataclass(frozen=True)
class StyleRule:
    matchers: MatcherNode
    color: Style | None = None
    indicator: Indicator | None = None


@dataclass(frozen=True)
class ColorsSpec:
    when: str = COLORS_AUTO
    use_lscolors: bool | str = True
    column_label: Style | None = None
    name_ellipsis: Style | None = None
    more_entries: Style | None = None
    diff_added: Style | None = field(default_factory=lambda: parse_style("green"))
    diff_deleted: Style | None = field(default_factory=lambda: parse_style("red"))
    disk_usage: Style | None = None
    styles: tuple[StyleRule, ...] = ()


@dataclass(frozen=True)
class InfoContent:
    text: str
    color: Style | None = None


@dataclass(frozen=True)
class InfoSpec:
    left: InfoContent | None = None
    right: InfoContent | None = None
    column: InfoContent | None = None
    variables: Mapping[str, MatcherNode] = field(default_factory=dict)


def default_columns(include_hidden: bool = False) -> tuple[ColumnSpec, ...]:
    """Directories first, then everything else."""
    return (
        ColumnSpec(
            matchers=AnyOfMatcher(children=(TypeMatcher(kind="directory"),)),
            include_hidden=include_hidden,
        ),
        ColumnSpec(matchers=AnyOfMatcher(children=(AnyMatcher(),)), include_hidden=True),
    )


@dataclass(frozen=True)
class Config:
    columns: tuple[ColumnSpec, ...] = field(default_factory=default_columns)
    include_hidden: bool = False
    grid: GridSpec = GridSpec()
    collector: CollectorSpec = CollectorSpec()
    colors: ColorsSpec = field(default_factory=ColorsSpec)
    info: InfoSpec = field(default_factory=InfoSpec)


__all__ = [
    "COLORS_AUTO",
    "COLORS_ALWAYS",
    "COLORS_NEVER",
    "COLORS_WHEN",
    "DEFAULT_COLUMN_PADDING",
    "ColumnSpec",
    "GridSpec",
    "CollectorSpec",
    "Indicator",
    "StyleRule",
    "ColorsSpec",
    "InfoContent",
    "InfoSpec",
    "default_columns",
    "Config",
]
