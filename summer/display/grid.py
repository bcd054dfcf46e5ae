"""Grid layout: fit classified columns into the terminal width.

Each column is made of optional sub-columns (git added, git deleted, disk
usage, indicator) followed by the names. Columns are dropped from the end of
the configured order until the rest fits; the first column always stays.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..ansi import display_width, quote_name
from ..summarizer.classifier import LayoutColumn
from ..summarizer.entries import FileEntry

_SIZE_UNITS = "KMGTPEZY"


def format_size(size: int) -> str:
    """Human size: ``900``, ``1K``, ``11K``, ``2M``."""
    if size < 1024:
        return str(size)
    units = iter(_SIZE_UNITS)
    while size > 1 << 20:
        next(units, None)
        size >>= 10
    unit = next(units, "?")
    return f"{size / 1024:.0f}{unit}"


@dataclass(frozen=True)
class GridCell:
    entry: FileEntry
    name: str
    truncated: bool

    @property
    def width(self) -> int:
        return display_width(self.name) + (1 if self.truncated else 0)

    @property
    def added_text(self) -> str:
        added = self.entry.collected.git_added
        return f"+{added}" if added else ""

    @property
    def deleted_text(self) -> str:
        deleted = self.entry.collected.git_deleted
        return f"-{deleted}" if deleted else ""

    @property
    def usage_text(self) -> str:
        usage = self.entry.collected.disk_usage
        return format_size(usage) if usage is not None else ""


@dataclass
class GridColumn:
    source: LayoutColumn
    cells: list[GridCell]
    more_count: int = 0
    name_width: int = 0
    added_width: int = 0
    deleted_width: int = 0
    usage_width: int = 0
    indicator_width: int = 0

    @property
    def label(self) -> str | None:
        return self.source.spec.label

    @property
    def more_text(self) -> str | None:
        return f"+{self.more_count} more" if self.more_count else None

    @property
    def extra_widths(self) -> list[int]:
        return [w for w in (self.added_width, self.deleted_width, self.usage_width) if w]

    @property
    def width(self) -> int:
        return sum(w + 1 for w in self.extra_widths) + self.indicator_width + self.name_width

    @property
    def height(self) -> int:
        return len(self.cells) + (1 if self.more_count else 0)


@dataclass
class Grid:
    columns: list[GridColumn] = field(default_factory=list)
    dropped: list[GridColumn] = field(default_factory=list)
    padding: int = 4
    has_labels: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.columns

    @property
    def width(self) -> int:
        if not self.columns:
            return 0
        return sum(column.width for column in self.columns) + self.padding * (len(self.columns) - 1)

    @property
    def height(self) -> int:
        if not self.columns:
            return 0
        return max(column.height for column in self.columns) + (1 if self.has_labels else 0)


def build_column(
    column: LayoutColumn,
    *,
    max_rows: int | None = None,
    max_name_width: int | None = None,
    indicator_width: Callable[[FileEntry], int] | None = None,
) -> GridColumn:
    """Measure one column: truncate rows and names, size every sub-column."""
    limit = column.spec.max_name_width or max_name_width
    shown = column.entries
    more_count = 0
    if max_rows is not None and len(shown) > max_rows:
        more_count = len(shown) - max_rows
        shown = shown[:max_rows]

    cells = []
    for entry in shown:
        name, truncated = quote_name(entry.name, limit)
        cells.append(GridCell(entry=entry, name=name, truncated=truncated))

    grid_column = GridColumn(source=column, cells=cells, more_count=more_count)
    name_widths = [cell.width for cell in cells]
    if grid_column.label:
        name_widths.append(display_width(grid_column.label))
    if grid_column.more_text:
        name_widths.append(display_width(grid_column.more_text))
    grid_column.name_width = max(name_widths, default=0)
    grid_column.added_width = max((len(cell.added_text) for cell in cells), default=0)
    grid_column.deleted_width = max((len(cell.deleted_text) for cell in cells), default=0)
    grid_column.usage_width = max((len(cell.usage_text) for cell in cells), default=0)
    if indicator_width is not None:
        grid_column.indicator_width = max((indicator_width(cell.entry) for cell in cells), default=0)
    return grid_column


def layout_grid(
    columns: Sequence[LayoutColumn],
    terminal_width: int | None,
    *,
    max_rows: int | None = None,
    max_name_width: int | None = None,
    padding: int = 4,
    indicator_width: Callable[[FileEntry], int] | None = None,
) -> Grid:
    """Build the grid for ``columns`` within ``terminal_width`` cells.

    Columns without entries are skipped. ``terminal_width=None`` keeps every
    column.
    """
    has_labels = any(column.spec.label for column in columns)
    built = [
        build_column(
            column,
            max_rows=max_rows,
            max_name_width=max_name_width,
            indicator_width=indicator_width,
        )
        for column in columns
        if column.entries
    ]

    grid = Grid(columns=built, padding=padding, has_labels=has_labels)
    if terminal_width is None:
        return grid
    while len(grid.columns) > 1 and grid.width > terminal_width:
        grid.dropped.insert(0, grid.columns.pop())
    return grid


__all__ = [
    "format_size",
    "GridCell",
    "GridColumn",
    "Grid",
    "build_column",
    "layout_grid",
]
