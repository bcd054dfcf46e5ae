"""Turn an :class:`~summer.summarizer.analyzer.Analysis` into terminal lines.

Output, top to bottom: the header (``info.left`` and ``info.right``), the
grid rows (labels, entries, ``+N more``), with ``info.column`` on the right
when it fits, and a ``[N more columns]`` footer when columns were dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from ..ansi import ELLIPSIS, clip_ansi_line, display_width
from ..config.model import ColorsSpec, Config, InfoContent
from ..summarizer.analyzer import Analysis
from ..summarizer.entries import FileEntry
from ..summarizer.matchers import MatchContext, evaluate
from .grid import Grid, GridColumn, format_size, layout_grid
from .info import (
    AddedLines,
    DeletedLines,
    DiskUsage,
    PathToken,
    ResetStyle,
    SetStyle,
    Text,
    Variable,
    home_relative,
    parse_template,
)
from .styles import LsColors, Style, combine_styles

Span = tuple[str, Style | None]


@dataclass
class Block:
    """Rows of styled spans drawn as one rectangle."""

    rows: list[list[Span]]
    style: Style | None = None

    @property
    def width(self) -> int:
        return max((row_width(row) for row in self.rows), default=0)

    @property
    def height(self) -> int:
        return len(self.rows)


def row_width(row: list[Span]) -> int:
    return sum(display_width(text) for text, _style in row)


class Painter:
    def __init__(self, use_colors: bool) -> None:
        self.use_colors = use_colors

    def paint(self, text: str, style: Style | None) -> str:
        if not self.use_colors or style is None:
            return text
        return style.paint(text)

    def pad(self, width: int, style: Style | None = None) -> str:
        if width <= 0:
            return ""
        return self.paint(" " * width, style)

    def spans(self, row: list[Span], base: Style | None = None) -> str:
        return "".join(self.paint(text, combine_styles(base, style)) for text, style in row)


class EntryStyler:
    """Name styles and indicators for entries, from LS_COLORS and style rules."""

    def __init__(self, colors: ColorsSpec, context: MatchContext, lscolors: LsColors | None = None) -> None:
        self.colors = colors
        self.context = context
        self.lscolors = lscolors
        self._cache: dict[bytes, tuple[Style | None, list[Span]]] = {}

    def resolve(self, entry: FileEntry) -> tuple[Style | None, list[Span]]:
        cached = self._cache.get(entry.name)
        if cached is not None:
            return cached
        style = self.lscolors.style_for(entry) if self.lscolors is not None else None
        indicator: list[Span] = []
        for rule in self.colors.styles:
            if not evaluate(rule.matchers, entry, self.context):
                continue
            style = combine_styles(style, rule.color)
            if rule.indicator is not None:
                indicator.append((rule.indicator.text, rule.indicator.color))
        if style is not None and style.is_plain():
            style = None
        result = (style, indicator)
        self._cache[entry.name] = result
        return result

    def indicator_width(self, entry: FileEntry) -> int:
        return row_width(self.resolve(entry)[1])


# Info templates.


def render_info(content: InfoContent, analysis: Analysis, environ: Mapping[str, str] | None = None) -> Block:
    base = content.color
    style = base
    rows: list[list[Span]] = []
    row: list[Span] = []
    for token in parse_template(content.text):
        if isinstance(token, Text):
            lines = token.text.split("\n")
            for line in lines[:-1]:
                if line:
                    row.append((line, style))
                rows.append(row)
                row = []
            if lines[-1]:
                row.append((lines[-1], style))
        elif isinstance(token, Variable):
            row.append((str(analysis.variables.get(token.name, 0)), style))
        elif isinstance(token, SetStyle):
            style = combine_styles(style, token.style)
        elif isinstance(token, ResetStyle):
            style = base
        elif isinstance(token, PathToken):
            path = str(analysis.path)
            if token.home:
                home = environ.get("HOME") if environ is not None else None
                path = home_relative(path, home)
            row.append((path, style))
        elif isinstance(token, DiskUsage):
            row.append((format_size(analysis.disk_usage_files), style))
        elif isinstance(token, AddedLines):
            if analysis.changes is not None:
                row.append((str(analysis.changes.added), style))
        elif isinstance(token, DeletedLines):
            if analysis.changes is not None:
                row.append((str(analysis.changes.deleted), style))
    if row:
        rows.append(row)
    return Block(rows=rows, style=base)


def _block_line(block: Block, index: int, painter: Painter) -> str:
    """Row ``index`` of ``block`` padded to the block width."""
    if index >= block.height:
        return painter.pad(block.width)
    row = block.rows[index]
    return painter.spans(row) + painter.pad(block.width - row_width(row), block.style)


def render_header(left: Block | None, right: Block | None, width: int, painter: Painter) -> list[str]:
    if left is None and right is None:
        return []
    parts: list[Block | int] = []
    if left is not None:
        parts.append(left)
    if right is not None:
        used = left.width if left is not None else 0
        gap = width - used - right.width
        if gap >= 0:
            parts.extend([gap, right])
        elif left is None:
            parts.append(right)

    height = max(part.height for part in parts if isinstance(part, Block))
    lines = []
    for index in range(height):
        line = "".join(
            painter.pad(part) if isinstance(part, int) else _block_line(part, index, painter)
            for part in parts
        )
        lines.append(clip_ansi_line(line, width).rstrip(" "))
    return lines


# Grid.


class GridRenderer:
    def __init__(self, grid: Grid, colors: ColorsSpec, styler: EntryStyler, painter: Painter) -> None:
        self.grid = grid
        self.colors = colors
        self.styler = styler
        self.painter = painter

    def _extras(self, column: GridColumn, texts: tuple[str, str, str], base: Style | None) -> str:
        out = []
        styles = (self.colors.diff_added, self.colors.diff_deleted, self.colors.disk_usage)
        widths = (column.added_width, column.deleted_width, column.usage_width)
        for text, style, width in zip(texts, styles, widths):
            if not width:
                continue
            out.append(self.painter.pad(width - len(text), base))
            out.append(self.painter.paint(text, combine_styles(base, style)))
            out.append(self.painter.pad(1, base))
        return "".join(out)

    def _name(self, column: GridColumn, row: list[Span], base: Style | None) -> str:
        return self.painter.spans(row, base) + self.painter.pad(column.name_width - row_width(row), base)

    def cell(self, column: GridColumn, index: int) -> str:
        """Text for row ``index`` (labels included) of ``column``."""
        base = column.source.spec.color
        painter = self.painter
        if self.grid.has_labels:
            if index == 0:
                blank = painter.pad(column.width - column.name_width, base)
                label = column.label or ""
                return blank + self._name(column, [(label, self.colors.column_label)] if label else [], base)
            index -= 1

        if index < len(column.cells):
            cell = column.cells[index]
            extras = self._extras(column, (cell.added_text, cell.deleted_text, cell.usage_text), base)
            name_style, indicator = self.styler.resolve(cell.entry)
            indicator_text = ""
            if column.indicator_width:
                indicator_text = painter.pad(column.indicator_width - row_width(indicator), base)
                indicator_text += painter.spans(indicator, base)
            name_row: list[Span] = [(cell.name, name_style)]
            if cell.truncated:
                name_row.append((ELLIPSIS, self.colors.name_ellipsis))
            return extras + indicator_text + self._name(column, name_row, base)

        if index == len(column.cells) and column.more_text:
            blank = painter.pad(column.width - column.name_width, base)
            return blank + self._name(column, [(column.more_text, self.colors.more_entries)], base)

        return painter.pad(column.width)

    def lines(self, info: Block | None, width: int) -> list[str]:
        grid = self.grid
        separator = " " * grid.padding
        info_gap = None
        if info is not None:
            gap = width - grid.width - info.width
            if gap >= 0:
                info_gap = gap

        height = grid.height
        if info_gap is not None:
            height = max(height, info.height)

        out = []
        for index in range(height):
            line = separator.join(self.cell(column, index) for column in grid.columns)
            if info_gap is not None:
                line += " " * info_gap + _block_line(info, index, self.painter)
            out.append(line.rstrip(" "))

        if grid.dropped:
            count = len(grid.dropped)
            out.append("")
            out.append(f"[{count} more column{'' if count == 1 else 's'}]")
        return out


def render_analysis(
    analysis: Analysis,
    config: Config,
    *,
    width: int,
    use_colors: bool,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Return the output lines for ``analysis``."""
    painter = Painter(use_colors)
    lscolors = LsColors.from_env(config.colors.use_lscolors, environ) if use_colors else None
    context = analysis.context or MatchContext()
    styler = EntryStyler(config.colors, context, lscolors)

    grid = layout_grid(
        analysis.columns,
        width,
        max_rows=config.grid.max_rows,
        max_name_width=config.grid.max_name_width,
        padding=config.grid.column_padding,
        indicator_width=styler.indicator_width,
    )

    info = config.info
    left = render_info(info.left, analysis, environ) if info.left is not None else None
    right = render_info(info.right, analysis, environ) if info.right is not None else None
    column = render_info(info.column, analysis, environ) if info.column is not None else None

    lines = render_header(left, right, width, painter)
    lines.extend(GridRenderer(grid, config.colors, styler, painter).lines(column, width))
    return lines


__all__ = [
    "Block",
    "Painter",
    "EntryStyler",
    "GridRenderer",
    "row_width",
    "render_info",
    "render_header",
    "render_analysis",
]
