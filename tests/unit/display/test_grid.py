"""Tests for grid layout and size formatting."""

from __future__ import annotations

import unittest
from pathlib import Path

from summer.config.model import ColumnSpec
from summer.display.grid import build_column, format_size, layout_grid
from summer.summarizer.classifier import LayoutColumn
from summer.summarizer.entries import FileEntry, GitChange
from summer.summarizer.matchers import AnyMatcher


def make_entry(name: bytes, kind: str = "file") -> FileEntry:
    return FileEntry(name=name, path=Path(name.decode("utf-8", "replace")), kind=kind, size=0, mtime_ns=0)


def layout_column(names: list[bytes], **spec_kwargs) -> LayoutColumn:
    spec = ColumnSpec(matchers=AnyMatcher(), **spec_kwargs)
    return LayoutColumn(spec=spec, entries=[make_entry(name) for name in names])


class FormatSizeTests(unittest.TestCase):
    def test_sizes(self) -> None:
        self.assertEqual(format_size(0), "0")
        self.assertEqual(format_size(900), "900")
        self.assertEqual(format_size(1023), "1023")
        self.assertEqual(format_size(1024), "1K")
        self.assertEqual(format_size(11 * 1024), "11K")
        self.assertEqual(format_size(2 * 1024 * 1024), "2M")
        self.assertEqual(format_size(3 * 1024 ** 3), "3G")


class BuildColumnTests(unittest.TestCase):
    def test_rows_are_truncated_with_more_marker(self) -> None:
        column = layout_column([f"n{index}".encode() for index in range(10)])

        built = build_column(column, max_rows=4)

        self.assertEqual([cell.name for cell in built.cells], ["n0", "n1", "n2", "n3"])
        self.assertEqual(built.more_text, "+6 more")
        self.assertEqual(built.height, 5)
        self.assertEqual(built.name_width, len("+6 more"))

    def test_no_marker_when_everything_fits(self) -> None:
        built = build_column(layout_column([b"a", b"b"]), max_rows=2)

        self.assertIsNone(built.more_text)
        self.assertEqual(built.height, 2)

    def test_long_names_are_cut_to_the_limit(self) -> None:
        built = build_column(layout_column([b"abcdefghij", b"abc"]), max_name_width=5)

        self.assertEqual(built.cells[0].name, "abcd")
        self.assertTrue(built.cells[0].truncated)
        self.assertEqual(built.cells[0].width, 5)
        self.assertFalse(built.cells[1].truncated)
        self.assertEqual(built.name_width, 5)

    def test_column_limit_overrides_global_limit(self) -> None:
        built = build_column(layout_column([b"abcdefghij"], max_name_width=3), max_name_width=8)

        self.assertEqual(built.cells[0].name, "ab")

    def test_control_characters_are_escaped(self) -> None:
        built = build_column(layout_column([b"a\nb", b"\xff"]))

        self.assertEqual(built.cells[0].name, "a\\x0Ab")
        self.assertEqual(built.cells[1].name, "\\xFF")

    def test_extra_sub_columns(self) -> None:
        column = layout_column([b"src", b"doc"])
        column.entries[0].collected.fill("git_change", GitChange(12, 3))
        column.entries[0].collected.fill("disk_usage", 2048)
        column.entries[1].collected.fill("disk_usage", 10)

        built = build_column(column)

        self.assertEqual(built.added_width, 3)
        self.assertEqual(built.deleted_width, 2)
        self.assertEqual(built.usage_width, 2)
        self.assertEqual(built.width, 4 + 3 + 3 + 3)
        self.assertEqual(built.cells[1].added_text, "")


class LayoutGridTests(unittest.TestCase):
    def test_columns_are_dropped_from_the_end(self) -> None:
        columns = [layout_column([name]) for name in (b"a", b"b", b"c", b"d", b"e")]

        grid = layout_grid(columns, 12, padding=4)

        self.assertEqual([column.cells[0].name for column in grid.columns], ["a", "b", "c"])
        self.assertEqual(len(grid.dropped), 2)
        self.assertEqual(grid.width, 11)

    def test_first_column_is_always_kept(self) -> None:
        grid = layout_grid([layout_column([b"a-very-long-name"]), layout_column([b"b"])], 3)

        self.assertEqual(len(grid.columns), 1)
        self.assertEqual(len(grid.dropped), 1)

    def test_empty_columns_are_skipped(self) -> None:
        grid = layout_grid([layout_column([]), layout_column([b"x"])], 80)

        self.assertEqual(len(grid.columns), 1)
        self.assertEqual(grid.columns[0].cells[0].name, "x")
        self.assertFalse(grid.dropped)

    def test_no_entries_means_empty_grid(self) -> None:
        grid = layout_grid([layout_column([])], 80)

        self.assertTrue(grid.is_empty)
        self.assertEqual(grid.height, 0)
        self.assertEqual(grid.width, 0)

    def test_labels_add_a_row(self) -> None:
        grid = layout_grid([layout_column([b"x"], label="Things")], 80)

        self.assertTrue(grid.has_labels)
        self.assertEqual(grid.height, 2)
        self.assertEqual(grid.width, len("Things"))

    def test_unbounded_width_keeps_everything(self) -> None:
        columns = [layout_column([name * 40]) for name in (b"a", b"b", b"c")]

        grid = layout_grid(columns, None)

        self.assertEqual(len(grid.columns), 3)


if __name__ == "__main__":
    unittest.main()
