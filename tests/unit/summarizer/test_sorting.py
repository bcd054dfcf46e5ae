"""Tests for column orderings."""

from __future__ import annotations

import random
import unittest
from pathlib import Path

from summer.errors import ConfigError
from summer.summarizer.entries import FileEntry, GitChange
from summer.summarizer.sorting import (
    SortSpec,
    parse_sort_spec,
    sort_entries,
)


def make_entry(name: bytes, *, size: int = 0, mtime_ns: int = 0, kind: str = "file") -> FileEntry:
    return FileEntry(name=name, path=Path(name.decode()), kind=kind, size=size, mtime_ns=mtime_ns)


def names(entries: list[FileEntry]) -> list[bytes]:
    return [entry.name for entry in entries]


def version_cmp(a: bytes, b: bytes) -> int:
    ordered = names(sort_entries([make_entry(b), make_entry(a)], SortSpec("version")))
    if a == b:
        return 0
    return -1 if ordered[0] == a else 1


class VersionOrderTests(unittest.TestCase):
    def test_numbered_names(self) -> None:
        expected = [f"N{number}".encode() for number in range(1, 21)]
        shuffled = expected[:]
        random.Random(7).shuffle(shuffled)
        entries = [make_entry(name) for name in shuffled]

        self.assertEqual(names(sort_entries(entries, SortSpec("version"))), expected)
        self.assertEqual(names(sort_entries(entries, SortSpec("name"))), sorted(expected))
        self.assertEqual(names(sort_entries(entries, SortSpec("name")))[:3], [b"N1", b"N10", b"N11"])

    def test_version_cmp(self) -> None:
        self.assertEqual(version_cmp(b"aaa", b"bbb"), -1)
        self.assertEqual(version_cmp(b"aaa100", b"aaa2"), 1)
        self.assertEqual(version_cmp(b"aaa", b"aaa0"), -1)
        self.assertEqual(version_cmp(b"aaa10", b"aaa9"), 1)
        self.assertEqual(version_cmp(b"aaa", b"aaa"), 0)
        self.assertEqual(version_cmp(b"aaa9", b"aaaa1"), -1)
        self.assertEqual(version_cmp(b"aaa100", b"aaa10z"), 1)
        self.assertEqual(version_cmp(b"aaa10000000000000", b"aaa10000000000001"), -1)
        self.assertEqual(version_cmp(b"aaa90000", b"aaa1000000000000000000000"), -1)

    def test_shorter_zero_padding_sorts_first(self) -> None:
        self.assertEqual(version_cmp(b"v1", b"v01"), -1)
        self.assertEqual(version_cmp(b"v01", b"v001"), -1)
        self.assertEqual(version_cmp(b"v01", b"v2"), -1)


class SortKeyTests(unittest.TestCase):
    def test_size_prefers_collected_disk_usage(self) -> None:
        small_dir = make_entry(b"a", kind="directory")
        big_dir = make_entry(b"b", kind="directory")
        small_dir.collected.fill("disk_usage", 10)
        big_dir.collected.fill("disk_usage", 5000)
        file_entry = make_entry(b"c", size=100)
        unknown_dir = make_entry(b"d", kind="directory")

        ordered = sort_entries([big_dir, file_entry, small_dir, unknown_dir], SortSpec("size"))

        self.assertEqual(names(ordered), [b"d", b"a", b"c", b"b"])

    def test_deep_mtime_falls_back_to_own_mtime(self) -> None:
        stale = make_entry(b"stale", mtime_ns=100, kind="directory")
        fresh = make_entry(b"fresh", mtime_ns=50, kind="directory")
        fresh.collected.fill("deep_mtime_ns", 900)
        untouched = make_entry(b"untouched", mtime_ns=300)

        ordered = sort_entries([fresh, stale, untouched], SortSpec("deep_modification_time", descending=True))

        self.assertEqual(names(ordered), [b"fresh", b"untouched", b"stale"])

    def test_ties_are_broken_by_name(self) -> None:
        entries = [make_entry(name, mtime_ns=10) for name in (b"c", b"a", b"b")]
        self.assertEqual(names(sort_entries(entries, SortSpec("modification_time"))), [b"a", b"b", b"c"])
        self.assertEqual(
            names(sort_entries(entries, SortSpec("modification_time", descending=True))),
            [b"c", b"b", b"a"],
        )

    def test_git_changes_stay_first_in_both_directions(self) -> None:
        entries = [make_entry(name) for name in (b"a", b"b", b"c", b"d")]
        entries[1].collected.fill("git_change", GitChange(1, 0))
        entries[3].collected.fill("git_change", GitChange(0, 2))

        ascending = sort_entries(entries, SortSpec("name"), git_changes_first=True)
        descending = sort_entries(entries, SortSpec("name", descending=True), git_changes_first=True)
        plain = sort_entries(entries, SortSpec("name"), git_changes_first=False)

        self.assertEqual(names(ascending), [b"b", b"d", b"a", b"c"])
        self.assertEqual(names(descending), [b"d", b"b", b"c", b"a"])
        self.assertEqual(names(plain), [b"a", b"b", b"c", b"d"])

    def test_sorting_is_deterministic(self) -> None:
        entries = [make_entry(f"f{index}".encode(), mtime_ns=index % 3) for index in range(30)]
        first = names(sort_entries(entries, SortSpec("modification_time")))
        random.Random(3).shuffle(entries)
        self.assertEqual(names(sort_entries(entries, SortSpec("modification_time"))), first)


class ParseSortSpecTests(unittest.TestCase):
    def test_keys_aliases_and_orders(self) -> None:
        self.assertEqual(parse_sort_spec("name"), SortSpec("name", False))
        self.assertEqual(parse_sort_spec("size desc"), SortSpec("size", True))
        self.assertEqual(parse_sort_spec("mtime asc"), SortSpec("modification_time", False))
        self.assertEqual(parse_sort_spec("deep_mtime desc"), SortSpec("deep_modification_time", True))
        self.assertEqual(parse_sort_spec("version"), SortSpec("version", False))

    def test_invalid_specs(self) -> None:
        for text in ("", "colour", "name up", "name asc extra", 3):
            with self.subTest(text=text):
                with self.assertRaises(ConfigError):
                    parse_sort_spec(text)


if __name__ == "__main__":
    unittest.main()
