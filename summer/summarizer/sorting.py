"""Orderings for column members.

Every key ends with the raw byte name so ties resolve the same way on every
run. Descending order reverses the whole ordering, including that tiebreak.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..errors import ConfigError
from .entries import FileEntry

SORT_NAME = "name"
SORT_SIZE = "size"
SORT_MODIFICATION_TIME = "modification_time"
SORT_DEEP_MODIFICATION_TIME = "deep_modification_time"
SORT_VERSION = "version"

SORT_KEY_ALIASES = {
    "name": SORT_NAME,
    "size": SORT_SIZE,
    "modification_time": SORT_MODIFICATION_TIME,
    "mtime": SORT_MODIFICATION_TIME,
    "deep_modification_time": SORT_DEEP_MODIFICATION_TIME,
    "deep_mtime": SORT_DEEP_MODIFICATION_TIME,
    "version": SORT_VERSION,
}

_DIGITS_RE = re.compile(rb"(\d+)")


@dataclass(frozen=True)
class SortSpec:
    key: str = SORT_NAME
    descending: bool = False

    def to_text(self) -> str:
        return f"{self.key} {'desc' if self.descending else 'asc'}"


def parse_sort_spec(text: object) -> SortSpec:
    """Parse ``"<key> [asc|desc]"``."""
    if not isinstance(text, str):
        raise ConfigError(f"invalid sort setting: {text!r}")
    words = text.split()
    if not words or len(words) > 2:
        raise ConfigError(f"invalid sort setting: {text!r}")
    key = SORT_KEY_ALIASES.get(words[0])
    if key is None:
        expected = ", ".join(SORT_KEY_ALIASES)
        raise ConfigError(f"unknown sort key {words[0]!r} (expected one of: {expected})")
    descending = False
    if len(words) == 2:
        if words[1] not in ("asc", "desc"):
            raise ConfigError(f"invalid sort order {words[1]!r} (expected asc or desc)")
        descending = words[1] == "desc"
    return SortSpec(key=key, descending=descending)


def version_key(name: bytes) -> tuple:
    """Natural-order key: digit runs compare by value, then by zero padding."""
    parts = _DIGITS_RE.split(name)
    key: list[object] = []
    for index, part in enumerate(parts):
        if index % 2:
            key.append((int(part), len(part)))
        else:
            key.append(part)
    return tuple(key)


def _name_key(entry: FileEntry) -> tuple:
    return (entry.name,)


def _size_key(entry: FileEntry) -> tuple:
    usage = entry.collected.disk_usage
    return (usage if usage is not None else entry.size, entry.name)


def _mtime_key(entry: FileEntry) -> tuple:
    return (entry.mtime_ns, entry.name)


def _deep_mtime_key(entry: FileEntry) -> tuple:
    deep = entry.collected.deep_mtime_ns
    return (deep if deep is not None else entry.mtime_ns, entry.name)


def _version_key(entry: FileEntry) -> tuple:
    return (version_key(entry.name), entry.name)


SORT_KEYS: dict[str, Callable[[FileEntry], tuple]] = {
    SORT_NAME: _name_key,
    SORT_SIZE: _size_key,
    SORT_MODIFICATION_TIME: _mtime_key,
    SORT_DEEP_MODIFICATION_TIME: _deep_mtime_key,
    SORT_VERSION: _version_key,
}


def sort_entries(
    entries: Iterable[FileEntry],
    spec: SortSpec = SortSpec(),
    *,
    git_changes_first: bool = False,
) -> list[FileEntry]:
    """Return ``entries`` ordered by ``spec``.

    With ``git_changes_first`` the entries with git changes come first in
    both directions, each group keeping the requested order.
    """
    ordered = sorted(entries, key=SORT_KEYS[spec.key], reverse=spec.descending)
    if git_changes_first:
        ordered.sort(key=lambda entry: entry.collected.git_change is None)
    return ordered


__all__ = [
    "SORT_NAME",
    "SORT_SIZE",
    "SORT_MODIFICATION_TIME",
    "SORT_DEEP_MODIFICATION_TIME",
    "SORT_VERSION",
    "SORT_KEY_ALIASES",
    "SortSpec",
    "parse_sort_spec",
    "version_key",
    "SORT_KEYS",
    "sort_entries",
]
