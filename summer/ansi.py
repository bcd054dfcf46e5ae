"""ANSI-aware text measurement and name quoting utilities.

Provides display-width measurement that ignores escape sequences and counts
wide characters correctly, plus quoting/truncation for raw file names.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
ELLIPSIS = "…"

_SURROGATE_ESCAPE_BASE = 0xDC00


def char_display_width(ch: str) -> int:
    """Return terminal column width for one printable character.

    Combining marks consume no columns, and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.category(ch) == "Cf":
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return the number of terminal cells used by ``text``.

    ANSI escape sequences are ignored.
    """
    if "\x1b" in text:
        text = strip_ansi(text)
    return sum(char_display_width(ch) for ch in text)


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def _quoted_units(name: bytes) -> list[tuple[str, int]]:
    """Split a raw name into printable units with their display widths.

    Control characters and bytes that are not valid UTF-8 become ``\\xNN``
    escapes; every escape is a single unit so truncation never splits one.
    """
    units: list[tuple[str, int]] = []
    for ch in name.decode("utf-8", errors="surrogateescape"):
        code = ord(ch)
        if 0xDC80 <= code <= 0xDCFF:
            units.append((f"\\x{code - _SURROGATE_ESCAPE_BASE:02X}", 4))
        elif code < 32 or code == 127:
            units.append((f"\\x{code:02X}", 4))
        else:
            units.append((ch, char_display_width(ch)))
    return units


def quote_name(name: bytes, max_width: int | None = None) -> tuple[str, bool]:
    """Return ``(text, truncated)`` for a raw file name.

    When the quoted name is wider than ``max_width`` it is cut so that the
    text plus one ellipsis cell fits in ``max_width``; the caller appends
    :data:`ELLIPSIS` when ``truncated`` is true.
    """
    if max_width is None and all(32 <= byte < 127 for byte in name):
        return name.decode("ascii"), False

    units = _quoted_units(name)
    total = sum(width for _text, width in units)
    if max_width is None or total <= max_width:
        return "".join(text for text, _width in units), False

    budget = max(0, max_width - 1)
    out: list[str] = []
    used = 0
    for text, width in units:
        if used + width > budget:
            break
        out.append(text)
        used += width
    return "".join(out), True


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    return "".join(out)


__all__ = [
    "ANSI_ESCAPE_RE",
    "ELLIPSIS",
    "char_display_width",
    "display_width",
    "strip_ansi",
    "quote_name",
    "clip_ansi_line",
]
