"""Terminal styles: color strings from configuration and ``LS_COLORS``.

A :class:`Style` keeps SGR parameters split into attributes, foreground and
background so that styles can be layered: a later style overrides colors and
adds attributes.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field

from ..errors import ConfigError
from ..summarizer.entries import (
    KIND_BLOCK_DEVICE,
    KIND_CHAR_DEVICE,
    KIND_DIRECTORY,
    KIND_FIFO,
    KIND_SOCKET,
    KIND_SYMLINK,
    FileEntry,
)

logger = logging.getLogger(__name__)

SGR_RESET = "\033[0m"

ATTRIBUTES = {
    "bold": 1,
    "dim": 2,
    "italic": 3,
    "ul": 4,
    "underline": 4,
    "blink": 5,
    "reverse": 7,
    "hidden": 8,
    "strike": 9,
}

COLOR_NAMES = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
}

_HEX_COLOR_RE = re.compile(r"#([0-9a-fA-F]{6})")


@dataclass(frozen=True)
class Style:
    attributes: frozenset[int] = frozenset()
    foreground: str | None = None
    background: str | None = None
    source: str | None = field(default=None, compare=False)

    def is_plain(self) -> bool:
        return not self.attributes and self.foreground is None and self.background is None

    def params(self) -> list[str]:
        out = [str(code) for code in sorted(self.attributes)]
        if self.foreground is not None:
            out.append(self.foreground)
        if self.background is not None:
            out.append(self.background)
        return out

    def prefix(self) -> str:
        if self.is_plain():
            return ""
        return "\033[" + ";".join(self.params()) + "m"

    def suffix(self) -> str:
        return "" if self.is_plain() else SGR_RESET

    def paint(self, text: str) -> str:
        if not text or self.is_plain():
            return text
        return f"{self.prefix()}{text}{SGR_RESET}"

    def combine(self, other: Style | None) -> Style:
        """Return ``other`` layered on top of this style."""
        if other is None:
            return self
        return Style(
            attributes=self.attributes | other.attributes,
            foreground=other.foreground if other.foreground is not None else self.foreground,
            background=other.background if other.background is not None else self.background,
        )


def combine_styles(base: Style | None, other: Style | None) -> Style | None:
    if base is None:
        return other
    return base.combine(other)


def _color_params(word: str, background: bool) -> str | None:
    """SGR parameters for one color word, or ``None`` if it is not a color."""
    base = 40 if background else 30
    extended = "48" if background else "38"

    name = word.lower()
    if name in COLOR_NAMES:
        return str(base + COLOR_NAMES[name])
    if name.startswith("bright") and name[6:].lstrip("_-") in COLOR_NAMES:
        return str(base + 60 + COLOR_NAMES[name[6:].lstrip("_-")])
    match = _HEX_COLOR_RE.fullmatch(word)
    if match:
        rgb = match.group(1)
        red, green, blue = (int(rgb[i : i + 2], 16) for i in (0, 2, 4))
        return f"{extended};2;{red};{green};{blue}"
    if word.isdigit():
        value = int(word)
        if value <= 255:
            return f"{extended};5;{value}"
    return None


def parse_style(text: object) -> Style:
    """Parse a color string such as ``"bold red"`` or ``"ul #ffcc00 black"``.

    The first color is the foreground and the second the background;
    ``normal``/``default`` keeps a slot unset.
    """
    if not isinstance(text, str):
        raise ConfigError(f"invalid color: {text!r}")

    attributes: set[int] = set()
    colors: list[str | None] = []
    for word in text.split():
        lower = word.lower()
        if lower in ATTRIBUTES:
            attributes.add(ATTRIBUTES[lower])
            continue
        if lower in ("normal", "default"):
            colors.append(None)
            continue
        if len(colors) >= 2:
            raise ConfigError(f"invalid color {text!r}: too many colors")
        params = _color_params(word, background=len(colors) == 1)
        if params is None:
            raise ConfigError(f"invalid color {text!r}: unknown word {word!r}")
        colors.append(params)

    if len(colors) > 2:
        raise ConfigError(f"invalid color {text!r}: too many colors")
    colors.extend([None, None])
    return Style(
        attributes=frozenset(attributes),
        foreground=colors[0],
        background=colors[1],
        source=text,
    )


def style_from_sgr(params: str) -> Style:
    """Build a style from raw SGR parameters (``LS_COLORS`` values)."""
    codes = [part for part in params.split(";") if part != ""]
    attributes: set[int] = set()
    foreground: str | None = None
    background: str | None = None
    index = 0
    while index < len(codes):
        try:
            code = int(codes[index])
        except ValueError:
            index += 1
            continue
        if code in (38, 48):
            mode = codes[index + 1] if index + 1 < len(codes) else ""
            width = 3 if mode == "5" else 5 if mode == "2" else 1
            value = ";".join(codes[index : index + width])
            index += width
            if code == 38:
                foreground = value
            else:
                background = value
            continue
        if 30 <= code <= 37 or 90 <= code <= 97:
            foreground = str(code)
        elif 40 <= code <= 47 or 100 <= code <= 107:
            background = str(code)
        elif 1 <= code <= 9:
            attributes.add(code)
        index += 1
    return Style(attributes=frozenset(attributes), foreground=foreground, background=background, source=params)


_KIND_KEYS = {
    KIND_DIRECTORY: "di",
    KIND_SYMLINK: "ln",
    KIND_FIFO: "pi",
    KIND_SOCKET: "so",
    KIND_BLOCK_DEVICE: "bd",
    KIND_CHAR_DEVICE: "cd",
}


class LsColors:
    """Styles from an ``LS_COLORS``-formatted string."""

    def __init__(self, kinds: dict[str, Style], suffixes: list[tuple[str, Style]]) -> None:
        self.kinds = kinds
        # Longest suffix first so "*.tar.gz" beats "*.gz".
        self.suffixes = sorted(suffixes, key=lambda item: len(item[0]), reverse=True)

    @classmethod
    def from_string(cls, value: str) -> LsColors:
        kinds: dict[str, Style] = {}
        suffixes: list[tuple[str, Style]] = []
        for item in value.split(":"):
            key, sep, params = item.partition("=")
            if not sep or not key:
                continue
            style = style_from_sgr(params)
            if key.startswith("*"):
                suffixes.append((key[1:], style))
            else:
                kinds[key] = style
        return cls(kinds, suffixes)

    @classmethod
    def from_env(cls, setting: bool | str, environ: dict[str, str] | None = None) -> LsColors | None:
        """Read the variable named by ``use_lscolors`` (``LS_COLORS`` for true)."""
        if setting is False:
            return None
        name = "LS_COLORS" if setting is True else str(setting)
        env = os.environ if environ is None else environ
        value = env.get(name)
        if not value:
            return None
        logger.debug("Using file colors from $%s", name)
        return cls.from_string(value)

    def style_for(self, entry: FileEntry) -> Style | None:
        key = _KIND_KEYS.get(entry.kind)
        if key is not None:
            return self.kinds.get(key)
        if entry.is_executable and "ex" in self.kinds:
            return self.kinds["ex"]
        name = entry.fs_name
        for suffix, style in self.suffixes:
            if name.endswith(suffix):
                return style
        return self.kinds.get("fi")


__all__ = [
    "SGR_RESET",
    "ATTRIBUTES",
    "COLOR_NAMES",
    "Style",
    "combine_styles",
    "parse_style",
    "style_from_sgr",
    "LsColors",
]
