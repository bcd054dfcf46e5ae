"""Header/info template language.

Specifiers::

    %%      literal '%'
    %P      path
    %p      path, with $HOME replaced by '~'
    %S      disk usage of the files in the directory
    %+      added lines (git)
    %-      deleted lines (git)
    %C{..}  color (``%C{reset}`` restores the base color)
    %V{..}  variable

Anything else starting with ``%`` is literal text.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ..errors import ConfigError
from .styles import Style, parse_style


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class SetStyle:
    style: Style


@dataclass(frozen=True)
class ResetStyle:
    pass


@dataclass(frozen=True)
class PathToken:
    home: bool = False


@dataclass(frozen=True)
class DiskUsage:
    pass


@dataclass(frozen=True)
class AddedLines:
    pass


@dataclass(frozen=True)
class DeletedLines:
    pass


InfoToken = Text | Variable | SetStyle | ResetStyle | PathToken | DiskUsage | AddedLines | DeletedLines

_SIMPLE_SPECIFIERS = {
    "P": PathToken(home=False),
    "p": PathToken(home=True),
    "S": DiskUsage(),
    "+": AddedLines(),
    "-": DeletedLines(),
    "%": Text("%"),
}


def _parse_braced(template: str, start: int, letter: str) -> tuple[str, int] | None:
    """Return the ``{..}`` body after ``%<letter>`` at ``start`` and the end index."""
    if not template.startswith(letter + "{", start + 1):
        return None
    end = template.find("}", start + 3)
    if end < 0:
        return None
    return template[start + 3 : end], end + 1


def _parse_specifier(template: str, start: int) -> tuple[InfoToken, int] | None:
    if start + 1 >= len(template):
        return None
    letter = template[start + 1]
    token = _SIMPLE_SPECIFIERS.get(letter)
    if token is not None:
        return token, start + 2
    if letter == "C":
        braced = _parse_braced(template, start, "C")
        if braced is None:
            return None
        body, end = braced
        if body.strip() == "reset":
            return ResetStyle(), end
        try:
            return SetStyle(parse_style(body.strip())), end
        except ConfigError:
            return None
    if letter == "V":
        braced = _parse_braced(template, start, "V")
        if braced is None:
            return None
        body, end = braced
        return Variable(body), end
    return None


def parse_template(template: str) -> list[InfoToken]:
    """Split ``template`` into tokens."""
    tokens: list[InfoToken] = []
    position = 0
    length = len(template)
    while position < length:
        if template[position] == "%":
            parsed = _parse_specifier(template, position)
            if parsed is not None:
                token, position = parsed
                tokens.append(token)
                continue

        # Text up to the next '%', which starts a new token.
        next_percent = template.find("%", position + 1)
        if next_percent < 0 or next_percent == length - 1:
            tokens.append(Text(template[position:]))
            break
        tokens.append(Text(template[position:next_percent]))
        position = next_percent
    return tokens


def home_relative(path: str, home: str | None = None) -> str:
    """Replace a leading ``$HOME`` in ``path`` with ``~``."""
    if home is None:
        home = os.environ.get("HOME")
    if not home:
        return path
    home = home.rstrip("/") or "/"
    if path == home:
        return "~"
    if home != "/" and path.startswith(home + "/"):
        return "~" + path[len(home) :]
    return path


__all__ = [
    "Text",
    "Variable",
    "SetStyle",
    "ResetStyle",
    "PathToken",
    "DiskUsage",
    "AddedLines",
    "DeletedLines",
    "InfoToken",
    "parse_template",
    "home_relative",
]
