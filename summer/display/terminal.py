"""Terminal queries used by the renderer."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Mapping
from typing import TextIO

DEFAULT_WIDTH = 80


def terminal_width(environ: Mapping[str, str] | None = None) -> int:
    """Return the output width: ``$COLUMNS``, then the tty size, then 80."""
    env = os.environ if environ is None else environ
    value = env.get("COLUMNS", "").strip()
    if value.isdigit() and int(value) > 0:
        return int(value)
    columns = shutil.get_terminal_size((DEFAULT_WIDTH, 24)).columns
    return columns if columns > 0 else DEFAULT_WIDTH


def stream_is_tty(stream: TextIO | None = None) -> bool:
    stream = sys.stdout if stream is None else stream
    try:
        return os.isatty(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return False


__all__ = [
    "DEFAULT_WIDTH",
    "terminal_width",
    "stream_is_tty",
]
