"""Public package surface for summer.

Exports ``main`` for programmatic CLI invocation. The scan, classification and
layout pipeline lives in ``summer.summarizer`` and ``summer.display``.
"""

from __future__ import annotations

__version__ = "0.4.0"


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["__version__", "main"]
