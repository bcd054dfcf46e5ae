"""Fatal error types.

Only configuration and scan-source problems are fatal. Collection failures are
absorbed by the collector and never surface as exceptions.
"""

from __future__ import annotations


class SummerError(Exception):
    """Base class for errors reported by the command line."""


class ConfigError(SummerError):
    """Invalid configuration, detected before any directory is scanned."""


class ScanError(SummerError):
    """The directory to summarize cannot be listed."""


__all__ = [
    "SummerError",
    "ConfigError",
    "ScanError",
]
