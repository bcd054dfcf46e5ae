"""Git diff statistics for the entries of one directory.

A single ``git diff --numstat`` query covers the whole directory; its per-file
line counts are folded onto the top-level entry names (``src/a/b.py`` counts
toward ``src``).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .entries import GitChange

logger = logging.getLogger(__name__)

GIT_DIFF_ARGS = ["diff", "--numstat", "--relative", "-z", "HEAD", "."]


def _parse_count(raw: bytes) -> int:
    # Binary files report "-" for both counts.
    if raw == b"-":
        return 0
    return int(raw)


def _top_level(path: bytes) -> bytes:
    return path.split(b"/", 1)[0]


def _add(changes: dict[bytes, GitChange], path: bytes, change: GitChange) -> None:
    if not path:
        return
    name = _top_level(path)
    changes[name] = changes.get(name, GitChange()) + change


def parse_numstat(output: bytes) -> dict[bytes, GitChange] | None:
    """Parse ``git diff --numstat -z`` output into per-entry totals.

    Renames are reported as an empty path followed by the old and new paths;
    deletions are charged to the old path and insertions to the new one.
    Returns ``None`` when the output is malformed.
    """
    changes: dict[bytes, GitChange] = {}
    tokens = output.split(b"\0")
    index = 0
    while index < len(tokens):
        record = tokens[index]
        index += 1
        if not record:
            continue
        fields = record.split(b"\t", 2)
        if len(fields) != 3:
            logger.debug("Unexpected numstat record: %r", record)
            return None
        try:
            added = _parse_count(fields[0])
            deleted = _parse_count(fields[1])
        except ValueError:
            logger.debug("Unexpected numstat counts: %r", record)
            return None

        path = fields[2]
        if path:
            _add(changes, path, GitChange(added, deleted))
            continue

        if index + 1 >= len(tokens) or not tokens[index + 1]:
            logger.debug("Truncated rename record in numstat output")
            return None
        old_path, new_path = tokens[index], tokens[index + 1]
        index += 2
        _add(changes, old_path, GitChange(0, deleted))
        _add(changes, new_path, GitChange(added, 0))
    return changes


def run_git_diff(directory: Path, timeout_seconds: float | None = None) -> dict[bytes, GitChange] | None:
    """Run the diff query in ``directory`` and return per-entry totals.

    Returns ``None`` when git is missing, the directory is not inside a
    repository, or the command fails or times out.
    """
    try:
        proc = subprocess.run(
            ["git", *GIT_DIFF_ARGS],
            cwd=str(directory),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        logger.debug("git diff timed out in %s", directory)
        return None
    except OSError as exc:
        logger.debug("Cannot run git in %s: %s", directory, exc)
        return None
    if proc.returncode != 0:
        logger.debug("git diff exited with status %d in %s", proc.returncode, directory)
        return None
    return parse_numstat(proc.stdout)


__all__ = [
    "GIT_DIFF_ARGS",
    "parse_numstat",
    "run_git_diff",
]
