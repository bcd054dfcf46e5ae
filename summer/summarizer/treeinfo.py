"""Recursive disk usage and deepest modification time of a directory tree.

Sizes are apparent file lengths (like ``du --apparent-size``). The walk is an
explicit depth-first stack: symlinks are never followed, directories on other
filesystems are not descended (like ``du -x``), and unreadable subdirectories
are skipped without aborting the walk.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_TREE_DEPTH = 256


@dataclass(frozen=True)
class TreeInfo:
    """Aggregates for one subtree.

    ``disk_usage`` sums the sizes of every non-directory below the root.
    ``deep_mtime_ns`` is the newest ``st_mtime_ns`` among the root and every
    file, directory and symlink below it.
    """

    disk_usage: int
    deep_mtime_ns: int


def read_tree_info(path: Path, *, max_depth: int = MAX_TREE_DEPTH) -> TreeInfo | None:
    """Walk ``path`` and return its :class:`TreeInfo`.

    Returns ``None`` when ``path`` itself cannot be read. For a non-directory
    the result is its own size and modification time.
    """
    try:
        root_stat = os.lstat(path)
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", path, exc)
        return None

    if not stat.S_ISDIR(root_stat.st_mode):
        return TreeInfo(disk_usage=int(root_stat.st_size), deep_mtime_ns=int(root_stat.st_mtime_ns))

    root_device = root_stat.st_dev
    disk_usage = 0
    deep_mtime_ns = int(root_stat.st_mtime_ns)
    stack: list[tuple[bytes, int]] = [(os.fsencode(path), 0)]
    root_readable = False

    while stack:
        directory, depth = stack.pop()
        try:
            with os.scandir(directory) as children:
                if depth == 0:
                    root_readable = True
                for child in children:
                    try:
                        st = child.stat(follow_symlinks=False)
                    except OSError:
                        continue
                    if st.st_mtime_ns > deep_mtime_ns:
                        deep_mtime_ns = int(st.st_mtime_ns)
                    if not stat.S_ISDIR(st.st_mode):
                        disk_usage += int(st.st_size)
                        continue
                    if st.st_dev != root_device:
                        continue
                    if depth + 1 > max_depth:
                        logger.debug("Depth limit reached at %r", child.path)
                        continue
                    stack.append((child.path, depth + 1))
        except OSError as exc:
            logger.debug("Skipping unreadable directory %r: %s", directory, exc)
            continue

    if not root_readable:
        return None
    return TreeInfo(disk_usage=disk_usage, deep_mtime_ns=deep_mtime_ns)


__all__ = [
    "MAX_TREE_DEPTH",
    "TreeInfo",
    "read_tree_info",
]
