"""Directory entries and the metadata collected for them.

``FileEntry`` values are produced once per scan by :func:`scan_directory` and
never change afterwards, except for their ``collected`` slot which the
collector fills at most once per field.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import ScanError

logger = logging.getLogger(__name__)

KIND_FILE = "file"
KIND_DIRECTORY = "directory"
KIND_SYMLINK = "symlink"
KIND_FIFO = "fifo"
KIND_SOCKET = "socket"
KIND_BLOCK_DEVICE = "blockdev"
KIND_CHAR_DEVICE = "chardev"

ENTRY_KINDS = frozenset(
    {
        KIND_FILE,
        KIND_DIRECTORY,
        KIND_SYMLINK,
        KIND_FIFO,
        KIND_SOCKET,
        KIND_BLOCK_DEVICE,
        KIND_CHAR_DEVICE,
    }
)

# Reasons recorded for collected fields that stay absent.
REASON_NOT_REQUESTED = "not-requested"
REASON_NOT_DIRECTORY = "not-directory"
REASON_TIMEOUT = "timeout"
REASON_FAILED = "failed"
REASON_NO_REPOSITORY = "no-repository"
REASON_UNCHANGED = "unchanged"


def kind_from_mode(mode: int) -> str:
    """Map an ``st_mode`` value to one of the entry kinds."""
    if stat.S_ISDIR(mode):
        return KIND_DIRECTORY
    if stat.S_ISLNK(mode):
        return KIND_SYMLINK
    if stat.S_ISFIFO(mode):
        return KIND_FIFO
    if stat.S_ISSOCK(mode):
        return KIND_SOCKET
    if stat.S_ISBLK(mode):
        return KIND_BLOCK_DEVICE
    if stat.S_ISCHR(mode):
        return KIND_CHAR_DEVICE
    return KIND_FILE


@dataclass(frozen=True)
class GitChange:
    """Added/deleted line counts reported by ``git diff --numstat``."""

    added: int = 0
    deleted: int = 0

    def __add__(self, other: GitChange) -> GitChange:
        return GitChange(self.added + other.added, self.deleted + other.deleted)


@dataclass
class CollectedMetadata:
    """Optional data attached to an entry after collection.

    Every field is independently optional. ``absent_reasons`` tells why a field
    is still ``None``; fields are set at most once.
    """

    disk_usage: int | None = None
    deep_mtime_ns: int | None = None
    git_change: GitChange | None = None
    absent_reasons: dict[str, str] = field(default_factory=dict)

    @property
    def git_added(self) -> int | None:
        return self.git_change.added if self.git_change is not None else None

    @property
    def git_deleted(self) -> int | None:
        return self.git_change.deleted if self.git_change is not None else None

    def fill(self, name: str, value: object) -> bool:
        """Set field ``name`` unless it already holds a value."""
        if getattr(self, name) is not None:
            return False
        setattr(self, name, value)
        self.absent_reasons.pop(name, None)
        return True

    def mark_absent(self, name: str, reason: str) -> None:
        """Record why field ``name`` has no value; ignored once it is set."""
        if getattr(self, name) is None:
            self.absent_reasons.setdefault(name, reason)

    def reason(self, name: str) -> str | None:
        if getattr(self, name) is not None:
            return None
        return self.absent_reasons.get(name, REASON_NOT_REQUESTED)


@dataclass(frozen=True)
class FileEntry:
    """One member of the scanned directory.

    ``name`` is the raw byte name reported by the filesystem. ``size`` is zero
    for directories; their recursive size lives in ``collected.disk_usage``.
    """

    name: bytes
    path: Path
    kind: str
    size: int
    mtime_ns: int
    mode: int = 0
    device: int = 0
    collected: CollectedMetadata = field(default_factory=CollectedMetadata, compare=False, repr=False)

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(b".")

    @property
    def is_dir(self) -> bool:
        return self.kind == KIND_DIRECTORY

    @property
    def is_executable(self) -> bool:
        return self.kind == KIND_FILE and bool(self.mode & 0o111)

    @property
    def fs_name(self) -> str:
        """Name as ``str`` with undecodable bytes kept as surrogate escapes."""
        return os.fsdecode(self.name)

    @property
    def text_name(self) -> str | None:
        """Name decoded as UTF-8, or ``None`` when it is not valid UTF-8."""
        try:
            return self.name.decode("utf-8")
        except UnicodeDecodeError:
            return None


def entry_from_stat(name: bytes, path: Path, st: os.stat_result) -> FileEntry:
    kind = kind_from_mode(st.st_mode)
    return FileEntry(
        name=name,
        path=path,
        kind=kind,
        size=0 if kind == KIND_DIRECTORY else int(st.st_size),
        mtime_ns=int(st.st_mtime_ns),
        mode=int(st.st_mode),
        device=int(st.st_dev),
    )


def scan_directory(directory: Path) -> list[FileEntry]:
    """List ``directory`` (non-recursively) in filesystem order.

    Raises ``ScanError`` when the directory itself cannot be listed. Children
    whose ``lstat`` fails are skipped.
    """
    entries: list[FileEntry] = []
    try:
        with os.scandir(os.fsencode(directory)) as children:
            for child in children:
                try:
                    st = child.stat(follow_symlinks=False)
                except OSError as exc:
                    logger.debug("Cannot stat %r: %s", child.path, exc)
                    continue
                entries.append(entry_from_stat(child.name, Path(os.fsdecode(child.path)), st))
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise ScanError(f"{directory}: {reason}") from exc

    logger.debug("Scanned %s: %d entries", directory, len(entries))
    return entries


__all__ = [
    "KIND_FILE",
    "KIND_DIRECTORY",
    "KIND_SYMLINK",
    "KIND_FIFO",
    "KIND_SOCKET",
    "KIND_BLOCK_DEVICE",
    "KIND_CHAR_DEVICE",
    "ENTRY_KINDS",
    "REASON_NOT_REQUESTED",
    "REASON_NOT_DIRECTORY",
    "REASON_TIMEOUT",
    "REASON_FAILED",
    "REASON_NO_REPOSITORY",
    "REASON_UNCHANGED",
    "GitChange",
    "CollectedMetadata",
    "FileEntry",
    "kind_from_mode",
    "entry_from_stat",
    "scan_directory",
]
