"""Concurrent metadata collection bounded by one shared deadline.

Tree walks (disk usage, deep modification time) and the git diff query run
as jobs on a pool of daemon worker threads. Workers only store results on
their own :class:`Job`; results are copied onto entries by the caller thread
at :meth:`CollectionBatch.finish`, so anything that completes after the
deadline is ignored. Jobs still running at that point are left behind and
never joined.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from queue import Queue

from .entries import (
    REASON_FAILED,
    REASON_NO_REPOSITORY,
    REASON_NOT_DIRECTORY,
    REASON_TIMEOUT,
    REASON_UNCHANGED,
    FileEntry,
    GitChange,
)
from .gitdiff import run_git_diff
from .treeinfo import TreeInfo, read_tree_info

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 0.1


def default_worker_count() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class Job:
    """One unit of background work and its outcome."""

    def __init__(self, name: str, fn: Callable[..., object], *args: object) -> None:
        self.name = name
        self._fn = fn
        self._args = args
        self._done = threading.Event()
        self.result: object = None
        self.error: BaseException | None = None

    def run(self) -> None:
        try:
            self.result = self._fn(*self._args)
        except Exception as exc:
            self.error = exc
            logger.debug("Job %s failed: %s", self.name, exc)
        finally:
            self._done.set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, deadline: float | None, clock: Callable[[], float] = time.monotonic) -> bool:
        """Block until the job finishes or ``deadline`` passes."""
        if deadline is None:
            self._done.wait()
            return True
        return self._done.wait(max(0.0, deadline - clock()))


class WorkerPool:
    """Fixed-size pool of daemon threads fed from a queue.

    Threads are started on demand up to ``size``. :meth:`close` asks idle
    workers to exit; busy workers exit after their current job.
    """

    def __init__(self, size: int | None = None, name: str = "summer-collector") -> None:
        self.size = max(1, size if size is not None else default_worker_count())
        self.name = name
        self._queue: Queue[Job | None] = Queue()
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def _worker(self) -> None:
        while True:
            job = self._queue.get()
            if job is None:
                return
            job.run()

    def submit(self, job: Job) -> Job:
        self._queue.put(job)
        with self._lock:
            if len(self._threads) < self.size:
                worker = threading.Thread(
                    target=self._worker,
                    name=f"{self.name}-{len(self._threads)}",
                    daemon=True,
                )
                self._threads.append(worker)
                worker.start()
        return job

    def close(self) -> None:
        with self._lock:
            for _thread in self._threads:
                self._queue.put(None)


class CollectionBatch:
    """Collection jobs for one scanned directory sharing a single deadline.

    The deadline starts when the batch is created. ``timeout=None`` waits for
    every job.
    """

    def __init__(
        self,
        directory: Path,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        *,
        pool: WorkerPool | None = None,
        clock: Callable[[], float] = time.monotonic,
        git_runner: Callable[[Path, float | None], dict[bytes, GitChange] | None] | None = None,
        tree_reader: Callable[[Path], TreeInfo | None] | None = None,
    ) -> None:
        self.directory = directory
        self.timeout = timeout
        self._clock = clock
        self.deadline = None if timeout is None else clock() + timeout
        self._pool = pool if pool is not None else WorkerPool()
        self._git_runner = git_runner if git_runner is not None else run_git_diff
        self._tree_reader = tree_reader if tree_reader is not None else read_tree_info
        self._git_job: Job | None = None
        self._git_resolved = False
        self._git_changes: dict[bytes, GitChange] | None = None
        self._git_reason: str | None = None
        self._tree_jobs: list[tuple[FileEntry, Job, bool, bool]] = []
        self._finished = False

    def start_git(self) -> None:
        if self._git_job is not None:
            return
        job = Job("git-diff", self._git_runner, self.directory, self.timeout)
        self._git_job = self._pool.submit(job)

    def git_changes(self) -> dict[bytes, GitChange] | None:
        """Wait (up to the deadline) for the git query and return its result."""
        if self._git_resolved:
            return self._git_changes
        job = self._git_job
        if job is None:
            return None
        if not job.wait(self.deadline, self._clock):
            logger.debug("git diff missed the collection deadline in %s", self.directory)
            self._git_reason = REASON_TIMEOUT
        elif job.error is not None:
            self._git_reason = REASON_FAILED
        elif job.result is None:
            self._git_reason = REASON_NO_REPOSITORY
        else:
            self._git_changes = job.result  # type: ignore[assignment]
        self._git_resolved = True
        return self._git_changes

    def start_tree(self, entries: Iterable[FileEntry], *, disk_usage: bool, deep_mtime: bool) -> None:
        """Queue one tree walk per directory entry.

        Non-directories get their deep modification time from their own
        ``mtime`` and are marked as having no disk usage.
        """
        if not (disk_usage or deep_mtime):
            return
        for entry in entries:
            if not entry.is_dir:
                if disk_usage:
                    entry.collected.mark_absent("disk_usage", REASON_NOT_DIRECTORY)
                if deep_mtime:
                    entry.collected.fill("deep_mtime_ns", entry.mtime_ns)
                continue
            job = Job(f"tree:{entry.fs_name}", self._tree_reader, entry.path)
            self._tree_jobs.append((entry, self._pool.submit(job), disk_usage, deep_mtime))

    def apply_git(self, entries: Iterable[FileEntry]) -> None:
        if self._git_job is None:
            return
        changes = self.git_changes()
        for entry in entries:
            if changes is None:
                entry.collected.mark_absent("git_change", self._git_reason or REASON_FAILED)
                continue
            change = changes.get(entry.name)
            if change is None:
                entry.collected.mark_absent("git_change", REASON_UNCHANGED)
            else:
                entry.collected.fill("git_change", change)

    def finish(self) -> None:
        """Apply every tree result available at the deadline."""
        if self._finished:
            return
        self._finished = True
        late = 0
        for entry, job, want_usage, want_deep in self._tree_jobs:
            if not job.wait(self.deadline, self._clock):
                reason = REASON_TIMEOUT
                late += 1
            elif job.error is not None or job.result is None:
                reason = REASON_FAILED
            else:
                info: TreeInfo = job.result  # type: ignore[assignment]
                if want_usage:
                    entry.collected.fill("disk_usage", info.disk_usage)
                if want_deep:
                    entry.collected.fill("deep_mtime_ns", info.deep_mtime_ns)
                continue
            if want_usage:
                entry.collected.mark_absent("disk_usage", reason)
            if want_deep:
                entry.collected.mark_absent("deep_mtime_ns", reason)
        if late:
            logger.debug("%d tree walk(s) missed the collection deadline in %s", late, self.directory)
        self._pool.close()


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "default_worker_count",
    "Job",
    "WorkerPool",
    "CollectionBatch",
]
