"""Sequential copy/move jobs with a shared progress buffer.

At most one job runs at a time. The worker reports byte progress through
``ProgressBuffer`` and always emits ``FileCopiedEvent`` when it ends; the
foreground then calls ``on_job_done`` to start the next queued job.
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..errors import ChannelClosed
from ..events import FileCopiedEvent, FmEvent

LOGGER = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


class CopyMode(Enum):
    COPY = "copy"
    MOVE = "move"


@dataclass(frozen=True)
class CopyMoveJob:
    sources: tuple[Path, ...]
    destination: Path
    mode: CopyMode

    def describe(self) -> str:
        verb = "copying" if self.mode is CopyMode.COPY else "moving"
        return f"{verb} {len(self.sources)} item(s) to {self.destination}"


class SubmitOutcome(Enum):
    MOVED = "moved"
    STARTED = "started"
    QUEUED = "queued"


@dataclass(frozen=True)
class Progress:
    label: str
    percent: int
    width: int

    def bar(self) -> str:
        """``[#####     ]  42% label`` sized for ``width`` columns."""
        inner = max(4, min(40, self.width // 3))
        filled = inner * self.percent // 100
        return f"[{'#' * filled}{' ' * (inner - filled)}] {self.percent:>3}% {self.label}"


class ProgressBuffer:
    """Lock-guarded cell written by the job worker and read every frame."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._progress: Progress | None = None

    def start(self, label: str, width: int) -> None:
        with self._lock:
            self._progress = Progress(label=label, percent=0, width=width)

    def update(self, percent: int) -> None:
        with self._lock:
            if self._progress is None:
                return
            self._progress = Progress(self._progress.label, max(0, min(100, percent)), self._progress.width)

    def clear(self) -> None:
        with self._lock:
            self._progress = None

    def snapshot(self) -> Progress | None:
        with self._lock:
            return self._progress

    def is_idle(self) -> bool:
        return self.snapshot() is None


def same_volume(source: Path, destination: Path) -> bool:
    """Return whether ``source`` and directory ``destination`` share a device."""
    try:
        return os.lstat(source).st_dev == os.stat(destination).st_dev
    except OSError:
        return False


def free_target(destination: Path, name: str) -> Path:
    """``destination / name`` with ``_`` appended until nothing exists there."""
    target = destination / name
    while os.path.lexists(target):
        name += "_"
        target = destination / name
    return target


def total_size(paths: Iterable[Path]) -> int:
    total = 0
    for path in paths:
        try:
            if path.is_dir() and not path.is_symlink():
                for dirpath, _dirnames, filenames in os.walk(path):
                    for filename in filenames:
                        try:
                            total += os.lstat(os.path.join(dirpath, filename)).st_size
                        except OSError:
                            continue
            else:
                total += os.lstat(path).st_size
        except OSError:
            continue
    return total


def percent_of(copied: int, total: int) -> int:
    if total <= 0:
        return 0
    return min(100, 100 * copied // total)


class _JobRunner:
    """Performs one job on the worker thread."""

    def __init__(self, job: CopyMoveJob, progress: ProgressBuffer, same_volume: Callable[[Path, Path], bool]) -> None:
        self.job = job
        self.progress = progress
        self.same_volume = same_volume
        self.total = total_size(job.sources)
        self.copied = 0
        self.failures = 0

    def _advance(self, size: int) -> None:
        self.copied += size
        self.progress.update(percent_of(self.copied, self.total))

    def _copy_file(self, source: Path, target: Path) -> None:
        if source.is_symlink():
            os.symlink(os.readlink(source), target)
            return
        with source.open("rb") as src, target.open("wb") as dst:
            while True:
                chunk = src.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                dst.write(chunk)
                self._advance(len(chunk))
        shutil.copystat(source, target)

    def _copy_tree(self, source: Path, target: Path) -> bool:
        """Copy ``source`` into ``target``; return ``False`` when something failed."""
        ok = True
        target.mkdir()
        for entry in sorted(source.iterdir()):
            child = target / entry.name
            try:
                if entry.is_dir() and not entry.is_symlink():
                    ok = self._copy_tree(entry, child) and ok
                else:
                    self._copy_file(entry, child)
            except OSError as exc:
                LOGGER.warning("failed to copy %s: %s", entry, exc)
                self.failures += 1
                ok = False
        try:
            shutil.copystat(source, target)
        except OSError as exc:
            LOGGER.debug("copystat %s: %s", target, exc)
        return ok

    def _transfer(self, source: Path) -> None:
        target = free_target(self.job.destination, source.name)
        moving = self.job.mode is CopyMode.MOVE
        if moving and self.same_volume(source, self.job.destination):
            os.rename(source, target)
            self._advance(total_size([target]))
            return
        if source.is_dir() and not source.is_symlink():
            ok = self._copy_tree(source, target)
        else:
            self._copy_file(source, target)
            ok = True
        if moving and ok:
            if source.is_dir() and not source.is_symlink():
                shutil.rmtree(source)
            else:
                source.unlink()

    def run(self) -> None:
        for source in self.job.sources:
            try:
                self._transfer(source)
            except OSError as exc:
                LOGGER.warning("failed to %s %s: %s", self.job.mode.value, source, exc)
                self.failures += 1
        LOGGER.info("%s finished, %d failure(s)", self.job.describe(), self.failures)


class CopyMoveQueue:
    """Runs submitted jobs one at a time in submission order."""

    def __init__(
        self,
        send: Callable[[FmEvent], None],
        progress: ProgressBuffer | None = None,
        same_volume: Callable[[Path, Path], bool] = same_volume,
    ) -> None:
        self._send = send
        self.progress = progress if progress is not None else ProgressBuffer()
        self._same_volume = same_volume
        self.pending: deque[CopyMoveJob] = deque()
        self.running: CopyMoveJob | None = None
        self._thread: threading.Thread | None = None

    def is_idle(self) -> bool:
        return self.running is None and not self.pending

    def is_simple_move(self, job: CopyMoveJob) -> bool:
        return (
            job.mode is CopyMode.MOVE
            and len(job.sources) == 1
            and self._same_volume(job.sources[0], job.destination)
        )

    def submit(self, sources: Iterable[Path], destination: Path, mode: CopyMode, width: int) -> SubmitOutcome:
        """Move in place, start, or queue a job.

        The same-volume single-file move renames synchronously and raises
        ``OSError`` on failure; nothing is queued in that case.
        """
        job = CopyMoveJob(sources=tuple(sources), destination=destination, mode=mode)
        if self.is_simple_move(job):
            source = job.sources[0]
            target = free_target(destination, source.name)
            os.rename(source, target)
            LOGGER.info("moved %s -> %s", source, target)
            return SubmitOutcome.MOVED
        if self.running is None:
            self._start(job, width)
            return SubmitOutcome.STARTED
        self.pending.append(job)
        LOGGER.info("queued: %s (%d waiting)", job.describe(), len(self.pending))
        return SubmitOutcome.QUEUED

    def _start(self, job: CopyMoveJob, width: int) -> None:
        self.running = job
        self.progress.start(job.describe(), width)
        LOGGER.info("start: %s", job.describe())
        self._thread = threading.Thread(
            target=self._worker,
            args=(job,),
            name="twinpane-copy",
            daemon=True,
        )
        self._thread.start()

    def _worker(self, job: CopyMoveJob) -> None:
        try:
            _JobRunner(job, self.progress, self._same_volume).run()
        except Exception:
            LOGGER.exception("copy worker crashed on %s", job.describe())
        try:
            self._send(FileCopiedEvent(job))
        except ChannelClosed:
            LOGGER.info("event channel closed, dropping completion of %s", job.describe())

    def on_job_done(self, width: int) -> CopyMoveJob | None:
        """Finish the running job and start the next one with the current ``width``."""
        finished = self.running
        self.running = None
        self.progress.clear()
        if self.pending:
            self._start(self.pending.popleft(), width)
        return finished

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
