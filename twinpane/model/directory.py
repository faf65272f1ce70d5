"""Flat listing of one directory, sorted and filtered."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .fileinfo import FileInfo
from .sort_filter import FilterKind, SortKind

LOGGER = logging.getLogger(__name__)


def read_mtime(path: Path) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return 0.0


def scan_directory(
    path: Path,
    *,
    show_hidden: bool,
    sort_kind: SortKind,
    filter_kind: FilterKind,
) -> list[FileInfo]:
    """Snapshot every entry of ``path`` that passes the filter, sorted.

    Entries that vanish or cannot be stat'ed between ``scandir`` and ``lstat``
    are logged and skipped.
    """
    infos: list[FileInfo] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if not show_hidden and entry.name.startswith("."):
                continue
            try:
                info = FileInfo.from_path(Path(entry.path))
            except OSError as exc:
                LOGGER.debug("skipping %s: %s", entry.path, exc)
                continue
            if filter_kind.matches(info):
                infos.append(info)
    return sort_kind.sort(infos)


class Directory:
    """Current listing plus the selected row."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.content: list[FileInfo] = []
        self.index = 0
        self.mtime = 0.0

    def load(
        self,
        path: Path,
        *,
        show_hidden: bool,
        sort_kind: SortKind,
        filter_kind: FilterKind,
    ) -> None:
        """Re-read ``path``; raises ``OSError`` when it cannot be listed."""
        content = scan_directory(path, show_hidden=show_hidden, sort_kind=sort_kind, filter_kind=filter_kind)
        self.path = path
        self.content = content
        self.index = 0
        self.mtime = read_mtime(path)

    def __len__(self) -> int:
        return len(self.content)

    def is_empty(self) -> bool:
        return not self.content

    def selected(self) -> FileInfo | None:
        if not self.content:
            return None
        return self.content[min(self.index, len(self.content) - 1)]

    def selected_path(self) -> Path | None:
        info = self.selected()
        return info.path if info is not None else None

    def paths(self) -> list[Path]:
        return [info.path for info in self.content]

    def select_index(self, index: int) -> None:
        if not self.content:
            self.index = 0
            return
        self.index = max(0, min(index, len(self.content) - 1))

    def select_path(self, path: Path) -> bool:
        for idx, info in enumerate(self.content):
            if info.path == path:
                self.index = idx
                return True
        return False

    def select_next(self) -> None:
        self.select_index(self.index + 1)

    def select_prev(self) -> None:
        self.select_index(self.index - 1)

    def is_stale(self) -> bool:
        """Return whether the directory changed on disk since ``load``."""
        return read_mtime(self.path) != self.mtime
