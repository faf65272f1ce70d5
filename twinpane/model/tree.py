"""Lazily expanded directory tree shown in ``DisplayMode.TREE``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .directory import scan_directory
from .fileinfo import FileInfo
from .sort_filter import FilterKind, SortKind

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeLine:
    """One visible row of the flattened tree."""

    info: FileInfo
    depth: int
    expanded: bool

    @property
    def path(self) -> Path:
        return self.info.path

    def prefix(self) -> str:
        if self.depth == 0:
            return ""
        marker = "▾ " if self.expanded else ("▸ " if self.info.is_dir else "  ")
        return "  " * (self.depth - 1) + marker


class Tree:
    """Flattened tree whose directories are read only once expanded."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.expanded: set[Path] = {root}
        self.lines: list[TreeLine] = []
        self.index = 0
        self._show_hidden = False
        self._sort_kind = SortKind()
        self._filter_kind = FilterKind()

    def build(
        self,
        root: Path,
        *,
        show_hidden: bool,
        sort_kind: SortKind,
        filter_kind: FilterKind,
    ) -> None:
        """Root the tree at ``root`` with only the root expanded."""
        self.root = root
        self.expanded = {root}
        self._show_hidden = show_hidden
        self._sort_kind = sort_kind
        self._filter_kind = filter_kind
        self.index = 0
        self._flatten()

    def _children(self, directory: Path) -> list[FileInfo]:
        try:
            return scan_directory(
                directory,
                show_hidden=self._show_hidden,
                sort_kind=self._sort_kind,
                filter_kind=self._filter_kind,
            )
        except OSError as exc:
            LOGGER.warning("cannot expand %s: %s", directory, exc)
            return []

    def _flatten(self) -> None:
        lines: list[TreeLine] = [TreeLine(FileInfo.from_path(self.root), 0, True)]
        stack: list[tuple[Path, int]] = [(self.root, 1)]
        # Expanded children are pushed in reverse so they are read in listing order.
        while stack:
            directory, depth = stack.pop()
            children = self._children(directory)
            pending = [TreeLine(info, depth, info.path in self.expanded and info.is_dir) for info in children]
            insert_at = self._insert_position(lines, directory)
            lines[insert_at:insert_at] = pending
            for line in reversed(pending):
                if line.expanded:
                    stack.append((line.path, depth + 1))
        self.lines = lines
        self.index = max(0, min(self.index, len(self.lines) - 1))

    @staticmethod
    def _insert_position(lines: list[TreeLine], directory: Path) -> int:
        for idx, line in enumerate(lines):
            if line.path == directory:
                return idx + 1
        return len(lines)

    def __len__(self) -> int:
        return len(self.lines)

    def selected(self) -> TreeLine | None:
        if not self.lines:
            return None
        return self.lines[self.index]

    def selected_path(self) -> Path | None:
        line = self.selected()
        return line.path if line is not None else None

    def paths(self) -> list[Path]:
        return [line.path for line in self.lines]

    def select_index(self, index: int) -> None:
        self.index = max(0, min(index, len(self.lines) - 1)) if self.lines else 0

    def select_next(self) -> None:
        self.select_index(self.index + 1)

    def select_prev(self) -> None:
        self.select_index(self.index - 1)

    def select_path(self, path: Path) -> bool:
        for idx, line in enumerate(self.lines):
            if line.path == path:
                self.index = idx
                return True
        return False

    def toggle_fold(self) -> None:
        """Expand or collapse the selected directory, keeping the selection."""
        line = self.selected()
        if line is None or not line.info.is_dir or line.depth == 0:
            return
        if line.path in self.expanded:
            self.expanded = {path for path in self.expanded if not _is_relative_to(path, line.path)}
        else:
            self.expanded.add(line.path)
        selected = line.path
        self._flatten()
        self.select_path(selected)

    def refresh(self) -> None:
        selected = self.selected_path()
        self._flatten()
        if selected is not None:
            self.select_path(selected)


def _is_relative_to(path: Path, parent: Path) -> bool:
    return path == parent or parent in path.parents
