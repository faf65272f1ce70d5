"""Cross-directory set of flagged paths, kept sorted and unique."""

from __future__ import annotations

import bisect
from collections.abc import Iterable
from pathlib import Path


class Flagged:
    """Sorted, deduplicated paths plus a cursor used by the flagged menu."""

    def __init__(self) -> None:
        self.content: list[Path] = []
        self.index = 0

    def __len__(self) -> int:
        return len(self.content)

    def __iter__(self):
        return iter(self.content)

    def __contains__(self, path: Path) -> bool:
        return self.contains(path)

    def is_empty(self) -> bool:
        return not self.content

    def contains(self, path: Path) -> bool:
        idx = bisect.bisect_left(self.content, path)
        return idx < len(self.content) and self.content[idx] == path

    def push(self, path: Path) -> None:
        idx = bisect.bisect_left(self.content, path)
        if idx < len(self.content) and self.content[idx] == path:
            return
        self.content.insert(idx, path)

    def remove(self, path: Path) -> None:
        idx = bisect.bisect_left(self.content, path)
        if idx < len(self.content) and self.content[idx] == path:
            del self.content[idx]
            self._clamp_index()

    def toggle(self, path: Path) -> None:
        if self.contains(path):
            self.remove(path)
        else:
            self.push(path)

    def extend(self, paths: Iterable[Path]) -> None:
        for path in paths:
            self.push(path)

    def replace(self, old: Path, new: Path) -> None:
        """Follow a rename: drop ``old`` and flag ``new`` instead."""
        if self.contains(old):
            self.remove(old)
            self.push(new)

    def clear(self) -> None:
        self.content.clear()
        self.index = 0

    def in_dir(self, directory: Path) -> list[Path]:
        """Flagged paths strictly inside ``directory``."""
        return [path for path in self.content if directory in path.parents]

    def selected(self) -> Path | None:
        if not self.content:
            return None
        return self.content[self.index]

    def remove_selected(self) -> None:
        path = self.selected()
        if path is not None:
            self.remove(path)

    def select_index(self, index: int) -> None:
        if self.content:
            self.index = max(0, min(index, len(self.content) - 1))

    def select_next(self) -> None:
        self.select_index(self.index + 1)

    def select_prev(self) -> None:
        self.select_index(self.index - 1)

    def _clamp_index(self) -> None:
        self.index = max(0, min(self.index, len(self.content) - 1))

    def labels(self) -> list[str]:
        return [str(path) for path in self.content]
