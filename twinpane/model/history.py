"""Visited-directory history with a movable cursor."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class HistoryEntry:
    directory: Path
    selected: Path | None = None

    def label(self) -> str:
        if self.selected is None:
            return str(self.directory)
        return f"{self.directory}  ({self.selected.name})"


class History:
    """Stack of ``(directory, selected entry)`` pairs.

    ``index`` is the current position; moving back only moves the cursor and
    the next push drops every entry after it.
    """

    def __init__(self) -> None:
        self.content: list[HistoryEntry] = []
        self.index = 0

    def __len__(self) -> int:
        return len(self.content)

    def is_empty(self) -> bool:
        return not self.content

    def push(self, directory: Path, selected: Path | None = None) -> None:
        """Record a visit; an identical pair already in the stack is not added again."""
        entry = HistoryEntry(directory, selected)
        if entry in self.content:
            self.index = self.content.index(entry)
            return
        if self.content and self.index < len(self.content) - 1:
            self.drop_queue()
        self.content.append(entry)
        self.index = len(self.content) - 1

    def drop_queue(self) -> None:
        """Truncate the entries after the current index."""
        if not self.content:
            return
        del self.content[self.index + 1 :]

    def back(self) -> HistoryEntry | None:
        """Move the cursor one step back and return the entry there."""
        if self.index <= 0 or not self.content:
            return None
        self.index -= 1
        return self.content[self.index]

    def selected(self) -> HistoryEntry | None:
        if not self.content:
            return None
        return self.content[self.index]

    def select_index(self, index: int) -> None:
        if self.content:
            self.index = max(0, min(index, len(self.content) - 1))

    def select_next(self) -> None:
        self.select_index(self.index + 1)

    def select_prev(self) -> None:
        self.select_index(self.index - 1)

    def labels(self) -> list[str]:
        return [entry.label() for entry in self.content]
