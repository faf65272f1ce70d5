"""Completion propositions for the completed input modes."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from .fuzzy import fuzzy_match_labels


def complete_directory(input_string: str, current_dir: Path) -> list[str]:
    """Directories matching ``input_string``, relative input resolved in ``current_dir``."""
    expanded = os.path.expanduser(input_string)
    if not expanded:
        parent, prefix = current_dir, ""
    elif expanded.endswith("/"):
        parent, prefix = Path(expanded), ""
    else:
        candidate = Path(expanded)
        parent, prefix = candidate.parent, candidate.name
    if not parent.is_absolute():
        parent = current_dir / parent
    try:
        children = sorted(entry.name for entry in os.scandir(parent) if entry.is_dir())
    except OSError:
        return []
    return [str(parent / name) for name in children if name.startswith(prefix)]


def complete_filename(input_string: str, names: Iterable[str]) -> list[str]:
    if not input_string:
        return list(names)
    return [label for _, label, _ in fuzzy_match_labels(input_string, list(names), limit=200)]


def complete_exec(input_string: str) -> list[str]:
    """Executables from ``$PATH`` whose name starts with the typed text."""
    if not input_string:
        return []
    found: set[str] = set()
    for directory in os.environ.get("PATH", "").split(os.pathsep):
        if not directory:
            continue
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.name.startswith(input_string) and os.access(entry.path, os.X_OK):
                        found.add(entry.name)
        except OSError:
            continue
    return sorted(found)


def complete_action(input_string: str, action_names: Iterable[str]) -> list[str]:
    folded = input_string.casefold()
    return [name for name in action_names if name.casefold().startswith(folded)]


class Completion:
    """Ranked propositions with a cursor."""

    def __init__(self) -> None:
        self.proposals: list[str] = []
        self.index = 0

    def __len__(self) -> int:
        return len(self.proposals)

    def is_empty(self) -> bool:
        return not self.proposals

    def reset(self) -> None:
        self.proposals = []
        self.index = 0

    def update(self, proposals: list[str]) -> None:
        self.proposals = proposals
        self.index = 0

    def current_proposition(self) -> str:
        if not self.proposals:
            return ""
        return self.proposals[self.index]

    def select_next(self) -> None:
        if self.proposals:
            self.index = (self.index + 1) % len(self.proposals)

    def select_prev(self) -> None:
        if self.proposals:
            self.index = (self.index - 1) % len(self.proposals)

    def select_index(self, index: int) -> None:
        if self.proposals:
            self.index = max(0, min(index, len(self.proposals) - 1))
