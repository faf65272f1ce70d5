"""Name search over the current listing."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern`` with smart case; raises ``re.error`` when invalid."""
    flags = 0 if any(ch.isupper() for ch in pattern) else re.IGNORECASE
    return re.compile(pattern, flags)


class Search:
    """Compiled pattern, ordered matches, and the current match index."""

    def __init__(self) -> None:
        self.pattern = ""
        self.regex: re.Pattern[str] | None = None
        self.matches: list[Path] = []
        self.index = 0

    def is_empty(self) -> bool:
        return self.regex is None

    def reset(self) -> None:
        self.pattern = ""
        self.regex = None
        self.matches = []
        self.index = 0

    def set(self, pattern: str, paths: Iterable[Path]) -> None:
        """Start a search; an empty pattern makes the search idle."""
        if not pattern:
            self.reset()
            return
        self.pattern = pattern
        self.regex = compile_pattern(pattern)
        self.update(paths)

    def update(self, paths: Iterable[Path]) -> None:
        if self.regex is None:
            return
        self.matches = [path for path in paths if self.regex.search(path.name)]
        self.index = 0

    def current(self) -> Path | None:
        if not self.matches:
            return None
        return self.matches[self.index]

    def next(self) -> Path | None:
        if not self.matches:
            return None
        self.index = (self.index + 1) % len(self.matches)
        return self.matches[self.index]

    def prev(self) -> Path | None:
        if not self.matches:
            return None
        self.index = (self.index - 1) % len(self.matches)
        return self.matches[self.index]

    def describe(self) -> str:
        if self.regex is None:
            return ""
        if not self.matches:
            return f"/{self.pattern} (no match)"
        return f"/{self.pattern} {self.index + 1}/{len(self.matches)}"
