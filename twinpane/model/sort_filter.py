"""Sort order and filter rules applied to directory listings."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

from .fileinfo import FileInfo


class SortBy(Enum):
    KIND = "k"
    NAME = "n"
    DATE = "m"
    SIZE = "s"
    EXTENSION = "e"


@dataclass(frozen=True)
class SortKind:
    """Sort key plus direction, updated from single characters."""

    sort_by: SortBy = SortBy.KIND
    reverse: bool = False

    def update_from_char(self, char: str) -> SortKind:
        """Return the order selected by ``char``.

        Lowercase letters sort ascending, uppercase descending, ``r``/``R``
        flips the current direction. Unknown characters leave it unchanged.
        """
        if char in {"r", "R"}:
            return replace(self, reverse=not self.reverse)
        try:
            sort_by = SortBy(char.lower())
        except ValueError:
            return self
        return SortKind(sort_by=sort_by, reverse=char.isupper())

    def _key(self, info: FileInfo) -> tuple:
        name = info.filename.casefold()
        if self.sort_by is SortBy.NAME:
            return (name,)
        if self.sort_by is SortBy.DATE:
            return (info.mtime, name)
        if self.sort_by is SortBy.SIZE:
            return (info.size, name)
        if self.sort_by is SortBy.EXTENSION:
            return (info.extension, name)
        return (0 if info.is_dir else 1, info.kind.sort_rank, name)

    def sort(self, files: Iterable[FileInfo]) -> list[FileInfo]:
        return sorted(files, key=self._key, reverse=self.reverse)

    def describe(self) -> str:
        arrow = "desc" if self.reverse else "asc"
        return f"{self.sort_by.name.lower()} {arrow}"


class FilterBy(Enum):
    ALL = "a"
    DIRECTORY = "d"
    EXTENSION = "e"
    NAME = "n"


@dataclass(frozen=True)
class FilterKind:
    """Which entries of a listing are kept."""

    by: FilterBy = FilterBy.ALL
    value: str = ""

    @classmethod
    def from_input(cls, text: str) -> FilterKind:
        """Parse ``"d"``, ``"e <ext>"``, ``"n <regex>"``; anything else keeps all.

        An unparsable name regex also falls back to keeping everything.
        """
        words = text.split(maxsplit=1)
        if not words:
            return cls()
        head = words[0]
        rest = words[1].strip() if len(words) > 1 else ""
        if head == "d":
            return cls(FilterBy.DIRECTORY)
        if head == "e" and rest:
            return cls(FilterBy.EXTENSION, rest.lstrip(".").lower())
        if head == "n" and rest:
            try:
                re.compile(rest)
            except re.error:
                return cls()
            return cls(FilterBy.NAME, rest)
        return cls()

    def matches(self, info: FileInfo) -> bool:
        if self.by is FilterBy.DIRECTORY:
            return info.is_dir
        if self.by is FilterBy.EXTENSION:
            return info.extension == self.value
        if self.by is FilterBy.NAME:
            return re.search(self.value, info.filename) is not None
        return True

    def describe(self) -> str:
        if self.by is FilterBy.ALL:
            return ""
        if self.by is FilterBy.DIRECTORY:
            return "dirs"
        return f"{self.by.name.lower()}:{self.value}"
