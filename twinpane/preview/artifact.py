"""Immutable preview artifacts produced by the preview worker."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class PreviewKind(Enum):
    TEXT = "text"
    TREE = "tree"
    COMMAND = "command"
    EMPTY = "empty"


@dataclass(frozen=True)
class Preview:
    """Pre-rendered lines plus what produced them."""

    kind: PreviewKind
    lines: tuple[str, ...] = field(default_factory=tuple)
    title: str = ""
    path: Path | None = None

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return self.kind is PreviewKind.EMPTY

    @classmethod
    def empty(cls) -> Preview:
        return EMPTY_PREVIEW

    @classmethod
    def text(cls, path: Path, lines: list[str], title: str = "") -> Preview:
        return cls(PreviewKind.TEXT, tuple(lines), title or path.name, path)

    @classmethod
    def tree(cls, path: Path, lines: list[str]) -> Preview:
        return cls(PreviewKind.TREE, tuple(lines), str(path), path)

    @classmethod
    def command_output(cls, command: str, output: str, path: Path | None = None) -> Preview:
        return cls(PreviewKind.COMMAND, tuple(output.splitlines()), command, path)

    @classmethod
    def unreadable(cls, path: Path, reason: str) -> Preview:
        """Artifact shown when no renderer could handle ``path``."""
        return cls(PreviewKind.EMPTY, (f"unreadable: {reason}",), path.name, path)


EMPTY_PREVIEW = Preview(PreviewKind.EMPTY)
