"""Small navigable lists shown by the navigate menus."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

T = TypeVar("T")


def index_from_a(char: str) -> int | None:
    """Map ``a``..``z`` to ``0``..``25``; other characters give ``None``."""
    if len(char) == 1 and "a" <= char <= "z":
        return ord(char) - ord("a")
    return None


class SelectableList(Generic[T]):
    """Items plus a clamped cursor."""

    def __init__(self, content: Iterable[T] = ()) -> None:
        self.content: list[T] = list(content)
        self.index = 0

    def __len__(self) -> int:
        return len(self.content)

    def is_empty(self) -> bool:
        return not self.content

    def set_content(self, content: Iterable[T]) -> None:
        self.content = list(content)
        self.index = max(0, min(self.index, len(self.content) - 1))

    def selected(self) -> T | None:
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
        return [str(item) for item in self.content]


def is_mark_key(char: str) -> bool:
    return len(char) == 1 and char.isprintable() and not char.isspace()


class Marks(SelectableList[tuple[str, Path]]):
    """Char to path bookmarks, persisted through the injected ``save``."""

    def __init__(
        self,
        marks: dict[str, Path] | None = None,
        save: Callable[[dict[str, Path]], None] | None = None,
    ) -> None:
        super().__init__()
        self._save = save
        self._marks: dict[str, Path] = {}
        for key, path in (marks or {}).items():
            if is_mark_key(key):
                self._marks[key] = path
        self._sync()

    def _sync(self) -> None:
        self.set_content(sorted(self._marks.items()))

    def get(self, char: str) -> Path | None:
        return self._marks.get(char)

    def set(self, char: str, path: Path) -> bool:
        """Bind ``char`` to ``path``; invalid keys are refused."""
        if not is_mark_key(char):
            return False
        self._marks[char] = path
        self._sync()
        if self._save is not None:
            self._save(dict(self._marks))
        return True

    def as_dict(self) -> dict[str, Path]:
        return dict(self._marks)

    def labels(self) -> list[str]:
        return [f"{key}  {path}" for key, path in self.content]


def _mount_points() -> list[Path]:
    try:
        with open("/proc/mounts", encoding="utf-8") as handle:
            lines = handle.readlines()
    except OSError:
        return []
    points: list[Path] = []
    for line in lines:
        parts = line.split()
        if len(parts) < 2:
            continue
        mount_point = parts[1].replace("\\040", " ")
        if mount_point.startswith(("/media/", "/mnt/", "/run/media/")):
            points.append(Path(mount_point))
    return points


class Shortcuts(SelectableList[Path]):
    """Frequent destinations: home, root, start dir, mount points, config extras."""

    @classmethod
    def build(cls, start_dir: Path, config_dir: Path, extra: Iterable[Path] = ()) -> Shortcuts:
        candidates = [Path.home(), Path("/"), start_dir, config_dir, *_mount_points(), *extra]
        seen: set[Path] = set()
        content: list[Path] = []
        for path in candidates:
            if path in seen or not path.exists():
                continue
            seen.add(path)
            content.append(path)
        return cls(content)

    def refresh_mounts(self) -> None:
        for path in _mount_points():
            if path not in self.content:
                self.content.append(path)


@dataclass(frozen=True)
class ContextAction:
    label: str
    action: str

    def __str__(self) -> str:
        return self.label

DEFAULT_CONTEXT_ACTIONS = (
    ContextAction("Open", "OpenFile"),
    ContextAction("Rename", "Rename"),
    ContextAction("Delete", "Delete"),
    ContextAction("Copy flagged here", "CopyPaste"),
    ContextAction("Move flagged here", "CutPaste"),
    ContextAction("Flag all", "FlagAll"),
    ContextAction("Clear flags", "ClearFlags"),
    ContextAction("Toggle hidden files", "ToggleHidden"),
    ContextAction("Toggle metadata", "ToggleMetadata"),
    ContextAction("Change permissions", "Chmod"),
    ContextAction("Bulk rename flagged", "BulkRename"),
    ContextAction("Open a shell here", "Shell"),
)


class ContextActions(SelectableList[ContextAction]):
    def __init__(self, content: Iterable[ContextAction] = DEFAULT_CONTEXT_ACTIONS) -> None:
        super().__init__(content)


class Picker(SelectableList[str]):
    """Generic chooser; ``caller`` says what the chosen item is used for."""

    def __init__(self) -> None:
        super().__init__()
        self.caller = ""
        self.description = ""

    def set(self, caller: str, description: str, content: Iterable[str]) -> None:
        self.caller = caller
        self.description = description
        self.content = list(content)
        self.index = 0

    def clear(self) -> None:
        self.set("", "", ())


def expand_home(text: str) -> Path:
    return Path(os.path.expanduser(text))
