"""Freedesktop trash: ``files/`` holds the data, ``info/`` the ``.trashinfo``."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from urllib.parse import quote, unquote

LOGGER = logging.getLogger(__name__)


def default_trash_root() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "Trash"


@dataclass(frozen=True)
class TrashEntry:
    name: str
    original_path: Path
    deletion_date: str

    def __str__(self) -> str:
        return f"{self.original_path}  {self.deletion_date}"


def parse_trash_info(name: str, path: Path) -> TrashEntry | None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return None

    original = None
    deletion_date = ""
    in_section = False
    for line in lines:
        if line.strip() == "[Trash Info]":
            in_section = True
            continue
        if not in_section or "=" not in line:
            continue
        key, value = line.split("=", 1)
        if key == "Path":
            original = Path(unquote(value))
        elif key == "DeletionDate":
            deletion_date = value

    if original is None:
        return None
    return TrashEntry(name=name, original_path=original, deletion_date=deletion_date)


class Trash:
    """One trash directory and its current entries."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else default_trash_root()
        self.files_dir = self.root / "files"
        self.info_dir = self.root / "info"
        self.entries: list[TrashEntry] = []
        self.index = 0

    def _ensure_dirs(self) -> None:
        self.files_dir.mkdir(parents=True, exist_ok=True)
        self.info_dir.mkdir(parents=True, exist_ok=True)

    def update(self) -> None:
        """Re-read the ``info`` directory; unreadable entries are skipped."""
        entries: list[TrashEntry] = []
        try:
            infos = sorted(self.info_dir.glob("*.trashinfo"))
        except OSError:
            infos = []
        for info_path in infos:
            entry = parse_trash_info(info_path.stem, info_path)
            if entry is not None:
                entries.append(entry)
        self.entries = entries
        self.index = max(0, min(self.index, len(entries) - 1))

    def __len__(self) -> int:
        return len(self.entries)

    def _free_name(self, name: str) -> str:
        candidate = name
        counter = 1
        while (self.files_dir / candidate).exists() or (self.info_dir / f"{candidate}.trashinfo").exists():
            candidate = f"{name}.{counter}"
            counter += 1
        return candidate

    def trash(self, path: Path) -> TrashEntry:
        """Move ``path`` into the trash; raises ``OSError`` on failure."""
        self._ensure_dirs()
        name = self._free_name(path.name)
        deletion_date = datetime.now().strftime("%Y-%m-%dT%H:%M:%S")
        info_path = self.info_dir / f"{name}.trashinfo"
        info_path.write_text(
            f"[Trash Info]\nPath={quote(str(path.absolute()))}\nDeletionDate={deletion_date}\n",
            encoding="utf-8",
        )
        try:
            shutil.move(str(path), str(self.files_dir / name))
        except OSError:
            info_path.unlink(missing_ok=True)
            raise
        LOGGER.info("trashed %s as %s", path, name)
        entry = TrashEntry(name=name, original_path=path.absolute(), deletion_date=deletion_date)
        self.entries.append(entry)
        return entry

    def selected(self) -> TrashEntry | None:
        if not self.entries:
            return None
        return self.entries[self.index]

    def restore(self, entry: TrashEntry) -> Path:
        """Move ``entry`` back where it came from; refuses to overwrite."""
        target = entry.original_path
        if target.exists():
            raise FileExistsError(f"cannot restore, {target} exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(self.files_dir / entry.name), str(target))
        (self.info_dir / f"{entry.name}.trashinfo").unlink(missing_ok=True)
        LOGGER.info("restored %s", target)
        self.update()
        return target

    def remove(self, entry: TrashEntry) -> None:
        """Delete ``entry`` for good."""
        data = self.files_dir / entry.name
        if data.is_dir() and not data.is_symlink():
            shutil.rmtree(data)
        elif data.exists() or data.is_symlink():
            data.unlink()
        (self.info_dir / f"{entry.name}.trashinfo").unlink(missing_ok=True)
        LOGGER.info("removed %s from trash", entry.name)
        self.update()

    def empty(self) -> None:
        for entry in list(self.entries):
            try:
                self.remove(entry)
            except OSError:
                LOGGER.exception("failed to remove %s from trash", entry.name)
        self.update()

    def select_index(self, index: int) -> None:
        if self.entries:
            self.index = max(0, min(index, len(self.entries) - 1))

    def select_next(self) -> None:
        self.select_index(self.index + 1)

    def select_prev(self) -> None:
        self.select_index(self.index - 1)

    def labels(self) -> list[str]:
        return [str(entry) for entry in self.entries]
