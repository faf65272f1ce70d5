"""Immutable metadata snapshots for directory entries."""

from __future__ import annotations

import grp
import os
import pwd
import stat
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path


class FileKind(Enum):
    DIRECTORY = "d"
    FILE = "."
    SYMLINK = "l"
    BROKEN_SYMLINK = "L"
    SOCKET = "s"
    FIFO = "p"
    CHAR_DEVICE = "c"
    BLOCK_DEVICE = "b"

    @property
    def sort_rank(self) -> int:
        """Directories first, then regular files, then everything else."""
        if self is FileKind.DIRECTORY:
            return 0
        if self is FileKind.FILE:
            return 1
        return 2


def _kind_from_mode(path: Path, mode: int) -> FileKind:
    if stat.S_ISDIR(mode):
        return FileKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return FileKind.SYMLINK if path.exists() else FileKind.BROKEN_SYMLINK
    if stat.S_ISSOCK(mode):
        return FileKind.SOCKET
    if stat.S_ISFIFO(mode):
        return FileKind.FIFO
    if stat.S_ISCHR(mode):
        return FileKind.CHAR_DEVICE
    if stat.S_ISBLK(mode):
        return FileKind.BLOCK_DEVICE
    return FileKind.FILE


@lru_cache(maxsize=256)
def user_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


@lru_cache(maxsize=256)
def group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def human_size(size: int) -> str:
    """Format ``size`` bytes with a one-letter binary unit suffix."""
    value = float(size)
    for unit in ("B", "K", "M", "G", "T"):
        if value < 1024 or unit == "T":
            if unit == "B":
                return f"{int(value)}{unit}"
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{size}B"


@dataclass(frozen=True)
class FileInfo:
    """Metadata captured once at listing time."""

    path: Path
    kind: FileKind
    size: int
    mode: int
    owner: str
    group: str
    mtime: float

    @classmethod
    def from_path(cls, path: Path) -> FileInfo:
        """Snapshot ``path`` with ``lstat`` so symlinks are described, not followed."""
        st = os.lstat(path)
        return cls(
            path=path,
            kind=_kind_from_mode(path, st.st_mode),
            size=st.st_size,
            mode=st.st_mode,
            owner=user_name(st.st_uid),
            group=group_name(st.st_gid),
            mtime=st.st_mtime,
        )

    @property
    def filename(self) -> str:
        return self.path.name or str(self.path)

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".").lower()

    @property
    def is_dir(self) -> bool:
        if self.kind is FileKind.DIRECTORY:
            return True
        return self.kind is FileKind.SYMLINK and self.path.is_dir()

    @property
    def permissions(self) -> str:
        """``ls -l`` style permission string, e.g. ``drwxr-xr-x``."""
        return stat.filemode(self.mode)

    def format_line(self, show_metadata: bool) -> str:
        if not show_metadata:
            return self.filename
        return (
            f"{self.permissions} {self.owner:<8.8} {self.group:<8.8} "
            f"{human_size(self.size):>7} {self.filename}"
        )
