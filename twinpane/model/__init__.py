"""Pane and menu data model: listings, windows, history, flags, and lists."""

from .content_window import ContentWindow
from .fileinfo import FileInfo, FileKind
from .flagged import Flagged
from .history import History
from .menu import MenuHolder
from .session import Session
from .sort_filter import FilterKind, SortKind
from .tab import Tab

__all__ = [
    "ContentWindow",
    "FileInfo",
    "FileKind",
    "FilterKind",
    "Flagged",
    "History",
    "MenuHolder",
    "Session",
    "SortKind",
    "Tab",
]
