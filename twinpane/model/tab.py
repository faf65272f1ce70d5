"""Navigation state of one pane."""

from __future__ import annotations

import logging
from pathlib import Path

from ..modes import NOTHING, DisplayMode, MenuMode
from ..preview.artifact import EMPTY_PREVIEW, Preview
from .content_window import ContentWindow
from .directory import Directory
from .fuzzy import FuzzyFinder
from .history import History
from .search import Search
from .sort_filter import FilterKind, SortKind
from .tree import Tree

LOGGER = logging.getLogger(__name__)


class Tab:
    """Listing, modes, scroll window, history, and search of one pane.

    Two tabs are created at startup and mutated in place afterwards.
    """

    def __init__(self, path: Path, *, show_hidden: bool = False, height: int = 80) -> None:
        self.display_mode = DisplayMode.DIRECTORY
        self.menu_mode: MenuMode = NOTHING
        self.sort_kind = SortKind()
        self.filter_kind = FilterKind()
        self.show_hidden = show_hidden
        self.directory = Directory(path)
        self.tree = Tree(path)
        self.history = History()
        self.search = Search()
        self.preview: Preview = EMPTY_PREVIEW
        self.previewed_path: Path | None = None
        self.fuzzy: FuzzyFinder | None = None
        self.height = height
        self.window = ContentWindow(0, height)
        self.cd(path)

    @property
    def path(self) -> Path:
        return self.directory.path

    def _load(self, path: Path) -> None:
        self.directory.load(
            path,
            show_hidden=self.show_hidden,
            sort_kind=self.sort_kind,
            filter_kind=self.filter_kind,
        )
        if self.display_mode is DisplayMode.TREE:
            self._build_tree(path)

    def _build_tree(self, path: Path) -> None:
        self.tree.build(
            path,
            show_hidden=self.show_hidden,
            sort_kind=self.sort_kind,
            filter_kind=self.filter_kind,
        )

    def cd(self, path: Path, select: Path | None = None, *, record: bool = True) -> None:
        """Move to ``path``; raises ``OSError`` and keeps the old listing on failure."""
        path = path.expanduser()
        if not path.is_absolute():
            path = self.path / path
        if not path.is_dir():
            raise NotADirectoryError(f"not a directory: {path}")
        self._load(path)
        if select is not None:
            self.select_path(select)
        if record:
            self.history.push(path, select)
        self.search.reset()
        self.window.reset(len(self))
        self.window.scroll_to(self.index)

    def refresh_view(self) -> None:
        """Reload the current directory keeping the selected entry when possible."""
        selected = self.selected_path()
        self._load(self.path)
        if selected is not None:
            self.select_path(selected)
        self.search.update(self.list_paths())
        self.window.reset(len(self))
        self.window.scroll_to(self.index)

    def refresh_if_changed(self) -> bool:
        if not self.directory.is_stale():
            return False
        self.refresh_view()
        return True

    def __len__(self) -> int:
        if self.display_mode is DisplayMode.TREE:
            return len(self.tree)
        if self.display_mode is DisplayMode.PREVIEW:
            return len(self.preview)
        if self.display_mode is DisplayMode.FUZZY:
            return len(self.fuzzy.matches) if self.fuzzy is not None else 0
        return len(self.directory)

    @property
    def index(self) -> int:
        if self.display_mode is DisplayMode.TREE:
            return self.tree.index
        if self.display_mode is DisplayMode.PREVIEW:
            return self.window.top
        if self.display_mode is DisplayMode.FUZZY:
            return self.fuzzy.index if self.fuzzy is not None else 0
        return self.directory.index

    def list_paths(self) -> list[Path]:
        if self.display_mode is DisplayMode.TREE:
            return self.tree.paths()
        return self.directory.paths()

    def selected_path(self) -> Path | None:
        """Path the pane currently points at, whatever the display mode."""
        if self.display_mode is DisplayMode.TREE:
            return self.tree.selected_path()
        if self.display_mode is DisplayMode.PREVIEW:
            return self.previewed_path
        if self.display_mode is DisplayMode.FUZZY:
            return self.fuzzy.selected_path() if self.fuzzy is not None else None
        return self.directory.selected_path()

    def directory_of_selected(self) -> Path:
        selected = self.selected_path()
        if self.display_mode is DisplayMode.TREE and selected is not None:
            return selected if selected.is_dir() else selected.parent
        return self.path

    def select_index(self, index: int) -> None:
        if self.display_mode is DisplayMode.TREE:
            self.tree.select_index(index)
        elif self.display_mode is DisplayMode.FUZZY:
            if self.fuzzy is not None and self.fuzzy.matches:
                self.fuzzy.index = max(0, min(index, len(self.fuzzy.matches) - 1))
        elif self.display_mode is DisplayMode.DIRECTORY:
            self.directory.select_index(index)
        self.window.scroll_to(self.index)

    def select_path(self, path: Path) -> bool:
        if self.display_mode is DisplayMode.TREE:
            found = self.tree.select_path(path)
        else:
            found = self.directory.select_path(path)
        self.window.scroll_to(self.index)
        return found

    def select_next(self) -> None:
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.scroll_down_one(self.window.bottom)
            return
        self.select_index(self.index + 1)
        self.window.scroll_down_one(self.index)

    def select_prev(self) -> None:
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.scroll_up_one(max(0, self.window.top - 1))
            return
        self.select_index(self.index - 1)
        self.window.scroll_up_one(self.index)

    def select_first(self) -> None:
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.reset(len(self.preview))
            return
        self.select_index(0)

    def select_last(self) -> None:
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.scroll_to(max(0, len(self.preview) - 1))
            return
        self.select_index(len(self) - 1)

    def page_down(self) -> None:
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.preview_page_down()
            return
        self.select_index(self.index + max(1, self.window.height // 2))

    def page_up(self) -> None:
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.preview_page_up()
            return
        self.select_index(self.index - max(1, self.window.height // 2))

    def go_to_file(self, path: Path) -> None:
        """Show ``path`` selected in its parent directory."""
        parent = path.parent
        if parent != self.path:
            self.cd(parent, select=path)
        else:
            self.select_path(path)

    def move_to_parent(self) -> None:
        parent = self.path.parent
        if parent == self.path:
            return
        self.cd(parent, select=self.path)

    def back(self) -> bool:
        entry = self.history.back()
        if entry is None:
            return False
        self.cd(entry.directory, select=entry.selected, record=False)
        return True

    def set_display_mode(self, mode: DisplayMode) -> None:
        self.display_mode = mode
        if mode is DisplayMode.TREE:
            selected = self.directory.selected_path()
            self._build_tree(self.path)
            if selected is not None:
                self.tree.select_path(selected)
        elif mode is DisplayMode.FUZZY:
            self.fuzzy = FuzzyFinder.for_directory(self.path, self.show_hidden)
        elif mode is DisplayMode.DIRECTORY:
            self.fuzzy = None
            self.previewed_path = None
            self.preview = EMPTY_PREVIEW
        self.window.reset(len(self))
        self.window.scroll_to(self.index)

    def toggle_fold(self) -> None:
        if self.display_mode is DisplayMode.TREE:
            self.tree.toggle_fold()
            self.window.set_len(len(self.tree))
            self.window.scroll_to(self.index)

    def toggle_hidden(self) -> None:
        self.show_hidden = not self.show_hidden
        self.refresh_view()

    def set_sort_kind(self, sort_kind: SortKind) -> None:
        self.sort_kind = sort_kind
        self.refresh_view()

    def set_filter(self, filter_kind: FilterKind) -> None:
        self.filter_kind = filter_kind
        self.refresh_view()

    def set_preview(self, preview: Preview) -> None:
        """Attach ``preview`` and point the window at its first line."""
        self.preview = preview
        if self.display_mode is DisplayMode.PREVIEW:
            self.window.reset(len(preview))

    def set_height(self, height: int) -> None:
        self.height = height
        self.window.set_height(height)
        self.window.scroll_to(self.index)

    def search_next(self) -> Path | None:
        target = self.search.next()
        if target is not None:
            self.select_path(target)
        return target

    def search_prev(self) -> Path | None:
        target = self.search.prev()
        if target is not None:
            self.select_path(target)
        return target

    def set_search(self, pattern: str) -> Path | None:
        """Start a search in the current listing; raises ``re.error`` on bad patterns."""
        self.search.set(pattern, self.list_paths())
        target = self.search.current()
        if target is not None:
            self.select_path(target)
        return target
