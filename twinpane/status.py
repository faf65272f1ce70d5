"""Top-level application state and the only place it is mutated.

Background workers never touch ``Status``; they send events that the
dispatcher turns into calls on this object from the foreground thread.
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .events import FileCopiedEvent
from .integrations.commands import notify
from .integrations.plugins import PluginHost
from .jobs.copy_move import CopyMode, CopyMoveQueue, SubmitOutcome
from .model.content_window import ContentWindow
from .model.menu import MenuHolder
from .model.session import Session
from .model.sort_filter import FilterKind
from .model.tab import Tab
from .modes import (
    DISCARD_ON_CANCEL,
    NOTHING,
    DisplayMode,
    Focus,
    MenuMode,
    Navigate,
)
from .preview.artifact import EMPTY_PREVIEW, Preview
from .preview.pipeline import PreviewPipeline, PreviewResult
from .preview.renderers import RenderOptions

LOGGER = logging.getLogger(__name__)


def _noop() -> None:
    return None


@dataclass(frozen=True)
class TuiHooks:
    """Leave and re-enter the full-screen mode around external programs."""

    disable: Callable[[], None] = _noop
    enable: Callable[[], None] = _noop


class Status:
    """Two tabs, the shared menu, focus, session flags, and worker handles."""

    def __init__(
        self,
        *,
        tabs: tuple[Tab, Tab],
        menu: MenuHolder,
        session: Session,
        pipeline: PreviewPipeline,
        jobs: CopyMoveQueue,
        plugins: PluginHost | None = None,
        width: int = 80,
        height: int = 24,
        render_options: RenderOptions | None = None,
        openers: dict[str, str] | None = None,
        tui: TuiHooks | None = None,
        username: str | None = None,
    ) -> None:
        self.tabs = tabs
        self.menu = menu
        self.session = session
        self.pipeline = pipeline
        self.jobs = jobs
        self.plugins = plugins if plugins is not None else PluginHost()
        self.index = 0
        self.focus = Focus.LEFT_FILE
        self.width = width
        self.height = height
        self.render_options = render_options if render_options is not None else RenderOptions()
        self.openers = dict(openers or {})
        self.tui = tui if tui is not None else TuiHooks()
        self.username = username if username is not None else getpass.getuser()
        self.message = ""
        self.should_quit = False
        self._mirrored_path: Path | None = None
        self.resize(width, height)

    # -- tabs and focus -------------------------------------------------

    @property
    def current_tab(self) -> Tab:
        return self.tabs[self.index]

    def set_message(self, text: str) -> None:
        self.message = text

    def report_error(self, action: str, exc: Exception) -> None:
        """Log ``exc`` and show it on the status line."""
        LOGGER.warning("%s failed: %s", action, exc)
        self.set_message(f"{action}: {exc}")

    def sync_focus(self) -> None:
        """Derive focus from the selected pane and whether its menu is open."""
        self.focus = Focus.from_pane(self.index, not self.current_tab.menu_mode.is_nothing)

    def select_pane(self, index: int) -> None:
        if index == 1 and not self.session.dual_pane:
            return
        self.index = index
        self.sync_focus()

    def switch_pane(self) -> None:
        """Move to the other pane; its own menu state decides file vs menu focus."""
        if not self.session.dual_pane:
            return
        self.focus = self.focus.switch()
        self.index = self.focus.index
        self.sync_focus()

    # -- menu modes -----------------------------------------------------

    def _second_window_height(self) -> int:
        return self.height // 2 + self.height % 2

    def _apply_tab_height(self, tab: Tab) -> None:
        tab.set_height(self.height if tab.menu_mode.is_nothing else self.height // 2)

    def set_menu_mode(self, index: int, mode: MenuMode) -> None:
        """Enter ``mode`` on pane ``index``.

        Resizes the pane's window, resets the menu window to the new content
        length, and moves focus to the pane's menu (or file list for
        ``NOTHING``).
        """
        tab = self.tabs[index]
        tab.menu_mode = mode
        self._apply_tab_height(tab)
        self.menu.window = ContentWindow(self.menu.len_for(mode, tab.history), self._second_window_height())
        self.index = index
        self.sync_focus()
        LOGGER.debug("pane %d menu mode -> %s", index, mode)

    def open_menu(self, mode: MenuMode) -> None:
        """Toggle ``mode`` on the current pane: entering it twice leaves it."""
        if self.current_tab.menu_mode == mode:
            self.reset_menu_mode()
            return
        self.menu.reset()
        self.set_menu_mode(self.index, mode)

    def reset_menu_mode(self) -> None:
        """Cancel the current pane's menu, undoing transient listing changes."""
        tab = self.current_tab
        if tab.menu_mode.kind in DISCARD_ON_CANCEL and tab.filter_kind != FilterKind():
            try:
                tab.set_filter(FilterKind())
            except OSError as exc:
                self.report_error("Filter", exc)
        if self.menu.auto_flagged is not None:
            self.menu.flagged.remove(self.menu.auto_flagged)
            self.menu.auto_flagged = None
        self.menu.reset()
        self.set_menu_mode(self.index, NOTHING)

    def refresh_menu_len(self) -> None:
        tab = self.current_tab
        self.menu.window.set_len(self.menu.len_for(tab.menu_mode, tab.history))

    # -- views ----------------------------------------------------------

    def refresh_views(self) -> None:
        """Reload both listings, e.g. after a file operation."""
        for tab in self.tabs:
            if tab.display_mode in (DisplayMode.DIRECTORY, DisplayMode.TREE):
                try:
                    tab.refresh_view()
                except OSError as exc:
                    self.report_error("Refresh", exc)
        self.refresh_menu_len()

    def refresh_if_needed(self) -> None:
        """Periodic refresh: reload only directories whose mtime changed."""
        for tab in self.tabs:
            if tab.display_mode not in (DisplayMode.DIRECTORY, DisplayMode.TREE):
                continue
            try:
                if tab.refresh_if_changed():
                    LOGGER.debug("refreshed %s", tab.path)
            except OSError as exc:
                self.report_error("Refresh", exc)

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        for tab in self.tabs:
            self._apply_tab_height(tab)
        self.menu.window.set_height(self._second_window_height())

    def pane_width(self) -> int:
        return self.width // 2 if self.session.dual_pane else self.width

    def set_display_mode(self, mode: DisplayMode) -> None:
        tab = self.current_tab
        if tab.display_mode is mode:
            mode = DisplayMode.DIRECTORY
        try:
            tab.set_display_mode(mode)
        except OSError as exc:
            self.report_error("Display", exc)

    def cd(self, path: Path, select: Path | None = None) -> bool:
        tab = self.current_tab
        if tab.display_mode in (DisplayMode.PREVIEW, DisplayMode.FUZZY):
            tab.set_display_mode(DisplayMode.DIRECTORY)
        try:
            tab.cd(path, select=select)
        except OSError as exc:
            self.report_error("Cd", exc)
            return False
        return True

    def go_to_file(self, path: Path) -> bool:
        tab = self.current_tab
        if tab.display_mode in (DisplayMode.PREVIEW, DisplayMode.FUZZY):
            tab.set_display_mode(DisplayMode.DIRECTORY)
        try:
            tab.go_to_file(path)
        except OSError as exc:
            self.report_error("Jump", exc)
            return False
        return True

    # -- flags ----------------------------------------------------------

    def selected_or_flagged(self) -> list[Path]:
        """Flagged paths, or the selected entry when nothing is flagged."""
        if not self.menu.flagged.is_empty():
            return list(self.menu.flagged)
        selected = self.current_tab.selected_path()
        return [selected] if selected is not None else []

    def toggle_flag(self) -> None:
        tab = self.current_tab
        selected = tab.selected_path()
        if selected is None:
            return
        self.menu.flagged.toggle(selected)
        tab.select_next()

    def flag_all(self) -> None:
        self.menu.flagged.extend(self.current_tab.list_paths())

    def reverse_flags(self) -> None:
        for path in self.current_tab.list_paths():
            self.menu.flagged.toggle(path)

    def clear_flags(self) -> None:
        self.menu.flagged.clear()

    # -- preview pipeline -----------------------------------------------

    def _options(self, show_hidden: bool) -> RenderOptions:
        options = self.render_options
        return RenderOptions(
            style=options.style,
            no_color=options.no_color,
            max_lines=options.max_lines,
            tree_depth=options.tree_depth,
            max_tree_entries=options.max_tree_entries,
            show_hidden=show_hidden,
        )

    def request_preview(self, path: Path, pane_index: int) -> None:
        tab = self.tabs[pane_index]
        tab.previewed_path = path
        self.pipeline.request(path, pane_index, self._options(tab.show_hidden))

    def preview_selected(self) -> None:
        """Show the selected entry as a full-pane preview of the current tab."""
        tab = self.current_tab
        if tab.display_mode is DisplayMode.PREVIEW:
            tab.set_display_mode(DisplayMode.DIRECTORY)
            return
        selected = tab.selected_path()
        if selected is None:
            return
        tab.set_display_mode(DisplayMode.PREVIEW)
        tab.set_preview(EMPTY_PREVIEW)
        self.request_preview(selected, self.index)

    def show_command_output(self, command: str, output: str) -> None:
        tab = self.current_tab
        tab.set_display_mode(DisplayMode.PREVIEW)
        tab.previewed_path = None
        tab.set_preview(Preview.command_output(command, output))

    def _mirror_source_path(self) -> Path | None:
        """Path the right pane should preview while mirroring the left pane."""
        left = self.tabs[0]
        mode = left.menu_mode
        if mode.kind is Navigate.HISTORY:
            entry = left.history.selected()
            return entry.directory if entry is not None else None
        if mode.kind is Navigate.SHORTCUT:
            return self.menu.shortcuts.selected()
        if mode.kind in (Navigate.MARKS_JUMP, Navigate.MARKS_NEW):
            selected = self.menu.marks.selected()
            return selected[1] if selected is not None else None
        if mode.kind is Navigate.FLAGGED:
            return self.menu.flagged.selected()
        return left.selected_path()

    def update_second_pane_for_preview(self) -> None:
        """Keep the right pane previewing the left selection while mirroring."""
        right = self.tabs[1]
        if not self.session.use_dual_preview():
            if right.display_mode is DisplayMode.PREVIEW and self._mirrored_path is not None:
                right.set_display_mode(DisplayMode.DIRECTORY)
            self._mirrored_path = None
            return
        target = self._mirror_source_path()
        if target is None or target == self._mirrored_path:
            return
        self._mirrored_path = target
        if right.display_mode is not DisplayMode.PREVIEW:
            right.set_display_mode(DisplayMode.PREVIEW)
        self.request_preview(target, 1)

    def _mirrors(self, pane_index: int) -> bool:
        return pane_index == 1 and self.session.use_dual_preview()

    def accepts_preview(self, result: PreviewResult) -> bool:
        """Return whether ``result`` still matches what its pane points at.

        The mirroring pane is checked against the left pane's selection.
        A source pane showing a navigable list accepts any result.
        """
        pane_index = result.pane_index
        if pane_index not in (0, 1):
            return False
        tab = self.tabs[pane_index]
        if tab.display_mode is not DisplayMode.PREVIEW:
            return False
        source = self.tabs[0] if self._mirrors(pane_index) else tab
        if source.menu_mode.is_navigate:
            return True
        if self._mirrors(pane_index):
            return self._mirror_source_path() == result.path
        return tab.previewed_path == result.path

    def check_preview(self) -> int:
        """Attach every fresh completed preview; return how many were accepted."""
        accepted = 0
        for result in self.pipeline.drain_results():
            if not self.accepts_preview(result):
                LOGGER.debug("discarding stale preview of %s", result.path)
                continue
            tab = self.tabs[result.pane_index]
            tab.set_preview(result.preview)
            accepted += 1
        return accepted

    def poll_background(self) -> bool:
        """Drain worker results once per loop pass; return whether a redraw is due."""
        accepted = self.check_preview()
        return accepted > 0 or not self.jobs.progress.is_idle()

    # -- copy / move ----------------------------------------------------

    def copy_move(self, mode: CopyMode) -> None:
        """Submit the flagged files to the current directory and clear the flags."""
        sources = list(self.menu.flagged)
        if not sources:
            self.set_message("Nothing flagged")
            return
        destination = self.current_tab.directory_of_selected()
        try:
            outcome = self.jobs.submit(sources, destination, mode, self.pane_width())
        except OSError as exc:
            self.report_error(mode.value.capitalize(), exc)
            return
        self.menu.flagged.clear()
        if outcome is SubmitOutcome.MOVED:
            self.set_message(f"Moved {sources[0].name}")
        elif outcome is SubmitOutcome.QUEUED:
            self.set_message(f"{mode.value.capitalize()} queued")
        self.refresh_views()

    def file_copied(self, event: FileCopiedEvent) -> None:
        finished = self.jobs.on_job_done(self.pane_width())
        job = finished if finished is not None else event.job
        self.set_message(f"Done {job.describe()}")
        notify(f"Done {job.describe()}")
        self.refresh_views()

    # -- background ticks ----------------------------------------------

    def tick(self) -> None:
        tab = self.current_tab
        if tab.display_mode is DisplayMode.FUZZY and tab.fuzzy is not None:
            if tab.fuzzy.tick():
                tab.window.reset(len(tab))
        self.plugins.update()

    def handle_ipc(self, payload: str) -> None:
        """Jump to the path a companion process asked to pick."""
        stripped = payload.strip()
        line = stripped.splitlines()[0].strip() if stripped else ""
        if not line:
            return
        path = Path(line).expanduser()
        if not path.exists():
            self.set_message(f"Pick: {line} does not exist")
            LOGGER.info("ipc pick of missing path %s", line)
            return
        if path.is_dir():
            ok = self.cd(path)
        else:
            ok = self.go_to_file(path)
        if ok:
            self.set_message(f"Picked {path}")

    def after_event(self) -> None:
        """Bookkeeping that depends on the state any event may have changed."""
        self.update_second_pane_for_preview()
        self.sync_focus()

    def quit(self) -> None:
        self.should_quit = True
