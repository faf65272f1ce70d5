"""Window sizing, pane switching and periodic refresh on ``Status``."""

from __future__ import annotations

import os
import tempfile
import time
import unittest
from pathlib import Path

from twinpane.dispatch.actions import toggle_dual_pane
from twinpane.events import EventChannel
from twinpane.integrations.trash import Trash
from twinpane.jobs.copy_move import CopyMoveQueue
from twinpane.model.content_window import displayed_rows
from twinpane.model.lists import Marks, Shortcuts
from twinpane.model.menu import MenuHolder
from twinpane.model.session import Session
from twinpane.model.tab import Tab
from twinpane.modes import DisplayMode, Focus, MenuMode, Navigate
from twinpane.preview.artifact import Preview
from twinpane.preview.pipeline import PreviewPipeline
from twinpane.status import Status


def _make_status(root: Path, **session_flags) -> Status:
    menu = MenuHolder(marks=Marks(), shortcuts=Shortcuts(), trash=Trash(root=root / ".trash"))
    return Status(
        tabs=(Tab(root), Tab(root)),
        menu=menu,
        session=Session(**session_flags),
        pipeline=PreviewPipeline(build=lambda path, options: Preview.text(path, ["body"])),
        jobs=CopyMoveQueue(EventChannel().send),
        width=100,
        height=40,
        username="test",
    )


class StatusTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "a.txt").write_text("a", encoding="utf-8")
        (self.root / "sub").mkdir()
        self.status = _make_status(self.root)

    def tearDown(self) -> None:
        self.status.pipeline.close()
        self._tmp.cleanup()

    def test_menu_takes_half_of_the_pane(self) -> None:
        tab = self.status.current_tab
        self.assertEqual(tab.window.height, displayed_rows(40))
        self.status.open_menu(MenuMode(Navigate.HISTORY))
        self.assertEqual(tab.window.height, displayed_rows(20))
        self.assertEqual(self.status.menu.window.height, displayed_rows(20))
        self.status.reset_menu_mode()
        self.assertEqual(tab.window.height, displayed_rows(40))

    def test_opening_same_menu_twice_closes_it(self) -> None:
        self.status.open_menu(MenuMode(Navigate.HISTORY))
        self.status.open_menu(MenuMode(Navigate.HISTORY))
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)
        self.assertEqual(self.status.focus, Focus.LEFT_FILE)

    def test_resize_updates_both_tabs(self) -> None:
        self.status.resize(60, 12)
        for tab in self.status.tabs:
            self.assertEqual(tab.window.height, displayed_rows(12))
        self.assertEqual(self.status.pane_width(), 30)

    def test_single_pane_mode_pins_left_pane(self) -> None:
        self.status.switch_pane()
        self.assertEqual(self.status.index, 1)
        toggle_dual_pane(self.status)
        self.assertEqual(self.status.index, 0)
        self.status.switch_pane()
        self.assertEqual(self.status.index, 0)
        self.assertEqual(self.status.pane_width(), 100)

    def test_session_toggles_are_persisted(self) -> None:
        saved: list[dict[str, bool]] = []
        session = Session(persist=saved.append)
        session.toggle_preview()
        session.toggle_metadata()
        self.assertEqual(saved[-1], {"dual_pane": True, "show_preview": True, "show_metadata": False})

    def test_refresh_if_needed_picks_up_changes(self) -> None:
        (self.root / "new.txt").write_text("n", encoding="utf-8")
        future = time.time() + 10
        os.utime(self.root, (future, future))
        self.status.refresh_if_needed()
        self.assertIn(self.root / "new.txt", self.status.current_tab.list_paths())

    def test_ipc_uses_first_line_and_enters_directories(self) -> None:
        self.status.handle_ipc(f"  {self.root / 'sub'}\nignored\n")
        self.assertEqual(self.status.current_tab.path, self.root / "sub")
        self.status.handle_ipc("   ")
        self.assertEqual(self.status.current_tab.path, self.root / "sub")

    def test_preview_selected_requests_and_attaches(self) -> None:
        tab = self.status.current_tab
        tab.select_path(self.root / "a.txt")
        self.status.preview_selected()
        self.assertIs(tab.display_mode, DisplayMode.PREVIEW)

        deadline = time.monotonic() + 5
        while tab.preview.is_empty and time.monotonic() < deadline:
            self.status.poll_background()
            time.sleep(0.01)
        self.assertEqual(tab.preview.lines, ("body",))

        self.status.preview_selected()
        self.assertIs(tab.display_mode, DisplayMode.DIRECTORY)

    def test_command_output_is_shown_as_preview(self) -> None:
        self.status.show_command_output("ls", "a\nb\n")
        tab = self.status.current_tab
        self.assertIs(tab.display_mode, DisplayMode.PREVIEW)
        self.assertEqual(tab.preview.lines, ("a", "b"))
        self.assertIsNone(tab.selected_path())


if __name__ == "__main__":
    unittest.main()
