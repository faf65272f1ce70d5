"""Key-driven scenarios run through ``EventDispatcher``.

Each test builds a real ``Status`` over temporary directories and feeds it
the same events the driver would.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from twinpane.dispatch import EventDispatcher
from twinpane.errors import DispatchError
from twinpane.events import ActionEvent, EventChannel, FileCopiedEvent, IpcEvent, KeyEvent, QuitEvent
from twinpane.integrations.trash import Trash
from twinpane.jobs.copy_move import CopyMode, CopyMoveQueue
from twinpane.model.lists import Marks, Shortcuts
from twinpane.model.menu import MenuHolder
from twinpane.model.session import Session
from twinpane.model.sort_filter import FilterBy, FilterKind, SortBy
from twinpane.model.tab import Tab
from twinpane.modes import NOTHING, Focus, InputSimple, NeedConfirmation
from twinpane.preview.artifact import Preview
from twinpane.preview.pipeline import PreviewPipeline
from twinpane.status import Status


def _fake_build(path, options):
    return Preview.text(path, [path.name])


def _make_status(left: Path, right: Path, trash_root: Path, channel: EventChannel) -> Status:
    menu = MenuHolder(marks=Marks(), shortcuts=Shortcuts(), trash=Trash(root=trash_root))
    return Status(
        tabs=(Tab(left), Tab(right)),
        menu=menu,
        session=Session(dual_pane=True, show_preview=False),
        pipeline=PreviewPipeline(build=_fake_build),
        jobs=CopyMoveQueue(channel.send, same_volume=lambda source, destination: False),
        width=120,
        height=40,
        username="test",
    )


def _press(dispatcher: EventDispatcher, status: Status, *keys: str) -> None:
    for key in keys:
        dispatcher.dispatch(status, KeyEvent(key))


def _assert_focus_consistent(test: unittest.TestCase, status: Status) -> None:
    tab = status.current_tab
    test.assertEqual(status.focus.index, status.index)
    test.assertEqual(status.focus.is_file, tab.menu_mode.is_nothing)


class DispatcherScenarioTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(self._tmp.name)
        self.left = base / "left"
        self.right = base / "right"
        self.trash_root = base / "trash"
        self.left.mkdir()
        self.right.mkdir()
        (self.left / "a.txt").write_bytes(b"a" * 50)
        (self.left / "b.txt").write_bytes(b"b")
        (self.left / "docs").mkdir()
        self.channel = EventChannel()
        self.status = _make_status(self.left, self.right, self.trash_root, self.channel)
        self.dispatcher = EventDispatcher()

    def tearDown(self) -> None:
        self.status.jobs.join(5)
        self.status.pipeline.close()
        self._tmp.cleanup()

    def test_sort_menu_applies_key_and_returns_focus(self) -> None:
        _press(self.dispatcher, self.status, "O")
        self.assertEqual(self.status.focus, Focus.LEFT_MENU)
        self.assertIs(self.status.current_tab.menu_mode.kind, InputSimple.SORT)

        _press(self.dispatcher, self.status, "s")
        self.assertIs(self.status.current_tab.sort_kind.sort_by, SortBy.SIZE)

        _press(self.dispatcher, self.status, "ENTER")
        self.assertIs(self.status.current_tab.sort_kind.sort_by, SortBy.SIZE)
        self.assertEqual(self.status.current_tab.menu_mode, NOTHING)
        self.assertEqual(self.status.focus, Focus.LEFT_FILE)

    def test_filter_is_live_and_discarded_on_escape(self) -> None:
        _press(self.dispatcher, self.status, "f", "d")
        tab = self.status.current_tab
        self.assertIs(tab.filter_kind.by, FilterBy.DIRECTORY)
        self.assertEqual([path.name for path in tab.list_paths()], ["docs"])

        _press(self.dispatcher, self.status, "ESC")
        self.assertEqual(tab.filter_kind, FilterKind())
        self.assertEqual(len(tab.list_paths()), 3)
        self.assertEqual(self.status.focus, Focus.LEFT_FILE)

    def test_filter_is_kept_on_enter(self) -> None:
        _press(self.dispatcher, self.status, "f", "d", "ENTER")
        tab = self.status.current_tab
        self.assertIs(tab.filter_kind.by, FilterBy.DIRECTORY)
        self.assertTrue(tab.menu_mode.is_nothing)

    def test_focus_tracks_pane_and_menu_state(self) -> None:
        for key in ("TAB", "O", "TAB", "ESC", "TAB", "H", "ESC", "TAB"):
            _press(self.dispatcher, self.status, key)
            _assert_focus_consistent(self, self.status)

    def test_tab_keeps_menu_focus_of_the_other_pane(self) -> None:
        _press(self.dispatcher, self.status, "O", "TAB")
        self.assertEqual(self.status.focus, Focus.RIGHT_FILE)
        _press(self.dispatcher, self.status, "TAB")
        self.assertEqual(self.status.focus, Focus.LEFT_MENU)

    def test_rename_prefills_and_renames(self) -> None:
        _press(self.dispatcher, self.status, "j", "r")
        self.assertEqual(self.status.menu.input.string(), "a.txt")
        self.status.menu.input.replace("renamed.txt")
        _press(self.dispatcher, self.status, "ENTER")

        self.assertFalse((self.left / "a.txt").exists())
        self.assertTrue((self.left / "renamed.txt").exists())
        self.assertEqual(self.status.current_tab.selected_path(), self.left / "renamed.txt")
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)

    def test_rename_onto_existing_name_keeps_menu_open(self) -> None:
        _press(self.dispatcher, self.status, "j", "r")
        self.status.menu.input.replace("b.txt")
        _press(self.dispatcher, self.status, "ENTER")

        self.assertTrue((self.left / "a.txt").exists())
        self.assertIs(self.status.current_tab.menu_mode.kind, InputSimple.RENAME)
        self.assertIn("exists", self.status.message)

    def test_new_directory(self) -> None:
        _press(self.dispatcher, self.status, "d", "n", "e", "w", "ENTER")
        self.assertTrue((self.left / "new").is_dir())
        self.assertIn(self.left / "new", self.status.current_tab.list_paths())

    def test_delete_flags_selection_and_trashes_after_confirmation(self) -> None:
        _press(self.dispatcher, self.status, "j")
        selected = self.status.current_tab.selected_path()
        _press(self.dispatcher, self.status, "x")
        self.assertIs(self.status.current_tab.menu_mode.kind, NeedConfirmation.DELETE)
        self.assertEqual(list(self.status.menu.flagged), [selected])

        _press(self.dispatcher, self.status, "y")
        self.assertFalse(selected.exists())
        self.assertTrue((self.trash_root / "files" / selected.name).exists())
        self.assertTrue(self.status.menu.flagged.is_empty())
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)

    def test_declined_confirmation_keeps_files(self) -> None:
        _press(self.dispatcher, self.status, "x", "n")
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)
        self.assertEqual(len(self.status.current_tab.list_paths()), 3)
        self.assertTrue(self.status.menu.flagged.is_empty())

    def test_cancelled_delete_keeps_only_user_flags(self) -> None:
        _press(self.dispatcher, self.status, "j", "x", "ESC")
        self.assertTrue(self.status.menu.flagged.is_empty())

        _press(self.dispatcher, self.status, " ", "x", "q")
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)
        self.assertEqual(list(self.status.menu.flagged), [self.left / "a.txt"])

    def test_copy_flagged_into_other_pane(self) -> None:
        _press(self.dispatcher, self.status, "j", " ")
        flagged = list(self.status.menu.flagged)
        self.assertEqual(len(flagged), 1)

        _press(self.dispatcher, self.status, "TAB", "c", "y")
        self.assertTrue(self.status.menu.flagged.is_empty())
        self.assertIsNotNone(self.status.jobs.running)

        event = self.channel.get(timeout=5)
        self.assertIsInstance(event, FileCopiedEvent)
        self.dispatcher.dispatch(self.status, event)

        self.assertTrue(self.status.jobs.is_idle())
        self.assertTrue((self.right / flagged[0].name).exists())
        self.assertTrue(flagged[0].exists())
        self.assertIn(self.right / flagged[0].name, self.status.tabs[1].list_paths())

    def test_move_flagged_across_volumes_queues_one_job(self) -> None:
        a, b = self.left / "a.txt", self.left / "b.txt"
        _press(self.dispatcher, self.status, "j", " ", " ")
        self.assertEqual(list(self.status.menu.flagged), [a, b])

        _press(self.dispatcher, self.status, "TAB", "p", "y")
        job = self.status.jobs.running
        self.assertIsNotNone(job)
        self.assertEqual(job.sources, (a, b))
        self.assertEqual(job.destination, self.right)
        self.assertIs(job.mode, CopyMode.MOVE)
        self.assertEqual(len(self.status.jobs.pending), 0)
        self.assertTrue(self.status.menu.flagged.is_empty())

        event = self.channel.get(timeout=5)
        self.assertIsInstance(event, FileCopiedEvent)
        self.dispatcher.dispatch(self.status, event)

        self.assertTrue(self.status.jobs.is_idle())
        self.assertFalse(a.exists())
        self.assertFalse(b.exists())
        self.assertEqual(self.status.tabs[0].list_paths(), [self.left / "docs"])
        self.assertEqual(self.status.tabs[1].list_paths(), [self.right / "a.txt", self.right / "b.txt"])

    def test_copy_without_flags_reports(self) -> None:
        _press(self.dispatcher, self.status, "c")
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)
        self.assertEqual(self.status.message, "Nothing flagged")

    def test_ipc_pick_selects_file(self) -> None:
        target = self.right / "report.pdf"
        target.write_bytes(b"%PDF")
        self.dispatcher.dispatch(self.status, IpcEvent(f"{target}\n"))
        tab = self.status.current_tab
        self.assertEqual(tab.path, self.right)
        self.assertEqual(tab.selected_path(), target)

    def test_ipc_pick_of_missing_path_only_reports(self) -> None:
        self.dispatcher.dispatch(self.status, IpcEvent("/nonexistent/twinpane/file"))
        self.assertEqual(self.status.current_tab.path, self.left)
        self.assertIn("does not exist", self.status.message)

    def test_marks_new_then_jump(self) -> None:
        _press(self.dispatcher, self.status, '"', "q")
        self.assertEqual(self.status.menu.marks.get("q"), self.left)
        self.status.cd(self.right)
        _press(self.dispatcher, self.status, "'", "q")
        self.assertEqual(self.status.current_tab.path, self.left)

    def test_enter_on_directory_then_back(self) -> None:
        _press(self.dispatcher, self.status, "ENTER")
        self.assertEqual(self.status.current_tab.path, self.left / "docs")
        _press(self.dispatcher, self.status, "-")
        self.assertEqual(self.status.current_tab.path, self.left)

    def test_unknown_action_sets_message(self) -> None:
        self.dispatcher.dispatch(self.status, ActionEvent("NoSuchAction"))
        self.assertEqual(self.status.message, "Unknown action NoSuchAction")

    def test_quit_event(self) -> None:
        self.dispatcher.dispatch(self.status, QuitEvent())
        self.assertTrue(self.status.should_quit)

    def test_unbound_key_changes_nothing(self) -> None:
        _press(self.dispatcher, self.status, "CTRL_Y")
        self.assertTrue(self.status.current_tab.menu_mode.is_nothing)
        self.assertEqual(self.status.message, "")

    def test_action_failure_is_wrapped(self) -> None:
        def explode(status: Status) -> None:
            raise RuntimeError("boom")

        dispatcher = EventDispatcher(actions={"Explode": explode})
        with self.assertRaises(DispatchError):
            dispatcher.dispatch(self.status, ActionEvent("Explode"))


if __name__ == "__main__":
    unittest.main()
