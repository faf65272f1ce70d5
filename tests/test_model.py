"""Scroll window, flagged set, history, sort and filter behaviour."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from twinpane.model.content_window import ContentWindow, displayed_rows
from twinpane.model.directory import scan_directory
from twinpane.model.flagged import Flagged
from twinpane.model.history import History
from twinpane.model.inputs import Input, InputHistory, PasswordHolder
from twinpane.model.lists import index_from_a
from twinpane.model.sort_filter import FilterBy, FilterKind, SortBy, SortKind


class ContentWindowTests(unittest.TestCase):
    def _assert_invariants(self, window: ContentWindow, selection: int) -> None:
        self.assertLessEqual(window.top, selection)
        self.assertLess(selection, max(window.bottom, 1))
        self.assertLessEqual(window.bottom - window.top, window.height)

    def test_scroll_to_keeps_selection_visible(self) -> None:
        window = ContentWindow(100, 24)
        for index in (0, 10, 50, 99, 3, 0, 77):
            window.scroll_to(index)
            self._assert_invariants(window, index)

    def test_stepping_one_row_at_a_time(self) -> None:
        window = ContentWindow(60, 20)
        for index in range(60):
            window.scroll_down_one(index)
            self._assert_invariants(window, index)
        for index in reversed(range(60)):
            window.scroll_up_one(index)
            self._assert_invariants(window, index)

    def test_short_list_fits(self) -> None:
        window = ContentWindow(3, 24)
        window.scroll_to(2)
        self.assertEqual((window.top, window.bottom), (0, 3))

    def test_set_height_clamps(self) -> None:
        window = ContentWindow(100, 40)
        window.scroll_to(99)
        window.set_height(10)
        self.assertEqual(window.height, displayed_rows(10))
        self.assertLessEqual(window.bottom - window.top, window.height)
        self.assertLessEqual(window.bottom, window.len)


class FlaggedTests(unittest.TestCase):
    def test_toggle_twice_removes(self) -> None:
        flagged = Flagged()
        flagged.toggle(Path("/tmp/a"))
        flagged.toggle(Path("/tmp/a"))
        self.assertTrue(flagged.is_empty())

    def test_sorted_and_unique(self) -> None:
        flagged = Flagged()
        for name in ("c", "a", "b", "a", "c"):
            flagged.push(Path("/x") / name)
        flagged.extend([Path("/w/z"), Path("/x/b")])
        self.assertEqual(list(flagged), sorted(set(flagged)))
        self.assertEqual(len(flagged), 4)

    def test_in_dir_and_replace(self) -> None:
        flagged = Flagged()
        flagged.extend([Path("/d/a"), Path("/d/sub/b"), Path("/e/c")])
        self.assertEqual(flagged.in_dir(Path("/d")), [Path("/d/a"), Path("/d/sub/b")])
        flagged.replace(Path("/e/c"), Path("/e/renamed"))
        self.assertIn(Path("/e/renamed"), flagged)
        self.assertNotIn(Path("/e/c"), flagged)

    def test_remove_selected_clamps_index(self) -> None:
        flagged = Flagged()
        flagged.extend([Path("/a"), Path("/b")])
        flagged.select_index(1)
        flagged.remove_selected()
        self.assertEqual(flagged.selected(), Path("/a"))


class HistoryTests(unittest.TestCase):
    def test_same_pair_twice_does_not_grow(self) -> None:
        history = History()
        history.push(Path("/a"), Path("/a/f"))
        history.push(Path("/a"), Path("/a/f"))
        self.assertEqual(len(history), 1)

    def test_drop_queue_truncates_after_index(self) -> None:
        history = History()
        for name in ("a", "b", "c", "d"):
            history.push(Path("/") / name)
        history.back()
        history.back()
        self.assertEqual(history.selected().directory, Path("/b"))
        history.drop_queue()
        self.assertEqual([entry.directory for entry in history.content], [Path("/a"), Path("/b")])

    def test_push_after_back_forgets_forward_entries(self) -> None:
        history = History()
        history.push(Path("/a"))
        history.push(Path("/b"))
        history.back()
        history.push(Path("/c"))
        self.assertEqual([entry.directory for entry in history.content], [Path("/a"), Path("/c")])
        self.assertEqual(history.index, 1)

    def test_back_at_start_returns_none(self) -> None:
        history = History()
        self.assertIsNone(history.back())
        history.push(Path("/a"))
        self.assertIsNone(history.back())


class SortFilterTests(unittest.TestCase):
    def test_update_from_char(self) -> None:
        kind = SortKind()
        self.assertEqual(kind.update_from_char("s"), SortKind(SortBy.SIZE, False))
        self.assertEqual(kind.update_from_char("S"), SortKind(SortBy.SIZE, True))
        self.assertTrue(kind.update_from_char("r").reverse)
        self.assertEqual(kind.update_from_char("?"), kind)

    def test_filter_from_input(self) -> None:
        self.assertEqual(FilterKind.from_input("d").by, FilterBy.DIRECTORY)
        self.assertEqual(FilterKind.from_input("e .PY"), FilterKind(FilterBy.EXTENSION, "py"))
        self.assertEqual(FilterKind.from_input("n ^a"), FilterKind(FilterBy.NAME, "^a"))
        self.assertEqual(FilterKind.from_input("n ("), FilterKind())
        self.assertEqual(FilterKind.from_input("a"), FilterKind())

    def test_scan_sorts_by_size_and_filters(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "big.txt").write_bytes(b"x" * 300)
            (root / "small.txt").write_bytes(b"x")
            (root / "mid.py").write_bytes(b"x" * 20)
            (root / "sub").mkdir()
            (root / ".hidden").write_text("h", encoding="utf-8")

            by_size = scan_directory(root, show_hidden=False, sort_kind=SortKind(SortBy.SIZE, True), filter_kind=FilterKind())
            files = [info.filename for info in by_size if not info.is_dir]
            self.assertEqual(files, ["big.txt", "mid.py", "small.txt"])
            self.assertNotIn(".hidden", [info.filename for info in by_size])

            only_py = scan_directory(
                root,
                show_hidden=True,
                sort_kind=SortKind(),
                filter_kind=FilterKind(FilterBy.EXTENSION, "py"),
            )
            self.assertEqual([info.filename for info in only_py], ["mid.py"])


class InputTests(unittest.TestCase):
    def test_cursor_editing(self) -> None:
        buffer = Input()
        for char in "hello":
            buffer.insert(char)
        buffer.cursor_left()
        buffer.cursor_left()
        buffer.delete_char_left()
        self.assertEqual(buffer.string(), "helo")
        buffer.cursor_start()
        buffer.insert(">")
        self.assertEqual(buffer.string(), ">helo")
        buffer.delete_chars_right()
        self.assertEqual(buffer.string(), ">")

    def test_password_is_read_once(self) -> None:
        holder = PasswordHolder()
        holder.set_sudo("secret")
        self.assertEqual(holder.take_sudo(), "secret")
        self.assertIsNone(holder.take_sudo())
        self.assertNotIn("secret", repr(holder))

    def test_input_history_most_recent_first(self) -> None:
        history = InputHistory()
        history.record("k", "one")
        history.record("k", "two")
        history.record("k", "one")
        self.assertEqual(history.for_kind("k"), ["one", "two"])

    def test_index_from_a(self) -> None:
        self.assertEqual(index_from_a("a"), 0)
        self.assertEqual(index_from_a("c"), 2)
        self.assertIsNone(index_from_a("A"))


if __name__ == "__main__":
    unittest.main()
