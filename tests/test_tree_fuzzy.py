from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from twinpane.model.fuzzy import FuzzyFinder, collect_file_labels, fuzzy_match_labels
from twinpane.model.sort_filter import FilterKind, SortKind
from twinpane.model.tab import Tab
from twinpane.modes import DisplayMode


def _make_tree(root: Path) -> None:
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "src" / "pkg" / "core.py").write_text("x", encoding="utf-8")
    (root / "src" / "main.py").write_text("x", encoding="utf-8")
    (root / "README.md").write_text("x", encoding="utf-8")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("x", encoding="utf-8")


class TreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        _make_tree(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_fold_and_unfold(self) -> None:
        tab = Tab(self.root)
        tab.set_display_mode(DisplayMode.TREE)
        self.assertEqual(tab.list_paths(), [self.root, self.root / "src", self.root / "README.md"])

        tab.select_path(self.root / "src")
        tab.toggle_fold()
        self.assertEqual(
            tab.list_paths(),
            [self.root, self.root / "src", self.root / "src" / "pkg", self.root / "src" / "main.py", self.root / "README.md"],
        )
        self.assertEqual(tab.selected_path(), self.root / "src")

        tab.select_path(self.root / "src" / "pkg")
        tab.toggle_fold()
        self.assertIn(self.root / "src" / "pkg" / "core.py", tab.list_paths())

        tab.select_path(self.root / "src")
        tab.toggle_fold()
        self.assertEqual(len(tab), 3)

    def test_directory_of_selected_in_tree(self) -> None:
        tab = Tab(self.root)
        tab.set_display_mode(DisplayMode.TREE)
        tab.select_path(self.root / "README.md")
        self.assertEqual(tab.directory_of_selected(), self.root)
        tab.select_path(self.root / "src")
        self.assertEqual(tab.directory_of_selected(), self.root / "src")

    def test_hidden_entries_follow_the_tab(self) -> None:
        tab = Tab(self.root)
        tab.toggle_hidden()
        tab.set_display_mode(DisplayMode.TREE)
        self.assertIn(self.root / ".git", tab.list_paths())
        tab.tree.build(self.root, show_hidden=False, sort_kind=SortKind(), filter_kind=FilterKind())
        self.assertNotIn(self.root / ".git", tab.list_paths())


class FuzzyTests(unittest.TestCase):
    def test_labels_skip_hidden_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _make_tree(root)
            self.assertEqual(collect_file_labels(root, show_hidden=False), ["README.md", "src/main.py", "src/pkg/core.py"])
            self.assertIn(".git/HEAD", collect_file_labels(root, show_hidden=True))

    def test_substring_matches_rank_first(self) -> None:
        labels = ["src/pkg/core.py", "docs/core_notes.md", "cxoxrxe.txt"]
        ranked = [label for _, label, _ in fuzzy_match_labels("core", labels)]
        self.assertEqual(ranked, ["docs/core_notes.md", "src/pkg/core.py"])
        fuzzy_only = [label for _, label, _ in fuzzy_match_labels("cxr", labels)]
        self.assertEqual(fuzzy_only, ["cxoxrxe.txt"])

    def test_finder_reranks_on_tick(self) -> None:
        finder = FuzzyFinder(Path("/r"), ["alpha.py", "beta.py"])
        finder.set_query("bet")
        self.assertEqual(finder.matches, ["alpha.py", "beta.py"])
        self.assertTrue(finder.tick())
        self.assertEqual(finder.matches, ["beta.py"])
        self.assertFalse(finder.tick())
        self.assertEqual(finder.selected_path(), Path("/r/beta.py"))


if __name__ == "__main__":
    unittest.main()
