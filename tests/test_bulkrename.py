from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from twinpane.integrations.bulkrename import BulkRename


class BulkRenameTests(unittest.TestCase):
    def test_unchanged_names_are_not_renamed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.txt").write_text("a", encoding="utf-8")
            (root / "b.txt").write_text("b", encoding="utf-8")
            bulk = BulkRename()
            bulk.sources = [root / "a.txt", root / "b.txt"]

            self.assertIsNone(bulk.set_new_names(["a.txt", "c.txt", ""]))
            self.assertEqual(bulk.describe(), ["b.txt -> c.txt"])

            done = bulk.execute()

            self.assertEqual(done, [(root / "b.txt", root / "c.txt")])
            self.assertTrue((root / "c.txt").exists())
            self.assertTrue(bulk.is_empty())

    def test_name_count_mismatch_is_reported(self) -> None:
        bulk = BulkRename()
        bulk.sources = [Path("/tmp/x"), Path("/tmp/y")]

        self.assertEqual(bulk.set_new_names(["only"]), "Bulk rename: expected 2 names, got 1")
        self.assertIn("invalid name", bulk.set_new_names(["a/b", "c"]))

    def test_existing_target_is_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.txt").write_text("a", encoding="utf-8")
            (root / "taken.txt").write_text("t", encoding="utf-8")
            bulk = BulkRename()
            bulk.sources = [root / "a.txt"]
            bulk.set_new_names(["taken.txt"])

            self.assertEqual(bulk.execute(), [])
            self.assertTrue((root / "a.txt").exists())


if __name__ == "__main__":
    unittest.main()
