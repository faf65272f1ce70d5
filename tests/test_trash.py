from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from twinpane.integrations.trash import Trash, parse_trash_info


class TrashTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name)
        self.trash = Trash(root=self.base / "Trash")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_trash_writes_info_and_moves_data(self) -> None:
        victim = self.base / "my file.txt"
        victim.write_text("x", encoding="utf-8")
        entry = self.trash.trash(victim)

        self.assertFalse(victim.exists())
        self.assertTrue((self.trash.files_dir / entry.name).exists())
        info = self.trash.info_dir / f"{entry.name}.trashinfo"
        self.assertIn("Path=", info.read_text(encoding="utf-8"))
        self.assertEqual(parse_trash_info(entry.name, info).original_path, victim)

    def test_same_name_twice_gets_distinct_entries(self) -> None:
        for _ in range(2):
            victim = self.base / "dup.txt"
            victim.write_text("x", encoding="utf-8")
            self.trash.trash(victim)
        self.trash.update()
        self.assertEqual(sorted(entry.name for entry in self.trash.entries), ["dup.txt", "dup.txt.1"])

    def test_restore_refuses_to_overwrite(self) -> None:
        victim = self.base / "a.txt"
        victim.write_text("old", encoding="utf-8")
        entry = self.trash.trash(victim)
        victim.write_text("new", encoding="utf-8")
        with self.assertRaises(FileExistsError):
            self.trash.restore(entry)
        victim.unlink()
        self.assertEqual(self.trash.restore(entry), victim)
        self.assertEqual(victim.read_text(encoding="utf-8"), "old")
        self.assertEqual(len(self.trash), 0)

    def test_empty_removes_everything(self) -> None:
        folder = self.base / "folder"
        folder.mkdir()
        (folder / "inner.txt").write_text("x", encoding="utf-8")
        self.trash.trash(folder)
        single = self.base / "single"
        single.write_text("x", encoding="utf-8")
        self.trash.trash(single)

        self.trash.empty()
        self.assertEqual(len(self.trash), 0)
        self.assertEqual(list(self.trash.files_dir.iterdir()), [])

    def test_malformed_info_is_skipped(self) -> None:
        self.trash.info_dir.mkdir(parents=True)
        (self.trash.info_dir / "bad.trashinfo").write_text("garbage", encoding="utf-8")
        self.trash.update()
        self.assertEqual(self.trash.entries, [])


if __name__ == "__main__":
    unittest.main()
