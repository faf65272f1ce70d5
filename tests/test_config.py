from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from twinpane import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("twinpane.config.CONFIG_PATH", Path(tmp) / "none.json"):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(
                    config.load_session_flags(),
                    {"dual_pane": True, "show_preview": False, "show_metadata": True},
                )
                self.assertFalse(config.load_show_hidden())

    def test_malformed_file_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")
            with mock.patch("twinpane.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
            config_path.write_text("[1, 2]", encoding="utf-8")
            with mock.patch("twinpane.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})

    def test_session_flags_round_trip_keeps_other_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("twinpane.config.CONFIG_PATH", config_path):
                config.save_show_hidden(True)
                config.save_session_flags({"dual_pane": False, "show_preview": True, "show_metadata": True})

                self.assertTrue(config.load_show_hidden())
                self.assertEqual(config.load_session_flags()["dual_pane"], False)
                self.assertEqual(config.load_session_flags()["show_preview"], True)

    def test_marks_drop_invalid_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                json.dumps({"marks": {"a": "/tmp", "long": "/x", "b": 3, "c": ""}}),
                encoding="utf-8",
            )
            with mock.patch("twinpane.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_marks(), {"a": Path("/tmp")})
                config.save_marks({"z": Path("/srv")})
                self.assertEqual(config.load_marks(), {"z": Path("/srv")})

    def test_openers_and_key_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(
                json.dumps({"opener": {".PDF": "zathura", "txt": 1}, "keys": {"CTRL_Y": "Quit"}}),
                encoding="utf-8",
            )
            with mock.patch("twinpane.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_openers(), {"pdf": "zathura"})
                self.assertEqual(config.load_key_overrides(), {"CTRL_Y": "Quit"})


if __name__ == "__main__":
    unittest.main()
