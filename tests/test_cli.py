"""CLI argument parsing and startup wiring."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from twinpane import cli
from twinpane.errors import StartupError


class CliParserTests(unittest.TestCase):
    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])
        self.assertIsNone(args.path)
        self.assertIsNone(args.dual_pane)
        self.assertIsNone(args.show_preview)
        self.assertEqual(args.style, "monokai")
        self.assertFalse(args.debug)

    def test_single_and_dual_are_exclusive(self) -> None:
        self.assertFalse(cli.build_parser().parse_args(["--single"]).dual_pane)
        self.assertTrue(cli.build_parser().parse_args(["--dual"]).dual_pane)
        with mock.patch("sys.stderr"), self.assertRaises(SystemExit):
            cli.build_parser().parse_args(["--dual", "--single"])

    def test_resolve_start_dir_uses_parent_of_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = root / "file.txt"
            target.write_text("x", encoding="utf-8")
            self.assertEqual(cli.resolve_start_dir(str(target)), root)
            self.assertEqual(cli.resolve_start_dir(str(root)), root)
            with self.assertRaises(SystemExit):
                cli.resolve_start_dir(str(root / "missing"))


class CliMainTests(unittest.TestCase):
    def test_main_runs_application_with_options(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch("twinpane.cli.configure_logging"), mock.patch(
                "twinpane.runtime.app.Application"
            ) as application:
                application.return_value.run.return_value = 0
                with self.assertRaises(SystemExit) as raised:
                    cli.main([str(root), "--single", "--no-color"])

        self.assertEqual(raised.exception.code, 0)
        options = application.call_args.args[0]
        self.assertEqual(options.start_dir, root)
        self.assertFalse(options.dual_pane)
        self.assertTrue(options.no_color)
        self.assertIsNone(options.show_preview)

    def test_startup_error_exits_with_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("twinpane.cli.configure_logging"), mock.patch(
                "twinpane.runtime.app.Application", side_effect=StartupError("no tty")
            ):
                with self.assertRaises(SystemExit) as raised:
                    cli.main([tmp])
        self.assertEqual(raised.exception.code, "twinpane: no tty")


if __name__ == "__main__":
    unittest.main()
