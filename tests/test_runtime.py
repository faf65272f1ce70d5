"""Input polling and application wiring."""

from __future__ import annotations

import json
import tempfile
import time
import unittest
from pathlib import Path
from unittest import mock

from twinpane.dispatch import EventDispatcher
from twinpane.events import EventChannel, KeyEvent, MouseEvent, ResizeEvent, TickEvent
from twinpane.input.bindings import KeyBinding, KeyBindings
from twinpane.runtime.app import AppOptions, Application, build_dispatcher, build_status
from twinpane.runtime.input_source import InputSource


class InputSourceTests(unittest.TestCase):
    def test_poll_merges_key_resize_and_channel(self) -> None:
        channel = EventChannel()
        sizes = iter([(80, 24), (100, 30)])
        keys = iter(["j"])
        source = InputSource(channel, 0, read=lambda fd, timeout: next(keys), terminal_size=lambda: next(sizes))
        channel.send(TickEvent())

        events = source.poll()
        self.assertEqual(events, [ResizeEvent(100, 30), KeyEvent("j"), TickEvent()])
        self.assertEqual(source.size, (100, 30))

    def test_poll_parses_mouse_and_skips_empty(self) -> None:
        channel = EventChannel()
        keys = iter(["MOUSE_LEFT_DOWN:3:4", "", "MOUSE"])
        source = InputSource(channel, 0, read=lambda fd, timeout: next(keys), terminal_size=lambda: (80, 24))
        self.assertEqual(source.poll(), [MouseEvent("LEFT_DOWN", 3, 4)])
        self.assertEqual(source.poll(), [])
        self.assertEqual(source.poll(), [])

    def test_keyboard_interrupt_is_not_fatal(self) -> None:
        def read(fd: int, timeout: int) -> str:
            raise KeyboardInterrupt

        source = InputSource(EventChannel(), 0, read=read, terminal_size=lambda: (80, 24))
        self.assertEqual(source.poll(), [])


class BuildStatusTests(unittest.TestCase):
    def test_command_line_overrides_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            config_path = root / "config.json"
            config_path.write_text(
                json.dumps({"dual_pane": True, "show_preview": True, "show_hidden": True, "keys": {"CTRL_Y": "Quit"}}),
                encoding="utf-8",
            )
            with mock.patch("twinpane.config.CONFIG_PATH", config_path):
                status = build_status(AppOptions(start_dir=root, dual_pane=False), EventChannel(), width=80, height=24)
                dispatcher = build_dispatcher()
            try:
                self.assertFalse(status.session.dual_pane)
                self.assertTrue(status.session.show_preview)
                self.assertTrue(status.tabs[0].show_hidden)
                self.assertEqual(status.tabs[0].path, root)
                self.assertIn(root / "config.json", status.tabs[0].list_paths())
                self.assertEqual(dispatcher.bindings.action_for("CTRL_Y"), "Quit")
                self.assertEqual(status.plugins.plugins[0].name, "clock")
            finally:
                status.pipeline.close()


def _make_app(root: Path, channel: EventChannel, keys: list[str], dispatcher: EventDispatcher) -> Application:
    pending = iter(keys)
    app = Application.__new__(Application)
    app.options = AppOptions(start_dir=root)
    app.channel = channel
    app.source = InputSource(channel, 0, read=lambda fd, timeout: next(pending, ""), terminal_size=lambda: (80, 24))
    app.status = build_status(app.options, channel, width=80, height=24)
    app.dispatcher = dispatcher
    app.refresher = mock.Mock()
    app._refresher_lost = False
    app.stdout_fd = 1
    return app


class ApplicationStepTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "note.txt").write_text("hello\n", encoding="utf-8")
        self._config = mock.patch("twinpane.config.CONFIG_PATH", self.root / "config.json")
        self._config.start()

    def tearDown(self) -> None:
        self._config.stop()
        self._tmp.cleanup()

    def test_finished_preview_is_attached_without_tick_events(self) -> None:
        app = _make_app(self.root, EventChannel(), [], build_dispatcher())
        tab = app.status.current_tab
        try:
            tab.select_path(self.root / "note.txt")
            app.status.preview_selected()
            with mock.patch("twinpane.runtime.app.draw") as draw:
                deadline = time.monotonic() + 5
                while tab.preview.is_empty and time.monotonic() < deadline:
                    app.step()
                    time.sleep(0.01)
        finally:
            app.status.pipeline.close()

        self.assertFalse(tab.preview.is_empty)
        draw.assert_called()

    def test_failed_action_is_reported_and_loop_continues(self) -> None:
        def explode(status) -> None:
            raise RuntimeError("boom")

        bindings = KeyBindings().register_binding(KeyBinding(("x",), "Explode"))
        app = _make_app(self.root, EventChannel(), ["x", "q"], EventDispatcher(bindings, {"Explode": explode}))
        try:
            with mock.patch("twinpane.runtime.app.draw"):
                app.step()
                self.assertEqual(app.status.message, "Internal error, see the log")
                self.assertFalse(app.status.should_quit)
                app.step()
        finally:
            app.status.pipeline.close()

        self.assertFalse(app.status.should_quit)


if __name__ == "__main__":
    unittest.main()
