"""Application driver: builds the state, starts the workers, runs the loop.

Owns shutdown order: stop the refresher, close the event channel, wait for
the running copy job, then persist what the session changed.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from ..config import (
    CONFIG_DIR,
    load_key_overrides,
    load_marks,
    load_openers,
    load_plugins,
    load_session_flags,
    load_shortcuts,
    load_show_hidden,
    save_marks,
    save_session_flags,
    save_show_hidden,
)
from ..dispatch import ACTIONS, EventDispatcher
from ..errors import DispatchError, WorkerDisconnectedError
from ..events import EventChannel, FmEvent
from ..input.bindings import KeyBindings
from ..integrations.plugins import PluginHost
from ..integrations.trash import Trash
from ..jobs.copy_move import CopyMoveQueue
from ..model.lists import Marks, Shortcuts
from ..model.menu import MenuHolder
from ..model.session import Session
from ..model.tab import Tab
from ..preview.pipeline import PreviewPipeline
from ..preview.renderers import RenderOptions
from ..status import Status, TuiHooks
from .input_source import InputSource
from .refresher import Refresher
from .render import draw
from .terminal import TerminalController

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppOptions:
    """Startup choices from the command line; ``None`` means use the config."""

    start_dir: Path
    socket_path: Path | None = None
    style: str = "monokai"
    no_color: bool = False
    dual_pane: bool | None = None
    show_preview: bool | None = None


def build_status(
    options: AppOptions,
    channel: EventChannel,
    width: int = 80,
    height: int = 24,
    tui: TuiHooks | None = None,
) -> Status:
    """Create both tabs, the shared menu, and the preview and copy workers."""
    flags = load_session_flags()
    if options.dual_pane is not None:
        flags["dual_pane"] = options.dual_pane
    if options.show_preview is not None:
        flags["show_preview"] = options.show_preview
    session = Session(persist=save_session_flags, **flags)
    show_hidden = load_show_hidden()
    tabs = (
        Tab(options.start_dir, show_hidden=show_hidden, height=height),
        Tab(options.start_dir, show_hidden=show_hidden, height=height),
    )
    menu = MenuHolder(
        marks=Marks(load_marks(), save=save_marks),
        shortcuts=Shortcuts.build(options.start_dir, CONFIG_DIR, load_shortcuts()),
        trash=Trash(),
    )
    return Status(
        tabs=tabs,
        menu=menu,
        session=session,
        pipeline=PreviewPipeline(),
        jobs=CopyMoveQueue(channel.send),
        plugins=PluginHost.from_config(load_plugins()),
        width=width,
        height=height,
        render_options=RenderOptions(style=options.style, no_color=options.no_color),
        openers=load_openers(),
        tui=tui,
    )


def build_dispatcher() -> EventDispatcher:
    bindings = KeyBindings.default().apply_overrides(load_key_overrides(), ACTIONS)
    return EventDispatcher(bindings, ACTIONS)


class Application:
    """Foreground read, dispatch and render loop over one ``Status``."""

    def __init__(self, options: AppOptions, stdin_fd: int | None = None, stdout_fd: int | None = None) -> None:
        self.options = options
        self.stdin_fd = stdin_fd if stdin_fd is not None else sys.stdin.fileno()
        self.stdout_fd = stdout_fd if stdout_fd is not None else sys.stdout.fileno()
        self.terminal = TerminalController(self.stdin_fd, self.stdout_fd)
        self.channel = EventChannel()
        self.source = InputSource(self.channel, self.stdin_fd)
        width, height = self.source.size
        self.status = build_status(
            options,
            self.channel,
            width=width,
            height=height,
            tui=TuiHooks(disable=self.terminal.disable_tui_mode, enable=self.terminal.enable_tui_mode),
        )
        self.dispatcher = build_dispatcher()
        self.refresher = Refresher(self.channel.send, options.socket_path)
        self._refresher_lost = False

    def handle(self, event: FmEvent) -> None:
        try:
            self.dispatcher.dispatch(self.status, event)
        except DispatchError:
            LOGGER.exception("dispatch failed")
            self.status.set_message("Internal error, see the log")

    def check_workers(self) -> None:
        """Surface a dead refresher once; the rest of the application keeps running."""
        if self._refresher_lost:
            return
        try:
            self.refresher.check_alive()
        except WorkerDisconnectedError as exc:
            self._refresher_lost = True
            LOGGER.error("%s", exc)
            self.status.set_message("Background refresh stopped; IPC and auto refresh are off")

    def step(self) -> None:
        """One pass: read input, dispatch it, attach finished previews, redraw if needed."""
        events = self.source.poll()
        self.check_workers()
        for event in events:
            self.handle(event)
            if self.status.should_quit:
                return
        if self.status.poll_background() or events:
            draw(self.status, self.stdout_fd)

    def run(self) -> int:
        LOGGER.info("starting in %s (socket %s)", self.options.start_dir, self.refresher.socket_path)
        try:
            with self.terminal.raw_mode():
                draw(self.status, self.stdout_fd)
                while not self.status.should_quit:
                    self.step()
        finally:
            self.shutdown()
        return 0

    def shutdown(self) -> None:
        self.refresher.quit()
        self.channel.close()
        self.status.pipeline.close()
        if not self.status.jobs.is_idle():
            LOGGER.info("waiting for the running copy job")
            self.status.jobs.join()
        save_show_hidden(self.status.tabs[0].show_hidden)
        LOGGER.info("stopped")


def default_start_dir() -> Path:
    try:
        return Path(os.getcwd())
    except OSError:
        return Path.home()
