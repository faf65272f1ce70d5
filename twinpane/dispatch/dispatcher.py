"""Turn one ``FmEvent`` into calls on ``Status``.

The dispatcher is the only consumer of the event channel, so every state
change happens on the foreground thread in the order events were sent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..errors import DispatchError
from ..events import (
    ActionEvent,
    FileCopiedEvent,
    FmEvent,
    IpcEvent,
    KeyEvent,
    MouseEvent,
    QuitEvent,
    RefreshEvent,
    ResizeEvent,
    TickEvent,
)
from ..input.bindings import KeyBindings
from ..input.mouse import parse_mouse_token
from ..modes import DisplayMode
from ..status import Status
from .actions import ACTIONS, Action
from .menu_chars import menu_char
from .mouse import handle_mouse

LOGGER = logging.getLogger(__name__)


def is_printable_char(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class EventDispatcher:
    """Route events to actions through ``bindings``."""

    def __init__(self, bindings: KeyBindings | None = None, actions: Mapping[str, Action] | None = None) -> None:
        self.actions = dict(actions if actions is not None else ACTIONS)
        self.bindings = bindings if bindings is not None else KeyBindings.default()

    def dispatch(self, status: Status, event: FmEvent) -> None:
        """Apply ``event``; unexpected failures are wrapped in ``DispatchError``."""
        try:
            self._dispatch(status, event)
            status.after_event()
        except DispatchError:
            raise
        except Exception as exc:
            raise DispatchError(f"{type(event).__name__} failed: {exc}") from exc

    def _dispatch(self, status: Status, event: FmEvent) -> None:
        if isinstance(event, KeyEvent):
            self.handle_key(status, event.key)
        elif isinstance(event, MouseEvent):
            handle_mouse(status, event)
        elif isinstance(event, ResizeEvent):
            status.resize(event.width, event.height)
        elif isinstance(event, TickEvent):
            status.tick()
        elif isinstance(event, RefreshEvent):
            status.refresh_if_needed()
        elif isinstance(event, FileCopiedEvent):
            status.file_copied(event)
        elif isinstance(event, IpcEvent):
            status.handle_ipc(event.payload)
        elif isinstance(event, ActionEvent):
            self.run_action(status, event.name)
        elif isinstance(event, QuitEvent):
            status.quit()

    def run_action(self, status: Status, name: str) -> None:
        action = self.actions.get(name)
        if action is None:
            LOGGER.warning("unknown action %s", name)
            status.set_message(f"Unknown action {name}")
            return
        action(status)

    def handle_key(self, status: Status, key: str) -> None:
        """Menu typing first, then the active plugin, then the binding table."""
        mouse = parse_mouse_token(key)
        if mouse is not None:
            handle_mouse(status, mouse)
            return
        tab = status.current_tab
        menu_open = not tab.menu_mode.is_nothing
        if menu_open and is_printable_char(key):
            menu_char(status, key)
            return
        if not menu_open and tab.display_mode is DisplayMode.FUZZY and tab.fuzzy is not None and is_printable_char(key):
            tab.fuzzy.set_query(tab.fuzzy.query + key)
            return
        if status.plugins.active_plugin() is not None and key.startswith("ALT_"):
            status.plugins.handle_input(key)
            return
        name = self.bindings.action_for(key)
        if name is None:
            LOGGER.debug("unbound key %r", key)
            return
        self.run_action(status, name)
