"""Foreground input: terminal keys and resizes merged with background events."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable

from ..events import EventChannel, FmEvent, KeyEvent, MouseEvent, ResizeEvent
from ..input.mouse import parse_mouse_token
from ..input.reader import read_key

LOGGER = logging.getLogger(__name__)

KEY_TIMEOUT_MS = 50


class InputSource:
    """Yield the next batch of events in arrival order.

    Background workers send into ``channel``; the terminal is polled with a
    short timeout so their events are never delayed by more than one poll.
    """

    def __init__(
        self,
        channel: EventChannel,
        stdin_fd: int,
        read: Callable[[int, int], str] = read_key,
        terminal_size: Callable[[], tuple[int, int]] | None = None,
    ) -> None:
        self.channel = channel
        self.stdin_fd = stdin_fd
        self._read = read
        self._terminal_size = terminal_size if terminal_size is not None else _terminal_size
        self._size = self._terminal_size()

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def _key_event(self, key: str) -> FmEvent | None:
        if key in ("", "MOUSE"):
            return None
        mouse: MouseEvent | None = parse_mouse_token(key)
        if mouse is not None:
            return mouse
        return KeyEvent(key)

    def poll(self) -> list[FmEvent]:
        """Read at most one key, then drain the background channel."""
        events: list[FmEvent] = []
        size = self._terminal_size()
        if size != self._size:
            self._size = size
            events.append(ResizeEvent(*size))
        try:
            key = self._read(self.stdin_fd, KEY_TIMEOUT_MS)
        except KeyboardInterrupt:
            key = ""
        event = self._key_event(key)
        if event is not None:
            events.append(event)
        events.extend(self.channel.drain())
        return events


def _terminal_size() -> tuple[int, int]:
    term = shutil.get_terminal_size((80, 24))
    return term.columns, term.lines
