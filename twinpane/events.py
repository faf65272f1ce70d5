"""Typed events flowing from input, timers, and workers into the dispatcher.

Background threads only ever talk to the foreground through an
``EventChannel``; they never touch ``Status`` directly.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import TYPE_CHECKING, Union

from .errors import ChannelClosed

if TYPE_CHECKING:
    from .jobs.copy_move import CopyMoveJob


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key token such as ``"j"``, ``"UP"`` or ``"CTRL_F"``."""

    key: str


@dataclass(frozen=True)
class MouseEvent:
    """Mouse action at a 1-based terminal cell."""

    kind: str
    col: int
    row: int


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class TickEvent:
    """Cheap periodic event emitted by the refresher every iteration."""


@dataclass(frozen=True)
class RefreshEvent:
    """Periodic request to re-read directories whose mtime changed."""


@dataclass(frozen=True)
class FileCopiedEvent:
    """A copy/move job finished (fully or partially)."""

    job: CopyMoveJob


@dataclass(frozen=True)
class IpcEvent:
    """Payload received on the local pick socket."""

    payload: str


@dataclass(frozen=True)
class ActionEvent:
    """Run a named action as if its key had been pressed."""

    name: str


@dataclass(frozen=True)
class QuitEvent:
    """Ask the driver to leave its loop."""


FmEvent = Union[
    KeyEvent,
    MouseEvent,
    ResizeEvent,
    TickEvent,
    RefreshEvent,
    FileCopiedEvent,
    IpcEvent,
    ActionEvent,
    QuitEvent,
]


class EventChannel:
    """Multi-producer, single-consumer event queue with explicit close."""

    def __init__(self) -> None:
        self._queue: Queue[FmEvent] = Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, event: FmEvent) -> None:
        """Queue ``event``; raise ``ChannelClosed`` once the consumer is gone."""
        if self._closed.is_set():
            raise ChannelClosed("event channel is closed")
        self._queue.put(event)

    def close(self) -> None:
        self._closed.set()

    def empty(self) -> bool:
        return self._queue.empty()

    def get(self, timeout: float | None = None) -> FmEvent | None:
        """Block up to ``timeout`` seconds for one event."""
        try:
            return self._queue.get(timeout=timeout)
        except Empty:
            return None

    def drain(self) -> list[FmEvent]:
        """Return every queued event in arrival order without blocking."""
        out: list[FmEvent] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "ActionEvent",
    "EventChannel",
    "FileCopiedEvent",
    "FmEvent",
    "IpcEvent",
    "KeyEvent",
    "MouseEvent",
    "QuitEvent",
    "RefreshEvent",
    "ResizeEvent",
    "TickEvent",
]
