"""Background timer thread that also owns the IPC socket.

Emits ``TickEvent`` every iteration and ``RefreshEvent`` once every
``refresh_every`` iterations. A connection on the Unix socket that writes a
non-empty payload becomes one ``IpcEvent``.
"""

from __future__ import annotations

import logging
import os
import socket
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path

from ..errors import ChannelClosed, StartupError, WorkerDisconnectedError
from ..events import FmEvent, IpcEvent, RefreshEvent, TickEvent

LOGGER = logging.getLogger(__name__)

TICK_INTERVAL_SECONDS = 0.05
# Ten seconds' worth of ticks.
REFRESH_EVERY_TICKS = 200
CONNECTION_READ_TIMEOUT_SECONDS = 0.05
MAX_PAYLOAD_BYTES = 64 * 1024


def default_socket_path(pid: int | None = None) -> Path:
    return Path(tempfile.gettempdir()) / f"twinpane-socket-{pid if pid is not None else os.getpid()}.sock"


def bind_listener(path: Path) -> socket.socket:
    """Bind a non-blocking Unix listener at ``path``; raise ``StartupError`` on failure."""
    listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        if path.exists():
            path.unlink()
        listener.bind(str(path))
        os.chmod(path, 0o600)
        listener.listen(8)
        listener.setblocking(False)
    except OSError as exc:
        listener.close()
        raise StartupError(f"cannot bind IPC socket {path}: {exc}") from exc
    LOGGER.info("listening on %s", path)
    return listener


def read_payload(connection: socket.socket, timeout: float = CONNECTION_READ_TIMEOUT_SECONDS) -> str:
    """Read until the peer closes or stays silent for ``timeout`` seconds."""
    connection.setblocking(True)
    connection.settimeout(timeout)
    chunks: list[bytes] = []
    size = 0
    while size < MAX_PAYLOAD_BYTES:
        try:
            chunk = connection.recv(4096)
        except socket.timeout:
            break
        if not chunk:
            break
        chunks.append(chunk)
        size += len(chunk)
    return b"".join(chunks).decode("utf-8", errors="replace")


class Refresher:
    """Tick/refresh timer plus IPC accept loop in one daemon thread."""

    def __init__(
        self,
        send: Callable[[FmEvent], None],
        socket_path: Path | None = None,
        interval: float = TICK_INTERVAL_SECONDS,
        refresh_every: int = REFRESH_EVERY_TICKS,
    ) -> None:
        self._send = send
        self.socket_path = socket_path if socket_path is not None else default_socket_path()
        self.interval = interval
        self.refresh_every = max(1, refresh_every)
        self._listener = bind_listener(self.socket_path)
        self._shutdown = threading.Event()
        self._ticks = 0
        self._thread = threading.Thread(target=self._run, name="twinpane-refresher", daemon=True)
        self._thread.start()

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def check_alive(self) -> None:
        """Raise ``WorkerDisconnectedError`` when the thread stopped without being asked to."""
        if not self._thread.is_alive() and not self._shutdown.is_set():
            raise WorkerDisconnectedError("refresher thread stopped")

    def _accept_one(self) -> None:
        try:
            connection, _ = self._listener.accept()
        except (BlockingIOError, InterruptedError):
            return
        except OSError as exc:
            LOGGER.warning("IPC accept failed: %s", exc)
            return
        with connection:
            try:
                payload = read_payload(connection)
            except OSError as exc:
                LOGGER.warning("IPC read failed: %s", exc)
                return
        if payload:
            LOGGER.debug("IPC payload %r", payload)
            self._send(IpcEvent(payload))

    def _tick(self) -> None:
        self._ticks += 1
        if self._ticks >= self.refresh_every:
            self._ticks = 0
            self._send(RefreshEvent())
        else:
            self._send(TickEvent())

    def _run(self) -> None:
        try:
            while True:
                self._accept_one()
                if self._shutdown.is_set():
                    break
                self._tick()
                self._shutdown.wait(self.interval)
        except ChannelClosed:
            LOGGER.info("event channel closed, refresher stopping")
        finally:
            self._cleanup()

    def _cleanup(self) -> None:
        self._listener.close()
        try:
            self.socket_path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("cannot remove %s: %s", self.socket_path, exc)

    def quit(self, timeout: float | None = 2.0) -> None:
        """Signal the thread and wait for it to remove the socket."""
        self._shutdown.set()
        self._thread.join(timeout)
