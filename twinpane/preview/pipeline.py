"""Background preview worker.

One worker thread at a time builds previews. Requests are collapsed per
pane so only the newest pending request for a pane is built; results carry
the pane index they were requested for and are drained without blocking.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from .artifact import Preview
from .renderers import RenderOptions, build_preview

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewRequest:
    request_id: int
    path: Path
    pane_index: int
    options: RenderOptions


@dataclass(frozen=True)
class PreviewResult:
    request: PreviewRequest
    preview: Preview

    @property
    def path(self) -> Path:
        return self.request.path

    @property
    def pane_index(self) -> int:
        return self.request.pane_index


class PreviewPipeline:
    """Latest-request-wins preview builder keyed by pane."""

    def __init__(self, build: Callable[[Path, RenderOptions], Preview] = build_preview) -> None:
        self._build = build
        self._lock = threading.Lock()
        self._pending: dict[int, PreviewRequest] = {}
        self._running = False
        self._closed = False
        self._next_request_id = 1
        self._results: Queue[PreviewResult] = Queue()

    def _next_pending(self) -> PreviewRequest | None:
        with self._lock:
            if not self._pending or self._closed:
                self._running = False
                return None
            oldest = min(self._pending.values(), key=lambda request: request.request_id)
            del self._pending[oldest.pane_index]
            return oldest

    def _worker(self) -> None:
        while True:
            request = self._next_pending()
            if request is None:
                return
            try:
                preview = self._build(request.path, request.options)
            except Exception as exc:
                LOGGER.exception("preview worker failed on %s", request.path)
                preview = Preview.unreadable(request.path, str(exc))
            self._results.put(PreviewResult(request=request, preview=preview))

    def request(self, path: Path, pane_index: int, options: RenderOptions | None = None) -> int:
        """Queue a preview of ``path`` for ``pane_index`` and return its request id.

        A still-pending request for the same pane is replaced. A request the
        worker already started still completes; the consumer filters it out.
        """
        with self._lock:
            if self._closed:
                return 0
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending[pane_index] = PreviewRequest(
                request_id=request_id,
                path=path,
                pane_index=pane_index,
                options=options if options is not None else RenderOptions(),
            )
            if self._running:
                return request_id
            self._running = True

        worker = threading.Thread(
            target=self._worker,
            name="twinpane-preview",
            daemon=True,
        )
        worker.start()
        return request_id

    def drain_results(self) -> list[PreviewResult]:
        """Drain all completed previews in completion order."""
        out: list[PreviewResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._pending.clear()


__all__ = ["PreviewPipeline", "PreviewRequest", "PreviewResult"]
