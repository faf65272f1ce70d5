"""Scroll window over a list of rows.

Keeps ``top <= selection < bottom`` and ``bottom - top <= height`` for any
selection passed through ``scroll_to``.
"""

from __future__ import annotations

WINDOW_PADDING = 4
HEADER_ROWS = 3
FOOTER_ROWS = 1
PREVIEW_PAGE_SKIP = 30


def displayed_rows(rect_height: int) -> int:
    """Rows left for content once header and footer are drawn."""
    return max(0, rect_height - HEADER_ROWS - FOOTER_ROWS)


class ContentWindow:
    """Visible slice ``[top, bottom)`` of a list with ``len`` rows."""

    def __init__(self, length: int = 0, rect_height: int = 80) -> None:
        self.len = max(0, length)
        self.height = displayed_rows(rect_height)
        self.top = 0
        self.bottom = min(self.len, self.height)

    def __repr__(self) -> str:
        return f"ContentWindow(top={self.top}, bottom={self.bottom}, len={self.len}, height={self.height})"

    def _padding(self) -> int:
        return min(WINDOW_PADDING, max(0, self.height - 1))

    def _clamp(self) -> None:
        self.top = max(0, min(self.top, self.len - self.height))
        self.bottom = min(self.len, self.top + self.height)

    def set_height(self, rect_height: int) -> None:
        self.height = displayed_rows(rect_height)
        self._clamp()

    def set_len(self, length: int) -> None:
        self.len = max(0, length)
        self._clamp()

    def reset(self, length: int) -> None:
        """Point the window at the first rows of a fresh list."""
        self.len = max(0, length)
        self.top = 0
        self.bottom = min(self.len, self.height)

    def scroll_to(self, index: int) -> None:
        """Move the window so that ``index`` is visible."""
        if self.height <= 0:
            return
        if self.len <= self.height:
            self.top = 0
            self.bottom = self.len
            return
        if index < self.top or index >= self.bottom:
            self.top = max(0, min(index - self._padding(), self.len - self.height))
        self.bottom = min(self.len, self.top + self.height)

    def scroll_up_one(self, index: int) -> None:
        if index < self.top + self._padding() and self.top > 0:
            self.top -= 1
            self.bottom = min(self.len, self.top + self.height)
        self.scroll_to(index)

    def scroll_down_one(self, index: int) -> None:
        if index + self._padding() >= self.bottom and self.bottom < self.len:
            self.top += 1
            self.bottom = min(self.len, self.top + self.height)
        self.scroll_to(index)

    def preview_page_up(self) -> None:
        skip = min(self.top, PREVIEW_PAGE_SKIP)
        self.top -= skip
        self.bottom -= skip

    def preview_page_down(self) -> None:
        if self.bottom < self.len:
            skip = min(self.len - self.bottom, PREVIEW_PAGE_SKIP)
            self.top += skip
            self.bottom += skip

    def contains(self, index: int) -> bool:
        return self.top <= index < self.bottom


def is_row_in_header(row: int) -> bool:
    """Return whether 0-based ``row`` falls in a pane header."""
    return row < HEADER_ROWS
