"""Mouse token parsing."""

from __future__ import annotations

from ..events import MouseEvent


def parse_mouse_token(key: str) -> MouseEvent | None:
    """Turn ``MOUSE_LEFT_DOWN:12:5`` into ``MouseEvent("LEFT_DOWN", 12, 5)``."""
    if not key.startswith("MOUSE_"):
        return None
    parts = key.split(":")
    if len(parts) != 3:
        return None
    try:
        col = int(parts[1])
        row = int(parts[2])
    except ValueError:
        return None
    return MouseEvent(kind=parts[0][len("MOUSE_") :], col=col, row=row)
