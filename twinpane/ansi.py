"""ANSI-aware clipping and padding for composed frames."""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\033[0m"
REVERSE = "\033[7m"
BOLD = "\033[1m"
DIM = "\033[2;38;5;245m"


def char_display_width(ch: str, col: int) -> int:
    """Terminal columns taken by ``ch`` at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_ansi_line(text: str, max_cols: int) -> tuple[str, int]:
    """Trim ``text`` to ``max_cols`` display columns; return it with its width.

    Escape sequences are kept and do not count; tabs become spaces.
    """
    if max_cols <= 0 or not text:
        return "", 0
    out: list[str] = []
    col = 0
    i = 0
    while i < len(text) and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        width = char_display_width(ch, col)
        if col + width > max_cols:
            break
        out.append(" " * width if ch == "\t" else ch)
        col += width
        i += 1
    return "".join(out), col


def fit(text: str, width: int) -> str:
    """Clip or pad ``text`` to exactly ``width`` columns, resetting styles at the end."""
    clipped, used = clip_ansi_line(text, width)
    suffix = RESET if "\x1b" in clipped else ""
    return clipped + suffix + " " * max(0, width - used)


def styled(text: str, style: str) -> str:
    return f"{style}{text}{RESET}"
