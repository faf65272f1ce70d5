"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing, modifier combos, and SGR mouse events.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_TOKENS = {
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "SHIFT_TAB",
}

_CSI_TILDE = {
    "1": "HOME",
    "2": "INSERT",
    "3": "DELETE",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
}

_MODIFIED_ARROWS = {
    ("2", b"A"): "SHIFT_UP",
    ("2", b"B"): "SHIFT_DOWN",
    ("2", b"C"): "SHIFT_RIGHT",
    ("2", b"D"): "SHIFT_LEFT",
    ("3", b"C"): "ALT_RIGHT",
    ("3", b"D"): "ALT_LEFT",
    ("5", b"C"): "CTRL_RIGHT",
    ("5", b"D"): "CTRL_LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, first: bytes) -> str:
    lead = first[0]
    if lead < 0xC0:
        return first.decode("utf-8", errors="replace")
    extra = 1 if lead < 0xE0 else 2 if lead < 0xF0 else 3
    data = first
    for _ in range(extra):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def _decode_mouse(fd: int) -> str:
    # SGR mouse: ESC [ < btn ; col ; row (M/m)
    payload = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if part in {b"M", b"m"}:
            break
        payload.append(part)
        if len(payload) > 64:
            return "ESC"
    try:
        btn_s, col_s, row_s = b"".join(payload).decode("ascii").split(";")
        btn = int(btn_s)
        col = int(col_s)
        row = int(row_s)
    except ValueError:
        return "ESC"
    button = btn & 0b11
    if btn & 0b0100_0000:
        if button == 0:
            return f"MOUSE_WHEEL_UP:{col}:{row}"
        if button == 1:
            return f"MOUSE_WHEEL_DOWN:{col}:{row}"
        return "MOUSE"
    if btn & 0b0010_0000:
        return "MOUSE"
    suffix = "DOWN" if part == b"M" else "UP"
    name = ("LEFT", "MIDDLE", "RIGHT")[button] if button < 3 else "LEFT"
    return f"MOUSE_{name}_{suffix}:{col}:{row}"


def _decode_csi(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _CSI_FINAL:
        return _CSI_FINAL[seq]
    if seq == b"<":
        return _decode_mouse(fd)
    if not seq.isdigit():
        return "ESC"
    params = seq.decode("ascii")
    while True:
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            return "ESC"
        if nxt.isdigit() or nxt == b";":
            params += nxt.decode("ascii")
            if len(params) > 16:
                return "ESC"
            continue
        break
    if nxt == b"~":
        return _CSI_TILDE.get(params.split(";")[0], "ESC")
    if params.startswith("1;"):
        return _MODIFIED_ARROWS.get((params[2:], nxt), "ESC")
    return "ESC"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` when nothing arrived in time.

    Printable input is returned as the character itself; control keys as
    ``CTRL_<LETTER>``; ``ESC`` followed by a printable character as
    ``ALT_<char>``; mouse events as ``MOUSE_<BUTTON>_<DOWN|UP>:col:row``.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    token = _CONTROL_TOKENS.get(ch)
    if token is not None:
        return token
    if ch == b"\x00":
        return "CTRL_SPACE"
    if ord(ch) < 0x1B:
        return f"CTRL_{chr(ord(ch) + 0x40)}"

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"[":
        return _decode_csi(fd)
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        return _CSI_FINAL.get(final or b"", "ESC")
    if seq == b"\x1b":
        _PENDING_BYTES.append(seq)
        return "ESC"
    if 0x20 < seq[0] < 0x7F:
        return f"ALT_{seq.decode('ascii')}"
    _PENDING_BYTES.append(seq)
    return "ESC"
