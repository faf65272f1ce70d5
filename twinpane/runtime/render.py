"""Compose and draw one frame from ``Status``.

``compose_frame`` is pure so layout can be tested without a terminal; the
row layout matches what ``dispatch.mouse`` expects.
"""

from __future__ import annotations

import os
import sys

from ..ansi import BOLD, DIM, REVERSE, fit, styled
from ..model.content_window import FOOTER_ROWS, HEADER_ROWS
from ..model.tab import Tab
from ..modes import DisplayMode, InputSimple, Navigate
from ..status import Status


LETTERED_MENUS = frozenset({Navigate.SHORTCUT, Navigate.CONTEXT, Navigate.HISTORY, Navigate.PICKER})


def _tab_rows(status: Status, tab: Tab, show_metadata: bool) -> list[str]:
    window = tab.window
    rows: list[str] = []
    if tab.display_mode is DisplayMode.PREVIEW:
        return list(tab.preview.lines[window.top : window.bottom])
    if tab.display_mode is DisplayMode.FUZZY:
        matches = tab.fuzzy.matches if tab.fuzzy is not None else []
        for idx in range(window.top, min(window.bottom, len(matches))):
            text = matches[idx]
            rows.append(styled(text, REVERSE) if idx == tab.index else text)
        return rows
    if tab.display_mode is DisplayMode.TREE:
        items = [(line.path, line.prefix() + line.info.format_line(show_metadata)) for line in tab.tree.lines]
    else:
        items = [(info.path, info.format_line(show_metadata)) for info in tab.directory.content]
    for idx in range(window.top, min(window.bottom, len(items))):
        path, text = items[idx]
        marker = "*" if path in status.menu.flagged else " "
        line = f"{marker}{text}"
        rows.append(styled(line, REVERSE) if idx == tab.index else line)
    return rows


def _tab_header(status: Status, pane_index: int) -> list[str]:
    tab = status.tabs[pane_index]
    title = str(tab.path)
    if tab.display_mode is DisplayMode.PREVIEW and tab.preview.title:
        title = tab.preview.title
    focused = pane_index == status.index
    details = [tab.display_mode.value, tab.sort_kind.describe()]
    if tab.filter_kind.describe():
        details.append(tab.filter_kind.describe())
    if tab.display_mode is DisplayMode.FUZZY and tab.fuzzy is not None:
        details.append(f"fuzzy: {tab.fuzzy.query}")
    if not tab.search.is_empty():
        details.append(tab.search.describe())
    return [
        styled(title, BOLD + REVERSE) if focused else styled(title, BOLD),
        styled(" | ".join(details), DIM),
        "",
    ]


def _menu_rows(status: Status, pane_index: int, height: int) -> list[str]:
    tab = status.tabs[pane_index]
    mode = tab.menu_mode
    menu = status.menu
    typed = menu.input.password_mask() if mode.kind is InputSimple.PASSWORD else menu.input.string()
    header = [styled(mode.title(), BOLD), f"> {typed}" if mode.is_input else "", ""]
    labels = menu.labels_for(mode, tab.history)
    selected = menu.index_for(mode, tab.history)
    rows = list(header[:HEADER_ROWS])
    window = menu.window
    for idx in range(window.top, min(window.bottom, len(labels))):
        prefix = f"{chr(ord('a') + idx)} " if mode.kind in LETTERED_MENUS and idx < 26 else ""
        text = f"{prefix}{labels[idx]}"
        rows.append(styled(text, REVERSE) if idx == selected and not mode.is_confirmation else text)
    return rows[:height]


def _pane(status: Status, pane_index: int, width: int, height: int) -> list[str]:
    tab = status.tabs[pane_index]
    menu_open = not tab.menu_mode.is_nothing
    files_height = status.height // 2 if menu_open else height
    rows = _tab_header(status, pane_index) + _tab_rows(status, tab, status.session.show_metadata)
    rows = rows[:files_height] + [""] * max(0, files_height - len(rows))
    if menu_open:
        rows += _menu_rows(status, pane_index, height - files_height)
    rows = rows[:height] + [""] * max(0, height - len(rows))
    return [fit(row, width) for row in rows]


def _footer(status: Status) -> str:
    progress = status.jobs.progress.snapshot()
    if progress is not None:
        return progress.bar()
    if status.message:
        return status.message
    flagged = len(status.menu.flagged)
    suffix = f"  {flagged} flagged" if flagged else ""
    return f"{status.focus.value}{suffix}"


def compose_frame(status: Status) -> list[str]:
    """Every screen row, each exactly ``status.width`` columns wide."""
    body_height = max(0, status.height - FOOTER_ROWS)
    if status.session.dual_pane:
        left_width = status.width // 2
        left = _pane(status, 0, left_width, body_height)
        right = _pane(status, 1, status.width - left_width, body_height)
        body = [a + b for a, b in zip(left, right)]
    else:
        body = _pane(status, 0, status.width, body_height)
    plugin_lines = status.plugins.draw(status.width, body_height)
    if plugin_lines:
        start = max(0, body_height - len(plugin_lines))
        for offset, text in enumerate(plugin_lines[:body_height]):
            body[start + offset] = fit(text, status.width)
    return body + [fit(styled(_footer(status), REVERSE), status.width)]


def draw(status: Status, fd: int | None = None) -> None:
    frame = compose_frame(status)
    out = "\033[H\033[J" + "\r\n".join(frame)
    os.write(fd if fd is not None else sys.stdout.fileno(), out.encode("utf-8", errors="replace"))
