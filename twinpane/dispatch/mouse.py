"""Map mouse events onto panes, file rows and menu rows.

Terminal coordinates are 1-based. Each pane shows ``HEADER_ROWS`` header
lines, then its file rows; an open menu takes the lower half of its pane
and draws its own header before the menu rows. The last line is the footer.
"""

from __future__ import annotations

from enum import Enum

from ..events import MouseEvent
from ..model.content_window import FOOTER_ROWS, HEADER_ROWS, is_row_in_header
from ..modes import MenuMode, Navigate
from ..status import Status
from .actions import open_file


class Area(Enum):
    HEADER = "header"
    FILES = "files"
    MENU = "menu"
    FOOTER = "footer"


def pane_at(status: Status, col: int) -> int:
    if not status.session.dual_pane:
        return 0
    return 0 if col - 1 < status.width // 2 else 1


def area_at(status: Status, pane: int, row: int) -> tuple[Area, int | None]:
    """Which part of ``pane`` holds 1-based ``row``, with the list index under it."""
    line = row - 1
    if line >= status.height - FOOTER_ROWS:
        return Area.FOOTER, None
    tab = status.tabs[pane]
    menu_top = status.height // 2
    if not tab.menu_mode.is_nothing and line >= menu_top:
        offset = line - menu_top
        if offset < HEADER_ROWS:
            return Area.MENU, None
        return Area.MENU, offset - HEADER_ROWS + status.menu.window.top
    if is_row_in_header(line):
        return Area.HEADER, None
    return Area.FILES, line - HEADER_ROWS + tab.window.top


def _select_under(status: Status, area: Area, index: int | None) -> bool:
    if index is None:
        return False
    tab = status.current_tab
    if area is Area.FILES:
        if index >= len(tab):
            return False
        tab.select_index(index)
        return True
    if area is Area.MENU:
        if index >= status.menu.len_for(tab.menu_mode, tab.history):
            return False
        status.menu.select_index(tab.menu_mode, tab.history, index)
        return True
    return False


def handle_mouse(status: Status, event: MouseEvent) -> None:
    pane = pane_at(status, event.col)
    area, index = area_at(status, pane, event.row)
    if area is Area.FOOTER:
        return
    status.select_pane(pane)
    tab = status.current_tab
    if event.kind in ("WHEEL_UP", "WHEEL_DOWN"):
        if area is Area.MENU:
            scroll = status.menu.select_prev if event.kind == "WHEEL_UP" else status.menu.select_next
            scroll(tab.menu_mode, tab.history)
        elif event.kind == "WHEEL_UP":
            tab.select_prev()
        else:
            tab.select_next()
        return
    if event.kind == "LEFT_DOWN":
        _select_under(status, area, index)
    elif event.kind == "RIGHT_DOWN":
        if area is Area.FILES and _select_under(status, area, index):
            status.open_menu(MenuMode(Navigate.CONTEXT))
    elif event.kind == "MIDDLE_DOWN":
        if area is Area.FILES and _select_under(status, area, index):
            open_file(status)
