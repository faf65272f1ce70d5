"""Printable characters typed while a menu has focus."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from ..integrations.mount import EncryptedDevice, RemovableDevice
from ..model.completion import complete_action, complete_directory, complete_exec, complete_filename
from ..model.lists import SelectableList, index_from_a
from ..model.sort_filter import FilterKind
from ..modes import InputCompleted, InputSimple, Navigate
from ..status import Status
from .leave_menu import RECOVERABLE_ERRORS, flag_from_regex, leave_menu

LOGGER = logging.getLogger(__name__)


def update_completion(status: Status) -> None:
    """Recompute propositions for the current completed-input menu."""
    kind = status.current_tab.menu_mode.kind
    typed = status.menu.input.string()
    tab = status.current_tab
    if kind is InputCompleted.CD:
        proposals = complete_directory(typed, tab.path)
    elif kind is InputCompleted.SEARCH:
        proposals = complete_filename(typed, [path.name for path in tab.list_paths()])
    elif kind is InputCompleted.EXEC:
        proposals = complete_exec(typed)
    elif kind is InputCompleted.ACTION:
        from .actions import ACTIONS

        proposals = complete_action(typed, sorted(ACTIONS))
    else:
        return
    status.menu.completion.update(proposals)
    status.refresh_menu_len()


def apply_live_input(status: Status) -> None:
    """Re-apply filters and regex flags that follow the input as it is typed."""
    kind = status.current_tab.menu_mode.kind
    if kind is InputSimple.FILTER:
        try:
            status.current_tab.set_filter(FilterKind.from_input(status.menu.input.string()))
        except OSError as exc:
            status.report_error("Filter", exc)
    elif kind is InputSimple.REGEX_MATCH:
        try:
            flag_from_regex(status)
        except re.error:
            # Incomplete patterns are expected while typing.
            LOGGER.debug("incomplete regex %r", status.menu.input.string())
    elif status.current_tab.menu_mode.is_input_completed:
        update_completion(status)


def sort_by_char(status: Status, char: str) -> None:
    tab = status.current_tab
    try:
        tab.set_sort_kind(tab.sort_kind.update_from_char(char))
    except OSError as exc:
        status.report_error("Sort", exc)


def insert_char(status: Status, char: str) -> None:
    status.menu.input.insert(char)
    apply_live_input(status)


def confirm(status: Status, char: str) -> None:
    if char == "y":
        leave_menu(status)
    else:
        status.reset_menu_mode()


def _run(status: Status, label: str, operation: Callable[[], None]) -> None:
    try:
        operation()
    except RECOVERABLE_ERRORS as exc:
        status.report_error(label, exc)


def trash_char(status: Status, char: str) -> None:
    trash = status.menu.trash
    entry = trash.selected()
    if char == "x" and entry is not None:
        _run(status, "Trash", lambda: trash.remove(entry))
        status.refresh_menu_len()
    elif char == "r":
        leave_menu(status)
    else:
        status.reset_menu_mode()


def _device_char(
    status: Status,
    char: str,
    devices: SelectableList[RemovableDevice] | SelectableList[EncryptedDevice],
) -> None:
    if char.isdigit():
        devices.select_index(int(char))
        return
    device = devices.selected()
    if device is None:
        status.reset_menu_mode()
        return
    if char == "m":
        leave_menu(status)
    elif char == "u":
        ok = device.umount(status.username, None)
        status.set_message(f"{'Unmounted' if ok else 'Failed to unmount'} {device.device}")
    elif char == "g":
        if device.mount_point is None:
            status.set_message(f"{device.device} is not mounted")
        else:
            status.reset_menu_mode()
            status.cd(device.mount_point)
    else:
        status.reset_menu_mode()


def removable_char(status: Status, char: str) -> None:
    _device_char(status, char, status.menu.removable)


def encrypted_char(status: Status, char: str) -> None:
    _device_char(status, char, status.menu.encrypted)


def marks_jump_char(status: Status, char: str) -> None:
    path = status.menu.marks.get(char)
    status.reset_menu_mode()
    if path is None:
        status.set_message(f"No mark {char!r}")
        return
    status.cd(path)


def marks_new_char(status: Status, char: str) -> None:
    path = status.current_tab.path
    if status.menu.marks.set(char, path):
        status.set_message(f"Mark {char!r} -> {path}")
    status.reset_menu_mode()


def flagged_char(status: Status, char: str) -> None:
    flagged = status.menu.flagged
    if char == "u":
        flagged.clear()
    elif char == "x":
        flagged.remove_selected()
    elif char == "j":
        leave_menu(status)
        return
    else:
        status.reset_menu_mode()
        return
    status.refresh_menu_len()


def letter_select_char(status: Status, char: str) -> None:
    """``a`` picks the first item, ``b`` the second, and so on."""
    index = index_from_a(char)
    tab = status.current_tab
    if index is None or index >= status.menu.len_for(tab.menu_mode, tab.history):
        status.reset_menu_mode()
        return
    status.menu.select_index(tab.menu_mode, tab.history, index)
    leave_menu(status)


NAVIGATE_CHARS: dict[Navigate, Callable[[Status, str], None]] = {
    Navigate.TRASH: trash_char,
    Navigate.REMOVABLE_DEVICES: removable_char,
    Navigate.ENCRYPTED_DRIVE: encrypted_char,
    Navigate.MARKS_JUMP: marks_jump_char,
    Navigate.MARKS_NEW: marks_new_char,
    Navigate.FLAGGED: flagged_char,
    Navigate.SHORTCUT: letter_select_char,
    Navigate.CONTEXT: letter_select_char,
    Navigate.HISTORY: letter_select_char,
    Navigate.PICKER: letter_select_char,
}


def menu_char(status: Status, char: str) -> None:
    """Route ``char`` according to the current pane's menu mode."""
    mode = status.current_tab.menu_mode
    kind = mode.kind
    if kind is InputSimple.SORT:
        sort_by_char(status, char)
    elif mode.is_input:
        insert_char(status, char)
    elif mode.is_confirmation:
        confirm(status, char)
    elif mode.is_navigate:
        NAVIGATE_CHARS[kind](status, char)
