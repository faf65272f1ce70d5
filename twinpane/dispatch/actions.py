"""Named actions reachable from key bindings, mouse clicks and ``ActionEvent``.

Every action takes the ``Status`` and nothing else. Actions that move or
edit are menu-aware: with a menu focused they act on the menu, otherwise
on the file list of the current pane.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable
from pathlib import Path

from ..integrations.commands import open_path, run_in_terminal
from ..integrations.mount import IsoDevice, encrypted_devices, list_block_devices, removable_devices
from ..modes import (
    DisplayMode,
    InputCompleted,
    InputSimple,
    MenuMode,
    Navigate,
    NeedConfirmation,
    PasswordRequest,
    PasswordUsage,
)
from ..status import Status
from .leave_menu import INPUT_HISTORY_CALLER, kind_key, leave_menu
from .menu_chars import apply_live_input, update_completion

LOGGER = logging.getLogger(__name__)

Action = Callable[[Status], None]


def _menu_focused(status: Status) -> bool:
    return not status.focus.is_file and not status.current_tab.menu_mode.is_nothing


def _input_focused(status: Status) -> bool:
    return _menu_focused(status) and status.current_tab.menu_mode.is_input


def _open(kind) -> Action:
    def action(status: Status) -> None:
        status.open_menu(MenuMode(kind))

    action.__name__ = f"open_{kind.name.lower()}"
    return action


# -- movement ------------------------------------------------------------


def reset_mode(status: Status) -> None:
    tab = status.current_tab
    if not tab.menu_mode.is_nothing:
        status.reset_menu_mode()
    elif tab.display_mode is not DisplayMode.DIRECTORY:
        status.set_display_mode(DisplayMode.DIRECTORY)
    else:
        tab.search.reset()


def move_up(status: Status) -> None:
    tab = status.current_tab
    if _menu_focused(status):
        status.menu.select_prev(tab.menu_mode, tab.history)
    else:
        tab.select_prev()


def move_down(status: Status) -> None:
    tab = status.current_tab
    if _menu_focused(status):
        status.menu.select_next(tab.menu_mode, tab.history)
    else:
        tab.select_next()


def move_left(status: Status) -> None:
    if _input_focused(status):
        status.menu.input.cursor_left()
        return
    if _menu_focused(status):
        return
    try:
        status.current_tab.move_to_parent()
    except OSError as exc:
        status.report_error("Parent", exc)


def move_right(status: Status) -> None:
    if _input_focused(status):
        status.menu.input.cursor_right()
        return
    if _menu_focused(status):
        return
    selected = status.current_tab.selected_path()
    if selected is not None and selected.is_dir():
        status.cd(selected)


def key_home(status: Status) -> None:
    tab = status.current_tab
    if _input_focused(status) and tab.menu_mode.is_input_simple:
        status.menu.input.cursor_start()
    elif _menu_focused(status):
        status.menu.select_index(tab.menu_mode, tab.history, 0)
    else:
        tab.select_first()


def key_end(status: Status) -> None:
    tab = status.current_tab
    if _input_focused(status) and tab.menu_mode.is_input_simple:
        status.menu.input.cursor_end()
    elif _menu_focused(status):
        last = status.menu.len_for(tab.menu_mode, tab.history) - 1
        status.menu.select_index(tab.menu_mode, tab.history, max(0, last))
    else:
        tab.select_last()


def page_up(status: Status) -> None:
    tab = status.current_tab
    if _menu_focused(status):
        index = status.menu.index_for(tab.menu_mode, tab.history)
        status.menu.select_index(tab.menu_mode, tab.history, max(0, index - status.menu.window.height))
    else:
        tab.page_up()


def page_down(status: Status) -> None:
    tab = status.current_tab
    if _menu_focused(status):
        index = status.menu.index_for(tab.menu_mode, tab.history)
        last = max(0, status.menu.len_for(tab.menu_mode, tab.history) - 1)
        status.menu.select_index(tab.menu_mode, tab.history, min(last, index + status.menu.window.height))
    else:
        tab.page_down()


# -- input editing -------------------------------------------------------


def backspace(status: Status) -> None:
    tab = status.current_tab
    if _input_focused(status):
        status.menu.input.delete_char_left()
        apply_live_input(status)
    elif tab.display_mode is DisplayMode.FUZZY and tab.fuzzy is not None:
        tab.fuzzy.set_query(tab.fuzzy.query[:-1])
    else:
        back(status)


def delete_char(status: Status) -> None:
    if _input_focused(status):
        status.menu.input.delete_chars_right()
        apply_live_input(status)


def enter(status: Status) -> None:
    """Validate the menu, or open what the file list points at."""
    tab = status.current_tab
    if _menu_focused(status):
        leave_menu(status)
        return
    if tab.display_mode is DisplayMode.PREVIEW:
        status.set_display_mode(DisplayMode.DIRECTORY)
        return
    selected = tab.selected_path()
    if selected is None:
        return
    if tab.display_mode is DisplayMode.FUZZY:
        status.go_to_file(selected)
        return
    if selected.is_dir():
        if tab.display_mode is DisplayMode.TREE:
            tab.toggle_fold()
        else:
            status.cd(selected)
        return
    open_file(status)


def tab_key(status: Status) -> None:
    """Complete the typed text, or switch pane."""
    if _input_focused(status) and status.current_tab.menu_mode.is_input_completed:
        proposition = status.menu.completion.current_proposition()
        if proposition:
            status.menu.input.replace(proposition)
            update_completion(status)
        return
    status.switch_pane()


def back_tab(status: Status) -> None:
    if _input_focused(status) and status.current_tab.menu_mode.is_input_completed:
        status.menu.completion.select_prev()
        return
    status.switch_pane()


# -- flags ---------------------------------------------------------------


def toggle_flag(status: Status) -> None:
    status.toggle_flag()


def flag_all(status: Status) -> None:
    status.flag_all()


def reverse_flags(status: Status) -> None:
    status.reverse_flags()


def clear_flags(status: Status) -> None:
    status.clear_flags()


# -- navigation ----------------------------------------------------------


def back(status: Status) -> None:
    try:
        moved = status.current_tab.back()
    except OSError as exc:
        status.report_error("Back", exc)
        return
    if not moved:
        status.set_message("No previous directory")


def home(status: Status) -> None:
    status.cd(Path.home())


def search_next(status: Status) -> None:
    if status.current_tab.search_next() is None:
        status.set_message("No search")


def search_prev(status: Status) -> None:
    if status.current_tab.search_prev() is None:
        status.set_message("No search")


def toggle_hidden(status: Status) -> None:
    try:
        status.current_tab.toggle_hidden()
    except OSError as exc:
        status.report_error("Hidden", exc)


def refresh_view(status: Status) -> None:
    status.refresh_views()


def tree(status: Status) -> None:
    status.set_display_mode(DisplayMode.TREE)


def toggle_fold(status: Status) -> None:
    status.current_tab.toggle_fold()


def preview(status: Status) -> None:
    status.preview_selected()


def fuzzy_find(status: Status) -> None:
    status.set_display_mode(DisplayMode.FUZZY)


# -- file operations -----------------------------------------------------


def _confirm_flagged(mode: NeedConfirmation) -> Action:
    def action(status: Status) -> None:
        if status.menu.flagged.is_empty():
            status.set_message("Nothing flagged")
            return
        status.open_menu(MenuMode(mode))

    action.__name__ = f"confirm_{mode.name.lower()}"
    return action


copy_paste = _confirm_flagged(NeedConfirmation.COPY)
cut_paste = _confirm_flagged(NeedConfirmation.MOVE)


def delete(status: Status) -> None:
    """Ask before trashing the flagged files; the selection is flagged if none are."""
    auto_flagged = None
    if status.menu.flagged.is_empty():
        selected = status.current_tab.selected_path()
        if selected is None:
            return
        status.menu.flagged.push(selected)
        auto_flagged = selected
    status.open_menu(MenuMode(NeedConfirmation.DELETE))
    status.menu.auto_flagged = auto_flagged


def empty_trash(status: Status) -> None:
    status.menu.trash.update()
    status.open_menu(MenuMode(NeedConfirmation.EMPTY_TRASH))


def open_file(status: Status) -> None:
    selected = status.current_tab.selected_path()
    if selected is None:
        return
    if selected.is_dir():
        status.cd(selected)
        return
    try:
        open_path(selected, status.openers)
    except OSError as exc:
        status.report_error("Open", exc)


def rename(status: Status) -> None:
    selected = status.current_tab.selected_path()
    if selected is None:
        return
    status.open_menu(MenuMode(InputSimple.RENAME))
    if status.current_tab.menu_mode.kind is InputSimple.RENAME:
        status.menu.input.replace(selected.name)


def chmod(status: Status) -> None:
    selected = status.current_tab.selected_path()
    if selected is None:
        return
    status.open_menu(MenuMode(InputSimple.CHMOD))
    if status.current_tab.menu_mode.kind is InputSimple.CHMOD:
        try:
            status.menu.input.replace(f"{stat.S_IMODE(selected.lstat().st_mode) & 0o777:03o}")
        except OSError as exc:
            LOGGER.debug("cannot stat %s: %s", selected, exc)


def shell(status: Status) -> None:
    """Hand the terminal to ``$SHELL`` in the current directory."""
    error = run_in_terminal(
        [os.environ.get("SHELL", "/bin/sh")],
        status.tui.disable,
        status.tui.enable,
        cwd=status.current_tab.path,
    )
    if error is not None:
        status.set_message(error)
    status.refresh_views()


def bulk_rename(status: Status) -> None:
    sources = status.selected_or_flagged()
    if not sources:
        return
    bulk = status.menu.bulk
    error = bulk.ask_filenames(sources, status.tui.disable, status.tui.enable)
    if error is not None:
        status.set_message(error)
        bulk.reset()
        return
    if bulk.is_empty():
        status.set_message("Nothing to rename")
        return
    status.open_menu(MenuMode(NeedConfirmation.BULK_ACTION))


def _open_completed(kind: InputCompleted) -> Action:
    def action(status: Status) -> None:
        status.open_menu(MenuMode(kind))
        if status.current_tab.menu_mode.kind is kind:
            update_completion(status)

    action.__name__ = f"open_{kind.name.lower()}"
    return action


# -- lists and devices ---------------------------------------------------


def trash(status: Status) -> None:
    status.menu.trash.update()
    status.open_menu(MenuMode(Navigate.TRASH))


def shortcut(status: Status) -> None:
    status.menu.shortcuts.refresh_mounts()
    status.open_menu(MenuMode(Navigate.SHORTCUT))


def removable(status: Status) -> None:
    status.menu.removable.set_content(removable_devices(list_block_devices()))
    status.open_menu(MenuMode(Navigate.REMOVABLE_DEVICES))


def encrypted(status: Status) -> None:
    status.menu.encrypted.set_content(encrypted_devices(list_block_devices()))
    status.open_menu(MenuMode(Navigate.ENCRYPTED_DRIVE))


def mount_iso(status: Status) -> None:
    """Ask for the sudo password, then loop-mount (or unmount) the selected image."""
    iso = status.menu.iso
    if iso is not None and iso.mount_point is not None:
        usage = PasswordUsage.UMOUNT_ISO
    else:
        selected = status.current_tab.selected_path()
        if selected is None or selected.suffix.lower() != ".iso":
            status.set_message("Select an .iso image")
            return
        status.menu.iso = iso = IsoDevice(selected)
        usage = PasswordUsage.MOUNT_ISO
    status.menu.reset()
    status.set_menu_mode(status.index, MenuMode(InputSimple.PASSWORD, PasswordRequest(usage, str(iso.image))))


def input_history(status: Status) -> None:
    """Pick a previous input for the open input menu."""
    mode = status.current_tab.menu_mode
    if not mode.is_input or mode.kind is InputSimple.PASSWORD:
        status.set_message("No input to recall")
        return
    key = kind_key(mode.kind)
    entries = status.menu.input_history.for_kind(key)
    if not entries:
        status.set_message("No previous input")
        return
    status.menu.reset()
    status.menu.picker.set(f"{INPUT_HISTORY_CALLER}:{key}", mode.title(), entries)
    status.set_menu_mode(status.index, MenuMode(Navigate.PICKER))


# -- session -------------------------------------------------------------


def toggle_metadata(status: Status) -> None:
    status.session.toggle_metadata()


def toggle_dual_pane(status: Status) -> None:
    status.session.toggle_dual_pane()
    if not status.session.dual_pane and status.index == 1:
        status.select_pane(0)


def toggle_preview_second(status: Status) -> None:
    status.session.toggle_preview()


def plugin(status: Status) -> None:
    active = status.plugins.cycle()
    status.set_message(f"Plugin: {active.name}" if active is not None else "Plugins off")


def quit_(status: Status) -> None:
    status.quit()


ACTIONS: dict[str, Action] = {
    "ResetMode": reset_mode,
    "MoveUp": move_up,
    "MoveDown": move_down,
    "MoveLeft": move_left,
    "MoveRight": move_right,
    "Backspace": backspace,
    "DeleteChar": delete_char,
    "KeyHome": key_home,
    "End": key_end,
    "PageUp": page_up,
    "PageDown": page_down,
    "Enter": enter,
    "Tab": tab_key,
    "BackTab": back_tab,
    "MarksJump": _open(Navigate.MARKS_JUMP),
    "MarksNew": _open(Navigate.MARKS_NEW),
    "ToggleFlag": toggle_flag,
    "FlagAll": flag_all,
    "ReverseFlags": reverse_flags,
    "ClearFlags": clear_flags,
    "Back": back,
    "Search": _open_completed(InputCompleted.SEARCH),
    "SearchNext": search_next,
    "SearchPrev": search_prev,
    "Home": home,
    "ToggleHidden": toggle_hidden,
    "CopyPaste": copy_paste,
    "CutPaste": cut_paste,
    "Delete": delete,
    "NewDir": _open(InputSimple.NEWDIR),
    "NewFile": _open(InputSimple.NEWFILE),
    "Exec": _open_completed(InputCompleted.EXEC),
    "Cd": _open_completed(InputCompleted.CD),
    "OpenFile": open_file,
    "Quit": quit_,
    "Rename": rename,
    "Shell": shell,
    "Tree": tree,
    "ToggleFold": toggle_fold,
    "RegexMatch": _open(InputSimple.REGEX_MATCH),
    "Filter": _open(InputSimple.FILTER),
    "Flagged": _open(Navigate.FLAGGED),
    "Sort": _open(InputSimple.SORT),
    "Preview": preview,
    "ToggleMetadata": toggle_metadata,
    "Context": _open(Navigate.CONTEXT),
    "History": _open(Navigate.HISTORY),
    "ToggleDualPane": toggle_dual_pane,
    "TogglePreviewSecond": toggle_preview_second,
    "Chmod": chmod,
    "Trash": trash,
    "EmptyTrash": empty_trash,
    "RemovableDevices": removable,
    "EncryptedDrive": encrypted,
    "MountIso": mount_iso,
    "BulkRename": bulk_rename,
    "ShellCommand": _open(InputSimple.SHELL_COMMAND),
    "Action": _open_completed(InputCompleted.ACTION),
    "FuzzyFind": fuzzy_find,
    "Shortcut": shortcut,
    "RefreshView": refresh_view,
    "InputHistory": input_history,
    "Plugin": plugin,
}
