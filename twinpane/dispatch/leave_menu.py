"""What ``Enter`` does in each menu kind.

Handlers raise on failure; ``leave_menu`` reports the error and keeps the
mode open so the user can fix the input or cancel.
"""

from __future__ import annotations

import logging
import os
import re
import shlex
import stat
import subprocess
from collections.abc import Callable
from pathlib import Path

from ..jobs.copy_move import CopyMode
from ..integrations.commands import execute, execute_shell, execute_sudo
from ..model.lists import expand_home
from ..model.sort_filter import FilterKind
from ..modes import (
    InputCompleted,
    InputSimple,
    MenuKind,
    MenuMode,
    Navigate,
    NeedConfirmation,
    PasswordRequest,
    PasswordUsage,
    leave_rule,
)
from ..status import Status

LOGGER = logging.getLogger(__name__)

INPUT_HISTORY_CALLER = "input_history"


class InputError(ValueError):
    """The typed text cannot be used for this menu."""


def _typed(status: Status) -> str:
    return status.menu.input.string().strip()


def _selected(status: Status) -> Path:
    selected = status.current_tab.selected_path()
    if selected is None:
        raise InputError("nothing selected")
    return selected


def rename(status: Status) -> None:
    new_name = _typed(status)
    if not new_name:
        raise InputError("new name is empty")
    old = _selected(status)
    new = old.parent / new_name
    if new.exists():
        raise FileExistsError(f"{new} already exists")
    new.parent.mkdir(parents=True, exist_ok=True)
    old.rename(new)
    LOGGER.info("renamed %s -> %s", old, new)
    status.menu.flagged.replace(old, new)
    status.current_tab.refresh_view()
    status.current_tab.select_path(new)


def parse_permissions(text: str) -> int:
    """Parse ``755`` or ``rwxr-xr-x`` into permission bits."""
    text = text.strip()
    if re.fullmatch(r"[0-7]{3,4}", text):
        return int(text, 8)
    if re.fullmatch(r"[r-][w-][xsS-][r-][w-][xsS-][r-][w-][xtT-]", text):
        bits = 0
        for char, flag in zip(text, (0o400, 0o200, 0o100, 0o40, 0o20, 0o10, 0o4, 0o2, 0o1)):
            if char not in "-ST":
                bits |= flag
        return bits
    raise InputError(f"invalid permissions {text!r}")


def chmod(status: Status) -> None:
    typed = _typed(status)
    mode = parse_permissions(typed)
    for path in status.selected_or_flagged():
        bits = mode
        if len(typed) != 4:
            # Three digits or a symbolic string leave setuid, setgid and sticky alone.
            bits = (stat.S_IMODE(os.lstat(path).st_mode) & 0o7000) | mode
        os.chmod(path, bits)
        LOGGER.info("chmod %o %s", bits, path)
    status.menu.flagged.clear()


def _new_path(status: Status) -> Path:
    name = _typed(status)
    if not name:
        raise InputError("name is empty")
    return status.current_tab.directory_of_selected() / name


def newfile(status: Status) -> None:
    path = _new_path(status)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=False)
    LOGGER.info("created %s", path)


def newdir(status: Status) -> None:
    path = _new_path(status)
    path.mkdir(parents=True, exist_ok=False)
    LOGGER.info("created directory %s", path)


def regex_match(status: Status) -> None:
    flag_from_regex(status)
    status.menu.input.reset()


def flag_from_regex(status: Status) -> None:
    """Flag every visible name matching the typed regex and jump to the first one."""
    pattern = status.menu.input.string()
    if not pattern:
        return
    regex = re.compile(pattern)
    matches = [path for path in status.current_tab.list_paths() if regex.search(path.name)]
    status.menu.flagged.extend(matches)
    if matches:
        status.current_tab.select_path(matches[0])


def sort(status: Status) -> None:
    status.focus = status.focus.to_parent()


def filter_(status: Status) -> None:
    status.current_tab.set_filter(FilterKind.from_input(status.menu.input.string()))
    status.menu.input.reset()


def password(status: Status) -> None:
    """Run the pending privileged command; the menu stays open when it fails."""
    request = status.current_tab.menu_mode.password
    if request is None:
        raise InputError("no password was requested")
    holder = status.menu.password_holder
    secret = status.menu.input.string()
    status.menu.input.reset()
    if request.usage is PasswordUsage.MOUNT_ENCRYPTED:
        holder.set_encrypted(secret)
    else:
        holder.set_sudo(secret)
    try:
        execute_password_command(status, request)
    finally:
        holder.clear()
    status.reset_menu_mode()


def execute_password_command(status: Status, request: PasswordRequest) -> None:
    """Run what the password was collected for; raises ``InputError`` when it fails."""
    holder = status.menu.password_holder
    if request.usage is PasswordUsage.SUDO_COMMAND:
        secret = holder.take_sudo()
        if secret is None:
            raise InputError("no password")
        args = shlex.split(request.target)
        if args and args[0] == "sudo":
            args = args[1:]
        result = execute_sudo(args, secret, cwd=status.current_tab.path)
        status.show_command_output(request.target, result.stdout + result.stderr)
        if not result.ok:
            raise InputError(f"sudo exited with {result.returncode}")
        return
    if request.usage is PasswordUsage.MOUNT_ENCRYPTED:
        secret = holder.take_encrypted()
        device = next((d for d in status.menu.encrypted.content if d.device == request.target), None)
        if device is None:
            raise InputError(f"unknown device {request.target}")
        if not device.mount(status.username, secret):
            raise InputError(f"failed to mount {device.device}")
        status.set_message(f"Mounted {device.device}")
        return
    secret = holder.take_sudo()
    iso = status.menu.iso
    if iso is None:
        raise InputError("no image selected")
    if request.usage is PasswordUsage.MOUNT_ISO:
        if not iso.mount(status.username, secret):
            raise InputError(f"failed to mount {iso.image.name}")
        status.set_message(f"Mounted {iso.image.name}")
        if iso.mount_point is not None:
            status.cd(iso.mount_point)
    else:
        if not iso.umount(status.username, secret):
            raise InputError(f"failed to unmount {iso.image.name}")
        status.set_message(f"Unmounted {iso.image.name}")


def shell_command(status: Status) -> None:
    command = _typed(status)
    if not command:
        raise InputError("empty command")
    if command.split()[0] == "sudo":
        status.menu.input.reset()
        status.set_menu_mode(
            status.index,
            MenuMode(InputSimple.PASSWORD, PasswordRequest(PasswordUsage.SUDO_COMMAND, command)),
        )
        return
    try:
        result = execute_shell(command, cwd=status.current_tab.directory_of_selected())
    except subprocess.TimeoutExpired as exc:
        raise InputError(f"timed out after {exc.timeout}s") from exc
    status.reset_menu_mode()
    status.show_command_output(command, result.stdout + result.stderr)
    status.refresh_views()


def _completed_or_typed(status: Status) -> str:
    proposition = status.menu.completion.current_proposition()
    return proposition or _typed(status)


def cd(status: Status) -> None:
    target = _completed_or_typed(status)
    if not target:
        raise InputError("no directory")
    path = expand_home(target)
    if not path.is_absolute():
        path = status.current_tab.path / path
    if not path.is_dir():
        raise NotADirectoryError(f"not a directory: {path}")
    status.cd(path)


def search(status: Status) -> None:
    proposition = status.menu.completion.current_proposition()
    pattern = re.escape(proposition) if proposition else _typed(status)
    try:
        found = status.current_tab.set_search(pattern)
    except re.error as exc:
        raise InputError(f"bad pattern: {exc}") from exc
    if found is None:
        status.set_message(f"No match for {pattern}")


def exec_(status: Status) -> None:
    program = _completed_or_typed(status)
    if not program:
        raise InputError("no program")
    targets = [str(path) for path in status.selected_or_flagged()]
    execute([*shlex.split(program), *targets], cwd=status.current_tab.path)
    status.menu.flagged.clear()


def action(status: Status) -> None:
    from .actions import ACTIONS

    name = _completed_or_typed(status)
    handler = ACTIONS.get(name)
    if handler is None:
        raise InputError(f"unknown action {name!r}")
    status.reset_menu_mode()
    handler(status)


def history(status: Status) -> None:
    tab = status.current_tab
    entry = tab.history.selected()
    if entry is None:
        return
    tab.history.drop_queue()
    tab.cd(entry.directory, select=entry.selected, record=False)


def shortcut(status: Status) -> None:
    path = status.menu.shortcuts.selected()
    if path is not None:
        status.current_tab.cd(path)


def trash_restore(status: Status) -> None:
    entry = status.menu.trash.selected()
    if entry is None:
        return
    restored = status.menu.trash.restore(entry)
    status.set_message(f"Restored {restored}")
    status.refresh_menu_len()


def marks_jump(status: Status) -> None:
    selected = status.menu.marks.selected()
    if selected is not None:
        status.current_tab.cd(selected[1])


def marks_new(status: Status) -> None:
    selected = status.menu.marks.selected()
    if selected is not None:
        status.menu.marks.set(selected[0], status.current_tab.path)


def removable_devices(status: Status) -> None:
    device = status.menu.removable.selected()
    if device is None:
        return
    if device.mount_point is not None:
        status.current_tab.cd(device.mount_point)
        return
    if not device.mount(status.username, None):
        raise OSError(f"cannot mount {device.device}")
    status.set_message(f"Mounted {device.device}")


def encrypted_drive(status: Status) -> None:
    device = status.menu.encrypted.selected()
    if device is None:
        return
    if device.mount_point is not None:
        status.current_tab.cd(device.mount_point)
        return
    status.set_menu_mode(
        status.index,
        MenuMode(InputSimple.PASSWORD, PasswordRequest(PasswordUsage.MOUNT_ENCRYPTED, device.device)),
    )


def context(status: Status) -> None:
    from .actions import ACTIONS

    selected = status.menu.context.selected()
    status.reset_menu_mode()
    if selected is None:
        return
    handler = ACTIONS.get(selected.action)
    if handler is not None:
        handler(status)


def picker(status: Status) -> None:
    """Re-open the menu a picked input belongs to, pre-filled with it."""
    chosen = status.menu.picker.selected()
    caller = status.menu.picker.caller
    status.menu.picker.clear()
    if chosen is None:
        return
    if caller.startswith(INPUT_HISTORY_CALLER + ":"):
        kind_name = caller.split(":", 1)[1]
        kind = _kind_by_name(kind_name)
        if kind is None:
            raise InputError(f"unknown menu {kind_name}")
        status.set_menu_mode(status.index, MenuMode(kind))
        status.menu.input.replace(chosen)
        return
    LOGGER.info("picker %s chose %s", caller, chosen)


def _kind_by_name(name: str) -> MenuKind | None:
    family, _, member = name.partition(".")
    for enum_cls in (InputSimple, InputCompleted):
        if enum_cls.__name__ == family and member in enum_cls.__members__:
            return enum_cls[member]
    return None


def kind_key(kind: MenuKind) -> str:
    return f"{type(kind).__name__}.{kind.name}"


def flagged(status: Status) -> None:
    path = status.menu.flagged.selected()
    if path is not None:
        status.go_to_file(path)


def confirm_copy(status: Status) -> None:
    status.copy_move(CopyMode.COPY)


def confirm_move(status: Status) -> None:
    status.copy_move(CopyMode.MOVE)


def confirm_delete(status: Status) -> None:
    """Move the flagged (or selected) entries to the trash."""
    targets = status.selected_or_flagged()
    trashed = 0
    for path in targets:
        try:
            status.menu.trash.trash(path)
            trashed += 1
        except OSError as exc:
            LOGGER.warning("cannot trash %s: %s", path, exc)
    status.menu.flagged.clear()
    status.menu.auto_flagged = None
    status.set_message(f"Trashed {trashed}/{len(targets)}")


def confirm_empty_trash(status: Status) -> None:
    status.menu.trash.empty()
    status.set_message("Trash emptied")


def confirm_bulk(status: Status) -> None:
    done = status.menu.bulk.execute()
    for old, new in done:
        status.menu.flagged.replace(old, new)
    status.set_message(f"Renamed {len(done)} file(s)")


ENTER_HANDLERS: dict[MenuKind, Callable[[Status], None]] = {
    InputSimple.RENAME: rename,
    InputSimple.CHMOD: chmod,
    InputSimple.NEWFILE: newfile,
    InputSimple.NEWDIR: newdir,
    InputSimple.REGEX_MATCH: regex_match,
    InputSimple.SORT: sort,
    InputSimple.FILTER: filter_,
    InputSimple.PASSWORD: password,
    InputSimple.SHELL_COMMAND: shell_command,
    InputCompleted.CD: cd,
    InputCompleted.SEARCH: search,
    InputCompleted.EXEC: exec_,
    InputCompleted.ACTION: action,
    Navigate.HISTORY: history,
    Navigate.SHORTCUT: shortcut,
    Navigate.TRASH: trash_restore,
    Navigate.MARKS_JUMP: marks_jump,
    Navigate.MARKS_NEW: marks_new,
    Navigate.REMOVABLE_DEVICES: removable_devices,
    Navigate.ENCRYPTED_DRIVE: encrypted_drive,
    Navigate.CONTEXT: context,
    Navigate.PICKER: picker,
    Navigate.FLAGGED: flagged,
    NeedConfirmation.COPY: confirm_copy,
    NeedConfirmation.MOVE: confirm_move,
    NeedConfirmation.DELETE: confirm_delete,
    NeedConfirmation.EMPTY_TRASH: confirm_empty_trash,
    NeedConfirmation.BULK_ACTION: confirm_bulk,
}

RECOVERABLE_ERRORS = (OSError, ValueError, subprocess.SubprocessError)


def leave_menu(status: Status) -> bool:
    """Validate the current menu; return ``True`` when it completed.

    On failure the error is logged and shown and the mode stays active.
    """
    mode = status.current_tab.menu_mode
    if mode.kind is None:
        return False
    handler = ENTER_HANDLERS[mode.kind]
    typed = status.menu.input.string()
    try:
        handler(status)
    except RECOVERABLE_ERRORS as exc:
        status.report_error(mode.kind.name.replace("_", " ").capitalize(), exc)
        return False
    if mode.is_input and mode.kind is not InputSimple.PASSWORD:
        status.menu.input_history.record(kind_key(mode.kind), typed)
    rule = leave_rule(mode)
    if rule.must_reset_mode and status.current_tab.menu_mode == mode:
        status.menu.reset()
        status.set_menu_mode(status.index, MenuMode())
    if rule.must_refresh:
        status.refresh_views()
    return True
