"""Focus, display modes, and the menu-mode state tables.

Menu modes are grouped in four families; each kind carries its own leave
rule so the dispatcher does not need one branch per kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Focus(Enum):
    LEFT_FILE = "left_file"
    LEFT_MENU = "left_menu"
    RIGHT_FILE = "right_file"
    RIGHT_MENU = "right_menu"

    @property
    def index(self) -> int:
        return 0 if self in (Focus.LEFT_FILE, Focus.LEFT_MENU) else 1

    @property
    def is_file(self) -> bool:
        return self in (Focus.LEFT_FILE, Focus.RIGHT_FILE)

    @property
    def is_left(self) -> bool:
        return self.index == 0

    def switch(self) -> Focus:
        """Other pane, same file-vs-menu side."""
        return _SWITCHED[self]

    def to_parent(self) -> Focus:
        """Collapse a menu focus to the file focus of the same pane."""
        return Focus.LEFT_FILE if self.is_left else Focus.RIGHT_FILE

    @classmethod
    def from_pane(cls, index: int, menu_open: bool) -> Focus:
        if index == 0:
            return cls.LEFT_MENU if menu_open else cls.LEFT_FILE
        return cls.RIGHT_MENU if menu_open else cls.RIGHT_FILE


_SWITCHED = {
    Focus.LEFT_FILE: Focus.RIGHT_FILE,
    Focus.RIGHT_FILE: Focus.LEFT_FILE,
    Focus.LEFT_MENU: Focus.RIGHT_MENU,
    Focus.RIGHT_MENU: Focus.LEFT_MENU,
}


class DisplayMode(Enum):
    DIRECTORY = "directory"
    TREE = "tree"
    PREVIEW = "preview"
    FUZZY = "fuzzy"


class InputSimple(Enum):
    RENAME = "Rename to:"
    CHMOD = "Permissions (octal or rwxr-xr-x):"
    NEWFILE = "New file:"
    NEWDIR = "New directory:"
    REGEX_MATCH = "Flag names matching:"
    SORT = "Sort by (k)ind (n)ame (m)odified (s)ize (e)xtension, (r)everse:"
    FILTER = "Filter: (d)irs, (e)xtension <ext>, (n)ame <regex>, (a)ll:"
    PASSWORD = "Password:"
    SHELL_COMMAND = "Shell command:"


class InputCompleted(Enum):
    CD = "Cd:"
    SEARCH = "Search:"
    EXEC = "Open with:"
    ACTION = "Action:"


class Navigate(Enum):
    HISTORY = "History"
    SHORTCUT = "Shortcuts"
    TRASH = "Trash: (x) delete permanently, (r)estore, enter restore"
    MARKS_JUMP = "Jump to mark: type its key"
    MARKS_NEW = "New mark: type a key"
    REMOVABLE_DEVICES = "Removable devices: (m)ount, (u)nmount, (g)o to"
    ENCRYPTED_DRIVE = "Encrypted devices: (m)ount, (u)nmount, (g)o to"
    CONTEXT = "Context actions"
    PICKER = "Pick"
    FLAGGED = "Flagged: (j)ump, (x) unflag, (u) clear"


class NeedConfirmation(Enum):
    COPY = "Copy flagged files here?"
    MOVE = "Move flagged files here?"
    DELETE = "Delete flagged files?"
    EMPTY_TRASH = "Empty the trash?"
    BULK_ACTION = "Apply bulk rename?"


MenuKind = Union[InputSimple, InputCompleted, Navigate, NeedConfirmation]


class PasswordUsage(Enum):
    """What the collected password unlocks once submitted."""

    SUDO_COMMAND = "sudo"
    MOUNT_ENCRYPTED = "mount_encrypted"
    MOUNT_ISO = "mount_iso"
    UMOUNT_ISO = "umount_iso"


@dataclass(frozen=True)
class PasswordRequest:
    usage: PasswordUsage
    # Shell command, device path, or image path the password is for.
    target: str = ""


@dataclass(frozen=True)
class MenuMode:
    """Tagged union of ``Nothing`` and the four menu families."""

    kind: MenuKind | None = None
    password: PasswordRequest | None = None

    @property
    def is_nothing(self) -> bool:
        return self.kind is None

    @property
    def is_input_simple(self) -> bool:
        return isinstance(self.kind, InputSimple)

    @property
    def is_input_completed(self) -> bool:
        return isinstance(self.kind, InputCompleted)

    @property
    def is_input(self) -> bool:
        return self.is_input_simple or self.is_input_completed

    @property
    def is_navigate(self) -> bool:
        return isinstance(self.kind, Navigate)

    @property
    def is_confirmation(self) -> bool:
        return isinstance(self.kind, NeedConfirmation)

    @property
    def family(self) -> str:
        if self.kind is None:
            return "Nothing"
        return type(self.kind).__name__

    def title(self) -> str:
        if self.kind is None:
            return ""
        return self.kind.value

    def __str__(self) -> str:
        if self.kind is None:
            return "Nothing"
        return f"{self.family}({self.kind.name})"


NOTHING = MenuMode()


@dataclass(frozen=True)
class LeaveRule:
    """Side effects applied after a menu kind completes with Enter."""

    must_refresh: bool = True
    must_reset_mode: bool = True


_DEFAULT_RULE = LeaveRule()

LEAVE_RULES: dict[MenuKind, LeaveRule] = {
    InputSimple.SHELL_COMMAND: LeaveRule(must_refresh=False, must_reset_mode=False),
    InputSimple.FILTER: LeaveRule(must_refresh=False),
    InputSimple.PASSWORD: LeaveRule(must_refresh=False, must_reset_mode=False),
    InputSimple.SORT: LeaveRule(must_refresh=False),
    Navigate.CONTEXT: LeaveRule(must_refresh=False, must_reset_mode=False),
}


def leave_rule(mode: MenuMode) -> LeaveRule:
    if mode.kind is None:
        return LeaveRule(must_refresh=False, must_reset_mode=False)
    return LEAVE_RULES.get(mode.kind, _DEFAULT_RULE)


# Kinds that change the visible listing while typing; cancelling undoes it.
DISCARD_ON_CANCEL: frozenset[MenuKind] = frozenset({InputSimple.FILTER})


def mode_for(kind: MenuKind | None, password: PasswordRequest | None = None) -> MenuMode:
    if kind is None:
        return NOTHING
    return MenuMode(kind=kind, password=password)
