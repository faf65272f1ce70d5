"""Key token to action-name table.

Defaults can be overridden from the config ``keys`` section; overrides
naming an unknown action are ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyBinding:
    """One or more key tokens triggering a single named action."""

    combos: tuple[str, ...]
    action: str


DEFAULT_BINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding(("ESC",), "ResetMode"),
    KeyBinding(("UP", "k"), "MoveUp"),
    KeyBinding(("DOWN", "j"), "MoveDown"),
    KeyBinding(("LEFT", "h"), "MoveLeft"),
    KeyBinding(("RIGHT", "l"), "MoveRight"),
    KeyBinding(("BACKSPACE",), "Backspace"),
    KeyBinding(("DELETE",), "DeleteChar"),
    KeyBinding(("HOME", "g"), "KeyHome"),
    KeyBinding(("END", "G"), "End"),
    KeyBinding(("PAGE_UP",), "PageUp"),
    KeyBinding(("PAGE_DOWN",), "PageDown"),
    KeyBinding(("ENTER",), "Enter"),
    KeyBinding(("TAB",), "Tab"),
    KeyBinding(("SHIFT_TAB",), "BackTab"),
    KeyBinding(("'",), "MarksJump"),
    KeyBinding(('"',), "MarksNew"),
    KeyBinding((" ",), "ToggleFlag"),
    KeyBinding(("*",), "FlagAll"),
    KeyBinding(("v",), "ReverseFlags"),
    KeyBinding(("u",), "ClearFlags"),
    KeyBinding(("-",), "Back"),
    KeyBinding(("/",), "Search"),
    KeyBinding(("N",), "SearchNext"),
    KeyBinding(("b",), "SearchPrev"),
    KeyBinding(("~",), "Home"),
    KeyBinding(("a",), "ToggleHidden"),
    KeyBinding(("c",), "CopyPaste"),
    KeyBinding(("p",), "CutPaste"),
    KeyBinding(("x",), "Delete"),
    KeyBinding(("d",), "NewDir"),
    KeyBinding(("n",), "NewFile"),
    KeyBinding(("e",), "Exec"),
    KeyBinding(("o",), "OpenFile"),
    KeyBinding(("q",), "Quit"),
    KeyBinding(("r",), "Rename"),
    KeyBinding(("s",), "Shell"),
    KeyBinding(("t",), "Tree"),
    KeyBinding(("z",), "ToggleFold"),
    KeyBinding(("w",), "RegexMatch"),
    KeyBinding(("f",), "Filter"),
    KeyBinding(("F",), "Flagged"),
    KeyBinding(("O",), "Sort"),
    KeyBinding(("P",), "Preview"),
    KeyBinding(("i",), "ToggleMetadata"),
    KeyBinding(("C",), "Context"),
    KeyBinding(("H",), "History"),
    KeyBinding(("D",), "ToggleDualPane"),
    KeyBinding(("V",), "TogglePreviewSecond"),
    KeyBinding(("M",), "Chmod"),
    KeyBinding(("T",), "Trash"),
    KeyBinding(("X",), "EmptyTrash"),
    KeyBinding(("R",), "RemovableDevices"),
    KeyBinding(("E",), "EncryptedDrive"),
    KeyBinding(("I",), "MountIso"),
    KeyBinding(("B",), "BulkRename"),
    KeyBinding(("!",), "ShellCommand"),
    KeyBinding((":",), "Action"),
    KeyBinding(("CTRL_F",), "FuzzyFind"),
    KeyBinding(("CTRL_G",), "Shortcut"),
    KeyBinding(("CTRL_R",), "RefreshView"),
    KeyBinding(("CTRL_P",), "InputHistory"),
    KeyBinding(("CTRL_E",), "Plugin"),
)


class KeyBindings:
    """Small key-dispatch table with optional key normalization strategy."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else self._identity
        self._actions: dict[str, str] = {}

    @staticmethod
    def _identity(key: str) -> str:
        return key

    @classmethod
    def default(cls) -> KeyBindings:
        return cls().register_bindings(*DEFAULT_BINDINGS)

    def register_binding(self, binding: KeyBinding) -> KeyBindings:
        """Register one binding, overwriting existing actions for same combos."""
        for combo in binding.combos:
            self._actions[self._normalize(combo)] = binding.action
        return self

    def register_bindings(self, *bindings: KeyBinding) -> KeyBindings:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def apply_overrides(self, overrides: Mapping[str, str], known_actions: Iterable[str]) -> KeyBindings:
        known = set(known_actions)
        for key, action in overrides.items():
            if action not in known:
                LOGGER.warning("ignoring binding %r -> unknown action %r", key, action)
                continue
            self._actions[self._normalize(key)] = action
        return self

    def action_for(self, key: str) -> str | None:
        return self._actions.get(self._normalize(key))

    def keys_for(self, action: str) -> list[str]:
        return sorted(key for key, bound in self._actions.items() if bound == action)

    def items(self) -> list[tuple[str, str]]:
        return sorted(self._actions.items())
