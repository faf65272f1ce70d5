"""State shared by every menu: buffers, lists, and the menu scroll window."""

from __future__ import annotations

from pathlib import Path

from ..integrations.bulkrename import BulkRename
from ..integrations.mount import EncryptedDevice, IsoDevice, RemovableDevice
from ..integrations.trash import Trash
from ..modes import InputCompleted, MenuMode, Navigate, NeedConfirmation
from .completion import Completion
from .content_window import ContentWindow
from .flagged import Flagged
from .inputs import Input, InputHistory, PasswordHolder
from .lists import ContextActions, Marks, Picker, SelectableList, Shortcuts


class MenuHolder:
    """One instance for both panes; ``menu_mode`` decides which part is shown."""

    def __init__(
        self,
        *,
        marks: Marks,
        shortcuts: Shortcuts,
        trash: Trash,
    ) -> None:
        self.window = ContentWindow()
        self.input = Input()
        self.completion = Completion()
        self.flagged = Flagged()
        # Selection flagged only to be listed by a pending delete prompt.
        self.auto_flagged: Path | None = None
        self.marks = marks
        self.shortcuts = shortcuts
        self.trash = trash
        self.removable: SelectableList[RemovableDevice] = SelectableList()
        self.encrypted: SelectableList[EncryptedDevice] = SelectableList()
        self.iso: IsoDevice | None = None
        self.context = ContextActions()
        self.picker = Picker()
        self.password_holder = PasswordHolder()
        self.bulk = BulkRename()
        self.input_history = InputHistory()

    def _navigable(self, mode: MenuMode, history):
        kind = mode.kind
        if kind is Navigate.HISTORY:
            return history
        if kind is Navigate.SHORTCUT:
            return self.shortcuts
        if kind is Navigate.TRASH:
            return self.trash
        if kind in (Navigate.MARKS_JUMP, Navigate.MARKS_NEW):
            return self.marks
        if kind is Navigate.REMOVABLE_DEVICES:
            return self.removable
        if kind is Navigate.ENCRYPTED_DRIVE:
            return self.encrypted
        if kind is Navigate.CONTEXT:
            return self.context
        if kind is Navigate.PICKER:
            return self.picker
        if kind is Navigate.FLAGGED:
            return self.flagged
        if isinstance(kind, InputCompleted):
            return self.completion
        return None

    def len_for(self, mode: MenuMode, history) -> int:
        """Rows the menu shows for ``mode``; ``history`` is the owning tab's."""
        if isinstance(mode.kind, NeedConfirmation):
            if mode.kind is NeedConfirmation.BULK_ACTION:
                return len(self.bulk.renames)
            return len(self.flagged)
        items = self._navigable(mode, history)
        return len(items) if items is not None else 0

    def labels_for(self, mode: MenuMode, history) -> list[str]:
        if mode.kind is NeedConfirmation.BULK_ACTION:
            return self.bulk.describe()
        if mode.kind is NeedConfirmation.EMPTY_TRASH:
            return self.trash.labels()
        if isinstance(mode.kind, NeedConfirmation):
            return self.flagged.labels()
        if mode.kind is Navigate.REMOVABLE_DEVICES:
            return [device.label for device in self.removable.content]
        if mode.kind is Navigate.ENCRYPTED_DRIVE:
            return [device.label for device in self.encrypted.content]
        if isinstance(mode.kind, InputCompleted):
            return list(self.completion.proposals)
        items = self._navigable(mode, history)
        return items.labels() if items is not None else []

    def index_for(self, mode: MenuMode, history) -> int:
        items = self._navigable(mode, history)
        return getattr(items, "index", 0) if items is not None else 0

    def select_next(self, mode: MenuMode, history) -> None:
        items = self._navigable(mode, history)
        if items is not None:
            items.select_next()
            self.window.scroll_down_one(items.index)

    def select_prev(self, mode: MenuMode, history) -> None:
        items = self._navigable(mode, history)
        if items is not None:
            items.select_prev()
            self.window.scroll_up_one(items.index)

    def select_index(self, mode: MenuMode, history, index: int) -> None:
        items = self._navigable(mode, history)
        if items is not None:
            items.select_index(index)
            self.window.scroll_to(items.index)

    def reset(self) -> None:
        """Clear per-interaction buffers; lists and flags survive."""
        self.input.reset()
        self.completion.reset()
