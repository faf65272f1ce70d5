"""Single-line input buffer, password holder, and per-mode input recall."""

from __future__ import annotations

from dataclasses import dataclass, field


class Input:
    """Editable text with a cursor measured in characters."""

    def __init__(self) -> None:
        self.chars: list[str] = []
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.chars)

    def string(self) -> str:
        return "".join(self.chars)

    def is_empty(self) -> bool:
        return not self.chars

    def reset(self) -> None:
        self.chars.clear()
        self.cursor = 0

    def replace(self, text: str) -> None:
        self.chars = list(text)
        self.cursor = len(self.chars)

    def insert(self, char: str) -> None:
        self.chars[self.cursor : self.cursor] = list(char)
        self.cursor += len(char)

    def delete_char_left(self) -> None:
        if self.cursor > 0:
            del self.chars[self.cursor - 1]
            self.cursor -= 1

    def delete_chars_right(self) -> None:
        del self.chars[self.cursor :]

    def cursor_left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def cursor_right(self) -> None:
        self.cursor = min(len(self.chars), self.cursor + 1)

    def cursor_start(self) -> None:
        self.cursor = 0

    def cursor_end(self) -> None:
        self.cursor = len(self.chars)

    def password_mask(self) -> str:
        return "*" * len(self.chars)


class PasswordHolder:
    """Write-only store; each secret is handed out at most once."""

    def __init__(self) -> None:
        self._sudo: str | None = None
        self._encrypted: str | None = None

    def __repr__(self) -> str:
        return f"PasswordHolder(sudo={self.has_sudo()}, encrypted={self.has_encrypted()})"

    def set_sudo(self, password: str) -> None:
        self._sudo = password

    def set_encrypted(self, password: str) -> None:
        self._encrypted = password

    def has_sudo(self) -> bool:
        return self._sudo is not None

    def has_encrypted(self) -> bool:
        return self._encrypted is not None

    def take_sudo(self) -> str | None:
        password, self._sudo = self._sudo, None
        return password

    def take_encrypted(self) -> str | None:
        password, self._encrypted = self._encrypted, None
        return password

    def clear(self) -> None:
        self._sudo = None
        self._encrypted = None


MAX_INPUT_HISTORY = 100


@dataclass
class InputHistory:
    """Previously validated inputs, grouped by menu kind name."""

    entries: dict[str, list[str]] = field(default_factory=dict)
    max_entries: int = MAX_INPUT_HISTORY

    def record(self, kind: str, text: str) -> None:
        if not text:
            return
        items = self.entries.setdefault(kind, [])
        if text in items:
            items.remove(text)
        items.append(text)
        del items[: max(0, len(items) - self.max_entries)]

    def for_kind(self, kind: str) -> list[str]:
        """Most recent first."""
        return list(reversed(self.entries.get(kind, [])))
