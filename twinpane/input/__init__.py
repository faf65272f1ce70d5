"""Terminal key decoding and the key binding table."""

from .bindings import DEFAULT_BINDINGS, KeyBinding, KeyBindings
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "DEFAULT_BINDINGS",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyBinding",
    "KeyBindings",
    "read_key",
]
