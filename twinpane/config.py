"""Persistent JSON config helpers.

Stores session toggles, marks, shortcuts, key overrides, plugins and
openers. All access is defensive: malformed or missing config falls back
safely.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

LOGGER = logging.getLogger(__name__)

APP_NAME = "twinpane"
CONFIG_FILENAME = "config.json"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.log"

SESSION_KEYS = ("dual_pane", "show_preview", "show_metadata")


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        LOGGER.warning("ignoring config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never breaks the session.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.warning("cannot save config %s: %s", CONFIG_PATH, exc)


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def load_session_flags() -> dict[str, bool]:
    """Session toggles with defaults for missing or non-boolean values."""
    data = load_config()
    defaults = {"dual_pane": True, "show_preview": False, "show_metadata": True}
    return {key: _load_bool(data, key, defaults[key]) for key in SESSION_KEYS}


def save_session_flags(flags: dict[str, bool]) -> None:
    config = load_config()
    for key in SESSION_KEYS:
        if key in flags:
            config[key] = bool(flags[key])
    save_config(config)


def load_show_hidden() -> bool:
    return _load_bool(load_config(), "show_hidden", False)


def save_show_hidden(show_hidden: bool) -> None:
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def load_marks() -> dict[str, Path]:
    """Load char -> path marks; invalid keys and non-string paths are dropped."""
    value = load_config().get("marks")
    if not isinstance(value, dict):
        return {}
    marks: dict[str, Path] = {}
    for key, raw_path in value.items():
        if not isinstance(key, str) or len(key) != 1:
            continue
        if not isinstance(raw_path, str) or not raw_path:
            continue
        marks[key] = Path(raw_path)
    return marks


def save_marks(marks: dict[str, Path]) -> None:
    config = load_config()
    config["marks"] = {key: str(path) for key, path in sorted(marks.items())}
    save_config(config)


def _load_str_list(key: str) -> list[str]:
    value = load_config().get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _load_str_map(key: str) -> dict[str, str]:
    value = load_config().get(key)
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str) and k and v}


def load_shortcuts() -> list[Path]:
    return [Path(item).expanduser() for item in _load_str_list("shortcuts")]


def load_key_overrides() -> dict[str, str]:
    """Key token -> action name overrides."""
    return _load_str_map("keys")


def load_plugins() -> dict[str, str]:
    """Plugin name -> module file or package directory."""
    return _load_str_map("plugins")


def load_openers() -> dict[str, str]:
    """File extension -> opener command."""
    return {key.lstrip(".").lower(): value for key, value in _load_str_map("opener").items()}
