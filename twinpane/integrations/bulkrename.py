"""Bulk rename through ``$EDITOR``: one name per line, edited in place."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path

LOGGER = logging.getLogger(__name__)


def launch_editor(
    target: Path,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
) -> str | None:
    editor_env = os.environ.get("EDITOR", "").strip()
    if not editor_env:
        return "Cannot edit: $EDITOR is not set."
    cmd = shlex.split(editor_env)
    if not cmd:
        return "Cannot edit: $EDITOR is empty."

    disable_tui_mode()
    try:
        subprocess.run([*cmd, str(target)], check=False)
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    finally:
        enable_tui_mode()
    return None


class BulkRename:
    """Pending ``old -> new`` renames gathered from an edited temp file."""

    def __init__(self) -> None:
        self.sources: list[Path] = []
        self.renames: list[tuple[Path, Path]] = []

    def is_empty(self) -> bool:
        return not self.renames

    def reset(self) -> None:
        self.sources = []
        self.renames = []

    def ask_filenames(
        self,
        sources: list[Path],
        disable_tui_mode: Callable[[], None],
        enable_tui_mode: Callable[[], None],
    ) -> str | None:
        """Let the user edit the names; return an error message or ``None``."""
        self.sources = list(sources)
        self.renames = []
        with tempfile.NamedTemporaryFile("w", suffix=".txt", prefix="twinpane-", delete=False, encoding="utf-8") as handle:
            handle.write("\n".join(path.name for path in self.sources) + "\n")
            temp_path = Path(handle.name)
        try:
            error = launch_editor(temp_path, disable_tui_mode, enable_tui_mode)
            if error is not None:
                return error
            edited = temp_path.read_text(encoding="utf-8").splitlines()
        finally:
            temp_path.unlink(missing_ok=True)
        return self.set_new_names(edited)

    def set_new_names(self, names: list[str]) -> str | None:
        names = [name.strip() for name in names if name.strip()]
        if len(names) != len(self.sources):
            return f"Bulk rename: expected {len(self.sources)} names, got {len(names)}"
        for name in names:
            if "/" in name:
                return f"Bulk rename: invalid name {name!r}"
        self.renames = [
            (source, source.with_name(name)) for source, name in zip(self.sources, names) if source.name != name
        ]
        return None

    def describe(self) -> list[str]:
        return [f"{old.name} -> {new.name}" for old, new in self.renames]

    def execute(self) -> list[tuple[Path, Path]]:
        """Apply the renames; existing targets and failures are logged and skipped."""
        done: list[tuple[Path, Path]] = []
        for old, new in self.renames:
            if new.exists():
                LOGGER.warning("bulk rename: %s exists, skipping", new)
                continue
            try:
                old.rename(new)
            except OSError as exc:
                LOGGER.warning("bulk rename %s failed: %s", old, exc)
                continue
            LOGGER.info("renamed %s -> %s", old, new)
            done.append((old, new))
        self.reset()
        return done
