"""External process helpers.

Every function logs what it runs. Passwords are only ever written to the
child's stdin and never logged.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def is_in_path(program: str) -> bool:
    return shutil.which(program) is not None


def execute(args: Sequence[str], cwd: Path | None = None) -> subprocess.Popen:
    """Start ``args`` detached from the TUI; raises ``OSError`` when it cannot start."""
    LOGGER.info("execute %s", shlex.join(args))
    return subprocess.Popen(
        list(args),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def execute_and_capture(args: Sequence[str], cwd: Path | None = None, timeout: float | None = 30.0) -> CommandResult:
    LOGGER.info("capture %s", shlex.join(args))
    proc = subprocess.run(
        list(args),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        timeout=timeout,
        check=False,
    )
    return CommandResult(proc.returncode, proc.stdout, proc.stderr)


def execute_shell(command: str, cwd: Path | None = None, timeout: float | None = 30.0) -> CommandResult:
    """Run ``command`` through ``$SHELL -c`` and capture its output."""
    shell = os.environ.get("SHELL") or "/bin/sh"
    return execute_and_capture([shell, "-c", command], cwd=cwd, timeout=timeout)


def execute_with_password(
    args: Sequence[str],
    password: str,
    cwd: Path | None = None,
    timeout: float | None = 60.0,
) -> CommandResult:
    """Run ``args`` feeding ``password`` followed by a newline on stdin."""
    LOGGER.info("execute with password %s", shlex.join(args))
    proc = subprocess.run(
        list(args),
        cwd=cwd,
        input=password + "\n",
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        timeout=timeout,
        check=False,
    )
    return CommandResult(proc.returncode, proc.stdout, proc.stderr)


def execute_sudo(args: Sequence[str], password: str, cwd: Path | None = None) -> CommandResult:
    """Run ``args`` through ``sudo -S``; the cached credential is dropped afterwards."""
    result = execute_with_password(["sudo", "-S", "-p", "", *args], password, cwd=cwd)
    try:
        subprocess.run(["sudo", "-k"], check=False, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError:
        LOGGER.warning("could not reset sudo credentials")
    return result


def run_in_terminal(
    args: Sequence[str],
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
    cwd: Path | None = None,
) -> str | None:
    """Hand the terminal to ``args`` until it exits; return an error message or ``None``."""
    LOGGER.info("run in terminal %s", shlex.join(args))
    disable_tui_mode()
    try:
        subprocess.run(list(args), cwd=cwd, check=False)
    except OSError as exc:
        LOGGER.warning("failed to run %s: %s", args[0] if args else "", exc)
        return f"Failed to run {args[0] if args else ''}: {exc}"
    finally:
        enable_tui_mode()
    return None


DEFAULT_OPENER = "xdg-open"


def opener_for(path: Path, openers: Mapping[str, str]) -> list[str]:
    """Command line opening ``path``, picked by extension from ``openers``."""
    extension = path.suffix.lstrip(".").lower()
    command = openers.get(extension) or DEFAULT_OPENER
    return [*shlex.split(command), str(path)]


def open_path(path: Path, openers: Mapping[str, str]) -> None:
    execute(opener_for(path, openers), cwd=path.parent)


def notify(message: str) -> None:
    """Desktop notification through ``notify-send`` when it is installed."""
    if not is_in_path("notify-send"):
        return
    try:
        execute(["notify-send", "twinpane", message])
    except OSError as exc:
        LOGGER.debug("notify-send failed: %s", exc)
