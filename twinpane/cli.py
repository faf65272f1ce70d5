"""Command-line front door for twinpane.

Parses CLI options, configures logging, and starts the application driver.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import DEFAULT_LOG_PATH
from .errors import StartupError

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="twinpane", description="Dual pane terminal file manager.")
    parser.add_argument("path", nargs="?", default=None, help="Start directory. Defaults to the current directory.")
    parser.add_argument("--socket", type=Path, default=None, help="IPC socket path (default: per-process temp file).")
    parser.add_argument("--log-file", type=Path, default=DEFAULT_LOG_PATH, help="Log file location.")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level.")
    parser.add_argument("--style", default="monokai", help="Pygments style name for file previews.")
    parser.add_argument("--no-color", action="store_true", help="Disable syntax highlighting in previews.")
    panes = parser.add_mutually_exclusive_group()
    panes.add_argument("--dual", dest="dual_pane", action="store_true", default=None, help="Show two panes.")
    panes.add_argument("--single", dest="dual_pane", action="store_false", help="Show one pane.")
    parser.add_argument(
        "--preview",
        dest="show_preview",
        action="store_true",
        default=None,
        help="Preview the left selection in the right pane.",
    )
    return parser


def configure_logging(log_file: Path, debug: bool) -> None:
    """Send logs to ``log_file``; the terminal belongs to the TUI."""
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StartupError(f"cannot create log directory {log_file.parent}: {exc}") from exc
    logging.basicConfig(
        filename=str(log_file),
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )


def resolve_start_dir(raw: str | None) -> Path:
    from .runtime.app import default_start_dir

    if raw is None:
        return default_start_dir()
    path = Path(raw).expanduser()
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    return path.resolve() if path.is_dir() else path.resolve().parent


def main(argv: list[str] | None = None) -> None:
    """Parse ``argv`` and run until the user quits; startup failures exit with status 1."""
    args = build_parser().parse_args(argv)
    start_dir = resolve_start_dir(args.path)
    try:
        configure_logging(args.log_file, args.debug)
        from .runtime.app import Application, AppOptions

        app = Application(
            AppOptions(
                start_dir=start_dir,
                socket_path=args.socket,
                style=args.style,
                no_color=args.no_color,
                dual_pane=args.dual_pane,
                show_preview=args.show_preview,
            )
        )
    except (StartupError, OSError) as exc:
        LOGGER.error("startup failed: %s", exc)
        raise SystemExit(f"twinpane: {exc}") from exc
    raise SystemExit(app.run())


if __name__ == "__main__":
    main()
