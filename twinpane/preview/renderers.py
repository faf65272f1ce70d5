"""Turn a path into a ``Preview``.

Renderers are tried in order; the first whose predicate accepts the path
builds the artifact. Any renderer failure degrades to an unreadable preview.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import tarfile
import zipfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..integrations.commands import execute_and_capture, is_in_path
from .artifact import Preview

LOGGER = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
SNIFF_BYTES = 8192
HEXDUMP_BYTES = 1024


@dataclass(frozen=True)
class RenderOptions:
    style: str = "monokai"
    no_color: bool = False
    max_lines: int = 2000
    tree_depth: int = 2
    max_tree_entries: int = 500
    show_hidden: bool = False


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order."""
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source
    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


_VALID_STYLES: dict[str, str] = {}


def _normalize_style(style: str) -> str:
    cached = _VALID_STYLES.get(style)
    if cached is not None:
        return cached
    try:
        get_style_by_name(style)
        resolved = style
    except ClassNotFound:
        LOGGER.warning("unknown pygments style %r, using monokai", style)
        resolved = "monokai"
    _VALID_STYLES[style] = resolved
    return resolved


def highlight_source(source: str, path: Path, style: str) -> str:
    """Highlight with Pygments; unknown file types use the plain text lexer."""
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(source, lexer, Terminal256Formatter(style=_normalize_style(style)))


def is_binary(path: Path) -> bool:
    with path.open("rb") as handle:
        chunk = handle.read(SNIFF_BYTES)
    return b"\x00" in chunk


def render_text(path: Path, options: RenderOptions) -> Preview:
    source = sanitize_terminal_text(read_text(path))
    lines = source.splitlines()[: options.max_lines]
    if options.no_color or not lines:
        return Preview.text(path, lines)
    rendered = highlight_source("\n".join(lines) + "\n", path, options.style)
    return Preview.text(path, rendered.splitlines())


def render_directory(path: Path, options: RenderOptions) -> Preview:
    """Indented snapshot of ``path`` down to ``options.tree_depth`` levels."""
    lines = [str(path)]

    def walk(directory: Path, depth: int) -> None:
        if depth > options.tree_depth or len(lines) >= options.max_tree_entries:
            return
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: (not entry.is_dir(follow_symlinks=False), entry.name.lower()))
        except OSError as exc:
            lines.append("  " * depth + f"<{exc.strerror}>")
            return
        for entry in entries:
            if not options.show_hidden and entry.name.startswith("."):
                continue
            if len(lines) >= options.max_tree_entries:
                lines.append("  " * depth + "...")
                return
            is_dir = entry.is_dir(follow_symlinks=False)
            lines.append("  " * depth + entry.name + ("/" if is_dir else ""))
            if is_dir:
                walk(Path(entry.path), depth + 1)

    walk(path, 1)
    return Preview.tree(path, lines)


def _is_archive(path: Path) -> bool:
    return zipfile.is_zipfile(path) or tarfile.is_tarfile(path)


def render_archive(path: Path, options: RenderOptions) -> Preview:
    if zipfile.is_zipfile(path):
        with zipfile.ZipFile(path) as archive:
            names = [f"{info.file_size:>10}  {info.filename}" for info in archive.infolist()]
    else:
        with tarfile.open(path) as archive:
            names = [f"{member.size:>10}  {member.name}" for member in archive.getmembers()]
    return Preview.command_output(f"archive {path.name}", "\n".join(names[: options.max_lines]), path)


MEDIA_EXTENSIONS = frozenset(
    {"mp3", "flac", "ogg", "wav", "m4a", "mp4", "mkv", "webm", "avi", "mov", "png", "jpg", "jpeg", "gif", "webp"}
)
OFFICE_EXTENSIONS = frozenset({"odt", "ods", "odp", "doc", "docx", "xls", "xlsx", "ppt", "pptx"})


def _external_command(path: Path) -> list[str] | None:
    extension = path.suffix.lstrip(".").lower()
    if extension in MEDIA_EXTENSIONS and is_in_path("mediainfo"):
        return ["mediainfo", str(path)]
    if extension == "pdf" and is_in_path("pdftotext"):
        return ["pdftotext", "-l", "5", str(path), "-"]
    if extension in OFFICE_EXTENSIONS and is_in_path("pandoc"):
        return ["pandoc", "-t", "plain", str(path)]
    return None


def render_external(path: Path, options: RenderOptions) -> Preview:
    command = _external_command(path)
    if command is None:
        return Preview.unreadable(path, "no renderer")
    result = execute_and_capture(command, timeout=10.0)
    if not result.ok:
        return Preview.unreadable(path, result.stderr.strip() or f"{command[0]} failed")
    output = sanitize_terminal_text(result.stdout)
    return Preview.command_output(" ".join(command[:1]), "\n".join(output.splitlines()[: options.max_lines]), path)


def render_hexdump(path: Path, options: RenderOptions) -> Preview:
    with path.open("rb") as handle:
        data = handle.read(HEXDUMP_BYTES)
    lines = []
    for offset in range(0, len(data), 16):
        chunk = data[offset : offset + 16]
        hex_part = " ".join(f"{byte:02x}" for byte in chunk)
        text_part = "".join(chr(byte) if 32 <= byte < 127 else "." for byte in chunk)
        lines.append(f"{offset:08x}  {hex_part:<47}  {text_part}")
    return Preview.text(path, lines, title=f"{path.name} (binary)")


Renderer = tuple[Callable[[Path], bool], Callable[[Path, RenderOptions], Preview]]

RENDERERS: tuple[Renderer, ...] = (
    (lambda path: path.is_dir(), render_directory),
    (lambda path: _external_command(path) is not None, render_external),
    (_is_archive, render_archive),
    (lambda path: not is_binary(path), render_text),
    (lambda path: True, render_hexdump),
)


def build_preview(path: Path, options: RenderOptions) -> Preview:
    """Classify ``path`` and render it; never raises for renderer failures."""
    if not os.path.lexists(path):
        return Preview.unreadable(path, "no such file")
    try:
        for accepts, render in RENDERERS:
            if accepts(path):
                return render(path, options)
    except (OSError, ValueError, tarfile.TarError, zipfile.BadZipFile, subprocess.SubprocessError) as exc:
        LOGGER.info("preview of %s failed: %s", path, exc)
        return Preview.unreadable(path, str(exc))
    return Preview.unreadable(path, "no renderer")
