"""Directory listings formatted like ``ls -l`` rows, plus cursor-word helpers."""

from __future__ import annotations

import logging
import os
import pwd
import re
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from zeek.styles import COLOR_CYAN, COLOR_GREEN, COLOR_GREY, COLOR_WHITE, fg_color

logger = logging.getLogger(__name__)

# "<perm>  <user>  <size>  dd/mm/yyyy HH:MM  <name>"
_NAME_RE = re.compile(r"\d{2}/\d{2}/\d{4} \d{2}:\d{2}  (.*)$")
_LEADING_WORD_RE = re.compile(r"^\S*")
_TRAILING_WORD_RE = re.compile(r"\S*$")

_meta_style = fg_color(COLOR_GREY)
_dir_style = fg_color(COLOR_CYAN)
_exec_style = fg_color(COLOR_GREEN)
_file_style = fg_color(COLOR_WHITE)


def format_permissions(mode: int, is_directory: bool) -> str:
    bits = "rwxrwxrwx"
    perms = "".join(
        ch if mode & (0o400 >> i) else "-" for i, ch in enumerate(bits)
    )
    return ("d" if is_directory else "-") + perms


def format_size(size: int) -> str:
    """Five columns: ``  512``, `` 1.5K``, ``12.0M``."""
    if size < 1024:
        return str(size).rjust(5)
    for unit, scale in (("K", 1024), ("M", 1024**2)):
        if size < scale * 1024:
            return f"{size / scale:.1f}".rjust(4) + unit
    return f"{size / 1024**3:.1f}".rjust(4) + "G"


def _owner(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def format_entry(name: str, st: os.stat_result) -> str:
    is_dir = stat.S_ISDIR(st.st_mode)
    mtime = datetime.fromtimestamp(st.st_mtime)
    return (
        f"{format_permissions(st.st_mode, is_dir)}  {_owner(st.st_uid)}  "
        f"{format_size(st.st_size)}  {mtime:%d/%m/%Y %H:%M}  {name}"
    )


def list_directory(path: str | Path) -> list[str]:
    """One row per entry of *path*, sorted by name.

    Raises :class:`OSError` if the directory itself cannot be read. Entries
    that vanish or cannot be stat'ed are skipped.
    """
    directory = Path(path)
    rows: list[str] = []
    for name in sorted(os.listdir(directory)):
        entry = directory / name
        try:
            st = entry.stat()
        except OSError:
            try:
                # dangling symlink
                st = entry.lstat()
            except OSError:
                logger.debug("Skipping %s: cannot stat", entry)
                continue
        rows.append(format_entry(name, st))
    return rows


def file_name_from_line(line: str) -> str:
    match = _NAME_RE.search(line)
    return match.group(1) if match else line


def is_directory_line(line: str) -> bool:
    return line.startswith("d")


def highlight_file_line(line: str) -> str:
    """Grey metadata; directories cyan, executables green."""
    name = file_name_from_line(line)
    if name == line:
        return line
    meta = line[: len(line) - len(name)]
    if is_directory_line(line):
        name_style = _dir_style
    elif "x" in line[1:10]:
        name_style = _exec_style
    else:
        name_style = _file_style
    return _meta_style(meta) + name_style(name)


# ---------------------------------------------------------------------------
# Command line helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WordUnderCursor:
    word: str
    prefix: str
    suffix: str


def word_under_cursor(lbuffer: str, rbuffer: str) -> WordUnderCursor:
    """The whitespace-delimited word spanning the cursor.

    *prefix* is everything before the word and *suffix* everything after it.
    """
    left = _TRAILING_WORD_RE.search(lbuffer)
    right = _LEADING_WORD_RE.match(rbuffer)
    left_part = left.group() if left else ""
    right_part = right.group() if right else ""
    return WordUnderCursor(
        word=left_part + right_part,
        prefix=lbuffer[: len(lbuffer) - len(left_part)],
        suffix=rbuffer[len(right_part):],
    )


def split_path_and_file(word: str) -> tuple[str, str]:
    """Split at the last ``/``: ``"src/ind"`` -> ``("src/", "ind")``."""
    index = word.rfind("/")
    return word[: index + 1], word[index + 1:]


def resolve_dir(prefix: str, cwd: str, home: str) -> str:
    """Absolute, normalized directory for a typed path prefix."""
    if not prefix:
        return os.path.normpath(cwd)
    if prefix == "~" or prefix.startswith("~/"):
        prefix = home + prefix[1:]
    return os.path.normpath(os.path.join(cwd, prefix))
