"""Executables on ``$PATH`` for command-name completion."""

from __future__ import annotations

import logging
import os
import re
import stat

from zeek.styles import COLOR_GREEN, fg_color

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"[;&|()]|\s&&\s|\s\|\|\s")

highlight_command_name = fg_color(COLOR_GREEN)


def executables_in(directory: str) -> list[str]:
    """Regular files with any execute bit set; unreadable directories yield nothing."""
    try:
        names = os.listdir(directory)
    except OSError:
        return []

    found: list[str] = []
    for name in names:
        try:
            st = os.stat(os.path.join(directory, name))
        except OSError:
            continue
        if stat.S_ISREG(st.st_mode) and st.st_mode & 0o111:
            found.append(name)
    return found


def list_path_commands(path_env: str | None = None) -> list[str]:
    """Sorted, de-duplicated executable names from every ``$PATH`` entry."""
    if path_env is None:
        path_env = os.environ.get("PATH", "")
    commands: set[str] = set()
    for directory in filter(None, path_env.split(os.pathsep)):
        commands.update(executables_in(directory))
    logger.debug("Found %d commands on PATH", len(commands))
    return sorted(commands)


def partial_command(lbuffer: str) -> tuple[str, str]:
    """Split *lbuffer* into ``(prefix, partial)`` at the last command separator.

    *partial* is the command name being typed; whitespace after the
    separator stays in *prefix*.
    """
    last_end = 0
    for match in _SEPARATOR_RE.finditer(lbuffer):
        last_end = match.end()
    while last_end < len(lbuffer) and lbuffer[last_end].isspace():
        last_end += 1
    return lbuffer[:last_end], lbuffer[last_end:]


def single_match(candidates: list[str], prefix: str) -> str | None:
    """The only candidate starting with *prefix* (case-insensitive), if exactly one does."""
    if not prefix:
        return None
    lowered = prefix.lower()
    matches = [c for c in candidates if c.lower().startswith(lowered)]
    return matches[0] if len(matches) == 1 else None
