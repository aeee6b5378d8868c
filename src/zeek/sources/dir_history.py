"""Directory history, one absolute path per line, most recent last."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def read_dir_history_file(path: str | Path) -> list[str]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.debug("Cannot read directory history %s: %s", path, e)
        return []
    return [line for line in text.split("\n") if line.strip()]


def write_dir_history_file(path: str | Path, dirs: list[str]) -> None:
    Path(path).write_text("\n".join(dirs), encoding="utf-8")


def add_dir_to_history(cwd: str, path: str | Path, max_lines: int) -> list[str]:
    """Move *cwd* to the end of the history, evicting the oldest entry if full."""
    dirs = [d for d in read_dir_history_file(path) if d != cwd]
    if dirs and len(dirs) >= max_lines:
        dirs = dirs[len(dirs) - max_lines + 1:]
    dirs.append(cwd)
    write_dir_history_file(path, dirs)
    logger.debug("Stored %s in directory history (%d entries)", cwd, len(dirs))
    return dirs


def abbreviate_home(directory: str, home: str) -> str:
    if home and (directory == home or directory.startswith(home.rstrip("/") + "/")):
        return "~" + directory[len(home.rstrip("/")):]
    return directory


def read_dir_history(cwd: str, path: str | Path, home: str) -> list[str]:
    """History entries for display, with *home* shortened to ``~``.

    The newest entry is dropped when it is the directory we are already in.
    """
    dirs = read_dir_history_file(path)
    if dirs and dirs[-1] == cwd:
        dirs.pop()
    return [abbreviate_home(d, home) for d in dirs]
