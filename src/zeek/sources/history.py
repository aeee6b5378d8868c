"""Command history read from the zsh history file."""

from __future__ import annotations

import collections
import logging
import re
from pathlib import Path

from zeek.palette.menu import GRAPHIC_NEWLINE

logger = logging.getLogger(__name__)

# Extended history prefix: ": <start>:<elapsed>;"
_TIMESTAMP_RE = re.compile(r"^:?\s?\d+:\d+;")
_PLAIN_ENTRY_SPLIT_RE = re.compile(r"(?<!\\)\n")


def remove_timestamp(entry: str) -> str:
    return _TIMESTAMP_RE.sub("", entry, count=1)


def remove_duplicates(entries: list[str]) -> list[str]:
    """Drop repeated entries, keeping the most recent occurrence of each."""
    seen: set[str] = set()
    kept: list[str] = []
    for entry in reversed(entries):
        if entry not in seen:
            seen.add(entry)
            kept.append(entry)
    kept.reverse()
    return kept


def tail_lines(path: Path, max_lines: int) -> list[str]:
    """Last *max_lines* physical lines of *path*."""
    if max_lines <= 0:
        return []
    with open(path, encoding="utf-8", errors="replace") as f:
        return list(collections.deque((line.rstrip("\n") for line in f), maxlen=max_lines))


def parse_history(text: str) -> list[str]:
    """Split raw history text into entries, oldest first.

    Continuation lines (a trailing backslash) are joined with
    :data:`GRAPHIC_NEWLINE` so every entry fits on one menu row.
    """
    text = text.rstrip()
    if not text:
        return []
    if _TIMESTAMP_RE.match(text):
        raw_entries = text.split("\n: ")
    else:
        # plain history: one entry per line unless the newline is escaped
        raw_entries = _PLAIN_ENTRY_SPLIT_RE.split(text)
    entries = [
        remove_timestamp(entry.replace("\\\n", GRAPHIC_NEWLINE))
        for entry in raw_entries
    ]
    return remove_duplicates(entries)


def read_command_history(path: str | Path, max_lines: int) -> list[str]:
    """Entries from the last *max_lines* lines of the history file at *path*.

    A missing or unreadable file yields an empty list.
    """
    try:
        lines = tail_lines(Path(path), max_lines)
    except OSError as e:
        logger.debug("Cannot read history file %s: %s", path, e)
        return []
    return parse_history("\n".join(lines))
