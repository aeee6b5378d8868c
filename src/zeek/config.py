"""Configuration for zeek, read from ``ZEEK_*`` environment variables.

The shell glue exports these before each popup is opened::

    ZEEK_MENU_ROW=2                 # positive: top row; negative: from the bottom
    ZEEK_MENU_SIZE=120x40           # negative sizes are distances to the edges
    ZEEK_LINE_EDIT_OVER_MENU=false
    ZEEK_MAX_CMD_HISTORY_LINES=2000
    ZEEK_MAX_DIR_HISTORY_LINES=200
    ZEEK_HIGHLIGHT_STYLES='{"command": "fg=#a6e22e,bold"}'
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)

HISTORY_FILE = ".zsh_history"
DIR_HISTORY_FILE = ".dir_history"

_TRUE_VALUES = ("true", "1", "yes")


def _home() -> Path:
    return Path(os.environ.get("HOME") or os.environ.get("USERPROFILE") or Path.home())


@dataclass
class Settings:
    """Popup layout, history limits and highlight style overrides."""

    menu_row: int = 2
    line_edit_over_menu: bool = False
    menu_width: int = 80
    menu_height: int = 40
    max_cmd_history_lines: int = 1000
    max_dir_history_lines: int = 1000
    highlight_styles: dict[str, str] = field(default_factory=dict)
    home: Path = field(default_factory=_home)

    @property
    def history_path(self) -> Path:
        return self.home / HISTORY_FILE

    @property
    def dir_history_path(self) -> Path:
        return self.home / DIR_HISTORY_FILE


def _parse_int(name: str, value: str) -> int | None:
    try:
        return int(value.strip(), 10)
    except ValueError:
        logger.debug("ignoring %s=%r: not an integer", name, value)
        return None


def parse_menu_size(value: str) -> tuple[int, int] | None:
    """Parse ``WxH`` into ``(width, height)``; either may be negative."""
    sizes = value.split("x")
    if len(sizes) != 2:
        logger.debug("ignoring ZEEK_MENU_SIZE=%r: expected WxH", value)
        return None
    width = _parse_int("ZEEK_MENU_SIZE", sizes[0])
    height = _parse_int("ZEEK_MENU_SIZE", sizes[1])
    if width is None or height is None:
        return None
    return width, height


def parse_highlight_styles(value: str) -> dict[str, str]:
    """Parse a JSON object of token category -> style string."""
    try:
        data = json.loads(value)
    except json.JSONDecodeError:
        logger.debug("ignoring malformed ZEEK_HIGHLIGHT_STYLES", exc_info=True)
        return {}
    if not isinstance(data, dict):
        logger.debug("ignoring ZEEK_HIGHLIGHT_STYLES: not a JSON object")
        return {}
    return {str(key): value for key, value in data.items() if isinstance(value, str)}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *environ* (defaults to ``os.environ``).

    Malformed values are skipped and the default kept.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    if "HOME" in env and env["HOME"]:
        settings.home = Path(env["HOME"])

    if env.get("ZEEK_MENU_ROW"):
        row = _parse_int("ZEEK_MENU_ROW", env["ZEEK_MENU_ROW"])
        if row is not None:
            # row 1 leaves no room for the header line
            settings.menu_row = 2 if row == 1 else row

    if env.get("ZEEK_MENU_SIZE"):
        size = parse_menu_size(env["ZEEK_MENU_SIZE"])
        if size is not None:
            settings.menu_width, settings.menu_height = size

    if env.get("ZEEK_LINE_EDIT_OVER_MENU"):
        settings.line_edit_over_menu = env["ZEEK_LINE_EDIT_OVER_MENU"].lower() in _TRUE_VALUES

    if env.get("ZEEK_MAX_CMD_HISTORY_LINES"):
        lines = _parse_int("ZEEK_MAX_CMD_HISTORY_LINES", env["ZEEK_MAX_CMD_HISTORY_LINES"])
        if lines is not None:
            settings.max_cmd_history_lines = lines

    if env.get("ZEEK_MAX_DIR_HISTORY_LINES"):
        lines = _parse_int("ZEEK_MAX_DIR_HISTORY_LINES", env["ZEEK_MAX_DIR_HISTORY_LINES"])
        if lines is not None:
            settings.max_dir_history_lines = lines

    if env.get("ZEEK_HIGHLIGHT_STYLES"):
        settings.highlight_styles = parse_highlight_styles(env["ZEEK_HIGHLIGHT_STYLES"])

    return settings
