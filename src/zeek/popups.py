"""The shell entry points: each popup wires a candidate source, a strategy and
the palette controller, and returns the text the shell widget should use.

Completion popups return ``new_lbuffer + "\\t" + new_rbuffer`` so the widget
can restore both halves of the command line and the cursor between them.
"""

from __future__ import annotations

import logging
import os

from zeek.config import Settings
from zeek.highlight import Highlighter
from zeek.palette import (
    DirectoryDrillDownStrategy,
    HistoryStrategy,
    PaletteController,
    PlainListStrategy,
)
from zeek.sources import (
    add_dir_to_history,
    file_name_from_line,
    highlight_file_line,
    is_directory_line,
    list_directory,
    list_path_commands,
    partial_command,
    read_command_history,
    read_dir_history,
    resolve_dir,
    single_match,
    split_path_and_file,
    word_under_cursor,
)
from zeek.sources.commands import highlight_command_name
from zeek.styles import build_style_table
from zeek.terminal import ProcessTerminal, Terminal

logger = logging.getLogger(__name__)


def _cwd(cwd: str | None) -> str:
    return cwd if cwd is not None else os.getcwd()


def history_popup(
    lbuffer: str,
    rbuffer: str,
    settings: Settings,
    terminal: Terminal | None = None,
) -> str | None:
    """Pick a command from the zsh history; the query starts as the current line."""
    items = read_command_history(settings.history_path, settings.max_cmd_history_lines)
    logger.debug("History popup with %d entries", len(items))
    highlighter = Highlighter(build_style_table(settings.highlight_styles))
    controller = PaletteController(
        items,
        HistoryStrategy(),
        terminal or ProcessTerminal(),
        settings,
        line_highlighter=highlighter,
    )
    result = controller.run(lbuffer, rbuffer)
    return result.line if result is not None else None


def dir_history_popup(
    lbuffer: str,
    rbuffer: str,
    settings: Settings,
    terminal: Terminal | None = None,
    cwd: str | None = None,
) -> str | None:
    """Pick a previously visited directory."""
    items = read_dir_history(_cwd(cwd), settings.dir_history_path, str(settings.home))
    controller = PaletteController(items, HistoryStrategy(), terminal or ProcessTerminal(), settings)
    result = controller.run(lbuffer, rbuffer)
    return result.line if result is not None else None


def store_dir(settings: Settings, cwd: str | None = None) -> None:
    add_dir_to_history(_cwd(cwd), settings.dir_history_path, settings.max_dir_history_lines)


# ---------------------------------------------------------------------------
# File search
# ---------------------------------------------------------------------------


def completion_line(prefix: str, path: str, suffix: str, cwd: str, home: str) -> str:
    """Splice *path* into the command line.

    Directories get a trailing ``/`` and no separator so completion can
    continue; anything else is followed by a space unless *suffix* already
    starts with one.
    """
    separator = "" if suffix.startswith(" ") else " "
    if os.path.isdir(resolve_dir(path, cwd, home)):
        path += "/"
        separator = ""
    return prefix + path + separator + "\t" + suffix


def display_dir(directory: str, cwd: str) -> str:
    """Path prefix to show for *directory*: relative below *cwd*, absolute elsewhere."""
    relative = os.path.relpath(directory, cwd)
    if relative == ".":
        return ""
    if relative.startswith(".."):
        return directory if directory.endswith("/") else directory + "/"
    return relative + "/"


def file_search_popup(
    lbuffer: str,
    rbuffer: str,
    settings: Settings,
    terminal: Terminal | None = None,
    cwd: str | None = None,
) -> str | None:
    """Complete the word under the cursor from a browsable directory listing.

    A unique prefix match completes immediately without showing the popup.
    """
    cwd = _cwd(cwd)
    home = str(settings.home)
    word = word_under_cursor(lbuffer, rbuffer)
    dir_prefix, file_part = split_path_and_file(word.word)
    start_dir = resolve_dir(dir_prefix, cwd, home)

    items = list_directory(start_dir)
    match = single_match([file_name_from_line(item) for item in items], file_part)
    if match is not None:
        logger.debug("Single match %r for %r", match, word.word)
        return completion_line(word.prefix, dir_prefix + match, word.suffix, cwd, home)

    strategy = DirectoryDrillDownStrategy(
        start_dir,
        list_dir=list_directory,
        get_name=file_name_from_line,
        is_dir=is_directory_line,
    )
    controller = PaletteController(
        items,
        strategy,
        terminal or ProcessTerminal(),
        settings,
        line_highlighter=highlight_file_line,
    )
    result = controller.run(file_part, "")
    if result is None or result.line is None:
        return None

    path = display_dir(str(strategy.current_dir), cwd) + file_name_from_line(result.line)
    return completion_line(word.prefix, path, word.suffix, cwd, home)


# ---------------------------------------------------------------------------
# Command search
# ---------------------------------------------------------------------------


def _command_line(prefix: str, command: str, rbuffer: str) -> str:
    separator = "" if rbuffer.startswith(" ") else " "
    return prefix + command + separator + "\t" + rbuffer


def cmd_search_popup(
    lbuffer: str,
    rbuffer: str,
    settings: Settings,
    terminal: Terminal | None = None,
    path_env: str | None = None,
) -> str | None:
    """Complete the command name being typed from the executables on ``$PATH``."""
    commands = list_path_commands(path_env)
    prefix, partial = partial_command(lbuffer)

    match = single_match(commands, partial)
    if match is not None:
        return _command_line(prefix, match, rbuffer)

    controller = PaletteController(
        commands,
        PlainListStrategy(),
        terminal or ProcessTerminal(),
        settings,
        line_highlighter=highlight_command_name,
    )
    result = controller.run(partial, "")
    if result is None or result.line is None:
        return None
    return _command_line(prefix, result.line, rbuffer)
