"""Candidate lists for the popups."""

from zeek.sources.commands import list_path_commands, partial_command, single_match
from zeek.sources.dir_history import add_dir_to_history, read_dir_history
from zeek.sources.file_list import (
    file_name_from_line,
    highlight_file_line,
    is_directory_line,
    list_directory,
    resolve_dir,
    split_path_and_file,
    word_under_cursor,
)
from zeek.sources.history import read_command_history

__all__ = [
    "add_dir_to_history",
    "file_name_from_line",
    "highlight_file_line",
    "is_directory_line",
    "list_directory",
    "list_path_commands",
    "partial_command",
    "read_command_history",
    "read_dir_history",
    "resolve_dir",
    "single_match",
    "split_path_and_file",
    "word_under_cursor",
]
