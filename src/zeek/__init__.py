"""zeek: searchable, syntax-highlighted command and directory palette for zsh."""

from zeek.config import Settings, load_settings
from zeek.filtering import Filter, filter_items
from zeek.highlight import Highlighter, highlight_command
from zeek.line_editor import CursorState, LineEditor
from zeek.palette import (
    DirectoryDrillDownStrategy,
    HistoryStrategy,
    NavigationAction,
    NavigationStrategy,
    PaletteController,
    PaletteResult,
    PlainListStrategy,
    compute_geometry,
)
from zeek.styles import StyleTable, build_style_table, parse_style
from zeek.terminal import ProcessTerminal, Terminal
from zeek.tokenizer import Token, TokenCategory, tokenize

__version__ = "0.1.0"

__all__ = [
    "CursorState",
    "DirectoryDrillDownStrategy",
    "Filter",
    "Highlighter",
    "HistoryStrategy",
    "LineEditor",
    "NavigationAction",
    "NavigationStrategy",
    "PaletteController",
    "PaletteResult",
    "PlainListStrategy",
    "ProcessTerminal",
    "Settings",
    "StyleTable",
    "Terminal",
    "Token",
    "TokenCategory",
    "build_style_table",
    "compute_geometry",
    "filter_items",
    "highlight_command",
    "load_settings",
    "parse_style",
    "tokenize",
]
