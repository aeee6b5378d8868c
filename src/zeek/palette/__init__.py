"""Interactive palette: filtered menu, query editor and navigation strategies."""

from zeek.palette.controller import LIST_ACTIONS, PaletteController, PaletteState
from zeek.palette.layout import Geometry, compute_geometry
from zeek.palette.menu import GRAPHIC_NEWLINE, NO_MATCHES, MenuTheme, MenuView
from zeek.palette.strategies import (
    DirectoryDrillDownStrategy,
    HistoryStrategy,
    NavigationAction,
    NavigationStrategy,
    PaletteResult,
    PlainListStrategy,
)

__all__ = [
    "DirectoryDrillDownStrategy",
    "GRAPHIC_NEWLINE",
    "Geometry",
    "HistoryStrategy",
    "LIST_ACTIONS",
    "MenuTheme",
    "MenuView",
    "NO_MATCHES",
    "NavigationAction",
    "NavigationStrategy",
    "PaletteController",
    "PaletteResult",
    "PaletteState",
    "PlainListStrategy",
    "compute_geometry",
]
