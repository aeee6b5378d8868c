"""Popup geometry: menu size and the rows used by the menu, header and editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from zeek.config import Settings


@dataclass(frozen=True)
class Geometry:
    width: int
    height: int
    menu_row: int
    editor_row: int

    @property
    def header_row(self) -> int:
        return self.menu_row - 1

    @property
    def scrollbar_col(self) -> int:
        return self.width + 1


def compute_geometry(
    items: Sequence[str],
    columns: int,
    rows: int,
    settings: Settings,
) -> Geometry:
    """Fit the menu to the terminal and the configured bounds.

    Positive ``menu_width``/``menu_height`` are upper limits; zero or
    negative values are offsets from the terminal edges. A negative
    ``menu_row`` counts up from the bottom of the screen.
    """
    max_width = max((len(item) for item in items), default=0)

    if settings.menu_width > 0:
        width = min(columns - 2, max_width + 1, settings.menu_width)
    else:
        width = min(columns + settings.menu_width, max_width + 1)

    if settings.menu_height > 0:
        height = min(rows - 4, len(items), settings.menu_height)
    else:
        height = min(rows + settings.menu_height, len(items))

    width = max(width, 1)
    height = max(height, 1)

    menu_row = settings.menu_row if settings.menu_row > 0 else rows + settings.menu_row - height
    if settings.line_edit_over_menu:
        editor_row = menu_row - 2
    else:
        editor_row = menu_row + height + 1

    return Geometry(width=width, height=height, menu_row=menu_row, editor_row=editor_row)
