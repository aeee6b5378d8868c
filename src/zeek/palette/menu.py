"""Scrolling single-column menu with a selection bar and scrollbar."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from zeek.styles import bg_color, fg_color
from zeek.utils import apply_background_to_line, truncate_to_width

# Shown as the only row when nothing matches the query; never selectable
NO_MATCHES = "# \U0001f937 No matches"

# Stands in for a line break inside a multi-line history entry
GRAPHIC_NEWLINE = "↵"

MENU_BG_COLOR = "#1d1e1a"
MENU_BG_SEL_COLOR = "#4a483a"
MENU_FG_COLOR = "#58d1eb"
SCROLL_FG_COLOR = "#ffffff"

SCROLL_THUMB = "█"

LineHighlighter = Callable[[str], str]


@dataclass(frozen=True)
class MenuTheme:
    item: Callable[[str], str]
    selected_item: Callable[[str], str]
    scroll_area: Callable[[str], str]
    scroll_bar: Callable[[str], str]


def default_menu_theme() -> MenuTheme:
    return MenuTheme(
        item=bg_color(MENU_BG_COLOR),
        selected_item=bg_color(MENU_BG_SEL_COLOR),
        scroll_area=bg_color(MENU_BG_COLOR),
        scroll_bar=fg_color(SCROLL_FG_COLOR),
    )


class MenuView:
    """Visible window over a list of rows.

    The scroll offset is adjusted after every move so the selected row is
    always inside the window of ``height`` rows.
    """

    def __init__(
        self,
        items: Sequence[str],
        height: int,
        width: int,
        line_highlighter: LineHighlighter,
        selection: int = 0,
        theme: MenuTheme | None = None,
    ) -> None:
        self._items: list[str] = list(items)
        self._height = max(height, 1)
        self._width = max(width, 1)
        self._highlight = line_highlighter
        self._theme = theme or default_menu_theme()
        self._selection = 0
        self._scroll_offset = 0
        self.select(selection)

    # -- state --------------------------------------------------------------

    @property
    def items(self) -> list[str]:
        return self._items

    @property
    def selection(self) -> int:
        return self._selection

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def height(self) -> int:
        return self._height

    @property
    def width(self) -> int:
        return self._width

    @property
    def selected_item(self) -> str | None:
        if 0 <= self._selection < len(self._items):
            return self._items[self._selection]
        return None

    def resize(self, height: int, width: int) -> None:
        self._height = max(height, 1)
        self._width = max(width, 1)
        self._scroll_to_selection()

    def set_items(self, items: Sequence[str], selection: int) -> None:
        self._items = list(items)
        self._scroll_offset = 0
        self.select(selection)

    # -- navigation ---------------------------------------------------------

    def select(self, index: int) -> None:
        if not self._items:
            self._selection = 0
            self._scroll_offset = 0
            return
        self._selection = max(0, min(index, len(self._items) - 1))
        self._scroll_to_selection()

    def move_up(self) -> None:
        if self._selection == 0:
            self.select(len(self._items) - 1)
        else:
            self.select(self._selection - 1)

    def move_down(self) -> None:
        if self._selection >= len(self._items) - 1:
            self.select(0)
        else:
            self.select(self._selection + 1)

    def page_up(self) -> None:
        self.select(self._selection - self._height)

    def page_down(self) -> None:
        self.select(self._selection + self._height)

    def select_first(self) -> None:
        self.select(0)

    def select_last(self) -> None:
        self.select(len(self._items) - 1)

    def _scroll_to_selection(self) -> None:
        if self._selection < self._scroll_offset:
            self._scroll_offset = self._selection
        elif self._selection >= self._scroll_offset + self._height:
            self._scroll_offset = self._selection - self._height + 1
        max_offset = max(len(self._items) - self._height, 0)
        self._scroll_offset = max(0, min(self._scroll_offset, max_offset))

    # -- rendering ----------------------------------------------------------

    def visible_items(self) -> list[str]:
        return self._items[self._scroll_offset:self._scroll_offset + self._height]

    def has_scrollbar(self) -> bool:
        return len(self._items) > self._height

    def _scrollbar_rows(self) -> range:
        """Rows (relative to the window) covered by the scrollbar thumb."""
        total = len(self._items)
        size = max(1, self._height * self._height // total)
        max_offset = total - self._height
        top = (self._height - size) * self._scroll_offset // max_offset if max_offset else 0
        return range(top, top + size)

    def render(self) -> list[str]:
        """Return exactly ``height`` rows, each ``width`` columns wide.

        When the list is longer than the window a one-column scrollbar is
        appended to every row.
        """
        lines: list[str] = []
        thumb = self._scrollbar_rows() if self.has_scrollbar() else range(0)

        for row in range(self._height):
            index = self._scroll_offset + row
            if index < len(self._items):
                text = truncate_to_width(self._items[index], self._width)
                paint = self._theme.selected_item if index == self._selection else self._theme.item
                line = apply_background_to_line(self._highlight(text), self._width, paint)
            else:
                line = " " * self._width

            if self.has_scrollbar():
                if row in thumb:
                    line += self._theme.scroll_area(self._theme.scroll_bar(SCROLL_THUMB))
                else:
                    line += self._theme.scroll_area(" ")
            lines.append(line)

        return lines
