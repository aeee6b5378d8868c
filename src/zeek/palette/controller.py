"""Palette controller: query editor, filtered menu and drill-down protocol.

The controller owns the terminal for the lifetime of one popup. Each key is
handled to completion (edit, refilter, render) before the next is read.
"""

from __future__ import annotations

import logging
from typing import Literal, Sequence

from zeek.config import Settings
from zeek.filtering import filter_items
from zeek.keybindings import KeybindingsManager, PaletteAction, get_keybindings
from zeek.line_editor import LineEditor
from zeek.palette.layout import Geometry, compute_geometry
from zeek.palette.menu import (
    GRAPHIC_NEWLINE,
    MENU_FG_COLOR,
    NO_MATCHES,
    LineHighlighter,
    MenuView,
)
from zeek.palette.strategies import NavigationAction, NavigationStrategy, PaletteResult
from zeek.styles import fg_color
from zeek.terminal import Terminal

logger = logging.getLogger(__name__)

PaletteState = Literal["idle", "open", "filtering", "navigating", "closed"]

LIST_ACTIONS: tuple[PaletteAction, ...] = (
    "selectUp",
    "selectDown",
    "selectPageUp",
    "selectPageDown",
    "selectFirst",
    "selectLast",
    "selectConfirm",
    "selectCancel",
)


class PaletteController:
    """Interactive filtered list with a one-line query editor."""

    def __init__(
        self,
        items: Sequence[str],
        strategy: NavigationStrategy,
        terminal: Terminal,
        settings: Settings | None = None,
        line_highlighter: LineHighlighter | None = None,
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self._all_items: list[str] = list(items)
        self._strategy = strategy
        self._terminal = terminal
        self._settings = settings or Settings()
        self._highlight = line_highlighter or fg_color(MENU_FG_COLOR)
        self._header_style = fg_color(MENU_FG_COLOR)
        self._keybindings = keybindings

        self._state: PaletteState = "idle"
        self._geometry: Geometry | None = None
        self._editor: LineEditor | None = None
        self._view: MenuView | None = None
        self.result: PaletteResult | None = None

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> PaletteState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state == "closed"

    @property
    def all_items(self) -> list[str]:
        return self._all_items

    @property
    def filtered_items(self) -> list[str]:
        return self._view.items if self._view is not None else []

    @property
    def selection_index(self) -> int | None:
        """Index of the selected row, or ``None`` when only the sentinel is shown."""
        if self._view is None or self._view.selected_item in (None, NO_MATCHES):
            return None
        return self._view.selection

    @property
    def geometry(self) -> Geometry | None:
        return self._geometry

    @property
    def editor(self) -> LineEditor | None:
        return self._editor

    @property
    def query(self) -> str:
        return self._editor.get_line() if self._editor is not None else ""

    def selected_line(self) -> str | None:
        if self._view is None:
            return None
        line = self._view.selected_item
        return None if line == NO_MATCHES else line

    def _kb(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    # -- lifecycle ----------------------------------------------------------

    def open(self, lbuffer: str = "", rbuffer: str = "") -> None:
        """Show the popup with the query seeded from the caller's buffers.

        Any failure restores the screen before the exception propagates.
        """
        terminal = self._terminal
        terminal.enter_alternate_screen()
        terminal.clear_screen()
        try:
            self._geometry = self._compute_geometry()
            self._editor = LineEditor(row=self._geometry.editor_row, keybindings=self._keybindings)
            self._editor.set_line(lbuffer, rbuffer)
            self._view = MenuView(
                self._with_sentinel(self._all_items),
                height=self._geometry.height,
                width=self._geometry.width,
                line_highlighter=self._highlight,
            )
            self._view.select(self._default_index())
            self._state = "open"

            if lbuffer or rbuffer:
                self._refilter()
            self._render()
        except Exception:
            logger.exception("Error showing popup menu")
            terminal.leave_alternate_screen()
            terminal.show_cursor()
            self._state = "closed"
            raise

    def run(self, lbuffer: str = "", rbuffer: str = "") -> PaletteResult | None:
        """Open the popup and process keys until a selection or cancellation."""
        terminal = self._terminal
        terminal.start()
        try:
            self.open(lbuffer, rbuffer)
            while not self.closed:
                data = terminal.read_key()
                if data is None:
                    logger.debug("Input closed, cancelling popup")
                    self._finalize(None, "select")
                    break
                self.handle_key(data)
        finally:
            if not self.closed:
                terminal.leave_alternate_screen()
                terminal.show_cursor()
                self._state = "closed"
            terminal.stop()
        return self.result

    # -- key handling -------------------------------------------------------

    def handle_key(self, data: str) -> None:  # noqa: C901
        if self._editor is None or self._view is None or self.closed:
            return

        kb = self._kb()
        editor = self._editor
        self._terminal.hide_cursor()

        if kb.matches(data, "navigateInto"):
            self._navigate(self.selected_line(), "navigate")
            return

        if editor.is_backspace(data) and editor.get_line() == "":
            self._navigate(None, "navigate-up")
            return

        if editor.is_edit_key(data):
            editor.handle_input(data)
            self._state = "filtering"
            self._refilter()
            self._render_menu()
            self._render_editor()
            return

        action = kb.action_for(data, LIST_ACTIONS)
        if action == "selectConfirm":
            self._finalize(self.selected_line(), "select")
            return
        if action == "selectCancel":
            self._finalize(None, "select")
            return

        view = self._view
        if action == "selectUp":
            view.move_up()
        elif action == "selectDown":
            view.move_down()
        elif action == "selectPageUp":
            view.page_up()
        elif action == "selectPageDown":
            view.page_down()
        elif action == "selectFirst":
            view.select_first()
        elif action == "selectLast":
            view.select_last()
        else:
            logger.debug("Unhandled key %r", data)

        if action is not None:
            self._state = "navigating"
            self._render_menu()
        self._place_cursor()

    def _navigate(self, line: str | None, action: NavigationAction) -> None:
        try:
            items = self._strategy.on_navigate(line, action)
        except Exception:
            logger.exception("Navigation %s failed for %r, staying in current view", action, line)
            self._place_cursor()
            return

        if items is None:
            self._finalize(line, action)
            return

        self._state = "navigating"
        self.set_items(items)

    def set_items(self, items: Sequence[str]) -> None:
        """Replace the whole candidate list and clear the query."""
        assert self._editor is not None and self._view is not None
        self._all_items = list(items)
        self._geometry = self._compute_geometry()
        self._editor.set_line("")
        self._editor.set_row(self._geometry.editor_row)
        self._view.resize(self._geometry.height, self._geometry.width)
        self._view.set_items(self._with_sentinel(self._all_items), self._default_index())
        self._terminal.clear_screen()
        self._render()

    def _finalize(self, line: str | None, action: NavigationAction) -> None:
        if self.closed:
            return
        self._state = "closed"
        if line == NO_MATCHES:
            line = None
        elif line is not None:
            line = line.replace(GRAPHIC_NEWLINE, "\n")

        self._terminal.leave_alternate_screen()
        self._terminal.show_cursor()

        self.result = PaletteResult(line, action)
        self._strategy.on_select(line, action)

    # -- filtering ----------------------------------------------------------

    def _refilter(self) -> None:
        assert self._view is not None
        matches = filter_items(self._all_items, self.query, self._strategy.get_filter_text)
        self._view.set_items(self._with_sentinel(matches), self._default_index(len(matches)))

    @staticmethod
    def _with_sentinel(items: list[str]) -> list[str]:
        return items if items else [NO_MATCHES]

    def _default_index(self, count: int | None = None) -> int:
        if count is None:
            count = len(self._all_items)
        if self._strategy.default_selection == "last":
            return max(count - 1, 0)
        return 0

    def _compute_geometry(self) -> Geometry:
        return compute_geometry(
            self._with_sentinel(self._all_items),
            self._terminal.columns,
            self._terminal.rows,
            self._settings,
        )

    # -- rendering ----------------------------------------------------------

    def _render(self) -> None:
        self._render_header()
        self._render_menu()
        self._render_editor()

    def _render_header(self) -> None:
        header = self._strategy.header
        if not header or self._geometry is None or self._geometry.header_row < 1:
            return
        self._terminal.move_to(self._geometry.header_row, 1)
        self._terminal.clear_line()
        self._terminal.write(self._header_style(header))

    def _render_menu(self) -> None:
        assert self._view is not None and self._geometry is not None
        for offset, row in enumerate(self._view.render()):
            self._terminal.move_to(self._geometry.menu_row + offset, 1)
            self._terminal.write(row)

    def _render_editor(self) -> None:
        assert self._editor is not None
        row, _ = self._editor.cursor_position()
        self._terminal.move_to(row, 1)
        self._terminal.clear_line()
        self._terminal.write(self._editor.render())
        self._place_cursor()

    def _place_cursor(self) -> None:
        if self._editor is None:
            return
        self._terminal.move_to(*self._editor.cursor_position())
        self._terminal.show_cursor()
