"""Tests for zeek.palette -- geometry, menu view, strategies and the controller."""

from __future__ import annotations

from pathlib import Path

import pytest

from .virtual_terminal import VirtualTerminal
from zeek.config import Settings
from zeek.keybindings import KeybindingsManager
from zeek.palette import (
    NO_MATCHES,
    DirectoryDrillDownStrategy,
    Geometry,
    HistoryStrategy,
    MenuTheme,
    MenuView,
    PaletteController,
    PaletteResult,
    PlainListStrategy,
    compute_geometry,
)

ENTER = "\r"
ESCAPE = "\x1b"
TAB = "\t"
BACKSPACE = "\x7f"
UP = "\x1b[A"
DOWN = "\x1b[B"
PAGE_DOWN = "\x1b[6~"
CTRL_HOME = "\x1b[1;5H"
CTRL_END = "\x1b[1;5F"

HISTORY = ["echo a", "git status", "echo b"]


def plain(text: str) -> str:
    return text


PLAIN_THEME = MenuTheme(
    item=plain,
    selected_item=lambda text: f"[{text}]",
    scroll_area=plain,
    scroll_bar=plain,
)


def make_controller(
    items: list[str],
    strategy=None,
    terminal: VirtualTerminal | None = None,
    settings: Settings | None = None,
    **kwargs,
) -> tuple[PaletteController, VirtualTerminal]:
    terminal = terminal or VirtualTerminal()
    controller = PaletteController(
        items,
        strategy or PlainListStrategy(),
        terminal,
        settings or Settings(home=Path("/nonexistent")),
        keybindings=KeybindingsManager(),
        **kwargs,
    )
    return controller, terminal


def type_text(controller: PaletteController, text: str) -> None:
    for ch in text:
        controller.handle_key(ch)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestGeometry:
    """compute_geometry fits the menu between the terminal and the limits."""

    def test_fits_items(self) -> None:
        geometry = compute_geometry(["echo a", "echo b", "git status"], 80, 24, Settings())
        assert geometry == Geometry(width=11, height=3, menu_row=2, editor_row=6)
        assert geometry.header_row == 1
        assert geometry.scrollbar_col == 12

    def test_limited_by_terminal(self) -> None:
        items = ["x" * 200] * 100
        geometry = compute_geometry(items, 80, 24, Settings())
        assert (geometry.width, geometry.height) == (78, 20)

    def test_limited_by_settings(self) -> None:
        items = ["x" * 200] * 100
        geometry = compute_geometry(items, 200, 100, Settings(menu_width=50, menu_height=10))
        assert (geometry.width, geometry.height) == (50, 10)

    def test_negative_sizes_are_edge_offsets(self) -> None:
        items = ["x" * 200] * 100
        geometry = compute_geometry(items, 80, 24, Settings(menu_width=-10, menu_height=-6))
        assert (geometry.width, geometry.height) == (70, 18)

    def test_negative_row_counts_from_bottom(self) -> None:
        geometry = compute_geometry(["a", "b", "c"], 80, 24, Settings(menu_row=-3))
        assert geometry.menu_row == 18
        assert geometry.editor_row == 22

    def test_editor_over_menu(self) -> None:
        geometry = compute_geometry(["a"], 80, 24, Settings(menu_row=4, line_edit_over_menu=True))
        assert geometry.editor_row == 2

    def test_never_below_one(self) -> None:
        geometry = compute_geometry([], 2, 3, Settings())
        assert geometry.width >= 1
        assert geometry.height >= 1


# ---------------------------------------------------------------------------
# MenuView
# ---------------------------------------------------------------------------


class TestMenuView:
    """Scrolling window and rendering."""

    def make_view(self, items: list[str], height: int = 2, width: int = 3, selection: int = 0) -> MenuView:
        return MenuView(items, height=height, width=width, line_highlighter=plain,
                        selection=selection, theme=PLAIN_THEME)

    def test_render_with_scrollbar(self) -> None:
        view = self.make_view(["a", "b", "c"])
        assert view.has_scrollbar()
        assert view.render() == ["[a  ]█", "b   "]

    def test_scrolls_to_selection(self) -> None:
        view = self.make_view(["a", "b", "c"])
        view.move_down()
        view.move_down()
        assert view.selection == 2
        assert view.scroll_offset == 1
        assert view.render() == ["b   ", "[c  ]█"]

    def test_wraps_around(self) -> None:
        view = self.make_view(["a", "b", "c"])
        view.move_up()
        assert view.selection == 2
        view.move_down()
        assert view.selection == 0
        assert view.scroll_offset == 0

    def test_paging(self) -> None:
        view = self.make_view([str(i) for i in range(10)], height=3)
        view.page_down()
        assert view.selection == 3
        view.page_down()
        view.page_down()
        view.page_down()
        assert view.selection == 9
        view.page_up()
        assert view.selection == 6
        view.select_first()
        assert (view.selection, view.scroll_offset) == (0, 0)
        view.select_last()
        assert (view.selection, view.scroll_offset) == (9, 7)

    def test_short_list_pads_rows(self) -> None:
        view = self.make_view(["a"], height=3, width=2)
        assert not view.has_scrollbar()
        assert view.render() == ["[a ]", "  ", "  "]

    def test_long_item_truncated(self) -> None:
        view = self.make_view(["abcdef"], height=1, width=3)
        assert view.render() == ["[abc]"]

    def test_set_items_clamps_selection(self) -> None:
        view = self.make_view(["a", "b", "c"], selection=2)
        view.set_items(["x"], 5)
        assert view.selection == 0
        assert view.selected_item == "x"

    def test_empty_items(self) -> None:
        view = self.make_view([])
        assert view.selected_item is None
        assert view.render() == ["   ", "   "]

    def test_highlighter_applied(self) -> None:
        view = MenuView(["ls"], height=1, width=4, line_highlighter=str.upper, theme=PLAIN_THEME)
        assert view.render() == ["[LS  ]"]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def fake_tree() -> dict[Path, list[str]]:
    return {
        Path("/r"): ["d sub", "- a.txt", "d broken"],
        Path("/r/sub"): ["- b.txt"],
        Path("/"): ["d r"],
    }


def make_drill_down(tree: dict[Path, list[str]], start: str = "/r") -> DirectoryDrillDownStrategy:
    def list_dir(path: Path) -> list[str]:
        if path not in tree:
            raise PermissionError(f"cannot list {path}")
        return tree[path]

    return DirectoryDrillDownStrategy(
        start,
        list_dir=list_dir,
        get_name=lambda line: line[2:],
        is_dir=lambda line: line.startswith("d "),
    )


class TestStrategies:
    def test_plain_list(self) -> None:
        results: list[PaletteResult] = []
        strategy = PlainListStrategy(on_result=results.append, header="pick")
        assert strategy.default_selection == "first"
        assert strategy.header == "pick"
        assert strategy.on_navigate("x", "navigate") is None
        strategy.on_select("x", "select")
        assert results == [PaletteResult("x", "select")]
        assert strategy.result == PaletteResult("x", "select")

    def test_history_starts_at_end(self) -> None:
        assert HistoryStrategy().default_selection == "last"
        assert HistoryStrategy().header is None

    def test_drill_down_into_and_up(self) -> None:
        strategy = make_drill_down(fake_tree())
        assert strategy.header == "/r"
        assert strategy.get_filter_text("d sub") == "sub"
        assert strategy.on_navigate("d sub", "navigate") == ["- b.txt"]
        assert strategy.current_dir == Path("/r/sub")
        assert strategy.on_navigate(None, "navigate-up") == ["d sub", "- a.txt", "d broken"]
        assert strategy.current_dir == Path("/r")

    def test_drill_down_on_file_finalizes(self) -> None:
        strategy = make_drill_down(fake_tree())
        assert strategy.on_navigate("- a.txt", "navigate") is None
        assert strategy.on_navigate(None, "navigate") is None
        assert strategy.on_navigate("d sub", "select") is None

    def test_failed_listing_keeps_directory(self) -> None:
        strategy = make_drill_down(fake_tree())
        with pytest.raises(PermissionError):
            strategy.on_navigate("d broken", "navigate")
        assert strategy.current_dir == Path("/r")

    def test_relative_start_is_made_absolute(self) -> None:
        strategy = make_drill_down({}, start=".")
        assert strategy.current_dir.is_absolute()


# ---------------------------------------------------------------------------
# PaletteController
# ---------------------------------------------------------------------------


class TestControllerOpen:
    def test_open_state(self) -> None:
        controller, terminal = make_controller(HISTORY, HistoryStrategy())
        assert controller.state == "idle"
        controller.open()
        assert controller.state == "open"
        assert terminal.alternate_screen
        assert controller.filtered_items == HISTORY
        assert controller.selection_index == 2
        assert controller.geometry == Geometry(width=11, height=3, menu_row=2, editor_row=6)

    def test_open_renders_items(self) -> None:
        controller, terminal = make_controller(HISTORY)
        controller.open()
        for item in HISTORY:
            assert item in terminal.output

    def test_open_seeds_query_and_filters(self) -> None:
        controller, terminal = make_controller(HISTORY)
        controller.open("ec", "")
        assert controller.query == "ec"
        assert controller.filtered_items == ["echo a", "echo b"]
        assert terminal.cursor == (6, 3)

    def test_open_with_right_buffer(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open("", "status")
        assert controller.editor is not None
        assert controller.editor.right == "status"
        assert controller.filtered_items == ["git status"]

    def test_empty_items_show_sentinel(self) -> None:
        controller, terminal = make_controller([])
        controller.open()
        assert controller.filtered_items == [NO_MATCHES]
        assert controller.selection_index is None
        assert "No matches" in terminal.output

    def test_header_rendered(self) -> None:
        controller, terminal = make_controller(HISTORY, PlainListStrategy(header="Pick one"))
        controller.open()
        assert "Pick one" in terminal.output

    def test_open_failure_restores_terminal(self) -> None:
        def broken(_: str) -> str:
            raise RuntimeError("boom")

        controller, terminal = make_controller(HISTORY, line_highlighter=broken)
        with pytest.raises(RuntimeError):
            controller.open()
        assert controller.closed
        assert not terminal.alternate_screen
        assert terminal.cursor_visible


class TestControllerKeys:
    """handle_key dispatch."""

    def test_typing_filters_and_resets_selection(self) -> None:
        controller, _ = make_controller(HISTORY, HistoryStrategy())
        controller.open()
        type_text(controller, "echo")
        assert controller.state == "filtering"
        assert controller.filtered_items == ["echo a", "echo b"]
        assert controller.selection_index == 1

    def test_filter_keeps_all_items(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        type_text(controller, "git")
        assert controller.all_items == HISTORY
        controller.handle_key(BACKSPACE)
        controller.handle_key(BACKSPACE)
        controller.handle_key(BACKSPACE)
        assert controller.filtered_items == HISTORY

    def test_commit(self) -> None:
        strategy = HistoryStrategy()
        controller, terminal = make_controller(HISTORY, strategy)
        controller.open()
        type_text(controller, "echo")
        controller.handle_key(ENTER)
        assert controller.closed
        assert controller.result == PaletteResult("echo b", "select")
        assert strategy.result == controller.result
        assert not terminal.alternate_screen
        assert terminal.cursor_visible

    def test_cancel(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        controller.handle_key(ESCAPE)
        assert controller.result == PaletteResult(None, "select")

    def test_ctrl_c_cancels(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        controller.handle_key("\x03")
        assert controller.result == PaletteResult(None, "select")

    def test_commit_on_sentinel_selects_nothing(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        type_text(controller, "zzz")
        assert controller.filtered_items == [NO_MATCHES]
        assert controller.selected_line() is None
        controller.handle_key(ENTER)
        assert controller.result == PaletteResult(None, "select")

    def test_list_navigation(self) -> None:
        items = [f"item {i}" for i in range(10)]
        controller, _ = make_controller(items, terminal=VirtualTerminal(rows=8))
        controller.open()
        assert controller.selection_index == 0
        controller.handle_key(UP)
        assert controller.selection_index == 9
        assert controller.state == "navigating"
        controller.handle_key(DOWN)
        assert controller.selection_index == 0
        controller.handle_key(PAGE_DOWN)
        assert controller.selection_index == 4
        controller.handle_key(CTRL_END)
        assert controller.selection_index == 9
        controller.handle_key(CTRL_HOME)
        assert controller.selection_index == 0

    def test_unbound_key_is_ignored(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        controller.handle_key("\x1b[2~")
        assert not controller.closed
        assert controller.query == ""

    def test_multiline_placeholder_restored(self) -> None:
        controller, _ = make_controller(["for x in 1 2; do↵echo $x↵done"])
        controller.open()
        controller.handle_key(ENTER)
        assert controller.result is not None
        assert controller.result.line == "for x in 1 2; do\necho $x\ndone"

    def test_finalize_happens_once(self) -> None:
        results: list[PaletteResult] = []
        controller, terminal = make_controller(HISTORY, PlainListStrategy(on_result=results.append))
        controller.open()
        controller.handle_key(ENTER)
        controller.handle_key(ENTER)
        controller.handle_key(ESCAPE)
        assert results == [PaletteResult("echo a", "select")]
        assert terminal.leave_alternate_count == 1

    def test_tab_without_drill_down_selects(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        controller.handle_key(TAB)
        assert controller.result == PaletteResult("echo a", "navigate")

    def test_backspace_on_empty_query_without_drill_down(self) -> None:
        controller, _ = make_controller(HISTORY)
        controller.open()
        controller.handle_key(BACKSPACE)
        assert controller.result == PaletteResult(None, "navigate-up")


class TestControllerDrillDown:
    def test_into_and_back_up(self) -> None:
        tree = fake_tree()
        strategy = make_drill_down(tree)
        controller, terminal = make_controller(tree[Path("/r")], strategy)
        controller.open()
        type_text(controller, "su")
        controller.handle_key(TAB)
        assert controller.all_items == ["- b.txt"]
        assert controller.query == ""
        assert controller.state == "navigating"
        assert "/r/sub" in terminal.output

        controller.handle_key(BACKSPACE)
        assert controller.all_items == tree[Path("/r")]
        assert strategy.current_dir == Path("/r")

    def test_filters_on_name(self) -> None:
        tree = fake_tree()
        controller, _ = make_controller(tree[Path("/r")], make_drill_down(tree))
        controller.open()
        type_text(controller, "-")
        # every row starts with a type marker, but only names are matched
        assert controller.filtered_items == [NO_MATCHES]
        controller.handle_key(BACKSPACE)
        type_text(controller, "txt")
        assert controller.filtered_items == ["- a.txt"]

    def test_failed_navigation_stays(self) -> None:
        tree = fake_tree()
        strategy = make_drill_down(tree)
        controller, _ = make_controller(tree[Path("/r")], strategy)
        controller.open()
        type_text(controller, "broken")
        controller.handle_key(TAB)
        assert not controller.closed
        assert controller.all_items == tree[Path("/r")]
        assert controller.query == "broken"
        assert strategy.current_dir == Path("/r")

    def test_tab_on_file_finalizes(self) -> None:
        tree = fake_tree()
        controller, _ = make_controller(tree[Path("/r")], make_drill_down(tree))
        controller.open()
        type_text(controller, "a.txt")
        controller.handle_key(TAB)
        assert controller.result == PaletteResult("- a.txt", "navigate")

    def test_select_after_navigation(self) -> None:
        tree = fake_tree()
        strategy = make_drill_down(tree)
        terminal = VirtualTerminal(keys=[TAB, ENTER])
        controller, _ = make_controller(tree[Path("/r")], strategy, terminal=terminal)
        result = controller.run()
        assert result == PaletteResult("- b.txt", "select")
        assert strategy.current_dir == Path("/r/sub")


class TestControllerRun:
    """run() drives the key loop and always restores the terminal."""

    @pytest.mark.parametrize(
        ("strategy", "selected"),
        [(PlainListStrategy(), 0), (HistoryStrategy(), 1)],
    )
    def test_type_then_cancel(self, strategy, selected: int) -> None:
        results: list[PaletteResult] = []
        terminal = VirtualTerminal(keys=["e", "c", "h", "o"])
        controller, _ = make_controller(["echo a", "echo b", "git status"], strategy, terminal=terminal)
        controller.run()
        assert controller.filtered_items == ["echo a", "echo b"]
        assert controller.selection_index == selected

        controller, _ = make_controller(
            ["echo a", "echo b", "git status"],
            PlainListStrategy(on_result=results.append),
            terminal=VirtualTerminal(keys=["e", "c", "h", "o", ESCAPE]),
        )
        assert controller.run() == PaletteResult(None, "select")
        assert results == [PaletteResult(None, "select")]

    def test_select_with_arrow(self) -> None:
        terminal = VirtualTerminal(keys=["e", "c", "h", "o", UP, ENTER])
        controller, _ = make_controller(HISTORY, HistoryStrategy(), terminal=terminal)
        result = controller.run()
        assert result == PaletteResult("echo a", "select")
        assert terminal.start_count == 1
        assert terminal.stop_count == 1
        assert not terminal.alternate_screen

    def test_escape_cancels(self) -> None:
        terminal = VirtualTerminal(keys=["g", ESCAPE])
        controller, _ = make_controller(HISTORY, terminal=terminal)
        assert controller.run() == PaletteResult(None, "select")

    def test_end_of_input_cancels(self) -> None:
        terminal = VirtualTerminal(keys=[])
        controller, _ = make_controller(HISTORY, terminal=terminal)
        assert controller.run() == PaletteResult(None, "select")
        assert terminal.stop_count == 1
        assert terminal.cursor_visible

    def test_seeded_run(self) -> None:
        terminal = VirtualTerminal(keys=[ENTER])
        controller, _ = make_controller(HISTORY, terminal=terminal)
        assert controller.run("status", "") == PaletteResult("git status", "select")

    def test_failure_restores_terminal(self) -> None:
        def broken(_: str) -> str:
            raise ValueError("bad row")

        terminal = VirtualTerminal(keys=[ENTER])
        controller, _ = make_controller(HISTORY, terminal=terminal, line_highlighter=broken)
        with pytest.raises(ValueError):
            controller.run()
        assert terminal.stop_count == 1
        assert not terminal.alternate_screen
        assert terminal.cursor_visible
