"""Line editor - single-line query input split at the cursor."""

from __future__ import annotations

from dataclasses import dataclass

from zeek.keybindings import EDITOR_ACTIONS, KeybindingsManager, get_keybindings
from zeek.keys import is_printable

BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"


@dataclass
class CursorState:
    """Text left and right of the cursor plus the terminal row it is drawn on."""

    left: str = ""
    right: str = ""
    row: int = 1

    @property
    def line(self) -> str:
        return self.left + self.right


def is_word_char(ch: str) -> bool:
    return ch.isalnum()


def is_word_start(text: str, pos: int) -> bool:
    if pos <= 0:
        return True
    return is_word_char(text[pos]) and not is_word_char(text[pos - 1])


def is_word_end(text: str, pos: int) -> bool:
    if pos >= len(text):
        return True
    return not is_word_char(text[pos]) and is_word_char(text[pos - 1])


class LineEditor:
    """Line editor with the cursor kept between ``left`` and ``right``.

    The cursor column is always derived from ``left`` (1-based, as terminals
    address cells), never stored.
    """

    def __init__(
        self,
        initial_line: str = "",
        row: int = 1,
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self._state = CursorState(left=initial_line, row=row)
        self._keybindings = keybindings

        # Bracketed paste mode
        self._paste_buffer: str = ""
        self._is_in_paste: bool = False

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def left(self) -> str:
        return self._state.left

    @property
    def right(self) -> str:
        return self._state.right

    def get_line(self) -> str:
        return self._state.line

    def set_line(self, line: str, right: str = "") -> None:
        self._state.left = line
        self._state.right = right

    def set_row(self, row: int) -> None:
        self._state.row = row

    def cursor_position(self) -> tuple[int, int]:
        """Return ``(row, column)`` of the cursor, 1-based."""
        return self._state.row, len(self._state.left) + 1

    # -- key dispatch -------------------------------------------------------

    def _kb(self) -> KeybindingsManager:
        return self._keybindings or get_keybindings()

    def is_edit_key(self, data: str) -> bool:
        """True if *data* is consumed by the editor rather than the list."""
        if self._is_in_paste or BRACKETED_PASTE_START in data:
            return True
        if self._kb().action_for(data, EDITOR_ACTIONS) is not None:
            return True
        return is_printable(data)

    def is_backspace(self, data: str) -> bool:
        return self._kb().matches(data, "deleteCharBackward")

    def handle_input(self, data: str) -> None:
        if BRACKETED_PASTE_START in data:
            self._is_in_paste = True
            self._paste_buffer = ""
            data = data.replace(BRACKETED_PASTE_START, "")

        if self._is_in_paste:
            self._paste_buffer += data
            end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
            if end_index != -1:
                self.insert(_single_line(self._paste_buffer[:end_index]))
                self._is_in_paste = False
                remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END):]
                self._paste_buffer = ""
                if remaining:
                    self.handle_input(remaining)
            return

        action = self._kb().action_for(data, EDITOR_ACTIONS)
        if action == "deleteCharBackward":
            self.backspace()
        elif action == "deleteCharForward":
            self.delete_forward()
        elif action == "cursorLeft":
            self.move_left()
        elif action == "cursorRight":
            self.move_right()
        elif action == "cursorLineStart":
            self.move_home()
        elif action == "cursorLineEnd":
            self.move_end()
        elif action == "cursorWordLeft":
            self.move_word_backward()
        elif action == "cursorWordRight":
            self.move_word_forward()
        elif is_printable(data):
            self.insert(data)

    # -- edit operations ----------------------------------------------------

    def insert(self, text: str) -> None:
        self._state.left += text

    def backspace(self) -> None:
        self._state.left = self._state.left[:-1]

    def delete_forward(self) -> None:
        self._state.right = self._state.right[1:]

    def move_left(self) -> None:
        state = self._state
        if not state.left:
            return
        state.right = state.left[-1] + state.right
        state.left = state.left[:-1]

    def move_right(self) -> None:
        state = self._state
        if not state.right:
            return
        state.left += state.right[0]
        state.right = state.right[1:]

    def move_home(self) -> None:
        self._state.right = self._state.left + self._state.right
        self._state.left = ""

    def move_end(self) -> None:
        self._state.left = self._state.left + self._state.right
        self._state.right = ""

    # ctrl+a / ctrl+e land on the same positions as home / end
    jump_line_start = move_home
    jump_line_end = move_end

    def move_word_backward(self) -> None:
        left = self._state.left
        for pos in range(len(left) - 1, -1, -1):
            if is_word_start(left, pos):
                self._state.right = left[pos:] + self._state.right
                self._state.left = left[:pos]
                return

    def move_word_forward(self) -> None:
        right = self._state.right
        for pos in range(1, len(right) + 1):
            if is_word_end(right, pos):
                self._state.left += right[:pos]
                self._state.right = right[pos:]
                return

    def render(self) -> str:
        return self._state.line


def _single_line(text: str) -> str:
    return text.replace("\r\n", "").replace("\r", "").replace("\n", "")
