"""Terminal abstraction for the palette.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
manages raw mode, the alternate screen, bracketed paste, cursor visibility
and absolute cursor addressing via ANSI escape sequences.

The shell glue runs ``zeek`` with stdin on the tty and stdout redirected to
stderr, so both ends of ``ProcessTerminal`` are the user's terminal.
"""

from __future__ import annotations

import collections
import logging
import os
import select
import sys
import termios
import tty
from typing import Protocol, TextIO

from zeek.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_ALTERNATE_SCREEN = "\x1b[?1049h"
_NORMAL_SCREEN = "\x1b[?1049l"

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K\r"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_MOVE_TO_FMT = "\x1b[{};{}H"

# Time to wait for the rest of an escape sequence before treating ESC as a key
ESC_TIMEOUT = 0.05


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def read_key(self, timeout: float | None = None) -> str | None: ...

    def write(self, data: str) -> None: ...

    def move_to(self, row: int, col: int) -> None: ...

    def clear_line(self) -> None: ...

    def clear_screen(self) -> None: ...

    def enter_alternate_screen(self) -> None: ...

    def leave_alternate_screen(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by ``sys.stdin``/``sys.stdout``.

    Raw mode is set with :mod:`tty` and undone with the saved :mod:`termios`
    attributes. Input is read synchronously with :func:`select.select` and
    split into key sequences by :class:`StdinBuffer`.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._original_termios: list | None = None
        self._stdin_buffer = StdinBuffer()
        self._pending: collections.deque[str] = collections.deque()

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(self._stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(self._stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Enable raw mode and bracketed paste."""
        fd = self._stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._raw_write(_BRACKETED_PASTE_ENABLE)

    def stop(self) -> None:
        """Restore the terminal attributes saved by :meth:`start`."""
        self._raw_write(_BRACKETED_PASTE_DISABLE)
        self._stdin_buffer.clear()
        self._pending.clear()

        if self._original_termios is not None:
            termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

    # -- input --------------------------------------------------------------

    def read_key(self, timeout: float | None = None) -> str | None:
        """Return the next complete key sequence.

        Blocks until one is available, or returns ``None`` after *timeout*
        seconds or at end of input.
        """
        while not self._pending:
            wait = ESC_TIMEOUT if self._stdin_buffer.has_pending() else timeout
            if not self._wait_readable(wait):
                if self._stdin_buffer.has_pending():
                    self._pending.extend(self._stdin_buffer.flush())
                    continue
                return None

            try:
                raw = os.read(self._stdin.fileno(), 4096)
            except OSError:
                logger.exception("Reading terminal input failed")
                return None
            if not raw:
                return None

            data = raw.decode("utf-8", errors="replace")
            self._pending.extend(self._stdin_buffer.process(data))

        return self._pending.popleft()

    def _wait_readable(self, timeout: float | None) -> bool:
        readable, _, _ = select.select([self._stdin.fileno()], [], [], timeout)
        return bool(readable)

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._raw_write(data)

    def move_to(self, row: int, col: int) -> None:
        self._raw_write(_MOVE_TO_FMT.format(row, col))

    def clear_line(self) -> None:
        self._raw_write(_CLEAR_LINE)

    def clear_screen(self) -> None:
        self._raw_write(_CLEAR_SCREEN)

    def enter_alternate_screen(self) -> None:
        self._raw_write(_ALTERNATE_SCREEN)

    def leave_alternate_screen(self) -> None:
        self._raw_write(_NORMAL_SCREEN)

    def hide_cursor(self) -> None:
        self._raw_write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(_SHOW_CURSOR)

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            self._stdout.write(data)
            self._stdout.flush()
        except OSError:
            logger.debug("Terminal write failed", exc_info=True)
