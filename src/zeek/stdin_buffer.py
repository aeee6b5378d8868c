"""StdinBuffer splits raw terminal input into complete key sequences.

Reads from a tty can end in the middle of an escape sequence; without
buffering, ``ESC [ A`` split over two reads would be seen as escape
followed by the text ``[A``.
"""

from __future__ import annotations

import re
from typing import Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")

SequenceStatus = Literal["complete", "incomplete", "not-escape"]


def _is_complete_sequence(data: str) -> SequenceStatus:
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    # ESC ESC [ D: option+arrow on macOS terminals
    if after_esc.startswith(ESC):
        if len(after_esc) == 1:
            return "incomplete"
        inner = _is_complete_sequence(after_esc)
        return "complete" if inner == "not-escape" else inner

    if after_esc.startswith("["):
        if after_esc.startswith("[M"):
            return "complete" if len(data) >= 6 else "incomplete"
        return _is_complete_csi_sequence(data)

    if after_esc.startswith("]"):
        return _is_complete_string_sequence(data, allow_bel=True)

    if after_esc[0] in "P_":
        return _is_complete_string_sequence(data, allow_bel=False)

    # SS3: ESC O <final>
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # Meta: ESC followed by a single character
    return "complete"


def _is_complete_csi_sequence(data: str) -> SequenceStatus:
    if len(data) < 3:
        return "incomplete"

    payload = data[2:]
    last_char = payload[-1]
    if not 0x40 <= ord(last_char) <= 0x7E:
        return "incomplete"

    if payload.startswith("<"):
        return "complete" if _SGR_MOUSE_RE.match(payload) else "incomplete"
    return "complete"


def _is_complete_string_sequence(data: str, *, allow_bel: bool) -> SequenceStatus:
    """OSC, DCS and APC strings end with ST (``ESC \\``), OSC also with BEL."""
    if data.endswith(f"{ESC}\\") or (allow_bel and data.endswith("\x07")):
        return "complete"
    return "incomplete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences and an unfinished remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]

        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        for seq_end in range(1, len(remaining) + 1):
            candidate = remaining[:seq_end]
            if _is_complete_sequence(candidate) != "incomplete":
                sequences.append(candidate)
                pos += seq_end
                break
        else:
            return sequences, remaining

    return sequences, ""


class StdinBuffer:
    """Buffers raw input and hands back complete sequences.

    Bracketed paste payloads are returned as a single item still wrapped in
    the paste markers so the line editor can insert them in one go.
    Whatever is left unfinished (typically a lone ESC) stays buffered until
    more input arrives or :meth:`flush` is called.
    """

    def __init__(self) -> None:
        self._buffer: str = ""
        self._paste_mode: bool = False
        self._paste_buffer: str = ""

    def process(self, data: str) -> list[str]:
        """Feed *data* and return the sequences it completes."""
        out: list[str] = []
        self._buffer += data

        if self._paste_mode:
            self._paste_buffer += self._buffer
            self._buffer = ""
            self._finish_paste(out)
            return out

        start_index = self._buffer.find(BRACKETED_PASTE_START)
        if start_index != -1:
            sequences, _ = _extract_complete_sequences(self._buffer[:start_index])
            out.extend(sequences)

            self._paste_mode = True
            self._paste_buffer = self._buffer[start_index + len(BRACKETED_PASTE_START):]
            self._buffer = ""
            self._finish_paste(out)
            return out

        sequences, self._buffer = _extract_complete_sequences(self._buffer)
        out.extend(sequences)
        return out

    def _finish_paste(self, out: list[str]) -> None:
        end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end_index == -1:
            return

        pasted = self._paste_buffer[:end_index]
        remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END):]
        self._paste_mode = False
        self._paste_buffer = ""

        out.append(BRACKETED_PASTE_START + pasted + BRACKETED_PASTE_END)
        if remaining:
            out.extend(self.process(remaining))

    def flush(self) -> list[str]:
        """Release whatever is buffered as one sequence."""
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def has_pending(self) -> bool:
        return bool(self._buffer)

    def clear(self) -> None:
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer
