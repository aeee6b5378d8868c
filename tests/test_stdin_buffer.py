"""Tests for zeek.stdin_buffer -- splitting raw input into key sequences."""

from __future__ import annotations

from zeek.stdin_buffer import StdinBuffer, _is_complete_sequence


# ---------------------------------------------------------------------------
# Sequence completeness
# ---------------------------------------------------------------------------


class TestIsCompleteSequence:
    def test_plain_text(self) -> None:
        assert _is_complete_sequence("a") == "not-escape"

    def test_lone_escape(self) -> None:
        assert _is_complete_sequence("\x1b") == "incomplete"

    def test_csi(self) -> None:
        assert _is_complete_sequence("\x1b[") == "incomplete"
        assert _is_complete_sequence("\x1b[1;5") == "incomplete"
        assert _is_complete_sequence("\x1b[1;5H") == "complete"

    def test_ss3(self) -> None:
        assert _is_complete_sequence("\x1bO") == "incomplete"
        assert _is_complete_sequence("\x1bOA") == "complete"

    def test_meta(self) -> None:
        assert _is_complete_sequence("\x1bf") == "complete"

    def test_double_escape(self) -> None:
        assert _is_complete_sequence("\x1b\x1b") == "incomplete"
        assert _is_complete_sequence("\x1b\x1b[") == "incomplete"
        assert _is_complete_sequence("\x1b\x1b[D") == "complete"

    def test_sgr_mouse(self) -> None:
        assert _is_complete_sequence("\x1b[<0;10") == "incomplete"
        assert _is_complete_sequence("\x1b[<0;10;5M") == "complete"

    def test_osc(self) -> None:
        assert _is_complete_sequence("\x1b]0;title") == "incomplete"
        assert _is_complete_sequence("\x1b]0;title\x07") == "complete"
        assert _is_complete_sequence("\x1b]0;title\x1b\\") == "complete"


# ---------------------------------------------------------------------------
# StdinBuffer
# ---------------------------------------------------------------------------


class TestStdinBuffer:
    """process / flush behaviour."""

    def test_plain_characters(self) -> None:
        assert StdinBuffer().process("ab") == ["a", "b"]

    def test_mixed_input(self) -> None:
        buf = StdinBuffer()
        assert buf.process("a\x1b[Ab\r") == ["a", "\x1b[A", "b", "\r"]

    def test_sequence_split_across_reads(self) -> None:
        buf = StdinBuffer()
        assert buf.process("\x1b[") == []
        assert buf.has_pending()
        assert buf.get_buffer() == "\x1b["
        assert buf.process("A") == ["\x1b[A"]
        assert not buf.has_pending()

    def test_lone_escape_held_until_flush(self) -> None:
        buf = StdinBuffer()
        assert buf.process("\x1b") == []
        assert buf.flush() == ["\x1b"]
        assert buf.flush() == []

    def test_escape_followed_by_key_is_meta(self) -> None:
        buf = StdinBuffer()
        buf.process("\x1b")
        assert buf.process("b") == ["\x1bb"]

    def test_clear(self) -> None:
        buf = StdinBuffer()
        buf.process("\x1b[")
        buf.clear()
        assert not buf.has_pending()
        assert buf.process("x") == ["x"]


class TestBracketedPaste:
    def test_paste_returned_whole(self) -> None:
        buf = StdinBuffer()
        result = buf.process("x\x1b[200~hello\nworld\x1b[201~y")
        assert result == ["x", "\x1b[200~hello\nworld\x1b[201~", "y"]

    def test_paste_across_reads(self) -> None:
        buf = StdinBuffer()
        assert buf.process("\x1b[200~abc") == []
        assert buf.process("def\x1b[201~") == ["\x1b[200~abcdef\x1b[201~"]

    def test_escape_inside_paste_is_literal(self) -> None:
        buf = StdinBuffer()
        assert buf.process("\x1b[200~a\x1b[Ab\x1b[201~") == ["\x1b[200~a\x1b[Ab\x1b[201~"]
