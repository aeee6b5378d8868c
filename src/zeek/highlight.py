"""Syntax highlighting for command lines."""

from __future__ import annotations

from zeek.styles import StyleTable, build_style_table
from zeek.tokenizer import Token, tokenize


class Highlighter:
    """Colorizes command lines with a resolved :class:`StyleTable`.

    Only escape sequences are added: stripping them from the output gives
    back the input line character for character.
    """

    def __init__(self, styles: StyleTable) -> None:
        self._styles = styles

    @property
    def styles(self) -> StyleTable:
        return self._styles

    def colorize(self, line: str, tokens: list[Token]) -> str:
        parts: list[str] = []
        pos = 0
        for token in tokens:
            if pos < token.start:
                parts.append(line[pos:token.start])
            parts.append(self._styles.render(token.category, line[token.start:token.end + 1]))
            pos = token.end + 1
        if pos < len(line):
            parts.append(line[pos:])
        return "".join(parts)

    def highlight_line(self, line: str) -> str:
        return self.colorize(line, tokenize(line))

    __call__ = highlight_line


_default_highlighter: Highlighter | None = None


def get_default_highlighter() -> Highlighter:
    global _default_highlighter
    if _default_highlighter is None:
        _default_highlighter = Highlighter(build_style_table())
    return _default_highlighter


def highlight_command(line: str, styles: StyleTable | None = None) -> str:
    """Highlight *line* with *styles*, or the built-in defaults."""
    if styles is None:
        return get_default_highlighter().highlight_line(line)
    return Highlighter(styles).highlight_line(line)
