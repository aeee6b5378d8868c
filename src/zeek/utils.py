"""Terminal text utilities: ANSI stripping, width measurement, truncation.

Menu rows carry highlight escapes, so every width calculation here ignores
SGR sequences and measures the remaining text in terminal cells.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

import grapheme
import wcwidth as _wcwidth

# CSI sequences: ESC[ <params> <final byte>
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJ]")

RESET = "\x1b[0m"

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def _grapheme_width(g: str) -> int:
    """Display width of one grapheme cluster.

    Emoji sequences (VS16, ZWJ, skin tones, flags) count as two cells,
    marks and format characters as zero, anything else goes to wcwidth.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000 or 0x2600 <= ord(first) <= 0x27BF:
        return 2

    category = unicodedata.category(first)
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies once escapes are removed."""
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def _take_columns(text: str, max_cols: int) -> str:
    """Prefix of *text* fitting in *max_cols* columns.

    Escape sequences are kept whole and the text is only cut between
    grapheme clusters.
    """
    result: list[str] = []
    cols = 0
    for part in _split_ansi(text):
        if _ANSI_RE.fullmatch(part):
            result.append(part)
            continue
        for g in grapheme.graphemes(part):
            w = _grapheme_width(g)
            if cols + w > max_cols:
                return "".join(result)
            result.append(g)
            cols += w
    return "".join(result)


def _split_ansi(text: str) -> list[str]:
    """Split *text* into plain chunks and escape sequences, in order."""
    parts: list[str] = []
    pos = 0
    for match in _ANSI_RE.finditer(text):
        if match.start() > pos:
            parts.append(text[pos:match.start()])
        parts.append(match.group())
        pos = match.end()
    if pos < len(text):
        parts.append(text[pos:])
    return parts


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    When cut, *ellipsis* is appended and counts towards the width. A reset
    is added after a cut so an open color does not bleed into what follows.
    With *pad* the result is right-padded with spaces to exactly
    *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    target_width = max_width - visible_width(ellipsis)
    if target_width <= 0:
        return _take_columns(ellipsis, max_width)

    result = _take_columns(text, target_width)
    if _ANSI_RE.search(result):
        result += RESET
    result += ellipsis

    if pad:
        result_width = visible_width(result)
        if result_width < max_width:
            result += " " * (max_width - result_width)
    return result


def apply_background_to_line(
    line: str,
    width: int,
    bg_fn: Callable[[str], str],
) -> str:
    """Pad *line* to *width* columns and wrap the whole row with *bg_fn*."""
    line = truncate_to_width(line, width)
    return bg_fn(line + " " * (width - visible_width(line)))
