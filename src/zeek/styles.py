"""Style strings and the token style table.

Style strings use the zsh-syntax-highlighting format: a comma separated
list of ``fg=<color>``, ``bg=<color>`` and attribute names, for example
``"fg=#a6e22e,bold"`` or ``"fg=cyan,bg=black,underline"``. A color is a
``#rrggbb`` hex value, a terminal color name (optionally ``bright-``
prefixed) or a 256-color index.

Colors only open: they stay active until the next color directive.
Attributes are closed right after the styled text with their own reset
code, so ``bold`` never leaks into the following token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from zeek.tokenizer import TokenCategory

logger = logging.getLogger(__name__)

StyleFn = Callable[[str], str]

RESET = "\x1b[0m"

NAMED_COLORS: dict[str, int] = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
    "default": 9,
}

# attribute -> (open code, close code)
ATTRIBUTES: dict[str, tuple[int, int]] = {
    "bold": (1, 22),
    "dim": (2, 22),
    "italic": (3, 23),
    "underline": (4, 24),
    "blink": (5, 25),
    "reverse": (7, 27),
    "standout": (7, 27),
    "hidden": (8, 28),
    "strikethrough": (9, 29),
}

# ---------------------------------------------------------------------------
# Default palette (Monokai)
# ---------------------------------------------------------------------------

COLOR_GREEN = "#a6e22e"
COLOR_FUCHSIA = "#f92672"
COLOR_CYAN = "#66d9ef"
COLOR_ORANGE = "#fd971f"
COLOR_PURPLE = "#ae81ff"
COLOR_YELLOW = "#e6db74"
COLOR_GREY = "#75715e"
COLOR_WHITE = "#ffffff"

DEFAULT_STYLES: dict[TokenCategory, str] = {
    "unknown-token": f"fg={COLOR_FUCHSIA}",
    "reserved-word": f"fg={COLOR_FUCHSIA}",
    "builtin": f"fg={COLOR_GREEN}",
    "command": f"fg={COLOR_GREEN}",
    "precommand": f"fg={COLOR_GREEN}",
    "commandseparator": f"fg={COLOR_WHITE}",
    "path": f"fg={COLOR_YELLOW}",
    "glob": f"fg={COLOR_ORANGE}",
    "history-expansion": f"fg={COLOR_PURPLE}",
    "single-hyphen-option": f"fg={COLOR_PURPLE}",
    "double-hyphen-option": f"fg={COLOR_PURPLE}",
    "single-quoted-argument": f"fg={COLOR_ORANGE}",
    "single-quoted-argument-unclosed": f"fg={COLOR_FUCHSIA}",
    "double-quoted-argument": f"fg={COLOR_ORANGE}",
    "double-quoted-argument-unclosed": f"fg={COLOR_FUCHSIA}",
    "dollar-quoted-argument": f"fg={COLOR_ORANGE}",
    "dollar-quoted-argument-unclosed": f"fg={COLOR_FUCHSIA}",
    "back-quoted-argument": f"fg={COLOR_CYAN}",
    "back-quoted-argument-unclosed": f"fg={COLOR_FUCHSIA}",
    "command-substitution": f"fg={COLOR_CYAN}",
    "process-substitution": f"fg={COLOR_CYAN}",
    "arithmetic-expansion": f"fg={COLOR_PURPLE}",
    "assign": f"fg={COLOR_YELLOW}",
    "redirection": f"fg={COLOR_WHITE}",
    "comment": f"fg={COLOR_GREY}",
    "default": f"fg={COLOR_CYAN}",
}

# zsh-syntax-highlighting key names that differ from ours
CATEGORY_ALIASES: dict[str, TokenCategory] = {
    "globbing": "glob",
}


# ---------------------------------------------------------------------------
# Color parsing
# ---------------------------------------------------------------------------


def parse_hex(color: str) -> tuple[int, int, int] | None:
    """Parse ``#rrggbb`` into an RGB triple."""
    if len(color) != 7 or not color.startswith("#"):
        return None
    try:
        return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)
    except ValueError:
        return None


def color_sequence(color: str, *, background: bool = False) -> str:
    """Return the SGR sequence selecting *color*, or ``""`` if unparseable."""
    prefix = 48 if background else 38
    rgb = parse_hex(color)
    if rgb is not None:
        r, g, b = rgb
        return f"\x1b[{prefix};2;{r};{g};{b}m"

    name = color.lower()
    bright = name.startswith("bright-")
    if bright:
        name = name[len("bright-"):]
    code = NAMED_COLORS.get(name)
    if code is not None:
        base = 40 if background else 30
        return f"\x1b[{base + code};1m" if bright else f"\x1b[{base + code}m"

    if color.isdigit() and 0 <= int(color) <= 255:
        return f"\x1b[{prefix};5;{int(color)}m"
    return ""


# ---------------------------------------------------------------------------
# Style functions
# ---------------------------------------------------------------------------


def identity(text: str) -> str:
    return text


def reset(text: str) -> str:
    return RESET + text


def parse_style(style: str) -> StyleFn:
    """Build a render function from a zsh-syntax-highlighting style string.

    Unknown parts are skipped. A style with nothing usable renders text
    unchanged; ``none`` renders a hard reset in front of the text.
    """
    prefixes: list[str] = []
    suffixes: list[str] = []

    for part in (p.strip() for p in style.split(",")):
        if part.startswith("fg=") or part.startswith("bg="):
            seq = color_sequence(part[3:], background=part.startswith("bg="))
            if seq:
                prefixes.append(seq)
            else:
                logger.debug("ignoring unparseable color in style %r", style)
            continue

        name = part.lower()
        if name == "none":
            return reset
        codes = ATTRIBUTES.get(name)
        if codes is not None:
            prefixes.append(f"\x1b[{codes[0]}m")
            suffixes.append(f"\x1b[{codes[1]}m")

    if not prefixes:
        return identity

    prefix = "".join(prefixes)
    suffix = "".join(suffixes)
    return lambda text: prefix + text + suffix


def fg_color(hex_color: str) -> StyleFn:
    """Foreground color that stays active after the text."""
    rgb = parse_hex(hex_color)
    if rgb is None:
        return reset
    prefix = "\x1b[38;2;{};{};{}m".format(*rgb)
    return lambda text: prefix + text


def bg_color(hex_color: str) -> StyleFn:
    """Background color closed with a full reset after the text."""
    rgb = parse_hex(hex_color)
    if rgb is None:
        return reset
    prefix = "\x1b[48;2;{};{};{}m".format(*rgb)
    return lambda text: prefix + text + RESET


def underline(text: str) -> str:
    return "\x1b[4m" + text + "\x1b[24m"


# ---------------------------------------------------------------------------
# Style table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StyleTable:
    """Immutable category -> render function table."""

    styles: Mapping[str, StyleFn] = field(default_factory=dict)

    def get(self, category: str) -> StyleFn:
        return self.styles.get(category, identity)

    def render(self, category: str, text: str) -> str:
        return self.get(category)(text)


def build_style_table(overrides: Mapping[str, str] | None = None) -> StyleTable:
    """Merge *overrides* over the defaults and resolve every style string.

    Call this after configuration has been loaded: the table is frozen and
    later configuration changes are not seen.
    """
    merged: dict[str, str] = dict(DEFAULT_STYLES)
    for key, value in (overrides or {}).items():
        category = CATEGORY_ALIASES.get(key, key)
        if category not in DEFAULT_STYLES:
            logger.debug("ignoring style for unknown token category %r", key)
            continue
        if not isinstance(value, str):
            logger.debug("ignoring non-string style for %r", key)
            continue
        merged[category] = value

    return StyleTable(MappingProxyType({key: parse_style(value) for key, value in merged.items()}))
