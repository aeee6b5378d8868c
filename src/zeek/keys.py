"""Keyboard input parsing for the palette.

Turns one complete raw terminal sequence (as split by
:class:`zeek.stdin_buffer.StdinBuffer`) into a key identifier such as
``"a"``, ``"ctrl+a"``, ``"alt+left"`` or ``"pageUp"``, and matches raw
input against key identifiers.

Only legacy xterm/VT sequences are understood. Modifiers in identifiers are
always ordered ``ctrl+shift+alt+``.
"""

from __future__ import annotations

KeyId = str

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIER_ORDER = ("ctrl", "shift", "alt")

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[E": "clear",
}

# xterm modifier parameter (1 + bitmask) -> identifier prefix
_MODIFIER_PARAMS: dict[int, str] = {
    2: "shift+",
    3: "alt+",
    4: "shift+alt+",
    5: "ctrl+",
    6: "ctrl+shift+",
    7: "ctrl+alt+",
    8: "ctrl+shift+alt+",
}

_CSI_FINAL_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageUp",
    "6": "pageDown",
}


def _build_modified_sequences() -> dict[str, str]:
    """``ESC [ 1 ; <mod> A`` and ``ESC [ 3 ; <mod> ~`` style sequences."""
    table: dict[str, str] = {}
    for param, prefix in _MODIFIER_PARAMS.items():
        for final, name in _CSI_FINAL_KEYS.items():
            table[f"\x1b[1;{param}{final}"] = prefix + name
        for number, name in _CSI_TILDE_KEYS.items():
            table[f"\x1b[{number};{param}~"] = prefix + name
    return table


LEGACY_MODIFIED_SEQUENCES: dict[str, str] = _build_modified_sequences()


# ---------------------------------------------------------------------------
# Key id helpers
# ---------------------------------------------------------------------------


def normalize_key_id(key_id: KeyId) -> KeyId:
    """Reorder modifiers to ``ctrl+shift+alt+`` and lower-case them.

    ``"Alt+Ctrl+x"`` becomes ``"ctrl+alt+x"``. The base key keeps its case
    except for single letters, which are lower-cased.
    """
    parts = key_id.split("+")
    # "ctrl++" names the plus key
    if key_id.endswith("++"):
        parts = parts[:-2] + ["+"]
    modifiers = {part.lower() for part in parts[:-1]}
    base = parts[-1]
    if len(base) == 1 and base.isalpha():
        base = base.lower()
    prefix = "".join(f"{mod}+" for mod in MODIFIER_ORDER if mod in modifiers)
    return prefix + base


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


def parse_key(data: str) -> KeyId | None:  # noqa: C901
    """Parse one raw input sequence into a key identifier, or ``None``."""
    if not data:
        return None

    if data in LEGACY_MODIFIED_SEQUENCES:
        return LEGACY_MODIFIED_SEQUENCES[data]
    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]
    if data == "\x1b[Z":
        return "shift+tab"

    # Option+arrow on macOS terminals: ESC followed by a whole sequence.
    if len(data) > 2 and data[0] == "\x1b" and data[1] == "\x1b":
        inner = parse_key(data[1:])
        if inner is not None and "alt+" not in inner:
            return normalize_key_id("alt+" + inner)
        return None

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data == "\r" or data == "\n":
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data == "\x7f" or data == "\x08":
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    # --- Ctrl + letter ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\r" or ch == "\n":
            return "alt+enter"
        if ch == "\x7f" or ch == "\x08":
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch.lower()

    if len(data) == 1 and data.isprintable():
        return data

    return None


def matches_key(data: str, key_id: KeyId) -> bool:
    """True if raw *data* is the key named by *key_id*."""
    parsed = parse_key(data)
    if parsed is None:
        return False
    return parsed == normalize_key_id(key_id)


def is_printable(data: str) -> bool:
    """True if *data* is plain text (no control characters)."""
    if not data:
        return False
    return not any(
        ord(ch) < 32 or ord(ch) == 0x7F or 0x80 <= ord(ch) <= 0x9F for ch in data
    )
