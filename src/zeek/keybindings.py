"""Palette keybindings manager."""

from __future__ import annotations

from typing import Literal

from zeek.keys import KeyId, matches_key

PaletteAction = Literal[
    # Line editor
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "deleteCharBackward",
    "deleteCharForward",
    # List
    "selectUp",
    "selectDown",
    "selectPageUp",
    "selectPageDown",
    "selectFirst",
    "selectLast",
    "selectConfirm",
    "selectCancel",
    # Drill-down
    "navigateInto",
]

PaletteKeybindingsConfig = dict[PaletteAction, KeyId | list[KeyId]]

DEFAULT_PALETTE_KEYBINDINGS: dict[PaletteAction, KeyId | list[KeyId]] = {
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorWordLeft": ["alt+b", "alt+left", "ctrl+left"],
    "cursorWordRight": ["alt+f", "alt+right", "ctrl+right"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "selectUp": "up",
    "selectDown": "down",
    "selectPageUp": "pageUp",
    "selectPageDown": "pageDown",
    "selectFirst": "ctrl+home",
    "selectLast": "ctrl+end",
    "selectConfirm": "enter",
    "selectCancel": ["escape", "ctrl+c"],
    "navigateInto": "tab",
}

EDITOR_ACTIONS: tuple[PaletteAction, ...] = (
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "deleteCharBackward",
    "deleteCharForward",
)


class KeybindingsManager:
    """Maps palette actions to the keys that trigger them."""

    def __init__(self, config: PaletteKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[PaletteAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: PaletteKeybindingsConfig) -> None:
        self._action_to_keys.clear()
        for source in (DEFAULT_PALETTE_KEYBINDINGS, config):
            for action, keys in source.items():
                self._action_to_keys[action] = list(keys if isinstance(keys, list) else [keys])

    def matches(self, data: str, action: PaletteAction) -> bool:
        """Check if input matches a specific action."""
        return any(matches_key(data, key) for key in self._action_to_keys.get(action, []))

    def action_for(self, data: str, actions: tuple[PaletteAction, ...]) -> PaletteAction | None:
        """Return the first of *actions* that *data* triggers."""
        for action in actions:
            if self.matches(data, action):
                return action
        return None

    def get_keys(self, action: PaletteAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: PaletteKeybindingsConfig) -> None:
        self._build_maps(config)


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
