"""Typed entries of the application configuration: monitor and trigger hotkey."""

from __future__ import annotations

import string
import sys
from dataclasses import dataclass
from typing import Any

from .config_store import ConfigError, ConfigItem

_SUPER_OR_CONTROL = "super" if sys.platform == "darwin" else "control"

_MODIFIERS = {
    "OPTION": "alt",
    "ALT": "alt",
    "CONTROL": "control",
    "CTRL": "control",
    "COMMAND": "super",
    "CMD": "super",
    "SUPER": "super",
    "SHIFT": "shift",
    "COMMANDORCONTROL": _SUPER_OR_CONTROL,
    "COMMANDORCTRL": _SUPER_OR_CONTROL,
    "CMDORCTRL": _SUPER_OR_CONTROL,
    "CMDORCONTROL": _SUPER_OR_CONTROL,
}


def _build_key_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for letter in string.ascii_uppercase:
        table[letter] = table[f"KEY{letter}"] = f"Key{letter}"
    for digit in string.digits:
        table[digit] = table[f"DIGIT{digit}"] = f"Digit{digit}"
        table[f"NUMPAD{digit}"] = f"Numpad{digit}"
    for number in range(1, 25):
        table[f"F{number}"] = f"F{number}"
    named = {
        "Space": ("SPACE",),
        "Enter": ("ENTER", "RETURN"),
        "Tab": ("TAB",),
        "Escape": ("ESCAPE", "ESC"),
        "Backspace": ("BACKSPACE",),
        "Delete": ("DELETE", "DEL"),
        "Insert": ("INSERT",),
        "Home": ("HOME",),
        "End": ("END",),
        "PageUp": ("PAGEUP",),
        "PageDown": ("PAGEDOWN",),
        "ArrowUp": ("UP", "ARROWUP"),
        "ArrowDown": ("DOWN", "ARROWDOWN"),
        "ArrowLeft": ("LEFT", "ARROWLEFT"),
        "ArrowRight": ("RIGHT", "ARROWRIGHT"),
        "Backquote": ("BACKQUOTE", "`"),
        "Minus": ("MINUS", "-"),
        "Equal": ("EQUAL", "="),
        "BracketLeft": ("BRACKETLEFT", "["),
        "BracketRight": ("BRACKETRIGHT", "]"),
        "Backslash": ("BACKSLASH", "\\"),
        "Semicolon": ("SEMICOLON", ";"),
        "Quote": ("QUOTE", "'"),
        "Comma": ("COMMA", ","),
        "Period": ("PERIOD", "."),
        "Slash": ("SLASH", "/"),
        "CapsLock": ("CAPSLOCK",),
        "PrintScreen": ("PRINTSCREEN",),
        "ScrollLock": ("SCROLLLOCK",),
        "Pause": ("PAUSE",),
        "NumLock": ("NUMLOCK",),
    }
    for code, aliases in named.items():
        for alias in aliases:
            table[alias] = code
    return table


_KEYS = _build_key_table()


@dataclass(frozen=True)
class HotKey:
    """A key combination: a set of modifier names and one key code."""

    modifiers: frozenset[str]
    key: str


def parse_hotkey(text: str) -> HotKey:
    """Parse a combination such as ``"cmd+alt+space"``; raise ValueError if invalid."""
    modifiers: set[str] = set()
    key: str | None = None
    for raw in text.split("+"):
        token = raw.strip()
        if not token:
            raise ValueError(f"Empty token in hotkey: {text!r}")
        upper = token.upper()
        if upper in _MODIFIERS:
            modifiers.add(_MODIFIERS[upper])
            continue
        if key is not None:
            raise ValueError(f"Hotkey has more than one key: {text!r}")
        try:
            key = _KEYS[upper]
        except KeyError:
            raise ValueError(f"Unknown key {token!r} in hotkey") from None
    if key is None:
        raise ValueError(f"Hotkey has no key: {text!r}")
    return HotKey(frozenset(modifiers), key)


@dataclass(frozen=True)
class MonitorItem(ConfigItem):
    """The name of the monitor the window is placed on."""

    name: str

    def save(self) -> tuple[str, Any]:
        return ("monitor", self.name)


@dataclass(frozen=True)
class TriggerItem(ConfigItem):
    """The global hotkey that toggles the window."""

    hotkey: HotKey

    def save(self) -> tuple[str, Any]:
        # The hotkey is always written back as the stock combination.
        return ("trigger", "cmd+alt+space")


def load_app_config_item(key: str, value: Any) -> ConfigItem:
    """Build the typed item for ``key`` from its raw YAML value."""
    if key == "monitor":
        if not isinstance(value, str):
            raise ConfigError("Failed to get monitor as string")
        return MonitorItem(value)
    if key == "trigger":
        if not isinstance(value, str):
            raise ConfigError("Failed to get trigger as string")
        try:
            return TriggerItem(parse_hotkey(value))
        except ValueError as exc:
            raise ConfigError(f"Failed to parse trigger: {exc}") from exc
    raise ConfigError(f"Unknown key: {key}")