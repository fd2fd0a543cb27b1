from __future__ import annotations

import re
import string
from enum import Enum
from typing import Any, FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Modifier(str, Enum):
    """Keyboard modifiers a keybind may require."""

    ALT = "alt"
    CTRL = "ctrl"
    SHIFT = "shift"
    SUPER = "super"


_NAMED_KEYS = [
    "Backquote", "Backslash", "BracketLeft", "BracketRight", "Comma", "Equal",
    "IntlBackslash", "IntlRo", "IntlYen", "Minus", "Period", "Quote", "Semicolon", "Slash",
    "AltLeft", "AltRight", "ControlLeft", "ControlRight", "MetaLeft", "MetaRight",
    "ShiftLeft", "ShiftRight", "Fn", "FnLock",
    "Backspace", "CapsLock", "ContextMenu", "Enter", "Space", "Tab",
    "Convert", "KanaMode", "NonConvert", "Lang1", "Lang2", "Lang3", "Lang4", "Lang5",
    "Delete", "End", "Help", "Home", "Insert", "PageDown", "PageUp",
    "ArrowDown", "ArrowLeft", "ArrowRight", "ArrowUp",
    "NumLock", "NumpadAdd", "NumpadBackspace", "NumpadClear", "NumpadComma",
    "NumpadDecimal", "NumpadDivide", "NumpadEnter", "NumpadEqual", "NumpadHash",
    "NumpadMultiply", "NumpadParenLeft", "NumpadParenRight", "NumpadStar",
    "NumpadSubtract",
    "Escape", "PrintScreen", "ScrollLock", "Pause",
    "BrowserBack", "BrowserFavorites", "BrowserForward", "BrowserHome",
    "BrowserRefresh", "BrowserSearch", "BrowserStop",
    "Eject", "LaunchApp1", "LaunchApp2", "LaunchMail",
    "MediaPlayPause", "MediaSelect", "MediaStop", "MediaTrackNext", "MediaTrackPrevious",
    "Power", "Sleep", "WakeUp",
    "AudioVolumeDown", "AudioVolumeMute", "AudioVolumeUp",
    "Again", "Copy", "Cut", "Find", "Open", "Paste", "Props", "Select", "Undo",
]

_KEY_NAMES = (
    [f"Key{c}" for c in string.ascii_uppercase]
    + [f"Digit{d}" for d in string.digits]
    + [f"Numpad{d}" for d in string.digits]
    + [f"F{n}" for n in range(1, 36)]
    + _NAMED_KEYS
)

# Physical key codes, named after the W3C UI Events `code` values.
KeyCode = Enum("KeyCode", {name: name for name in _KEY_NAMES}, module=__name__, type=str)

_MODIFIER_TOKENS = {m.value: m for m in Modifier}
_KEYS_BY_FOLDED = {name.lower(): KeyCode(name) for name in _KEY_NAMES}
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


class KeybindError(ValueError):
    """A keybind string could not be parsed."""

    def __init__(self, message: str, tokens: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.tokens = list(tokens)


class Keybind(BaseModel):
    """A set of modifiers plus exactly one physical key."""

    model_config = ConfigDict(frozen=True)

    modifiers: FrozenSet[Modifier] = Field(default_factory=frozenset)
    key: KeyCode

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            bind = parse_keybind(data)
            return {"modifiers": bind.modifiers, "key": bind.key}
        return data

    @classmethod
    def parse(cls, expr: str) -> Keybind:
        return parse_keybind(expr)

    def __str__(self) -> str:
        mods = [m.value for m in sorted(self.modifiers, key=lambda m: m.value)]
        return "+".join([*mods, self.key.value])


def _pascal_case(token: str) -> str:
    return "".join(word.capitalize() for word in _WORD_RE.findall(token))


def _key_from_token(token: str) -> KeyCode | None:
    pascal = _pascal_case(token)
    if pascal in KeyCode.__members__:
        return KeyCode(pascal)

    folded = re.sub(r"[^0-9a-z]", "", token.lower())
    if not folded:
        return None
    if folded in _KEYS_BY_FOLDED:
        return _KEYS_BY_FOLDED[folded]
    if len(folded) == 1 and folded in string.ascii_lowercase:
        return KeyCode(f"Key{folded.upper()}")
    if len(folded) == 1 and folded in string.digits:
        return KeyCode(f"Digit{folded}")
    return None


def parse_keybind(expr: str) -> Keybind:
    """Parse a ``mod+mod+key`` expression into a Keybind.

    Tokens are case-insensitive and may appear in any order. Exactly one
    token must name a key; every other token must be a modifier.
    """

    if not expr.strip():
        raise KeybindError("keybind is empty", [expr])

    keys: list[KeyCode] = []
    key_tokens: list[str] = []
    modifiers: set[Modifier] = set()
    for raw in expr.split("+"):
        token = raw.strip()
        modifier = _MODIFIER_TOKENS.get(token.lower())
        if modifier is not None:
            modifiers.add(modifier)
            continue
        key = _key_from_token(token)
        if key is None:
            raise KeybindError(f"invalid key/modifier: {token!r}", [token])
        keys.append(key)
        key_tokens.append(token)

    if not keys:
        raise KeybindError(f"no keys specified: {expr!r}", [expr])
    if len(keys) > 1:
        raise KeybindError(f"too many keys: {key_tokens!r}", key_tokens)

    return Keybind(modifiers=frozenset(modifiers), key=keys[0])


def parse_keybinds(exprs: Iterable[str]) -> list[Keybind]:
    """Parse every expression; the first failure aborts the whole list."""

    return [parse_keybind(expr) for expr in exprs]
