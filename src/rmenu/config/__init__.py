from __future__ import annotations

from .keybind import KeyCode, Keybind, KeybindError, Modifier, parse_keybind, parse_keybinds
from .loader import ConfigLoader
from .models import (
    CachePolicy,
    CacheSetting,
    Config,
    KeyConfig,
    PluginConfig,
    Position,
    SearchConfig,
    Size,
    WindowConfig,
)
from .overlay import apply_options, merge_display, merge_keybinds, merge_search, merge_window

__all__ = [
    "CachePolicy",
    "CacheSetting",
    "Config",
    "ConfigLoader",
    "KeyCode",
    "KeyConfig",
    "Keybind",
    "KeybindError",
    "Modifier",
    "PluginConfig",
    "Position",
    "SearchConfig",
    "Size",
    "WindowConfig",
    "apply_options",
    "merge_display",
    "merge_keybinds",
    "merge_search",
    "merge_window",
    "parse_keybind",
    "parse_keybinds",
]
