from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping

from rmenu.plugin.protocol import Options

from .keybind import parse_keybinds

if TYPE_CHECKING:
    from .models import Config, KeyConfig, SearchConfig, WindowConfig


# keybind slot -> Options field holding its raw strings
KEYBIND_FIELDS: Mapping[str, str] = {
    "exec": "key_exec",
    "exit": "key_exit",
    "move_next": "key_move_next",
    "move_prev": "key_move_prev",
    "open_menu": "key_open_menu",
    "close_menu": "key_close_menu",
    "jump_next": "key_jump_next",
    "jump_prev": "key_jump_prev",
}


def _present(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def merge_display(options: Options) -> Dict[str, Any]:
    """Top-level field replacements (stylesheet and paging settings)."""

    return _present(
        {
            "css": options.theme,
            "page_size": options.page_size,
            "page_load": options.page_load,
            "jump_dist": options.jump_dist,
        }
    )


def merge_search(search: SearchConfig, options: Options) -> SearchConfig:
    updates = _present(
        {
            "placeholder": options.placeholder,
            "restrict": options.search_restrict,
            "min_length": options.search_min_length,
            "max_length": options.search_max_length,
        }
    )
    return search.model_copy(update=updates)


def merge_keybinds(keybinds: KeyConfig, options: Options) -> KeyConfig:
    """Replace every keybind slot the options supply.

    Raises KeybindError on the first string that does not parse.
    """

    updates: Dict[str, Any] = {}
    for slot, field in KEYBIND_FIELDS.items():
        raw = getattr(options, field)
        if raw is not None:
            updates[slot] = parse_keybinds(raw)
    return keybinds.model_copy(update=updates)


def merge_window(window: WindowConfig, options: Options) -> WindowConfig:
    size = window.size.model_copy(
        update=_present({"width": options.window_width, "height": options.window_height})
    )
    updates = _present(
        {
            "title": options.title,
            "decorate": options.decorate,
            "fullscreen": options.fullscreen,
            "transparent": options.transparent,
        }
    )
    updates["size"] = size
    return window.model_copy(update=updates)


def apply_options(config: Config, options: Options) -> None:
    """Overlay options onto config in place, all or nothing.

    Every group is merged into a copy before anything is assigned, so a
    failing keybind leaves config exactly as it was.
    """

    keybinds = merge_keybinds(config.keybinds, options)
    search = merge_search(config.search, options)
    window = merge_window(config.window, options)
    display = merge_display(options)

    for name, value in display.items():
        setattr(config, name, value)
    config.search = search
    config.keybinds = keybinds
    config.window = window
