from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rmenu.plugin.protocol import Options

from .keybind import KeyCode, Keybind
from .overlay import apply_options


class CachePolicy(str, Enum):
    NO_CACHE = "disabled"
    NEVER = "never"
    ON_LOGIN = "onlogin"
    AFTER_SECONDS = "seconds"


_POLICY_WORDS = {
    "never": CachePolicy.NEVER,
    "false": CachePolicy.NO_CACHE,
    "disable": CachePolicy.NO_CACHE,
    "disabled": CachePolicy.NO_CACHE,
    "true": CachePolicy.ON_LOGIN,
    "login": CachePolicy.ON_LOGIN,
    "onlogin": CachePolicy.ON_LOGIN,
}


class CacheSetting(BaseModel):
    """When a plugin's cached results stop being valid.

    Accepted from settings documents as ``"never"``, ``"disabled"``,
    ``"onlogin"`` (or their aliases), a boolean, or a number of seconds.
    """

    model_config = ConfigDict(frozen=True)

    policy: CachePolicy = CachePolicy.NO_CACHE
    seconds: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _from_scalar(cls, data: Any) -> Any:
        if isinstance(data, bool):
            return {"policy": CachePolicy.ON_LOGIN if data else CachePolicy.NO_CACHE}
        if isinstance(data, int):
            if data < 0:
                raise ValueError(f"invalid cache setting: {data!r}")
            return {"policy": CachePolicy.AFTER_SECONDS, "seconds": data}
        if isinstance(data, str):
            return cls.parse(data).model_dump()
        return data

    @model_validator(mode="after")
    def _check_seconds(self) -> CacheSetting:
        if (self.policy is CachePolicy.AFTER_SECONDS) != (self.seconds is not None):
            raise ValueError("seconds must be set exactly when policy is 'seconds'")
        return self

    @classmethod
    def parse(cls, value: str) -> CacheSetting:
        policy = _POLICY_WORDS.get(value)
        if policy is not None:
            return cls(policy=policy)
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"invalid cache setting: {value!r}")
        return cls.after_seconds(int(value))

    @classmethod
    def no_cache(cls) -> CacheSetting:
        return cls(policy=CachePolicy.NO_CACHE)

    @classmethod
    def never(cls) -> CacheSetting:
        return cls(policy=CachePolicy.NEVER)

    @classmethod
    def on_login(cls) -> CacheSetting:
        return cls(policy=CachePolicy.ON_LOGIN)

    @classmethod
    def after_seconds(cls, seconds: int) -> CacheSetting:
        return cls(policy=CachePolicy.AFTER_SECONDS, seconds=seconds)


class PluginConfig(BaseModel):
    exec: List[str]
    cache: CacheSetting = Field(default_factory=CacheSetting)
    placeholder: Optional[str] = None
    options: Optional[Options] = None


class SearchConfig(BaseModel):
    restrict: Optional[str] = None
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    placeholder: Optional[str] = None
    use_regex: bool = True
    ignore_case: bool = True


def _binds(*keys: str) -> List[Keybind]:
    return [Keybind(key=KeyCode(key)) for key in keys]


class KeyConfig(BaseModel):
    """Keybinds per launcher action; each action accepts several alternatives."""

    exec: List[Keybind] = Field(default_factory=lambda: _binds("Enter"))
    exit: List[Keybind] = Field(default_factory=lambda: _binds("Escape"))
    move_next: List[Keybind] = Field(default_factory=lambda: _binds("ArrowUp"))
    move_prev: List[Keybind] = Field(default_factory=lambda: _binds("ArrowDown"))
    open_menu: List[Keybind] = Field(default_factory=list)
    close_menu: List[Keybind] = Field(default_factory=list)
    jump_next: List[Keybind] = Field(default_factory=lambda: _binds("PageDown"))
    jump_prev: List[Keybind] = Field(default_factory=lambda: _binds("PageUp"))


class Size(BaseModel):
    width: float = 700.0
    height: float = 400.0


class Position(BaseModel):
    x: float = 100.0
    y: float = 100.0


class WindowConfig(BaseModel):
    title: str = "RMenu - App Launcher"
    size: Size = Field(default_factory=Size)
    position: Position = Field(default_factory=Position)
    focus: bool = True
    decorate: bool = False
    transparent: bool = False
    always_top: bool = True
    fullscreen: Optional[bool] = None
    dark_mode: Optional[bool] = None

    def get_fullscreen(self) -> bool:
        return bool(self.fullscreen)


class Config(BaseModel):
    """Complete launcher configuration; every field has a default."""

    page_size: int = Field(default=50, ge=0)
    page_load: float = 0.8
    jump_dist: int = Field(default=5, ge=0)
    use_icons: bool = True
    use_comments: bool = True
    search: SearchConfig = Field(default_factory=SearchConfig)
    plugins: Dict[str, PluginConfig] = Field(default_factory=dict)
    keybinds: KeyConfig = Field(default_factory=KeyConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    css: Optional[str] = None
    terminal: Optional[str] = None

    @field_validator("plugins")
    @classmethod
    def _sort_plugins(cls, v: Dict[str, PluginConfig]) -> Dict[str, PluginConfig]:
        return dict(sorted(v.items()))

    def update(self, options: Options) -> None:
        """Overlay a plugin's Options onto this config.

        Raises KeybindError on the first bad keybind string, in which case
        nothing is changed.
        """

        apply_options(self, options)

    def apply_plugin(self, plugin: PluginConfig) -> None:
        """Overlay the options and placeholder configured for a plugin."""

        if plugin.options is not None:
            self.update(plugin.options)
        if plugin.placeholder is not None:
            self.search.placeholder = plugin.placeholder
