from __future__ import annotations

from abc import abstractmethod
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter


class Method(BaseModel):
    """How an action executes; externally tagged on the wire (``{"run": cmd}``)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    @abstractmethod
    def command(self) -> str: ...

    @staticmethod
    def new(command: str, terminal: bool) -> Terminal | Run:
        if terminal:
            return Terminal(terminal=command)
        return Run(run=command)


class Terminal(Method):
    """Run the command inside the configured terminal."""

    terminal: str

    @property
    def command(self) -> str:
        return self.terminal


class Run(Method):
    """Run the command directly."""

    run: str

    @property
    def command(self) -> str:
        return self.run


class Echo(Method):
    """Print the text back to the caller instead of executing anything."""

    echo: str

    @property
    def command(self) -> str:
        return self.echo


AnyMethod = Union[Terminal, Run, Echo]


class Action(BaseModel):
    """A named operation attached to an entry."""

    name: str
    exec: AnyMethod
    comment: Optional[str] = None

    @classmethod
    def run(cls, command: str) -> Action:
        return cls(name="main", exec=Run(run=command))

    @classmethod
    def echo(cls, text: str) -> Action:
        return cls(name="main", exec=Echo(echo=text))


class Entry(BaseModel):
    """One selectable launcher item."""

    type: Literal["entry"] = "entry"
    name: str
    actions: List[Action]
    comment: Optional[str] = None
    icon: Optional[str] = None
    icon_alt: Optional[str] = None

    @classmethod
    def new(cls, name: str, command: str, comment: str | None = None) -> Entry:
        return cls(name=name, actions=[Action.run(command)], comment=comment)

    @classmethod
    def echo(cls, text: str, comment: str | None = None) -> Entry:
        return cls(name=text, actions=[Action.echo(text)], comment=comment)


class Options(BaseModel):
    """Sparse runtime overrides a plugin may send; unset fields stay None."""

    type: Literal["options"] = "options"

    # base settings
    theme: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("theme", "css")
    )
    page_size: Optional[int] = Field(default=None, ge=0)
    page_load: Optional[float] = None
    jump_dist: Optional[int] = Field(default=None, ge=0)

    # search settings
    placeholder: Optional[str] = None
    search_restrict: Optional[str] = None
    search_min_length: Optional[int] = Field(default=None, ge=0)
    search_max_length: Optional[int] = Field(default=None, ge=0)

    # key settings
    key_exec: Optional[List[str]] = None
    key_exit: Optional[List[str]] = None
    key_move_next: Optional[List[str]] = None
    key_move_prev: Optional[List[str]] = None
    key_open_menu: Optional[List[str]] = None
    key_close_menu: Optional[List[str]] = None
    key_jump_next: Optional[List[str]] = None
    key_jump_prev: Optional[List[str]] = None

    # window settings
    title: Optional[str] = None
    decorate: Optional[bool] = None
    fullscreen: Optional[bool] = None
    transparent: Optional[bool] = None
    window_width: Optional[float] = None
    window_height: Optional[float] = None


Message = Annotated[Union[Entry, Options], Field(discriminator="type")]

MESSAGE_ADAPTER: TypeAdapter[Entry | Options] = TypeAdapter(Message)
ENTRIES_ADAPTER: TypeAdapter[List[Entry]] = TypeAdapter(List[Entry])
