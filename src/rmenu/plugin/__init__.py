from __future__ import annotations

from .protocol import Action, AnyMethod, Echo, Entry, Message, Method, Options, Run, Terminal
from .stream import ProtocolError, dump_message, iter_messages, parse_message, self_exe

__all__ = [
    "Action",
    "AnyMethod",
    "Echo",
    "Entry",
    "Message",
    "Method",
    "Options",
    "ProtocolError",
    "Run",
    "Terminal",
    "dump_message",
    "iter_messages",
    "parse_message",
    "self_exe",
]
