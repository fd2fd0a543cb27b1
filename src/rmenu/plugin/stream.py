from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import ValidationError

from .protocol import MESSAGE_ADAPTER, Entry, Options


class ProtocolError(ValueError):
    """A plugin wrote something that is not a valid message."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


def parse_message(data: str | bytes) -> Entry | Options:
    """Decode one JSON document into an Entry or Options message."""

    try:
        return MESSAGE_ADAPTER.validate_json(data)
    except ValidationError as exc:
        raise ProtocolError(str(exc)) from exc


def iter_messages(lines: Iterable[str | bytes]) -> Iterator[Entry | Options]:
    """Decode a plugin output stream, one message per non-blank line.

    Messages are yielded as soon as their line is read so callers can start
    consuming entries before the plugin exits.
    """

    for lineno, raw in enumerate(lines, start=1):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ProtocolError(f"invalid UTF-8: {exc}", line=lineno) from exc
        if not raw.strip():
            continue
        try:
            yield parse_message(raw)
        except ProtocolError as exc:
            raise ProtocolError(str(exc), line=lineno) from exc


def dump_message(message: Entry | Options) -> str:
    """Encode a message as a single JSON line (absent fields omitted)."""

    return message.model_dump_json(exclude_none=True)


def self_exe() -> str:
    """Absolute path of the running executable."""

    exe = sys.executable
    if not exe:
        raise RuntimeError("cannot find executable of self")
    return str(Path(exe).resolve())
