"""
Log records.

A Record is built per log call, rendered immediately and discarded. Its
message is a tagged variant (text, bytes or structured data) so each
formatter handles every kind explicitly.
"""

from __future__ import annotations

import itertools
import os
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MessageKind(Enum):
    TEXT = "text"
    BYTES = "bytes"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class Message:
    """A log payload and its kind."""
    kind: MessageKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> "Message":
        if isinstance(value, Message):
            return value
        if isinstance(value, str):
            return cls(MessageKind.TEXT, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(MessageKind.BYTES, bytes(value))
        return cls(MessageKind.STRUCTURED, value)

    @property
    def text(self) -> str:
        """The payload as display text."""
        if self.kind is MessageKind.TEXT:
            return self.value
        if self.kind is MessageKind.BYTES:
            return self.value.decode("utf-8", errors="replace")
        return str(self.value)


@dataclass(frozen=True)
class Record:
    """
    One log event.

    time is already rendered with the worker's time layout. emoji is used by
    text layouts only and never serialized.
    """
    id: int
    time: str
    module: str
    filename: str
    line: int
    level: int
    message: Message
    emoji: str = ""


class SequenceCounter:
    """Process-wide monotonic id source. next() is an atomic fetch-and-increment."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


SEQUENCE = SequenceCounter()

UNKNOWN_FILE = "???"


def caller(calldepth: int) -> tuple[str, int]:
    """
    Basename and line of the frame calldepth levels above the caller of this
    function. Falls back to ("???", 0) when the stack is not that deep.
    """
    try:
        frame = sys._getframe(calldepth + 1)
    except ValueError:
        return UNKNOWN_FILE, 0
    return os.path.basename(frame.f_code.co_filename), frame.f_lineno
