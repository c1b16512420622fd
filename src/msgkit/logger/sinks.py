"""
Sinks (output destinations).

One worker writes to exactly one sink. Sinks serialize their own writes so a
logger can be shared between threads.
"""

import os
import sys
import threading
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from typing import IO, Optional

STDOUT_NAMES = ("", "1", "-", "stdout", "/dev/stdout")
STDERR_NAMES = ("2", "stderr", "/dev/stderr")


class Sink(ABC):
    """Base sink. Receives fully rendered lines."""

    name: str = "sink"

    @abstractmethod
    def write(self, text: str, calldepth: int = 0) -> None:
        """
        Write one rendered line.

        calldepth says how many frames up the real caller is. Only sinks that
        annotate output with source locations need it.
        """
        ...

    def flush(self) -> None:
        """Flush buffered output. Override in buffered sinks."""
        pass

    def close(self) -> None:
        """Cleanup. Override if the sink holds resources."""
        self.flush()


class StreamSink(Sink):
    """
    Writes to a text stream.

    With no stream, sys.<name> is looked up on every write, so redirection of
    sys.stdout/sys.stderr (and pytest capture) is honoured.
    """

    def __init__(self, stream: Optional[IO[str]] = None, name: str = "stdout"):
        self._stream = stream
        self.name = name
        self._lock = threading.Lock()

    @property
    def stream(self) -> IO[str]:
        if self._stream is not None:
            return self._stream
        return getattr(sys, self.name)

    def write(self, text: str, calldepth: int = 0) -> None:
        with self._lock:
            stream = self.stream
            stream.write(text)
            stream.flush()

    def flush(self) -> None:
        with self._lock:
            self.stream.flush()

    def close(self) -> None:
        self.flush()


class FileSink(Sink):
    """Appends to a file created with owner-only permissions."""

    def __init__(self, path: str | Path, name: str = "file"):
        self.path = Path(path)
        self.name = name
        self._file: Optional[IO[str]] = None
        self._lock = threading.Lock()

    def _ensure_file(self) -> IO[str]:
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_CREAT | os.O_WRONLY | os.O_APPEND, 0o600)
            self._file = os.fdopen(fd, "a", encoding="utf-8")
        return self._file

    def write(self, text: str, calldepth: int = 0) -> None:
        with self._lock:
            f = self._ensure_file()
            f.write(text)
            f.flush()

    def flush(self) -> None:
        with self._lock:
            if self._file:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None


class BufferSink(Sink):
    """
    Ring buffer of the last N rendered lines (trailing newline stripped).
    Does not grow unbounded.
    """

    def __init__(self, maxlen: int = 10000, name: str = "buffer"):
        self.name = name
        self._buffer: deque[str] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def write(self, text: str, calldepth: int = 0) -> None:
        with self._lock:
            self._buffer.append(text[:-1] if text.endswith("\n") else text)

    def get_recent(self, n: int = 100) -> list[str]:
        with self._lock:
            lines = list(self._buffer)
        return lines[-n:]

    @property
    def lines(self) -> list[str]:
        with self._lock:
            return list(self._buffer)

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    @property
    def count(self) -> int:
        return len(self._buffer)


def open_output(target: str | None) -> Sink:
    """
    Map a command-line style output target to a sink:
    stdout aliases, stderr aliases, or a file path.
    """
    if target is None or target in STDOUT_NAMES:
        return StreamSink(name="stdout")
    if target in STDERR_NAMES:
        return StreamSink(name="stderr")
    return FileSink(target)
