"""
Logger: the user-facing facade.

One method per severity, printf-style variants, fatal (log then exit 1),
panic (log then raise LoggerPanic) and stack dumps. Every call captures the
caller's file and line, takes the next process-wide sequence id, builds a
Record and hands it to the worker. Calls return once the write was attempted.

A process-wide default logger backs the module-level functions; any number of
independent loggers can be built alongside it.
"""

from __future__ import annotations

import sys
import threading
import traceback
from collections.abc import Mapping
from datetime import datetime
from typing import IO, Any, NoReturn, Optional

from msgkit.logger.errors import ConfigurationError, LoggerPanic
from msgkit.logger.formats import (
    CLI_FORMAT,
    CLI_TIME_FMT,
    DEF_TIME_FMT,
    FORMATS,
    PLAIN_FORMAT,
    FormatRegistry,
    format_time,
)
from msgkit.logger.levels import LEVEL_DEFAULT, LEVELS, LevelRegistry, Lvl
from msgkit.logger.records import SEQUENCE, Message, Record, SequenceCounter, caller
from msgkit.logger.sinks import Sink, StreamSink, open_output
from msgkit.logger.worker import Worker, resolve_format

DEFAULT_MODULE = "msg"
STACK_HEADER = "Stack info\n"


class Logger:
    """
    Leveled logger bound to one module name and one worker.

    Usage:
        log = Logger("svc", format="std", level=Lvl.INFO, color=False)
        log.info("listening")
        log.warningf("disk at %d%%", 91)
        log.set_format("%{time:rfc822} %{lvl} %{message}")
    """

    _default: Optional["Logger"] = None
    _default_lock = threading.Lock()

    # Re-export levels for convenience: Logger.DEBUG, etc.
    CRITICAL = Lvl.CRITICAL
    ERROR = Lvl.ERROR
    WARNING = Lvl.WARNING
    NOTICE = Lvl.NOTICE
    INFO = Lvl.INFO
    DEBUG = Lvl.DEBUG

    def __init__(
        self,
        module: str = DEFAULT_MODULE,
        format: Optional[str] = None,
        time_format: Optional[str] = None,
        color: bool = True,
        sink: Sink | IO[str] | None = None,
        level: int | str = LEVEL_DEFAULT,
        levels: LevelRegistry | None = None,
        formats: FormatRegistry | None = None,
        sequence: SequenceCounter | None = None,
    ) -> None:
        if not isinstance(module, str):
            raise ConfigurationError(f"invalid module argument: {module!r}")
        if not isinstance(color, bool):
            raise ConfigurationError(f"invalid color argument: {color!r}")
        _check_format_argument("format", format)
        _check_format_argument("time_format", time_format)
        self.module = module
        self._levels = levels if levels is not None else LEVELS
        self._formats = formats if formats is not None else FORMATS
        self._sequence = sequence if sequence is not None else SEQUENCE
        self._owns_sink = False

        time_layout = self._formats.time_layout(time_format or DEF_TIME_FMT)
        compiled, structured = resolve_format(format, self._formats, time_layout)
        self._worker = Worker(
            sink=_as_sink(sink, default="stderr"),
            compiled=compiled,
            levels=self._levels,
            threshold=self._levels.resolve(level),
            color=color,
            structured=structured,
        )

    # ── Process-wide default ──────────────────────────────────────

    @classmethod
    def default(cls) -> "Logger":
        """Get or create the default logger: plain format, DEBUG, stdout, color."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls(
                        module=DEFAULT_MODULE,
                        format=PLAIN_FORMAT,
                        color=True,
                        sink=StreamSink(name="stdout"),
                        level=Lvl.DEBUG,
                    )
        return cls._default

    @classmethod
    def set_default(cls, logger: "Logger") -> None:
        with cls._default_lock:
            cls._default = logger

    @classmethod
    def reset_default(cls) -> None:
        """Drop the default logger. For testing only."""
        with cls._default_lock:
            if cls._default is not None:
                cls._default.close()
                cls._default = None

    def for_module(self, module: str) -> "Logger":
        """A logger with the same settings and sink, logging as another module."""
        child = Logger.__new__(Logger)
        child.module = module
        child._levels = self._levels
        child._formats = self._formats
        child._sequence = self._sequence
        child._owns_sink = False
        child._worker = Worker(
            sink=self._worker.sink,
            compiled=self._worker.compiled,
            levels=self._levels,
            threshold=self._worker.threshold,
            color=self._worker.color,
            structured=self._worker.structured,
        )
        return child

    # ── Configuration ─────────────────────────────────────────────

    @property
    def worker(self) -> Worker:
        return self._worker

    @property
    def level(self) -> int:
        return self._worker.threshold

    def set_level(self, level: int | str) -> None:
        """Change verbosity. Accepts a registered rank or a level name."""
        self._worker.threshold = self._levels.resolve(level)

    @property
    def color(self) -> bool:
        return self._worker.color

    def set_color(self, color: bool) -> None:
        if not isinstance(color, bool):
            raise ConfigurationError(f"invalid color argument: {color!r}")
        self._worker.color = color

    @property
    def format(self) -> str:
        """The compiled positional template in use."""
        return self._worker.compiled.template

    def set_format(self, format: str) -> None:
        """
        Switch layout: a registered format name or a placeholder template.
        The template is compiled here, once, not per log line.
        """
        _check_format_argument("format", format)
        compiled, structured = resolve_format(
            format, self._formats, self._worker.time_layout
        )
        self._worker.set_format(compiled, structured)

    @property
    def time_format(self) -> str:
        return self._worker.time_layout

    def set_time_format(self, time_format: str) -> None:
        """A registered time format name or a literal strftime layout."""
        _check_format_argument("time_format", time_format)
        self._worker.set_time_layout(self._formats.time_layout(time_format or DEF_TIME_FMT))

    def set_output(self, sink: Sink | IO[str] | str) -> None:
        """
        Redirect output to a sink, a stream, or an output target name/path.

        A sink the logger opened from a target name is closed when replaced.
        """
        previous, owned = self._worker.sink, self._owns_sink
        if isinstance(sink, str):
            self._worker.sink = open_output(sink)
        else:
            self._worker.sink = _as_sink(sink, default="stderr")
        self._owns_sink = isinstance(sink, str)
        if owned and previous is not self._worker.sink:
            previous.close()

    def status(self) -> dict[str, Any]:
        level = self._levels.get(self._worker.threshold)
        return {
            "module": self.module,
            "level": self._worker.threshold,
            "level_name": level.name,
            "format": self._worker.compiled.template,
            "structured": self._worker.structured,
            "time_format": self._worker.time_layout,
            "color": self._worker.color,
            "sink": type(self._worker.sink).__name__,
        }

    # ── Core logging ──────────────────────────────────────────────

    def _log(self, level: int, message: Any, calldepth: int) -> bool:
        """
        Build and emit a record.

        calldepth counts frames above this method: 1 is the facade method
        that called us, 2 is its caller.
        """
        if not self._worker.enabled(level):
            return False
        filename, line = caller(calldepth)
        record = Record(
            id=self._sequence.next(),
            time=format_time(datetime.now().astimezone(), self._worker.time_layout),
            module=self.module,
            filename=filename,
            line=line,
            level=int(level),
            message=Message.of(message),
            emoji=self._levels.get(level).emoji,
        )
        return self._worker.log(record, calldepth)

    def log(self, level: int, message: Any) -> bool:
        """Log at an arbitrary registered level. message may be str, bytes or data."""
        return self._log(level, message, 2)

    def output(self, calldepth: int, text: str) -> bool:
        """Write a raw line to the sink, bypassing format and threshold."""
        return self._worker.output(calldepth + 1, text)

    # ── Convenience methods ───────────────────────────────────────

    def critical(self, message: Any) -> bool:
        return self._log(Lvl.CRITICAL, message, 2)

    def error(self, message: Any) -> bool:
        return self._log(Lvl.ERROR, message, 2)

    def warning(self, message: Any) -> bool:
        return self._log(Lvl.WARNING, message, 2)

    def notice(self, message: Any) -> bool:
        return self._log(Lvl.NOTICE, message, 2)

    def info(self, message: Any) -> bool:
        return self._log(Lvl.INFO, message, 2)

    def debug(self, message: Any) -> bool:
        return self._log(Lvl.DEBUG, message, 2)

    def criticalf(self, format: str, *args: Any) -> bool:
        return self._log(Lvl.CRITICAL, sprintf(format, *args), 2)

    def errorf(self, format: str, *args: Any) -> bool:
        return self._log(Lvl.ERROR, sprintf(format, *args), 2)

    def warningf(self, format: str, *args: Any) -> bool:
        return self._log(Lvl.WARNING, sprintf(format, *args), 2)

    def noticef(self, format: str, *args: Any) -> bool:
        return self._log(Lvl.NOTICE, sprintf(format, *args), 2)

    def infof(self, format: str, *args: Any) -> bool:
        return self._log(Lvl.INFO, sprintf(format, *args), 2)

    def debugf(self, format: str, *args: Any) -> bool:
        return self._log(Lvl.DEBUG, sprintf(format, *args), 2)

    def logf(self, level: int, format: str, *args: Any) -> bool:
        return self._log(level, sprintf(format, *args), 2)

    # ── Terminating variants ──────────────────────────────────────

    def fatal(self, message: Any) -> NoReturn:
        """Log at CRITICAL, then exit the process with status 1."""
        self._log(Lvl.CRITICAL, message, 2)
        sys.exit(1)

    def fatalf(self, format: str, *args: Any) -> NoReturn:
        self._log(Lvl.CRITICAL, sprintf(format, *args), 2)
        sys.exit(1)

    def panic(self, message: Any) -> NoReturn:
        """Log at CRITICAL, then raise LoggerPanic."""
        self._log(Lvl.CRITICAL, message, 2)
        raise LoggerPanic(str(message))

    def panicf(self, format: str, *args: Any) -> NoReturn:
        message = sprintf(format, *args)
        self._log(Lvl.CRITICAL, message, 2)
        raise LoggerPanic(message)

    # ── Stack dumps ───────────────────────────────────────────────

    def stack_as_error(self, message: str = "") -> bool:
        """Log the caller's stack at ERROR, after an optional header line."""
        return self._log(Lvl.ERROR, stack(message, 1), 2)

    def stack_as_critical(self, message: str = "") -> bool:
        return self._log(Lvl.CRITICAL, stack(message, 1), 2)

    # ── Cleanup ───────────────────────────────────────────────────

    def flush(self) -> None:
        self._worker.sink.flush()

    def close(self) -> None:
        self._worker.sink.close()


# ── Helpers ───────────────────────────────────────────────────────────

def sprintf(format: str, *args: Any) -> str:
    """
    printf-style formatting that never fails.

    Surplus arguments are dropped instead of rendered; a format that cannot be
    satisfied at all is returned unexpanded.
    """
    if len(args) == 1 and isinstance(args[0], Mapping):
        try:
            return format % args[0]
        except (TypeError, ValueError, KeyError):
            pass
    for n in range(len(args), -1, -1):
        try:
            return format % args[:n]
        except (TypeError, ValueError, KeyError):
            continue
    return format


def stack(message: str = "", calldepth: int = 0) -> str:
    """Header plus the formatted stack, starting calldepth frames above our caller."""
    frame = sys._getframe(calldepth + 1)
    header = message or STACK_HEADER
    return f"{header}\n{''.join(traceback.format_stack(frame))}"


def _check_format_argument(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"invalid {name} argument: {value!r}")


def _as_sink(sink: Sink | IO[str] | None, default: str) -> Sink:
    if sink is None:
        return StreamSink(name=default)
    if isinstance(sink, Sink):
        return sink
    if hasattr(sink, "write"):
        return StreamSink(stream=sink, name=getattr(sink, "name", "stream"))
    raise ConfigurationError(f"invalid sink argument: {sink!r}")


# ── Module-level functions (default logger) ───────────────────────────

def set_default_format() -> None:
    """Switch the default logger to the command-line layout."""
    log = Logger.default()
    log.set_format(CLI_FORMAT)
    log.set_time_format(CLI_TIME_FMT)


def log(level: int, message: Any) -> bool:
    return Logger.default()._log(level, message, 2)


def critical(message: Any) -> bool:
    return Logger.default()._log(Lvl.CRITICAL, message, 2)


def error(message: Any) -> bool:
    return Logger.default()._log(Lvl.ERROR, message, 2)


def warning(message: Any) -> bool:
    return Logger.default()._log(Lvl.WARNING, message, 2)


def notice(message: Any) -> bool:
    return Logger.default()._log(Lvl.NOTICE, message, 2)


def info(message: Any) -> bool:
    return Logger.default()._log(Lvl.INFO, message, 2)


def debug(message: Any) -> bool:
    return Logger.default()._log(Lvl.DEBUG, message, 2)


def criticalf(format: str, *args: Any) -> bool:
    return Logger.default()._log(Lvl.CRITICAL, sprintf(format, *args), 2)


def errorf(format: str, *args: Any) -> bool:
    return Logger.default()._log(Lvl.ERROR, sprintf(format, *args), 2)


def warningf(format: str, *args: Any) -> bool:
    return Logger.default()._log(Lvl.WARNING, sprintf(format, *args), 2)


def noticef(format: str, *args: Any) -> bool:
    return Logger.default()._log(Lvl.NOTICE, sprintf(format, *args), 2)


def infof(format: str, *args: Any) -> bool:
    return Logger.default()._log(Lvl.INFO, sprintf(format, *args), 2)


def debugf(format: str, *args: Any) -> bool:
    return Logger.default()._log(Lvl.DEBUG, sprintf(format, *args), 2)


def fatal(message: Any) -> NoReturn:
    Logger.default()._log(Lvl.CRITICAL, message, 2)
    sys.exit(1)


def fatalf(format: str, *args: Any) -> NoReturn:
    Logger.default()._log(Lvl.CRITICAL, sprintf(format, *args), 2)
    sys.exit(1)


def panic(message: Any) -> NoReturn:
    Logger.default()._log(Lvl.CRITICAL, message, 2)
    raise LoggerPanic(str(message))


def panicf(format: str, *args: Any) -> NoReturn:
    message = sprintf(format, *args)
    Logger.default()._log(Lvl.CRITICAL, message, 2)
    raise LoggerPanic(message)


def stack_as_error(message: str = "") -> bool:
    return Logger.default()._log(Lvl.ERROR, stack(message, 1), 2)


def stack_as_critical(message: str = "") -> bool:
    return Logger.default()._log(Lvl.CRITICAL, stack(message, 1), 2)
