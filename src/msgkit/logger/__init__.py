"""
msgkit leveled logger.

Format-customizable console logging with ANSI colors. Formats are authored
with %{placeholders}, compiled once, and expanded per record.
"""

from msgkit.logger.core import (
    Logger,
    critical,
    criticalf,
    debug,
    debugf,
    error,
    errorf,
    fatal,
    fatalf,
    info,
    infof,
    log,
    notice,
    noticef,
    panic,
    panicf,
    set_default_format,
    sprintf,
    stack_as_critical,
    stack_as_error,
    warning,
    warningf,
)
from msgkit.logger.errors import (
    ConfigurationError,
    LoggerPanic,
    MsgkitError,
    RenderError,
    TemplateFunctionError,
)
from msgkit.logger.formats import (
    FORMATS,
    CompiledFormat,
    Format,
    FormatRegistry,
    compile_format,
    format_time,
)
from msgkit.logger.formatters import JsonFormatter, RecordFormatter, TextFormatter, YamlFormatter
from msgkit.logger.levels import LEVEL_DEFAULT, LEVELS, Level, LevelRegistry, Lvl
from msgkit.logger.records import Message, MessageKind, Record
from msgkit.logger.sinks import BufferSink, FileSink, Sink, StreamSink, open_output
from msgkit.logger.worker import Worker

__all__ = [
    "Logger",
    "Worker",
    "Lvl",
    "Level",
    "LevelRegistry",
    "LEVELS",
    "LEVEL_DEFAULT",
    "Format",
    "FormatRegistry",
    "FORMATS",
    "CompiledFormat",
    "compile_format",
    "format_time",
    "Record",
    "Message",
    "MessageKind",
    "RecordFormatter",
    "TextFormatter",
    "JsonFormatter",
    "YamlFormatter",
    "Sink",
    "StreamSink",
    "FileSink",
    "BufferSink",
    "open_output",
    "MsgkitError",
    "ConfigurationError",
    "RenderError",
    "LoggerPanic",
    "TemplateFunctionError",
    "sprintf",
    "set_default_format",
    "log",
    "critical",
    "error",
    "warning",
    "notice",
    "info",
    "debug",
    "criticalf",
    "errorf",
    "warningf",
    "noticef",
    "infof",
    "debugf",
    "fatal",
    "fatalf",
    "panic",
    "panicf",
    "stack_as_error",
    "stack_as_critical",
]
