"""
Worker: the per-logger object that owns sink, format, threshold and color.

Threshold, format and color are plain mutable settings; changes take effect on
the next log call. There is no buffering and nothing to drain.
"""

from __future__ import annotations

import threading
from typing import Optional

from msgkit import ansi
from msgkit.logger.errors import RenderError
from msgkit.logger.formats import (
    MESSAGE_FORMATS,
    OPEN,
    PLAIN_FORMAT,
    CompiledFormat,
    FormatRegistry,
    compile_format,
)
from msgkit.logger.formatters import RecordFormatter, TextFormatter, build_formatter
from msgkit.logger.levels import LevelRegistry, Lvl
from msgkit.logger.records import Message, Record
from msgkit.logger.sinks import Sink


class Worker:
    """
    Renders records and writes them to a sink.

    Usage:
        worker = Worker(StreamSink(name="stderr"), compiled, levels, threshold=Lvl.INFO)
        worker.log(record)
    """

    def __init__(
        self,
        sink: Sink,
        compiled: CompiledFormat,
        levels: LevelRegistry,
        threshold: int = Lvl.NOTICE,
        color: bool = True,
        structured: Optional[str] = None,
    ):
        self.sink = sink
        self.levels = levels
        self.threshold = threshold
        self.color = color
        self.last_error: Optional[BaseException] = None
        self._lock = threading.Lock()
        self.set_format(compiled, structured)

    # ── Settings ──────────────────────────────────────────────────

    @property
    def compiled(self) -> CompiledFormat:
        return self._compiled

    @property
    def structured(self) -> Optional[str]:
        return self._structured

    @property
    def time_layout(self) -> str:
        return self._compiled.time_layout

    def set_format(self, compiled: CompiledFormat, structured: Optional[str] = None) -> None:
        formatter = build_formatter(compiled, self.levels, structured)
        with self._lock:
            self._compiled = compiled
            self._structured = structured
            self._formatter: RecordFormatter = formatter

    def set_time_layout(self, layout: str) -> None:
        self.set_format(CompiledFormat(self._compiled.template, layout), self._structured)

    def enabled(self, level: int) -> bool:
        return level <= self.threshold

    # ── Output ────────────────────────────────────────────────────

    def log(self, record: Record, calldepth: int = 1) -> bool:
        """
        Render and write a record if its level passes the threshold.

        Returns True when a line was written. Render failures are logged at
        ERROR in place of the record, when ERROR passes the threshold. Sink
        failures are kept on last_error.
        """
        if not self.enabled(record.level):
            return False
        try:
            text = self._formatter.format(record)
        except RenderError as exc:
            if not self.enabled(Lvl.ERROR):
                return False
            record = Record(
                id=record.id,
                time=record.time,
                module=record.module,
                filename=record.filename,
                line=record.line,
                level=Lvl.ERROR,
                message=Message.of(str(exc)),
                emoji=self.levels.get(Lvl.ERROR).emoji,
            )
            fallback = CompiledFormat(MESSAGE_FORMATS[PLAIN_FORMAT], self.time_layout)
            text = TextFormatter(fallback, self.levels).format(record)
        return self.output(calldepth + 1, text, record.level)

    def output(self, calldepth: int, text: str, level: Optional[int] = None) -> bool:
        """Write one line, colorized for level when color is on."""
        if self.color and level is not None:
            escape = self.levels.get(level).escape
            if escape:
                text = f"{escape}{text}{ansi.RESET}"
        if not text.endswith("\n"):
            text += "\n"
        try:
            self.sink.write(text, calldepth + 1)
        except (OSError, ValueError) as exc:
            # ValueError: write to a closed stream
            self.last_error = exc
            return False
        return True


def resolve_format(
    value: Optional[str],
    formats: FormatRegistry,
    time_layout: str,
) -> tuple[CompiledFormat, Optional[str]]:
    """
    Turn a format argument into (compiled format, structured mode).

    value is a registered name, a placeholder template (contains "%{"), or
    None for the plain layout. Unknown names raise ConfigurationError.
    """
    if value is None or value == "":
        value = PLAIN_FORMAT
    if OPEN in value and value not in formats:
        return compile_format(value, time_layout, formats.time_formats), None
    fmt = formats.get(value)
    return fmt.compiled(time_layout), fmt.structured
