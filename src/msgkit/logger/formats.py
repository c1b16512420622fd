"""
Message and time formats, and the placeholder compiler.

A message format is authored with placeholders:

    "%{id} %{time:rfc822} %{module} %{level} %{message}"

and compiled once into a positional str.format template:

    "{0} {1} {2} {5} {6}"

plus the time layout to render field {1} with. The positional slots are fixed
and shared by every format:

    {0} id   {1} time   {2} module   {3} filename   {4} line
    {5} level name      {6} message  {7} emoji

Compilation is lenient: unknown placeholders compile to nothing and malformed
ones degrade to literal text. It never raises.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from msgkit.logger.errors import ConfigurationError

# ── Preset names ──────────────────────────────────────────────────

CLI_TIME_FMT = "rfc822"
DEF_TIME_FMT = "rfc3339"
DETAILED_TIME_FMT = "rfc3339Nano"

CLI_FORMAT = "cli"
PLAIN_FORMAT = "plain"
PLAIN_FORMAT_WITH_EMOJI = "plain-emoji"
STD_FORMAT = "std"
STD_FORMAT_WITH_EMOJI = "std-emoji"
SIMPLE_FORMAT = "simple"
JSON_FORMAT = "json"
YAML_FORMAT = "yaml"

STRUCTURED_FORMATS = (JSON_FORMAT, YAML_FORMAT)

TIME_FORMATS: dict[str, str] = {
    CLI_TIME_FMT: "%d %b %y %H:%M %Z",
    DEF_TIME_FMT: "%Y-%m-%dT%H:%M:%S%:z",
    DETAILED_TIME_FMT: "%Y-%m-%dT%H:%M:%S.%f%:z",
}

MESSAGE_FORMATS: dict[str, str] = {
    CLI_FORMAT: "{2}\t{1}\n\t{6}\n\n",
    PLAIN_FORMAT: "{6}",
    PLAIN_FORMAT_WITH_EMOJI: "{7}\t{6}",
    STD_FORMAT: "#{0}|{1}|{3}:{4}:{2}\t{5:.5}\t{6}",
    STD_FORMAT_WITH_EMOJI: "#{0}|{1}|{3}:{4}:{2}\t{7}\t{5:.5}\t{6}",
    SIMPLE_FORMAT: "#{1}\t{2}\t{6}",
    JSON_FORMAT: "{6}",
    YAML_FORMAT: "{6}",
}

# ── Placeholder table ─────────────────────────────────────────────

TIME_SLOT = "{1}"

PLACEHOLDERS: dict[str, str] = {
    "id": "{0}",
    "time": TIME_SLOT,
    "module": "{2}",
    "filename": "{3}",
    "file": "{3}",
    "line": "{4}",
    "level": "{5}",
    "lvl": "{5:.3}",
    "message": "{6}",
    "emoji": "{7}",
}

OPEN = "%{"
CLOSE = "}"


@dataclass(frozen=True)
class CompiledFormat:
    """Positional template plus the time layout its {1} slot is rendered with."""
    template: str
    time_layout: str


@dataclass(frozen=True)
class Format:
    """
    A named, registered format.

    structured is "json" or "yaml" for the serializing formats, where the
    template is not used for the record layout.
    """
    name: str
    template: str
    time_layout: Optional[str] = None
    structured: Optional[str] = None

    def compiled(self, default_time_layout: str) -> CompiledFormat:
        return CompiledFormat(self.template, self.time_layout or default_time_layout)


def _escape(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def _placeholder(token: str) -> tuple[str, str]:
    """Split "name:arg" into its field and argument. Unknown names map to ""."""
    name, _, arg = token.partition(":")
    return PLACEHOLDERS.get(name, ""), arg


def compile_format(
    text: str,
    time_layout: str,
    time_formats: dict[str, str] | None = None,
) -> CompiledFormat:
    """
    Translate a placeholder template into a CompiledFormat.

    Args:
        text: template with %{name} / %{name:arg} placeholders.
        time_layout: layout in effect before this template; kept unless the
            template carries a %{time:LAYOUT} override.
        time_formats: named time layouts an override may refer to
            (e.g. %{time:rfc822}). Unknown names are used as strftime layouts.
    """
    names = TIME_FORMATS if time_formats is None else time_formats
    out: list[str] = []
    rest = text
    while True:
        idx = rest.find(OPEN)
        if idx == -1:
            out.append(_escape(rest))
            break
        out.append(_escape(rest[:idx]))
        rest = rest[idx:]

        end = rest.find(CLOSE)
        if end == -1:
            # lone "%{" with nothing to close it
            out.append(_escape(OPEN))
            rest = rest[len(OPEN):]
            continue

        nested = rest.find(OPEN, 1)
        if nested != -1 and nested < end:
            # "%{bad %{message}": keep the "%" literal, resume at "{bad "
            out.append("%")
            rest = rest[1:]
            continue

        field, arg = _placeholder(rest[len(OPEN):end])
        out.append(field)
        if field == TIME_SLOT and arg:
            time_layout = names.get(arg, arg)
        rest = rest[end + 1:]

    return CompiledFormat("".join(out), time_layout)


def format_time(moment: datetime, layout: str) -> str:
    """
    strftime with one extension: %:z renders the UTC offset as +HH:MM.

    Layouts are not validated; unknown directives pass through strftime as is.
    """
    if "%:z" in layout:
        offset = moment.strftime("%z")
        if offset:
            offset = f"{offset[:3]}:{offset[3:5]}"
        layout = layout.replace("%:z", offset.replace("%", "%%"))
    return moment.strftime(layout)


class FormatRegistry:
    """
    Name → Format for message layouts, name → strftime layout for time formats.

    Usage:
        formats = FormatRegistry.with_defaults()
        formats.register("short", "%{lvl} %{message}")
        formats.get("short").template  # "{5:.3} {6}"
    """

    def __init__(self) -> None:
        self._formats: dict[str, Format] = {}
        self._time_formats: dict[str, str] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_defaults(cls) -> "FormatRegistry":
        registry = cls()
        registry._time_formats.update(TIME_FORMATS)
        for name, template in MESSAGE_FORMATS.items():
            structured = name if name in STRUCTURED_FORMATS else None
            registry._formats[name] = Format(name, template, structured=structured)
        return registry

    # ── Message formats ───────────────────────────────────────────

    def register(self, name: str, text: str) -> Format:
        """Compile a placeholder template and store it under name."""
        compiled = compile_format(text, "", self.time_formats)
        fmt = Format(name, compiled.template, time_layout=compiled.time_layout or None)
        with self._lock:
            self._formats[name] = fmt
        return fmt

    def get(self, name: str) -> Format:
        fmt = self._formats.get(name)
        if fmt is None:
            raise ConfigurationError(
                f"Unknown format '{name}'. Valid formats: {', '.join(self.names)}"
            )
        return fmt

    @property
    def names(self) -> list[str]:
        return sorted(self._formats)

    def __contains__(self, name: object) -> bool:
        return name in self._formats

    # ── Time formats ──────────────────────────────────────────────

    def register_time_format(self, name: str, layout: str) -> None:
        with self._lock:
            self._time_formats[name] = layout

    def time_layout(self, value: str) -> str:
        """Resolve a time format name; anything else is taken as a layout."""
        return self._time_formats.get(value, value)

    @property
    def time_formats(self) -> dict[str, str]:
        return dict(self._time_formats)


# Process-wide registry; loggers take it by default.
FORMATS = FormatRegistry.with_defaults()
