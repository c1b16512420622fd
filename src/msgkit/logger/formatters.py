"""
Record formatters.

Each worker owns one formatter, rebuilt whenever its format changes:
  - text: expands the compiled positional template
  - json: one JSON object per record; JSON-looking messages are nested
  - yaml: the same document as YAML
"""

import json
from abc import ABC, abstractmethod
from typing import Any

import yaml

from msgkit.logger.errors import RenderError
from msgkit.logger.formats import JSON_FORMAT, YAML_FORMAT, CompiledFormat
from msgkit.logger.levels import LevelRegistry
from msgkit.logger.records import MessageKind, Record

EXTRA_ARGS_MARKER = "%!(EXTRA"


class RecordFormatter(ABC):
    """Base formatter. Transforms Record → string."""

    @abstractmethod
    def format(self, record: Record) -> str: ...


class TextFormatter(RecordFormatter):
    """
    Expands a compiled template with the eight positional record fields.
    Example ("std"): #3|2026-02-12T14:32:05+00:00|app.py:12:svc	WARN	disk low
    """

    def __init__(self, compiled: CompiledFormat, levels: LevelRegistry):
        self.compiled = compiled
        self.levels = levels

    def format(self, record: Record) -> str:
        level = self.levels.get(record.level)
        try:
            out = self.compiled.template.format(
                record.id,              # {0} id
                record.time,            # {1} time
                record.module,          # {2} module
                record.filename,        # {3} filename
                record.line,            # {4} line
                level.name,             # {5} level
                record.message.text,    # {6} message
                record.emoji,           # {7} emoji
            )
        except (IndexError, KeyError, ValueError) as exc:
            raise RenderError(
                f"cannot render format {self.compiled.template!r}: {exc}"
            ) from exc
        # surplus-argument diagnostics from printf-era templates
        idx = out.rfind(EXTRA_ARGS_MARKER)
        if idx != -1:
            out = out[:idx]
        return out


def record_document(record: Record) -> dict[str, Any]:
    """The serializable view of a record. Empty line/filename are omitted."""
    doc: dict[str, Any] = {
        "id": record.id,
        "time": record.time,
        "module": record.module,
        "level": int(record.level),
    }
    if record.line:
        doc["line"] = record.line
    if record.filename:
        doc["filename"] = record.filename
    doc["message"] = _structured_message(record)
    return doc


def _structured_message(record: Record) -> Any:
    """Re-parse text/bytes payloads as JSON; keep the raw string if that fails."""
    message = record.message
    if message.kind is MessageKind.STRUCTURED:
        return message.value
    try:
        return json.loads(message.value)
    except (ValueError, TypeError):
        return message.text


class JsonFormatter(RecordFormatter):
    """One JSON object per line."""

    def format(self, record: Record) -> str:
        try:
            return json.dumps(record_document(record), default=str)
        except (TypeError, ValueError) as exc:
            raise RenderError(f"cannot serialize record #{record.id}: {exc}") from exc


class YamlFormatter(RecordFormatter):
    """One YAML document per record."""

    def format(self, record: Record) -> str:
        try:
            return yaml.safe_dump(
                record_document(record),
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=False,
            ).rstrip("\n")
        except yaml.YAMLError as exc:
            raise RenderError(f"cannot serialize record #{record.id}: {exc}") from exc


def build_formatter(
    compiled: CompiledFormat,
    levels: LevelRegistry,
    structured: str | None = None,
) -> RecordFormatter:
    """Pick the formatter for a worker's current format."""
    if structured == JSON_FORMAT:
        return JsonFormatter()
    if structured == YAML_FORMAT:
        return YamlFormatter()
    return TextFormatter(compiled, levels)
