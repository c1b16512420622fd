"""
Pydantic configuration schemas for msgkit loggers.

A logger section can stand alone or sit under a top-level `logger:` key of a
larger YAML document:

    logger:
      module: svc
      format: std
      time_format: rfc3339
      level: info
      color: false
      output: stderr
      levels:
        - {rank: 8, name: TRACE, color: Blue, emoji: 128064}
      formats:
        short: "%{lvl} %{message}"

Usage:
    config = LoggerConfig.from_yaml("logging.yaml")
    log = config.build()
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from msgkit.logger.core import DEFAULT_MODULE, Logger
from msgkit.logger.formats import DEF_TIME_FMT, FORMATS, PLAIN_FORMAT, FormatRegistry
from msgkit.logger.levels import LEVEL_DEFAULT, LEVELS, MAX_RESERVED_RANK, LevelRegistry
from msgkit.logger.sinks import open_output


# ═══════════════════════════════════════════════════════════════════
#  Custom levels
# ═══════════════════════════════════════════════════════════════════

class LevelConfig(BaseModel):
    rank: int
    name: str
    color: str = "White"
    emoji: int = 128172  # 💬

    @field_validator("rank")
    @classmethod
    def rank_not_reserved(cls, value: int) -> int:
        if value <= MAX_RESERVED_RANK:
            raise ValueError(
                f"rank {value} is reserved; custom levels need a rank > {MAX_RESERVED_RANK}"
            )
        return value


# ═══════════════════════════════════════════════════════════════════
#  Logger
# ═══════════════════════════════════════════════════════════════════

class LoggerConfig(BaseModel):
    module: str = DEFAULT_MODULE
    format: str = PLAIN_FORMAT               # preset name or placeholder template
    time_format: str = DEF_TIME_FMT          # preset name or strftime layout
    level: int | str = int(LEVEL_DEFAULT)
    color: bool = True
    output: str = "stderr"                   # stdout | stderr | file path
    levels: list[LevelConfig] = Field(default_factory=list)
    formats: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LoggerConfig":
        """Load and validate from a YAML file."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml_string(raw)

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "LoggerConfig":
        """Load and validate from a YAML string."""
        return cls.from_dict(yaml.safe_load(yaml_string) or {})

    @classmethod
    def from_dict(cls, data: dict) -> "LoggerConfig":
        """Load and validate from a dict, with or without a `logger` wrapper key."""
        if isinstance(data, dict) and isinstance(data.get("logger"), dict):
            data = data["logger"]
        return cls.model_validate(data)

    def to_dict(self, exclude_none: bool = True) -> dict:
        return self.model_dump(exclude_none=exclude_none)

    def build(
        self,
        levels: Optional[LevelRegistry] = None,
        formats: Optional[FormatRegistry] = None,
    ) -> Logger:
        """
        Register custom levels and formats, then construct the logger.

        Registries default to the process-wide ones.
        """
        levels = levels if levels is not None else LEVELS
        formats = formats if formats is not None else FORMATS
        for lvl in self.levels:
            levels.register(lvl.rank, lvl.name, lvl.color, lvl.emoji)
        for name, template in self.formats.items():
            formats.register(name, template)
        return Logger(
            module=self.module,
            format=self.format,
            time_format=self.time_format,
            color=self.color,
            sink=open_output(self.output),
            level=self.level,
            levels=levels,
            formats=formats,
        )


__all__ = ["LevelConfig", "LoggerConfig"]
