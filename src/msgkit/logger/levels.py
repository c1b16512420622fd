"""
Level definitions and the level registry.

Lower rank = more severe. The six built-in levels occupy ranks 0-5 and ranks up
to 7 are reserved, so custom levels start at 8. A record is emitted when its
rank is <= the worker threshold.

Colors are resolved once, when a level is registered, not per log line.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum

from msgkit import ansi
from msgkit.logger.errors import ConfigurationError
from msgkit.unicode import codepoint_to_emoji

MAX_RESERVED_RANK = 7


class Lvl(IntEnum):
    """Built-in verbosity levels."""
    CRITICAL = 0
    ERROR = 1
    WARNING = 2
    NOTICE = 3
    INFO = 4
    DEBUG = 5

    @classmethod
    def from_name(cls, name: str) -> "Lvl":
        """Resolve level from string name, case-insensitive."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown log level '{name}'. "
                f"Valid levels: {', '.join(m.name for m in cls)}"
            )


LEVEL_DEFAULT = Lvl.NOTICE


@dataclass(frozen=True)
class Level:
    """A registered level: display name, color key, emoji and resolved escape."""
    rank: int
    name: str
    color: str
    emoji: str
    escape: str

    @classmethod
    def create(cls, rank: int, name: str, color: str, emoji_codepoint: int) -> "Level":
        escape, _ = ansi.lookup(color)
        return cls(
            rank=rank,
            name=name,
            color=color,
            emoji=codepoint_to_emoji(emoji_codepoint),
            escape=escape,
        )


BUILTIN_LEVELS: tuple[tuple[Lvl, str, str, int], ...] = (
    (Lvl.CRITICAL, "FATAL", "Red", 128557),     # 😭
    (Lvl.ERROR, "ERROR", "Magenta", 128545),    # 😡
    (Lvl.WARNING, "WARN", "Yellow", 128548),    # 😤
    (Lvl.NOTICE, "NOTICE", "Green", 128516),    # 😄
    (Lvl.INFO, "INFO", "Cyan", 128523),         # 😋
    (Lvl.DEBUG, "DEBUG", "White", 128533),      # 😕
)


class LevelRegistry:
    """
    Rank → Level mapping.

    Usage:
        levels = LevelRegistry.with_defaults()
        levels.register(8, "TRACE", "Blue", 128064)
        levels.get(Lvl.WARNING).name  # "WARN"
    """

    def __init__(self) -> None:
        self._levels: dict[int, Level] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_defaults(cls) -> "LevelRegistry":
        registry = cls()
        for rank, name, color, emoji in BUILTIN_LEVELS:
            registry._store(Level.create(int(rank), name, color, emoji))
        return registry

    def _store(self, level: Level) -> None:
        with self._lock:
            self._levels[level.rank] = level

    def register(self, rank: int, name: str, color: str, emoji_codepoint: int) -> Level:
        """
        Create or replace a custom level.

        Ranks 0-7 are reserved for the built-ins and rejected.
        """
        if not isinstance(rank, int) or isinstance(rank, bool):
            raise ConfigurationError(f"Level rank must be an int, got {type(rank).__name__}")
        if rank <= MAX_RESERVED_RANK:
            raise ConfigurationError(
                f"Level rank {rank} is reserved; custom levels need a rank > {MAX_RESERVED_RANK}"
            )
        level = Level.create(rank, name, color, emoji_codepoint)
        self._store(level)
        return level

    def get(self, rank: int) -> Level:
        """Get the level for a rank. Unknown ranks render as their number."""
        level = self._levels.get(rank)
        if level is None:
            return Level(rank=rank, name=str(rank), color="", emoji="", escape="")
        return level

    def validate(self, rank: int) -> int:
        """Return rank if registered, else raise ConfigurationError."""
        if rank not in self._levels:
            raise ConfigurationError(
                f"Invalid level {rank}. Valid levels: {', '.join(map(str, self.ranks))}"
            )
        return rank

    def resolve(self, value: int | str) -> int:
        """Convert a level name or rank to a registered rank."""
        if isinstance(value, bool):
            raise ConfigurationError(f"Expected int or str for level, got {type(value).__name__}")
        if isinstance(value, int):
            return self.validate(int(value))
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.lstrip("-").isdigit():
                return self.validate(int(stripped))
            for level in self._levels.values():
                if level.name.upper() == stripped.upper():
                    return level.rank
            return int(Lvl.from_name(stripped))
        raise ConfigurationError(f"Expected int or str for level, got {type(value).__name__}")

    @property
    def ranks(self) -> list[int]:
        return sorted(self._levels)

    def __contains__(self, rank: object) -> bool:
        return rank in self._levels

    def __iter__(self):
        return iter(self._levels[r] for r in self.ranks)

    def __len__(self) -> int:
        return len(self._levels)


# Process-wide registry; loggers take it by default.
LEVELS = LevelRegistry.with_defaults()
