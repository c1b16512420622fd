"""
ANSI escape sequences.

The color provider consumed by the level table: every color name maps to a
foreground escape and its background variant. Unknown names fall back to red.

Usage:
    escape, bg_escape = lookup("Yellow")
    print(paint("Green", "ready") + CONTROLS["Reset"])
"""

from dataclasses import dataclass

ESCAPE_PREFIX = "\033["

BLACK = 30
RED = 31
GREEN = 32
YELLOW = 33
BLUE = 34
MAGENTA = 35
CYAN = 36
WHITE = 37

DEFAULT_COLOR = "Red"


@dataclass(frozen=True)
class Color:
    """A foreground color code and its background counterpart (code + 10)."""
    code: int
    escape: str
    bg_code: int
    bg_escape: str

    @classmethod
    def from_code(cls, code: int) -> "Color":
        return cls(
            code=code,
            escape=f"{ESCAPE_PREFIX}{code}m",
            bg_code=code + 10,
            bg_escape=f"{ESCAPE_PREFIX}{code + 10}m",
        )


COLORS: dict[str, Color] = {
    "Black": Color.from_code(BLACK),
    "Red": Color.from_code(RED),
    "Green": Color.from_code(GREEN),
    "Yellow": Color.from_code(YELLOW),
    "Blue": Color.from_code(BLUE),
    "Magenta": Color.from_code(MAGENTA),
    "Cyan": Color.from_code(CYAN),
    "White": Color.from_code(WHITE),
}

CONTROLS: dict[str, str] = {
    "Prefix": ESCAPE_PREFIX,
    "Bold": ESCAPE_PREFIX + "1m",
    "Clear": ESCAPE_PREFIX + "2J",
    "Dim": ESCAPE_PREFIX + "2m",
    "Hide": ESCAPE_PREFIX + "8m",
    "Blink": ESCAPE_PREFIX + "5m",
    "Unblink": ESCAPE_PREFIX + "25m",
    "Reset": ESCAPE_PREFIX + "0m",
    "Reverse": ESCAPE_PREFIX + "7m",
    "Underline": ESCAPE_PREFIX + "4m",
}

RESET = CONTROLS["Reset"]


def get_color(name: str) -> Color:
    """Get a color by name. Falls back to red for unregistered names."""
    color = COLORS.get(name)
    if color is None:
        return COLORS[DEFAULT_COLOR]
    return color


def lookup(name: str) -> tuple[str, str]:
    """Resolve a color name to (escape, background escape)."""
    color = get_color(name)
    return color.escape, color.bg_escape


def paint(color: str, *parts: str, bg: bool = False, sep: str = " ") -> str:
    """
    Prefix the joined parts with a color escape.

    The reset sequence is not appended; callers decide where the color ends.
    Example: paint("Black", bg=True) == "\\033[40m"
    """
    c = get_color(color)
    prefix = c.bg_escape if bg else c.escape
    return prefix + sep.join(parts)


__all__ = [
    "Color",
    "COLORS",
    "CONTROLS",
    "RESET",
    "get_color",
    "lookup",
    "paint",
]
