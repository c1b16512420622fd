"""Unicode helpers for level decorations."""

REPLACEMENT_CHARACTER = "\ufffd"


def codepoint_to_emoji(codepoint: int) -> str:
    """Render a decimal codepoint (e.g. 128516) as its character."""
    try:
        return chr(codepoint)
    except (ValueError, OverflowError):
        return REPLACEMENT_CHARACTER


__all__ = ["codepoint_to_emoji"]
