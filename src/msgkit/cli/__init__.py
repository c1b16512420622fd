"""Command-line entry points: msg and xprint."""
