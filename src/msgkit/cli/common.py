"""Flags and input handling shared by the msg and xprint commands."""

from __future__ import annotations

import argparse
import sys
from typing import IO, Optional

from msgkit.logger.core import Logger
from msgkit.logger.errors import ConfigurationError
from msgkit.logger.formats import DEF_TIME_FMT, FORMATS, PLAIN_FORMAT
from msgkit.logger.levels import LEVELS, Lvl
from msgkit.logger.sinks import open_output


def add_bool_flag(parser: argparse.ArgumentParser, *flags: str, dest: str, help: str) -> None:
    """-x / --name turns it on, --no-name turns it off."""
    parser.add_argument(
        *flags, dest=dest, action=argparse.BooleanOptionalAction, default=False, help=help,
    )


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-F", "--log-format",
        default=PLAIN_FORMAT,
        help=f"logging format preset (default: {PLAIN_FORMAT}; one of {', '.join(FORMATS.names)})",
    )
    parser.add_argument(
        "-l", "--level",
        type=int,
        default=int(Lvl.INFO),
        help=f"log level threshold (default: {int(Lvl.INFO)})",
    )
    add_bool_flag(parser, "-c", "--color", dest="color", help="colorize output")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="output to stdout, stderr or a file path (default: stderr)",
    )


def build_logger(
    parser: argparse.ArgumentParser,
    ns: argparse.Namespace,
    module: str,
) -> Logger:
    """Logger from the parsed shared flags. Invalid values exit via parser.error."""
    if ns.log_format not in FORMATS:
        parser.error(f"invalid format [{ns.log_format}] specified")
    try:
        LEVELS.validate(ns.level)
        sink = open_output(ns.output) if ns.output is not None else None
        return Logger(
            module=module,
            format=ns.log_format,
            time_format=DEF_TIME_FMT,
            color=ns.color,
            sink=sink,
            level=ns.level,
        )
    except (ConfigurationError, OSError) as exc:
        parser.error(str(exc))


def read_stdin(log: Logger, stdin: Optional[IO[str]] = None) -> Optional[str]:
    """Piped input, or None when stdin is a terminal."""
    stream = stdin if stdin is not None else sys.stdin
    if stream is None or stream.isatty():
        return None
    try:
        return stream.read()
    except OSError as exc:
        log.errorf("reading %s: %s", getattr(stream, "name", "stdin"), exc)
        return None


def collect_data(args: list[str], piped: Optional[str], args_first: bool) -> list[str]:
    """Arguments and piped input in output order: stdin first unless args_first."""
    data: list[str] = []
    if args_first:
        data.extend(args)
    if piped is not None:
        data.append(piped)
    if not args_first:
        data.extend(args)
    return data
