"""msg: log printf-formatted text from the command line."""

from __future__ import annotations

import argparse
from typing import IO, Optional

from msgkit.cli.common import (
    add_bool_flag,
    add_logging_arguments,
    build_logger,
    collect_data,
    read_stdin,
)

DEFAULT_PRINTF_FORMAT = "%s"

EPILOG = """
Examples:
  msg "%s is %s" disk full                 # logs "disk is full" at INFO (-l 4)
  echo hello | msg -l 2 "%s %s" world      # piped input comes first
  msg -F std -c -f "!s-!s" a b             # -f: ! stands for %, | for a backslash
"""


def translate_format(value: str) -> str:
    """Shell-friendly format spelling: ! → %, | → backslash."""
    return value.replace("!", "%").replace("|", "\\")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msg",
        description="Log printf-formatted arguments and piped input.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    add_logging_arguments(parser)
    add_bool_flag(
        parser, "-A", "--args-first", dest="args_first",
        help="output arguments (if any) before stdin (if any), instead of the opposite",
    )
    parser.add_argument(
        "-f", "--fmt",
        default=None,
        help="printf format, in place of the first argument",
    )
    parser.add_argument("format", nargs="?", default=None, help="printf format")
    parser.add_argument("args", nargs="*", help="format arguments")
    return parser


def main(argv: Optional[list[str]] = None, stdin: Optional[IO[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    log = build_logger(parser, ns, module="msg")

    args = list(ns.args)
    if ns.fmt is not None:
        printfmt = translate_format(ns.fmt)
        if ns.format is not None:
            args.insert(0, ns.format)
    else:
        printfmt = ns.format if ns.format is not None else DEFAULT_PRINTF_FORMAT

    data = collect_data(args, read_stdin(log, stdin), ns.args_first)
    log.logf(ns.level, printfmt, *data)
    log.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
