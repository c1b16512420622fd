"""xprint: render arguments and piped input through a Jinja2 template, then log the result."""

from __future__ import annotations

import argparse
import json
import sys
from typing import IO, Optional

from msgkit.cli.common import (
    add_bool_flag,
    add_logging_arguments,
    build_logger,
    collect_data,
    read_stdin,
)
from msgkit.logger.errors import MsgkitError
from msgkit.server.app import serve
from msgkit.templates.functions import describe_functions
from msgkit.templates.render import TemplateRenderer, load_template
from msgkit.templates.usage import UsageTracker

EPILOG = """
Examples:
  xprint hello world                                  # logs "hello world"
  xprint -t '{{ data | join("-") | upper }}' a b      # logs "A-B"
  cat secret | xprint -t '{{ data[0] | b64enc }}'     # base64 of stdin
  xprint -t report.j2 --unsafe -c -F std x y          # template from a file
  xprint --list-functions                             # helper catalog as JSON
  xprint --serve 127.0.0.1:8080                       # HTTP render endpoint
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xprint",
        description="Render data through a template and log the result.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    add_logging_arguments(parser)
    add_bool_flag(
        parser, "-a", "--args-first", dest="args_first",
        help="output arguments (if any) before stdin (if any), instead of the opposite",
    )
    parser.add_argument(
        "-n", "--name",
        default="xprint",
        help="module name for verbose logging formats (default: xprint)",
    )
    parser.add_argument(
        "-t", "--template",
        default=None,
        help="template (file path or inline text)",
    )
    parser.add_argument(
        "--unsafe",
        action="store_true",
        help="enable helpers that access the host: cmd, env, http, files, user input",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="log every helper call made while rendering",
    )
    parser.add_argument(
        "--list-functions",
        action="store_true",
        help="print the helper catalog as JSON and exit",
    )
    parser.add_argument(
        "--serve",
        default=None,
        metavar="ADDR",
        help="serve the HTTP render endpoint on host:port",
    )
    parser.add_argument("args", nargs="*", help="template data")
    return parser


def main(argv: Optional[list[str]] = None, stdin: Optional[IO[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)

    if ns.list_functions:
        sys.stdout.write(json.dumps(describe_functions(), indent=2) + "\n")
        return 0

    log = build_logger(parser, ns, module=ns.name)
    tracker = UsageTracker()
    if ns.debug:
        tracker.start(log)

    if ns.serve:
        try:
            serve(ns.serve, logger=log, unsafe=ns.unsafe, tracker=tracker, debug=ns.debug)
        except MsgkitError as exc:
            log.error(str(exc))
            return 1
        return 0

    data = collect_data(list(ns.args), read_stdin(log, stdin), ns.args_first)
    if not data:
        return 0

    if ns.template is None:
        log.log(ns.level, " ".join(data))
        log.flush()
        return 0

    renderer = TemplateRenderer(unsafe=ns.unsafe, tracker=tracker)
    try:
        out = renderer.render(load_template(ns.template), data)
    except Exception as exc:
        log.errorf("rendering template: %s", exc)
        return 1
    log.log(ns.level, out)
    log.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
