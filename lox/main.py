"""Runs a Lox script file, or starts the interactive shell when no file is given. Called from the `lox` console script
and from `python -m lox`.

Exit statuses follow sysexits.h: 64 for bad usage, 65 when the script has lex/parse errors, 66 when it can't be read
and 70 when it hits a runtime error.
"""

import argparse
import os
import sys

from lox.lang.error import ErrorHandler, LoxError
from lox.lang.session import Session
from lox.lang.shell import Shell


class ArgumentParser(argparse.ArgumentParser):
    """argparse, but usage errors exit with EX_USAGE instead of 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(ErrorHandler.USAGE)


def build_parser():
    parser = ArgumentParser(prog="lox", description="Tree-walking interpreter for the Lox language.")
    parser.add_argument("script", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--no-color", help="disable colored diagnostics (also honors NO_COLOR)", action="store_true")
    return parser


def main(argv=None):
    """Runs the Lox interpreter and returns the process exit status."""
    args = build_parser().parse_args(argv)
    color = not args.no_color and "NO_COLOR" not in os.environ and sys.stderr.isatty()

    with ErrorHandler(color=color) as error_handler:
        if args.script is None:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()
            return 0

        sess = Session(error_handler, args.script)
        try:
            sess.run_file()
        except LoxError as error:
            error_handler.throw(error)
            return ErrorHandler.NO_INPUT

    return error_handler.exit_code
