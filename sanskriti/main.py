"""Command-line front end for the sanskriti interpreter: tokenizes, parses or runs a .san file, or goes to command-line
mode if no mode is given. Uses the error handling context manager to turn errors into exit codes. Called from the
sanskriti console script.
"""

import argparse
import logging
import sys

from sanskriti.lang.error import EX_DATAERR, ErrorHandler
from sanskriti.lang.session import Session
from sanskriti.lang.shell import Shell


MODES = ("tokenize", "parse", "run")


def build_parser():
    """Returns the argparse parser for the sanskriti command line."""
    parser = argparse.ArgumentParser(prog="sanskriti", description="Lox interpreter with Sanskrit keywords.")
    parser.add_argument("-v", "--verbose", action="store_true", help="log what the interpreter is doing to stderr")
    parser.add_argument("--no-translate", action="store_true", help="do not translate Sanskrit keywords")

    subparsers = parser.add_subparsers(dest="mode", metavar="MODE",
                                       help="one of tokenize, parse, run (if empty, goes to command-line mode)")
    for mode, help_msg in zip(MODES, ("print the tokens of FILE", "print the syntax tree of the expression in FILE",
                                      "run the program in FILE")):
        subparser = subparsers.add_parser(mode, help=help_msg)
        subparser.add_argument("file", metavar="FILE", help="source file")

    return parser


def main(argv=None):
    """Runs the sanskriti interpreter. Called from the sanskriti console script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.verbose:
            logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

        if args.mode is None:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, translate=not args.no_translate)
            Shell(sess).cmdloop()
            return

        sess = Session(error_handler, args.file, translate=not args.no_translate)

        if args.mode == "tokenize":
            if sess.tokenize():
                sys.exit(EX_DATAERR)
        elif args.mode == "parse":
            sess.parse()
        else:
            sess.run()


if __name__ == "__main__":
    main()
