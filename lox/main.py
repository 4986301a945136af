"""Runs a .lox file, or the interactive shell when no file is given. Installed as the `lox` console script.

Exit codes: 0 on success, 65 if the input was rejected (lexical, syntax or resolution error), 66 if the file could
not be read, 70 on a runtime error.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


def main(argv=None):
    """Runs lox interpreter. Called from lox executable script."""
    parser = argparse.ArgumentParser(prog="lox")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--debug", action="store_true", help="print tokens and syntax tree before running")
    parser.add_argument("--no-color", action="store_true", help="do not color diagnostics")
    args = parser.parse_args(argv)

    with ErrorHandler(fatal=True, color=not args.no_color) as error_handler:
        if args.file is None:
            Shell(Session(error_handler, debug=args.debug)).cmdloop()
            return 0

        sess = Session(error_handler, args.file, debug=args.debug)
        source = sess.read_file()
        if source is None:
            return 66
        sess.run_source(source)

    if error_handler.had_error:
        return 65
    if error_handler.had_runtime_error:
        return 70
    return 0


if __name__ == "__main__":
    sys.exit(main())
