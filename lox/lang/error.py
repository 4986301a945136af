"""Error handling for the lox language. Lexical, syntax and resolution errors are reported through an ErrorHandler
and recorded, never raised out of the pipeline: the driving stage checks ErrorHandler.had_error before moving on.
Runtime errors are raised as LoxRuntimeError and caught once, at the top of Interpreter.interpret.

If any other Python exception makes it all the way to an ErrorHandler used as a context manager, it is assumed to
be an internal issue.
"""

import sys
from dataclasses import dataclass

from termcolor import colored

from lox.syntax.tokens import Token, TokenType


class LoxException(Exception):
    """Base class for every error the lox language can report. Carries the source line and a location hint
    (" at 'lexeme'", " at end" or "") used when the error is displayed.
    """

    def __init__(self, line, message, where=""):
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where


class ParseError(LoxException):
    """Raised inside the parser to unwind to the nearest statement boundary. Already reported when raised."""


class LoxRuntimeError(LoxException):
    """Type mismatch, arity mismatch, undefined variable, bad call target or missing property."""

    def __init__(self, token, message):
        super().__init__(token.line, message, where=location(token))
        self.token = token


def location(token):
    """Returns the location hint for token used in error messages."""
    if token.type is TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    line: int
    message: str

    def __str__(self):
        return f"[line {self.line}] {self.kind}: {self.message}"


class ErrorHandler:
    """Error-reporting collaborator shared by every stage of the pipeline. Also a context manager that will suppress
    Python errors raised by the driver and report them as lox errors instead.
    """
    ERROR = "red"
    WARNING = "magenta"
    TRACE = "cyan"

    def __init__(self, fatal=False, color=True, stream=None):
        self.fatal = fatal
        self.color = color
        self.stream = stream  # defaults to sys.stderr at write time

        self.path = None
        self.lines = []

        self.had_error = False
        self.had_runtime_error = False
        self.diagnostics = []

    def register_source(self, path, source):
        """Registers source (and the file it was read from) so diagnostics can quote the offending line."""
        self.path = path
        self.lines = source.splitlines()

    def reset(self):
        """Clears error flags. Should be called between independent inputs (e.g. REPL lines)."""
        self.had_error = False
        self.had_runtime_error = False

    def error(self, line, where, message, kind="error", lexeme=None):
        """Reports a lexical, syntax or resolution error."""
        self.had_error = True
        self._report(kind, line, f"Error{where}: {message}", ErrorHandler.ERROR, lexeme)

    def error_at(self, token, message, kind="error"):
        """Reports an error located at token."""
        lexeme = None if token.type is TokenType.EOF else token.lexeme
        self.error(token.line, location(token), message, kind, lexeme)

    def runtime_error(self, error):
        """Reports a LoxRuntimeError caught by the interpreter."""
        self.had_runtime_error = True
        self._report("runtime error", error.line, error.message, ErrorHandler.ERROR, error.token.lexeme)

    def warn(self, token, message):
        """Reports an advisory diagnostic. Warnings never stop the pipeline."""
        self._report("warning", token.line, message, ErrorHandler.WARNING, token.lexeme)

    def trace(self, text):
        """Prints debugging output (tokens, syntax tree)."""
        self._write(self._colored(text, ErrorHandler.TRACE))

    def diagnose(self, line, lexeme, color):
        """Returns the source line quoted, with the first occurrence of lexeme highlighted and underlined."""
        if not 0 < line <= len(self.lines):
            return None

        text = self.lines[line - 1]
        start = text.find(lexeme) if lexeme else -1
        if start == -1:
            return "  " + text.strip()

        indent = len(text) - len(text.lstrip())
        text, start = text[indent:], start - indent
        end = start + max(len(lexeme), 1)

        diagnosis = "  " + text[:start] + self._colored(text[start:end], color, bold=True) + text[end:] + "\n"
        diagnosis += "  " + " " * start + self._colored("^" + "~" * (end - start - 1), color, bold=True)
        return diagnosis

    def _report(self, kind, line, message, color, lexeme=None):
        self.diagnostics.append(Diagnostic(kind, line, message))

        prefix = f"{self.path}:{line}: " if self.path else f"[line {line}] "
        self._write(self._colored(prefix, bold=True) + self._colored(f"{kind}: ", color, bold=True) + message)

        diagnosis = self.diagnose(line, lexeme, color)
        if diagnosis:
            self._write(diagnosis)

    def _colored(self, text, color=None, bold=False):
        if not self.color:
            return text
        return colored(text, color, attrs=["bold"] if bold else None)

    def _write(self, text):
        print(text, file=self.stream if self.stream is not None else sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self._report("error", 0, "keyboard interrupt", ErrorHandler.ERROR)
            self.had_error = True
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self._report("error", 0, "maximum recursion depth exceeded", ErrorHandler.ERROR)
            self.had_error = True
        elif exc_type is not None and issubclass(exc_type, LoxException):
            self.error(exc_val.line, exc_val.where, exc_val.message)
        elif exc_type is not None:
            message = self._colored("[internal] ", ErrorHandler.ERROR, bold=True)
            message += f"unknown error: '{exc_type.__name__}: {exc_val}'"
            self._report("error", 0, message, ErrorHandler.ERROR)
            self.had_error = True
            do_exit = self.fatal

        if do_exit and exc_type is not SystemExit:
            sys.exit(70)
        return not do_exit
