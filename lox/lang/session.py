"""Session control for lox. Drives the scan -> parse -> resolve -> interpret pipeline, either for a whole file or
for one line at a time in command-line mode.
"""

from lox.interpreter import Interpreter
from lox.printer import AstPrinter
from lox.resolver import resolve
from lox.syntax.parser import parse
from lox.syntax.scanner import scan


class Session:
    """Governs a lox session. Every input run in the same session shares one interpreter, so globals persist."""
    SH_FILE = "<stdin>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, debug=False, out=None):
        self.error_handler = error_handler
        self.path = path    # used for error messages
        self.debug = debug  # trace tokens and syntax tree before running

        self.interpreter = Interpreter(error_handler, out)

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Joins line onto any buffered continuation. Returns the joined line and whether it still needs more input,
        i.e. whether its braces or parentheses are left open.
        """
        line = add_to_prev + "\n" + line if add_to_prev else line
        return line, is_unbalanced(line)

    def read_file(self):
        """Returns the text of self.path, or None (reported) if it cannot be opened or is not valid UTF-8."""
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                return file.read()
        except OSError as exc:
            self.error_handler.error(0, "", f"'{self.path}' could not be opened: {exc.strerror}")
        except UnicodeDecodeError as exc:
            self.error_handler.error(0, "", f"'{self.path}' could not be decoded: {exc.reason} at byte {exc.start}")
        return None

    def run_file(self):
        """Reads and runs self.path. Returns whether it ran without error."""
        source = self.read_file()
        if source is None:
            return False
        return self.run_source(source)

    def run_source(self, source):
        """Runs source through the whole pipeline. Returns whether it ran without error. Stops before resolving if
        there was a syntax error, and before interpreting if there was a resolution error.
        """
        self.error_handler.register_source(self.path, source)

        tokens = scan(source, self.error_handler)
        if self.debug:
            self.error_handler.trace(" ".join(token.lexeme or token.type.name for token in tokens))

        statements = parse(tokens, self.error_handler)
        if self.error_handler.had_error:
            return False

        if self.debug:
            self.error_handler.trace(AstPrinter().print(statements))

        if resolve(self.interpreter, statements, self.error_handler):
            return False

        self.interpreter.interpret(statements)
        return not self.error_handler.had_runtime_error


def is_unbalanced(line):
    """Whether line has more opening than closing braces/parentheses, ignoring strings and comments."""
    balance = 0
    in_string = False
    idx = 0
    while idx < len(line):
        char = line[idx]
        if in_string:
            in_string = char != '"'
        elif char == '"':
            in_string = True
        elif line.startswith("//", idx):
            end = line.find("\n", idx)
            if end == -1:
                break
            idx = end
        elif char in "({":
            balance += 1
        elif char in ")}":
            balance -= 1
        idx += 1
    return balance > 0 or in_string
