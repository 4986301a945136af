"""Lexical analysis: source text in, token sequence out. The scanner never stops at the first lexical error;
every bad character and unterminated string is reported through the error handler and scanning carries on, so a
single pass surfaces every lexical error it can.
"""

from lox.syntax.tokens import KEYWORDS, Token, TokenType


class Scanner:
    """Single-use scanner over one source text."""
    SINGLE = {
        "(": TokenType.PAREN_LEFT,
        ")": TokenType.PAREN_RIGHT,
        "{": TokenType.BRACE_LEFT,
        "}": TokenType.BRACE_RIGHT,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        "?": TokenType.QUESTION,
        ":": TokenType.COLON,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
    }
    # char: (type if followed by '=', type otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }
    WHITESPACE = " \r\t"

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0    # first char of the lexeme being scanned
        self.current = 0  # char being considered
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source. The returned list always ends with an EOF token."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Scanner.SINGLE:
            self.add_token(Scanner.SINGLE[char])
        elif char in Scanner.DOUBLE:
            matched, single = Scanner.DOUBLE[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif char in Scanner.WHITESPACE:
            pass
        elif char == "\n":
            self.line += 1
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            self.error_handler.error(self.line, "", f"Unexpected character '{char}'.", lexeme=char)

    def string(self):
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error_handler.error(self.line, "", "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        # a trailing '.' is only part of the number if a digit follows it
        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while is_alpha(self.peek()) or is_digit(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def is_at_end(self):
        return self.current >= len(self.source)

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected):
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "" if self.is_at_end() else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return ""
        return self.source[self.current + 1]

    def add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return ("a" <= char <= "z") or ("A" <= char <= "Z") or char == "_"


def scan(source, error_handler):
    """Returns the token sequence for source. Lexical errors are reported through error_handler."""
    return Scanner(source, error_handler).scan_tokens()
