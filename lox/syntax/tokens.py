"""Token model shared by the scanner and the parser. A Token is created once while scanning and is read-only
afterwards; the parser keeps references to some of them inside AST nodes for error reporting.
"""

import enum
from dataclasses import dataclass
from typing import Any


class TokenType(enum.Enum):
    # single-character tokens
    PAREN_LEFT = "("
    PAREN_RIGHT = ")"
    BRACE_LEFT = "{"
    BRACE_RIGHT = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    QUESTION = "?"
    COLON = ":"
    SEMICOLON = ";"
    SLASH = "/"
    STAR = "*"

    # one or two character tokens
    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL = "="
    EQUAL_EQUAL = "=="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="

    # literals
    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"

    # keywords
    AND = "and"
    CLASS = "class"
    ELSE = "else"
    FALSE = "false"
    FOR = "for"
    FUN = "fun"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"

    EOF = "end of input"


KEYWORDS = {
    "and": TokenType.AND,
    "class": TokenType.CLASS,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    literal: Any
    line: int

    def __str__(self):
        return f"{self.type.name} {self.lexeme} {self.literal}"
