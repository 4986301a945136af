"""lox: a small dynamically-typed, lexically-scoped scripting language with a tree-walking interpreter."""

from lox.interpreter import Interpreter
from lox.lang.error import ErrorHandler, LoxRuntimeError
from lox.resolver import resolve
from lox.syntax.parser import parse, scan_and_parse
from lox.syntax.scanner import scan

__all__ = ["ErrorHandler", "Interpreter", "LoxRuntimeError", "parse", "resolve", "scan", "scan_and_parse"]
