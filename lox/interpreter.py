"""Tree-walking interpreter for lox.

Basic program flow (see lox/lang/session.py):
    1. Scanner: source text -> tokens (lox/syntax/scanner.py)
    2. Parser: tokens -> statements (lox/syntax/parser.py). Stops here on any syntax error.
    3. Resolver: statements -> binding distances stored in Interpreter.locals (lox/resolver.py). Stops here on any
       resolution error.
    4. Interpreter: executes statements against the environment chain.

Statements execute to a control signal rather than unwinding with an exception: execute returns None when
execution should carry on, or a ReturnSignal carrying the returned value, which blocks and loops pass straight up
to the enclosing call. Runtime errors do unwind, as LoxRuntimeError, up to interpret.
"""

import math
import sys
from dataclasses import dataclass
from typing import Any

from lox.callables import NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, LoxLambda
from lox.environment import Environment
from lox.lang.error import LoxRuntimeError
from lox.syntax import ast
from lox.syntax.tokens import TokenType


@dataclass(frozen=True)
class ReturnSignal:
    value: Any


class Interpreter:
    """Owns the global frame and the binding table. One interpreter can run many independently resolved programs
    (e.g. successive REPL lines); globals persist between them.
    """

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out  # defaults to sys.stdout at write time

        self.globals = Environment()
        for native in NATIVES:
            self.globals.define(native.name, native)

        self.environment = self.globals
        self.locals = {}  # expression node: binding distance

    def resolve(self, expr, distance):
        """Called by the resolver for every local variable reference."""
        self.locals[expr] = distance

    def interpret(self, statements):
        """Executes statements, stopping at (and reporting) the first runtime error."""
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)

    # statements

    def execute(self, stmt):
        """Executes stmt. Returns a ReturnSignal if a `return` was executed, else None."""
        if isinstance(stmt, ast.Expression):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, ast.Print):
            value = self.evaluate(stmt.expression)
            print(stringify(value), file=self.out if self.out is not None else sys.stdout)

        elif isinstance(stmt, ast.Var):
            if stmt.initializer is not None:
                self.environment.define(stmt.name.lexeme, self.evaluate(stmt.initializer))
            else:
                self.environment.declare(stmt.name.lexeme)

        elif isinstance(stmt, ast.Block):
            return self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, ast.If):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                return self.execute(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            while is_truthy(self.evaluate(stmt.condition)):
                signal = self.execute(stmt.body)
                if signal is not None:
                    return signal

        elif isinstance(stmt, ast.Function):
            self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

        elif isinstance(stmt, ast.Return):
            value = None if stmt.value is None else self.evaluate(stmt.value)
            return ReturnSignal(value)

        elif isinstance(stmt, ast.Class):
            self.environment.define(stmt.name.lexeme, LoxClass(stmt, self.environment))

        else:
            raise TypeError(f"unknown statement type: {type(stmt).__name__}")

        return None

    def execute_block(self, statements, environment):
        """Executes statements in environment, stopping early on a return signal, which is passed back."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
        finally:
            self.environment = previous
        return None

    # expressions

    def evaluate(self, expr):
        if isinstance(expr, ast.Literal):
            return expr.value

        elif isinstance(expr, ast.Grouping):
            return self.evaluate(expr.expression)

        elif isinstance(expr, ast.Variable):
            return self.look_up(expr.name, expr)

        elif isinstance(expr, ast.This):
            return self.look_up(expr.keyword, expr)

        elif isinstance(expr, ast.Assign):
            value = self.evaluate(expr.value)
            if expr in self.locals:
                self.environment.assign_at(self.locals[expr], expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value

        elif isinstance(expr, ast.Unary):
            return self.unary(expr)

        elif isinstance(expr, ast.Binary):
            return self.binary(expr)

        elif isinstance(expr, ast.Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type is TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        elif isinstance(expr, ast.Ternary):
            if is_truthy(self.evaluate(expr.condition)):
                return self.evaluate(expr.then_branch)
            return self.evaluate(expr.else_branch)

        elif isinstance(expr, ast.Call):
            return self.call(expr)

        elif isinstance(expr, ast.Get):
            target = self.evaluate(expr.object)
            if isinstance(target, LoxInstance):
                return target.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.")

        elif isinstance(expr, ast.Set):
            target = self.evaluate(expr.object)
            if not isinstance(target, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")
            return target.set(expr.name, self.evaluate(expr.value))

        elif isinstance(expr, ast.Lambda):
            return LoxLambda(expr, self.environment)

        raise TypeError(f"unknown expression type: {type(expr).__name__}")

    def look_up(self, name, expr):
        if expr in self.locals:
            return self.environment.get_at(self.locals[expr], name)
        return self.globals.get(name)

    def unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.MINUS:
            check_numbers(expr.operator, right)
            return -right
        elif expr.operator.type is TokenType.BANG:
            return not is_truthy(right)

        raise TypeError(f"unknown unary operator: {expr.operator.lexeme}")

    def binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        if operator.type is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        elif operator.type is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        elif operator.type is TokenType.PLUS:
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            if is_number(left) and is_number(right):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        check_numbers(operator, left, right)

        if operator.type is TokenType.MINUS:
            return left - right
        elif operator.type is TokenType.STAR:
            return left * right
        elif operator.type is TokenType.SLASH:
            return divide(left, right)
        elif operator.type is TokenType.GREATER:
            return left > right
        elif operator.type is TokenType.GREATER_EQUAL:
            return left >= right
        elif operator.type is TokenType.LESS:
            return left < right
        elif operator.type is TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"unknown binary operator: {operator.lexeme}")

    def call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None


def is_number(value):
    return isinstance(value, float)


def check_numbers(operator, *operands):
    for operand in operands:
        if not is_number(operand):
            message = "Operand must be a number." if len(operands) == 1 else "Operands must be numbers."
            raise LoxRuntimeError(operator, message)


def divide(left, right):
    """IEEE-754 division: Python raises on a zero divisor where lox yields an infinity or NaN."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def is_truthy(value):
    """nil and false are falsey; everything else, 0 and "" included, is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """nil equals only nil. Values of different kinds are never equal (true != 1)."""
    if left is None or right is None:
        return left is right
    if type(left) is not type(right):
        return False
    return left == right


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)
