"""Static resolution pass, run once over a parsed program before it is interpreted.

For every variable reference (and every `this`) the resolver counts how many scopes lie between the reference and
the scope that declares the name, and records that binding distance in the interpreter. A name found in no scope is
global and left unrecorded: the interpreter looks it up in the outermost frame at runtime.

Scopes pushed here must correspond one-to-one with the frames the interpreter creates at runtime:
    - Block                  -> one frame per execution of the block
    - function/lambda body   -> the call frame holding the parameters (the body shares it)
    - class body             -> the frame holding `this`, created when a method is bound to an instance

Also reported (statically, without computing any values): redeclaration within one scope, reading a local in its
own initializer (a global too, when read directly by its top-level initializer), `return` outside of a function and
`this` outside of a class. Locals that are never read are reported as warnings
when their block or function body closes; parameters and `this` never warn.
"""

import enum

from lox.syntax import ast


class FunctionType(enum.Enum):
    NONE = enum.auto()
    FUNCTION = enum.auto()
    METHOD = enum.auto()


class ClassType(enum.Enum):
    NONE = enum.auto()
    CLASS = enum.auto()


class VariableState(enum.Enum):
    DECLARED = enum.auto()
    DEFINED = enum.auto()
    REFERENCED = enum.auto()


class Resolver:
    """Computes binding distances into interpreter.locals. A fresh Resolver should be used per program; the
    interpreter keeps the distances of every program resolved against it, since closures from earlier programs (e.g.
    previous REPL lines) may still run those nodes.
    """

    def __init__(self, interpreter, error_handler):
        self.interpreter = interpreter
        self.error_handler = error_handler

        self.scopes = []  # innermost last; each is a dict of name: [VariableState, declaring Token]
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        self.initializing = set()  # globals whose top-level initializer is being resolved

        self.had_error = False

    def resolve(self, statements):
        """Resolves statements. Returns whether a resolution error was reported."""
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.had_error

    def resolve_stmt(self, stmt):
        if isinstance(stmt, ast.Block):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope(warn_unused=True)

        elif isinstance(stmt, ast.Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                if not self.scopes:
                    self.initializing.add(stmt.name.lexeme)
                self.resolve_expr(stmt.initializer)
                self.initializing.discard(stmt.name.lexeme)
            self.define(stmt.name)

        elif isinstance(stmt, ast.Function):
            # defined before its body is resolved, so the function can call itself
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt.params, stmt.body, FunctionType.FUNCTION)

        elif isinstance(stmt, ast.Class):
            self.resolve_class(stmt)

        elif isinstance(stmt, ast.Expression):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, ast.Print):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, ast.If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)

        elif isinstance(stmt, ast.Return):
            if self.current_function is FunctionType.NONE:
                self.error(stmt.keyword, "Can't return from top-level code.")
            if stmt.value is not None:
                self.resolve_expr(stmt.value)

        else:
            raise TypeError(f"unknown statement type: {type(stmt).__name__}")

    def resolve_expr(self, expr):
        if isinstance(expr, ast.Variable):
            scope = self.scopes[-1] if self.scopes else {}
            if expr.name.lexeme in scope and scope[expr.name.lexeme][0] is VariableState.DECLARED:
                self.error(expr.name, "Can't read local variable in its own initializer.")
            elif not self.scopes and expr.name.lexeme in self.initializing:
                # reads from a lambda body inside the initializer resolve with scopes pushed
                self.error(expr.name, "Can't read global variable in its own initializer.")
            self.resolve_local(expr, expr.name, read=True)

        elif isinstance(expr, ast.Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, ast.This):
            if self.current_class is ClassType.NONE:
                self.error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(expr, expr.keyword, read=True)

        elif isinstance(expr, ast.Lambda):
            self.resolve_function(expr.params, expr.body, FunctionType.FUNCTION)

        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Unary):
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Ternary):
            self.resolve_expr(expr.condition)
            self.resolve_expr(expr.then_branch)
            self.resolve_expr(expr.else_branch)

        elif isinstance(expr, ast.Grouping):
            self.resolve_expr(expr.expression)

        elif isinstance(expr, ast.Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)

        elif isinstance(expr, ast.Get):
            self.resolve_expr(expr.object)

        elif isinstance(expr, ast.Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.object)

        elif isinstance(expr, ast.Literal):
            pass

        else:
            raise TypeError(f"unknown expression type: {type(expr).__name__}")

    def resolve_function(self, params, body, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in params:
            self.declare(param)
            self.scopes[-1][param.lexeme][0] = VariableState.REFERENCED  # parameters never warn
        self.resolve(body)
        self.end_scope(warn_unused=True)

        self.current_function = enclosing_function

    def resolve_class(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        self.begin_scope()
        self.scopes[-1]["this"] = [VariableState.REFERENCED, stmt.name]
        for method in stmt.methods:
            self.resolve_function(method.params, method.body, FunctionType.METHOD)
        self.end_scope()

        self.current_class = enclosing_class

    def resolve_local(self, expr, name, read=False):
        """Records the distance from the innermost scope to the scope declaring name. Unrecorded means global."""
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                if read:
                    scope[name.lexeme][0] = VariableState.REFERENCED
                self.interpreter.resolve(expr, distance)
                return

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self, warn_unused=False):
        scope = self.scopes.pop()
        if warn_unused:
            for name, (state, token) in scope.items():
                if state is not VariableState.REFERENCED:
                    self.error_handler.warn(token, f"Local variable '{name}' is never read.")

    def declare(self, name):
        if not self.scopes:
            return  # globals may be redeclared freely

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = [VariableState.DECLARED, name]

    def define(self, name):
        if not self.scopes:
            return
        state = self.scopes[-1][name.lexeme]
        if state[0] is VariableState.DECLARED:  # the initializer may already have read it
            state[0] = VariableState.DEFINED

    def error(self, token, message):
        self.had_error = True
        self.error_handler.error_at(token, message)


def resolve(interpreter, statements, error_handler):
    """Resolves statements against interpreter. Returns whether a resolution error was reported; statements must not
    be interpreted if so.
    """
    return Resolver(interpreter, error_handler).resolve(statements)
