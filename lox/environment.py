"""Scope frames. An Environment maps names to values and links to its enclosing frame. Frames are shared by
reference: a closure keeps its defining frame alive after the block that created it exits, and an assignment through
any holder is visible to every other holder.
"""

from lox.lang.error import LoxRuntimeError


class _Uninitialized:
    """Sentinel stored for declared-but-unassigned variables. Distinct from None, the language's nil."""

    def __repr__(self):
        return "<uninitialized>"


UNINITIALIZED = _Uninitialized()


class Environment:

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def declare(self, name):
        """Creates a slot for name that raises on read until it is assigned."""
        self.values[name] = UNINITIALIZED

    def define(self, name, value):
        self.values[name] = value

    def get(self, name):
        """Returns the value of the nearest declaration of name (a Token)."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return _initialized(environment.values[name.lexeme], name)
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undeclared variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Assigns to the nearest declaration of name (a Token)."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undeclared variable '{name.lexeme}'.")

    def ancestor(self, distance):
        environment = self
        for __ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Returns name (a Token) from the frame distance hops out. The resolver guarantees it is declared there."""
        return _initialized(self.ancestor(distance).values[name.lexeme], name)

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({', '.join(self.values)}{' -> ...' if self.enclosing else ''})"


def _initialized(value, name):
    if value is UNINITIALIZED:
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
    return value
