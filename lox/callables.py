"""Runtime object model. A lox value is one of None (nil), bool, float, str, a LoxCallable or a LoxInstance.

Callables are native functions, user functions, lambdas and classes (a class is called to construct an instance).
Every user-defined callable holds a reference to the AST node that defined it plus its captured closure frame; the
closure is the frame active at the definition site, never the caller's.
"""

import time
from abc import ABC, abstractmethod

from lox.environment import Environment
from lox.lang.error import LoxRuntimeError


class LoxCallable(ABC):

    @abstractmethod
    def arity(self):
        """Number of arguments call expects. Call sites must pass exactly this many."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes this callable with already-evaluated arguments and returns its value."""


class NativeFunction(LoxCallable):
    """Host-provided function. fn receives the evaluated arguments positionally."""

    def __init__(self, name, arity, fn):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.fn(*arguments)

    def __str__(self):
        return "<native fn>"


def clock():
    """Monotonic seconds count, for timing scripts."""
    return time.monotonic()


NATIVES = [NativeFunction("clock", 0, clock)]


class LoxFunction(LoxCallable):
    """Function declared with `fun name(...) { ... }` or as a class method."""

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure

    def bind(self, instance):
        """Returns this method with `this` bound to instance, via a one-off frame wrapping the class closure."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        return invoke(interpreter, self.declaration.params, self.declaration.body, self.closure, arguments)

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxLambda(LoxCallable):
    """Anonymous function: `fun (params) { body }` used as an expression."""

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        return invoke(interpreter, self.declaration.params, self.declaration.body, self.closure, arguments)

    def __str__(self):
        return f"<fn lambda/{self.arity()}>"


def invoke(interpreter, params, body, closure, arguments):
    """Call mechanics shared by functions and lambdas: a fresh frame enclosed by closure, parameters bound
    positionally, body executed there. Returns the returned value, or None if the body finished without one.
    """
    environment = Environment(closure)
    for param, argument in zip(params, arguments):
        environment.define(param.lexeme, argument)

    signal = interpreter.execute_block(body, environment)
    return signal.value if signal is not None else None


class LoxClass(LoxCallable):
    """Class value. Calling it constructs a LoxInstance whose fields are the constructor arguments."""

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.name = declaration.name.lexeme
        self.closure = closure

        # methods close over the class's defining frame; `this` is bound per access
        self.methods = {method.name.lexeme: LoxFunction(method, closure) for method in declaration.methods}

    def find_method(self, name):
        return self.methods.get(name)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        for param, argument in zip(self.declaration.params, arguments):
            instance.fields[param.lexeme] = argument
        return instance

    def __str__(self):
        return f"class {self.name}"


class LoxInstance:

    def __init__(self, klass):
        self.klass = klass  # back-reference only
        self.fields = {}

    def get(self, name):
        """Looks up name (a Token): fields shadow methods; methods come back bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value
        return value

    def __str__(self):
        return f"instance of {self.klass.name}"
