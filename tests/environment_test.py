import unittest

from lox.environment import Environment
from lox.lang.error import LoxRuntimeError
from lox.syntax.tokens import Token, TokenType


def name(lexeme, line=1):
    return Token(TokenType.IDENTIFIER, lexeme, None, line)


class EnvironmentTestCase(unittest.TestCase):

    def test_get_walks_enclosing(self):
        outer = Environment()
        outer.define("a", 1.0)
        inner = Environment(Environment(outer))
        inner.define("b", 2.0)

        self.assertEqual(1.0, inner.get(name("a")))
        self.assertEqual(2.0, inner.get(name("b")))

    def test_shadowing(self):
        outer = Environment()
        outer.define("a", "outer")
        inner = Environment(outer)
        inner.define("a", "inner")

        self.assertEqual("inner", inner.get(name("a")))
        self.assertEqual("outer", outer.get(name("a")))

    def test_undeclared_vs_undefined(self):
        environment = Environment()
        environment.declare("x")
        environment.define("y", None)

        with self.assertRaises(LoxRuntimeError) as context:
            environment.get(name("x", line=7))
        self.assertEqual("Undefined variable 'x'.", context.exception.message)
        self.assertEqual(7, context.exception.line)

        with self.assertRaises(LoxRuntimeError) as context:
            environment.get(name("z"))
        self.assertEqual("Undeclared variable 'z'.", context.exception.message)

        self.assertIsNone(environment.get(name("y")))

    def test_assign(self):
        outer = Environment()
        outer.declare("a")
        inner = Environment(outer)

        inner.assign(name("a"), 3.0)
        self.assertEqual(3.0, outer.get(name("a")))
        self.assertNotIn("a", inner.values)

        self.assertRaises(LoxRuntimeError, inner.assign, name("missing"), 1.0)

    def test_distance_access(self):
        globals_ = Environment()
        globals_.define("a", "global")
        middle = Environment(globals_)
        middle.define("a", "middle")
        inner = Environment(middle)
        inner.define("a", "inner")

        cases = {0: "inner", 1: "middle", 2: "global"}
        for distance, expected in cases.items():
            self.assertEqual(expected, inner.get_at(distance, name("a")), distance)

        inner.assign_at(1, name("a"), "changed")
        self.assertEqual("changed", middle.get(name("a")))
        self.assertEqual("inner", inner.get(name("a")))

    def test_distance_access_uninitialized(self):
        environment = Environment()
        environment.declare("a")
        inner = Environment(environment)

        self.assertRaises(LoxRuntimeError, inner.get_at, 1, name("a"))
        inner.assign_at(1, name("a"), False)
        self.assertIs(False, inner.get_at(1, name("a")))

    def test_shared_frame(self):
        shared = Environment()
        shared.define("count", 0.0)
        first, second = Environment(shared), Environment(shared)

        first.assign(name("count"), 1.0)
        self.assertEqual(1.0, second.get(name("count")))


if __name__ == '__main__':
    unittest.main()
