import unittest

from lox.engine.environment import Environment
from lox.engine.tokens import Token, TokenType
from lox.lang.error import LoxRuntimeError


def name(lexeme, line=1):
    return Token(TokenType.IDENTIFIER, lexeme, None, line)


class EnvironmentTestCase(unittest.TestCase):

    def setUp(self):
        self.globals = Environment()
        self.globals.define("a", 1.0)
        self.child = Environment(self.globals)

    def test_lookup_walks_outward(self):
        self.assertEqual(1.0, self.child.get(name("a")))
        self.assertIn("a", self.child)
        self.assertNotIn("b", self.child)

    def test_define_shadows(self):
        self.child.define("a", 2.0)
        self.assertEqual(2.0, self.child.get(name("a")))
        self.assertEqual(1.0, self.globals.get(name("a")))

    def test_assign_mutates_nearest_binding(self):
        self.child.assign(name("a"), 3.0)
        self.assertEqual(3.0, self.globals.get(name("a")))
        self.assertNotIn("a", self.child.values)

    def test_never_looks_sideways(self):
        sibling = Environment(self.globals)
        sibling.define("b", 1.0)
        with self.assertRaises(LoxRuntimeError):
            self.child.get(name("b"))

    def test_undefined(self):
        with self.assertRaises(LoxRuntimeError) as ctx:
            self.child.get(name("missing", line=4))
        self.assertEqual("Undefined variable 'missing'.", ctx.exception.msg)
        self.assertEqual(4, ctx.exception.line)

        with self.assertRaises(LoxRuntimeError):
            self.child.assign(name("missing"), 1.0)
        self.assertNotIn("missing", self.globals)

    def test_copy_is_independent(self):
        self.child.define("i", 0.0)
        copy = self.child.copy()
        copy.assign(name("i"), 1.0)

        self.assertEqual(0.0, self.child.get(name("i")))
        self.assertIs(self.globals, copy.enclosing)

    def test_repr(self):
        self.child.define("x", None)
        self.assertEqual("[x] < [<globals>]", repr(self.child))


if __name__ == '__main__':
    unittest.main()
