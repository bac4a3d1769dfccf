import io
import os
import tempfile
import unittest

from lox.lang.error import ErrorHandler, LoxError
from lox.lang.session import Session


class SessionTestBase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.handler = ErrorHandler(self.err, color=False)
        self.sess = Session(self.handler, cmd_line=True, out=self.out)

    def output(self):
        return self.out.getvalue().splitlines()

    def messages(self):
        return [error.msg for error in self.handler.diagnostics]


class ExecuteTestCase(SessionTestBase):

    def test_scenarios(self):
        cases = {
            "print 1 + 2;": ["3"],
            "var a = 1; { var a = 2; print a; } print a;": ["2", "1"],
            "fun makeCounter() { var i = 0; fun count() { i = i + 1; print i; } return count; } "
            "var c = makeCounter(); c(); c();": ["1", "2"],
            'class Greeter { greet() { print "hi " + this.name; } } var g = Greeter(); g.name = "Bob"; g.greet();':
                ["hi Bob"],
        }
        for case, expected in cases.items():
            self.out.seek(0)
            self.out.truncate()
            self.assertTrue(self.sess.execute(case), case)
            self.assertEqual(expected, self.output(), case)

    def test_runtime_error_reported_once(self):
        self.assertFalse(self.sess.execute('1 + "two";'))
        self.assertEqual([], self.output())
        self.assertEqual("[line 1] Error: Operands must be two numbers or two strings.\n", self.err.getvalue())
        self.assertEqual(ErrorHandler.SOFTWARE, self.handler.exit_code)

    def test_syntax_errors_skip_evaluation(self):
        self.assertFalse(self.sess.execute("print 1;\nprint ;\nvar 2;\n@"))
        self.assertEqual([], self.output())
        self.assertEqual(["Expect expression.", "Expect variable name.", "Unexpected character '@'."], self.messages())
        self.assertEqual([2, 3, 4], [error.line for error in self.handler.diagnostics])
        self.assertEqual(ErrorHandler.DATA_ERROR, self.handler.exit_code)

    def test_unterminated_string_reported(self):
        self.assertFalse(self.sess.execute('print "abc;'))
        self.assertIn("Unterminated string.", self.messages())

    def test_declarations_persist_between_inputs(self):
        self.sess.execute("var a = 1;")
        self.sess.execute("fun inc() { a = a + 1; }")
        self.sess.execute("inc(); inc();")
        self.sess.execute("print a;")
        self.assertEqual(["3"], self.output())
        self.assertIn("inc", self.sess.environment)

    def test_runtime_error_does_not_corrupt_globals(self):
        self.sess.execute("var a = 1;")
        self.assertFalse(self.sess.execute("a = 2; print a; missing; a = 3;"))
        self.assertTrue(self.sess.execute("print a;"))
        self.assertEqual(["2", "2"], self.output())
        self.assertEqual(0, self.handler.exit_code)  # flags are per input

    def test_echo(self):
        self.sess.execute("1 + 2;", echo=True)
        self.sess.execute("var x = 4;", echo=True)
        self.sess.execute("x;", echo=True)
        self.sess.execute("x; x;", echo=True)
        self.assertEqual(["3", "4"], self.output())

    def test_deeply_nested_input(self):
        depth = 300
        self.assertTrue(self.sess.execute("print " + "(" * depth + "1" + ")" * depth + ";"))
        self.assertEqual(["1"], self.output())

        depth = 20000
        self.assertFalse(self.sess.execute("print " + "(" * depth + "1" + ")" * depth + ";"))
        self.assertEqual(["Too much nesting."], self.messages())
        self.assertEqual(ErrorHandler.DATA_ERROR, self.handler.exit_code)


class ContinuationTestCase(unittest.TestCase):

    def test_needs_continuation(self):
        should_fail = ["print 1;", "}", "fun f() {}", "(1 + 2);", "// {", ""]
        for case in should_fail:
            self.assertFalse(Session.needs_continuation(case), case)

        should_pass = ["fun f() {", "class A {\n m() {", '"abc', "print (1 +", "if (a) {\n"]
        for case in should_pass:
            self.assertTrue(Session.needs_continuation(case), case)


class FileTestCase(SessionTestBase):

    def test_run_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "script.lox")
            with open(path, "w", encoding="utf-8") as file:
                file.write('var s = "héllo";\nprint s;\n')

            sess = Session(self.handler, path, out=self.out)
            self.assertTrue(sess.run_file())
        self.assertEqual(["héllo"], self.output())

    def test_missing_file(self):
        sess = Session(self.handler, os.path.join(tempfile.gettempdir(), "does", "not", "exist.lox"))
        with self.assertRaises(LoxError):
            sess.run_file()

    def test_missing_file_is_named(self):
        path = os.path.join(tempfile.gettempdir(), "does", "not", "exist.lox")
        with self.assertRaises(LoxError) as ctx:
            Session(self.handler, path).run_file()
        self.assertIn(path, ctx.exception.msg)

    def test_default_path_outside_command_line(self):
        sess = Session(self.handler, out=self.out)
        self.assertTrue(sess.execute("print 1;"))
        self.assertEqual(["1"], self.output())


if __name__ == '__main__':
    unittest.main()
