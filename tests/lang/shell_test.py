import io
import re
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def run_shell(self, lines):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.handler = ErrorHandler(self.err, color=False)
        self.sess = Session(self.handler, cmd_line=True, out=self.out)

        shell = Shell(self.sess, stdin=io.StringIO(lines), stdout=io.StringIO())
        shell.use_rawinput = False
        shell.cmdloop(intro="")
        self.shell_out = shell.stdout.getvalue()
        return self.out.getvalue().splitlines()

    def test_globals_persist_between_lines(self):
        self.assertEqual(["2"], self.run_shell("var a = 1;\nprint a + 1;\nexit\n"))

    def test_multiline_input(self):
        self.assertEqual(["5", "nil"], self.run_shell("fun f() {\nprint 5;\n}\nf();\nquit\n"))

    def test_echo_expressions(self):
        self.assertEqual(["3", "hi"], self.run_shell('1 + 2;\nvar s = "hi";\ns;\n'))

    def test_errors_do_not_exit(self):
        self.assertEqual(["1"], self.run_shell("print x;\nprint ;\nprint 1;\n"))
        self.assertEqual(["Undefined variable 'x'.", "Expect expression."],
                         [error.msg for error in self.handler.diagnostics])

    def test_exit_with_argument_is_source(self):
        self.assertEqual([], self.run_shell("exit = 1;\n"))
        self.assertEqual(["Undefined variable 'exit'."], [error.msg for error in self.handler.diagnostics])

    def test_eof_and_help(self):
        self.run_shell("help\n")
        self.assertIn("Welcome to the Lox interpreter!", self.shell_out)
        self.assertTrue(self.shell_out.endswith("\n"))

    def test_help_examples_run(self):
        self.run_shell("help\n")
        examples = re.findall(r"'([^']+;)'", self.shell_out)
        self.assertEqual(["var a = 1;", "print a + 2;", "a + 2;"], examples)

        self.assertEqual(["3", "3"], self.run_shell("\n".join(examples) + "\n"))
        self.assertEqual([], self.handler.diagnostics)

    def test_unary_not_is_not_a_shell_escape(self):
        self.assertEqual(["false"], self.run_shell("!true;\n"))


if __name__ == '__main__':
    unittest.main()
