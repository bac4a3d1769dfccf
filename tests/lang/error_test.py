import io
import unittest
from unittest import mock

from lox.engine.tokens import Token, TokenType
from lox.lang.error import ErrorHandler, LexError, LoxError, LoxRuntimeError, ParseError


class LoxErrorTestCase(unittest.TestCase):

    def test_str(self):
        self.assertEqual("[line 3] Error: boom", str(LoxRuntimeError("boom", 3)))
        self.assertEqual("Error: no line", str(LoxError("no line")))

    def test_parse_error_location(self):
        identifier = Token(TokenType.IDENTIFIER, "x", None, 2)
        eof = Token(TokenType.EOF, "", None, 5)

        self.assertEqual("[line 2] Error at 'x': msg", str(ParseError.at_token(identifier, "msg")))
        self.assertEqual("[line 5] Error at end: msg", str(ParseError.at_token(eof, "msg")))
        self.assertEqual("[line 2] Error: msg", str(LoxRuntimeError.at_token(identifier, "msg")))

    def test_stages(self):
        self.assertEqual(["lex", "parse", "runtime"],
                         [cls.stage for cls in (LexError, ParseError, LoxRuntimeError)])
        self.assertNotEqual(LexError("m", 1), ParseError("m", 1))


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.handler = ErrorHandler(self.stream, color=False)

    def test_throw_prints_and_records(self):
        self.handler.throw(LexError("Unexpected character '@'.", 1))
        self.handler.throw(LoxRuntimeError("Undefined variable 'x'.", 2))

        self.assertEqual("[line 1] Error: Unexpected character '@'.\n[line 2] Error: Undefined variable 'x'.\n",
                         self.stream.getvalue())
        self.assertEqual(2, len(self.handler.diagnostics))

    def test_exit_codes(self):
        self.assertEqual(0, self.handler.exit_code)

        self.handler.throw(ParseError("Expect expression.", 1))
        self.assertEqual(ErrorHandler.DATA_ERROR, self.handler.exit_code)

        self.handler.reset()
        self.assertEqual(0, self.handler.exit_code)

        self.handler.throw(LoxRuntimeError("boom", 1))
        self.assertEqual(ErrorHandler.SOFTWARE, self.handler.exit_code)
        self.assertEqual(2, len(self.handler.diagnostics))  # reset keeps history

    def test_colored_output(self):
        handler = ErrorHandler(self.stream, color=True)
        with mock.patch("lox.lang.error.colored", side_effect=lambda text, *args, **kwargs: f"<{text}>") as colored:
            handler.throw(LoxRuntimeError("boom", 7))

        self.assertEqual("<[line 7] ><Error>: boom\n", self.stream.getvalue())
        self.assertEqual(2, colored.call_count)

    def test_context_manager_reports_lox_errors(self):
        with self.handler:
            raise LoxRuntimeError("boom", 1)
        self.assertTrue(self.handler.had_runtime_error)

        with self.handler:
            raise RecursionError()
        self.assertEqual("Stack overflow.", self.handler.diagnostics[-1].msg)

        with self.handler:
            raise KeyboardInterrupt()
        self.assertEqual("keyboard interrupt", self.handler.diagnostics[-1].msg)

    def test_context_manager_propagates_internal_errors(self):
        with self.assertRaises(KeyError):
            with self.handler:
                raise KeyError("oops")

        self.assertTrue(self.handler.diagnostics[-1].internal)
        self.assertIn("[internal] Error: unknown error: 'KeyError", self.stream.getvalue())

        with self.assertRaises(SystemExit):
            with self.handler:
                raise SystemExit(3)


if __name__ == '__main__':
    unittest.main()
