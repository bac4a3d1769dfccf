"""Session control for Lox. A Session owns one Evaluator (and so one global environment) and runs source text through
scanner, parser and evaluator, either for a whole file or for one command-line input at a time.
"""

from lox.engine import syntax
from lox.engine.evaluator import Evaluator
from lox.engine.parser import parse
from lox.engine.scanner import scan
from lox.engine.tokens import TokenType
from lox.lang.error import LoxError, LoxRuntimeError


class Session:
    """Governs a Lox session. Declarations persist across calls to execute."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, cmd_line=False, out=None):
        self.error_handler = error_handler

        self.path = path          # script to read in run_file, named in its error message
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.evaluator = Evaluator(out)

    @property
    def environment(self):
        """The global scope shared by every input of this session."""
        return self.evaluator.globals

    @staticmethod
    def needs_continuation(source):
        """Whether source is an incomplete command-line input: an unclosed brace/paren or an unterminated string."""
        tokens, errors = scan(source)
        if any(error.msg == "Unterminated string." for error in errors):
            return True

        depth = 0
        for token in tokens:
            if token.type in (TokenType.LEFT_BRACE, TokenType.LEFT_PAREN):
                depth += 1
            elif token.type in (TokenType.RIGHT_BRACE, TokenType.RIGHT_PAREN):
                depth -= 1
        return depth > 0

    def execute(self, source, echo=False):
        """Scans, parses and evaluates source against this session's globals. Lex/parse errors are all reported and
        skip evaluation; a runtime error is reported and stops this input only. Returns whether source ran cleanly.

        If echo, a lone expression statement has its value printed (command-line convenience).
        """
        self.error_handler.reset()

        tokens, lex_errors = scan(source)
        statements, parse_errors = parse(tokens)

        errors = sorted(lex_errors + parse_errors, key=lambda error: error.line)
        if errors:
            self.error_handler.throw_all(errors)
            return False

        if echo and len(statements) == 1 and isinstance(statements[0], syntax.Expression):
            statements = (syntax.Print(statements[0].expression),)

        try:
            self.evaluator.interpret(statements)
        except LoxRuntimeError as error:
            self.error_handler.throw(error)
            return False

        return True

    def run_file(self):
        """Reads self.path as UTF-8 and executes it. Raises LoxError if the file can't be read."""
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                source = file.read()
        except OSError:
            raise LoxError(f"'{self.path}' could not be opened")

        return self.execute(source)
