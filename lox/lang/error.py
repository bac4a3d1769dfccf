"""Error handling for the Lox interpreter. Scanning, parsing and evaluation only ever produce LoxErrors, and every
LoxError is handed to an ErrorHandler exactly once. If another type of error makes it all the way to ErrorHandler, it
is assumed to be an internal issue.
"""

import sys

from termcolor import colored

from lox.engine.tokens import TokenType


class LoxError(Exception):
    """A line-tagged Lox diagnostic. Subclasses only differ by the stage that produced them."""
    stage = "error"

    def __init__(self, msg, line=None, where="", internal=False):
        super().__init__(msg)

        self.msg = msg
        self.line = line
        self.where = where  # " at 'lexeme'" or " at end", only set for parse errors
        self.internal = internal

    @classmethod
    def at_token(cls, token, msg):
        """Builds an error located at token's line."""
        return cls(msg, token.line)

    def __str__(self):
        head = f"[line {self.line}] " if self.line is not None else ""
        return f"{head}Error{self.where}: {self.msg}"

    def __eq__(self, other):
        return (isinstance(other, type(self)) and other.stage == self.stage and other.line == self.line and
                other.msg == self.msg)

    def __hash__(self):
        return hash((self.stage, self.line, self.msg))


class LexError(LoxError):
    """Unterminated string literals and unexpected characters."""
    stage = "lex"


class ParseError(LoxError):
    """Syntax errors. The offending token is kept so the report can point at it."""
    stage = "parse"

    @classmethod
    def at_token(cls, token, msg):
        where = " at end" if token.type is TokenType.EOF else f" at '{token.lexeme}'"
        return cls(msg, token.line, where)


class LoxRuntimeError(LoxError):
    """Errors raised while evaluating a program. Aborts the current input only."""
    stage = "runtime"


class ErrorHandler:
    """Collects and prints diagnostics from every stage. Also a context manager that turns stray Python errors into
    reported diagnostics instead of tracebacks.
    """
    ERROR = "red"

    USAGE = 64
    DATA_ERROR = 65
    NO_INPUT = 66
    SOFTWARE = 70

    def __init__(self, stream=None, color=True):
        self.stream = stream  # None means sys.stderr at time of reporting
        self.color = color

        self.diagnostics = []
        self.had_error = False
        self.had_runtime_error = False

    @property
    def exit_code(self):
        """Process exit status matching the worst diagnostic seen since the last reset."""
        if self.had_error:
            return ErrorHandler.DATA_ERROR
        if self.had_runtime_error:
            return ErrorHandler.SOFTWARE
        return 0

    def render(self, error):
        """Returns error formatted as '[line N] Error: msg', colored if enabled."""
        head = f"[line {error.line}] " if error.line is not None else ""
        label = f"Error{error.where}"
        if error.internal:
            label = "[internal] " + label

        if self.color:
            head = colored(head, attrs=["bold"]) if head else head
            label = colored(label, ErrorHandler.ERROR, attrs=["bold"])

        return f"{head}{label}: {error.msg}"

    def throw(self, error):
        """Records and prints a single diagnostic."""
        self.diagnostics.append(error)

        if isinstance(error, LoxRuntimeError):
            self.had_runtime_error = True
        else:
            self.had_error = True

        stream = self.stream if self.stream is not None else sys.stderr
        print(self.render(error), file=stream)

    def throw_all(self, errors):
        """Prints a batch of diagnostics in source order. Used for lex/parse errors, which are collected first."""
        for error in errors:
            self.throw(error)

    def reset(self):
        """Clears per-input error flags. Should be called before each REPL input."""
        self.had_error = False
        self.had_runtime_error = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LoxError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LoxRuntimeError("Stack overflow."))
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LoxError(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
