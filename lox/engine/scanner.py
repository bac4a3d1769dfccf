"""Lexical analysis for Lox. Converts raw source text into a list of Tokens terminated by an EOF token.

Lexical grammar, loosely:

```
<number>     ::= <digit>+ ( "." <digit>+ )?     ; no exponents, no sign (unary minus is an operator)
<string>     ::= '"' <any char except '"'>* '"' ; may span lines, no escapes
<identifier> ::= <alpha> ( <alpha> | <digit> )* ; <alpha> includes "_"
<comment>    ::= "//" <any char except newline>*
```

Scanning never stops at the first error: bad characters and unterminated strings are recorded in `errors` and
scanning picks up again right after them.
"""

from lox.engine.tokens import KEYWORDS, Token, TokenType
from lox.lang.error import LexError


SINGLE = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}

# char: (type if followed by "=", type otherwise)
PAIRED = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

WHITESPACE = " \r\t"


def is_alpha(char):
    return char.isascii() and (char.isalpha() or char == "_")


def is_digit(char):
    return "0" <= char <= "9"


class Scanner:
    """Single-pass scanner over a source string."""

    def __init__(self, source):
        self.source = source
        self.tokens = []
        self.errors = []

        self._start = 0
        self._current = 0
        self._line = 1

    def scan_tokens(self):
        """Scans the whole source and returns the tokens. Lexical errors are collected in self.errors."""
        while not self._at_end():
            self._start = self._current
            self._scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self._line))
        return self.tokens

    def _scan_token(self):
        char = self._advance()

        if char in SINGLE:
            self._add_token(SINGLE[char])
        elif char in PAIRED:
            matched, single = PAIRED[char]
            self._add_token(matched if self._match("=") else single)
        elif char == "/":
            if self._match("/"):
                while self._peek() != "\n" and not self._at_end():
                    self._advance()
            else:
                self._add_token(TokenType.SLASH)
        elif char in WHITESPACE:
            pass
        elif char == "\n":
            self._line += 1
        elif char == '"':
            self._string()
        elif is_digit(char):
            self._number()
        elif is_alpha(char):
            self._identifier()
        else:
            self.errors.append(LexError(f"Unexpected character '{char}'.", self._line))

    def _string(self):
        start_line = self._line
        while self._peek() != '"' and not self._at_end():
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._at_end():
            self.errors.append(LexError("Unterminated string.", start_line))
            return

        self._advance()  # closing quote
        self._add_token(TokenType.STRING, self.source[self._start + 1:self._current - 1], line=start_line)

    def _number(self):
        while is_digit(self._peek()):
            self._advance()

        # a trailing "." without digits is left for the DOT token
        if self._peek() == "." and is_digit(self._peek_next()):
            self._advance()
            while is_digit(self._peek()):
                self._advance()

        self._add_token(TokenType.NUMBER, float(self.source[self._start:self._current]))

    def _identifier(self):
        while is_alpha(self._peek()) or is_digit(self._peek()):
            self._advance()

        text = self.source[self._start:self._current]
        self._add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def _add_token(self, token_type, literal=None, line=None):
        lexeme = self.source[self._start:self._current]
        self.tokens.append(Token(token_type, lexeme, literal, self._line if line is None else line))

    def _match(self, expected):
        if self._at_end() or self.source[self._current] != expected:
            return False
        self._current += 1
        return True

    def _advance(self):
        self._current += 1
        return self.source[self._current - 1]

    def _peek(self):
        return "\0" if self._at_end() else self.source[self._current]

    def _peek_next(self):
        if self._current + 1 >= len(self.source):
            return "\0"
        return self.source[self._current + 1]

    def _at_end(self):
        return self._current >= len(self.source)


def scan(source):
    """Returns (tokens, errors) for source."""
    scanner = Scanner(source)
    return scanner.scan_tokens(), scanner.errors
