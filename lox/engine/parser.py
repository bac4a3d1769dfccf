"""Recursive-descent parser for Lox. Consumes the scanner's tokens and produces a tuple of top-level statements.

Syntactic grammar, lowest precedence first:

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <fun_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENT ( "<" IDENT )? "{" <function>* "}"
<fun_decl>    ::= "fun" <function>
<function>    ::= IDENT "(" <params>? ")" <block>
<var_decl>    ::= "var" IDENT ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>

<expression>  ::= <assignment>
<assignment>  ::= ( <call> "." )? IDENT "=" <assignment> | <logic_or>
<logic_or>    ::= <logic_and> ( "or" <logic_and> )*
<logic_and>   ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>        ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>      ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" | "." IDENT )*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENT | "(" <expression> ")"
                | "super" "." IDENT
```

Errors never escape the parser: each one is recorded in `errors` and the parser resynchronizes at the next statement
boundary (panic mode). `return`, `this` and `super` are also checked against their enclosing function/class here.
Input nested deeper than the Python recursion limit allows is reported as "Too much nesting." the same way.
"""

from enum import Enum, auto

from lox.engine import syntax
from lox.engine.tokens import TokenType
from lox.lang.error import ParseError


MAX_ARGS = 255

# tokens that start a new declaration/statement, used to resynchronize after an error
BOUNDARIES = {
    TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR, TokenType.IF, TokenType.WHILE, TokenType.PRINT,
    TokenType.RETURN,
}


class FunctionKind(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassKind(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Parser:
    """Parses a single input's tokens. Not reusable: create one Parser per token list."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.errors = []

        self._current = 0
        self._function_kind = FunctionKind.NONE
        self._class = ClassKind.NONE

    def parse(self):
        """Returns a tuple of statements. Syntax errors are collected in self.errors instead of being raised."""
        statements = []
        while not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return tuple(statements)

    # declarations

    def _declaration(self):
        try:
            if self._match(TokenType.CLASS):
                return self._class_declaration()
            if self._match(TokenType.FUN):
                return self._function(FunctionKind.FUNCTION)
            if self._match(TokenType.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None
        except RecursionError:
            self._error(self._peek(), "Too much nesting.")
            self._synchronize()
            return None

    def _class_declaration(self):
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._match(TokenType.LESS):
            self._consume(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = syntax.Variable(self._previous())
            if superclass.name.lexeme == name.lexeme:
                self._error(superclass.name, "A class can't inherit from itself.")

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")

        enclosing = self._class
        self._class = ClassKind.SUBCLASS if superclass is not None else ClassKind.CLASS
        try:
            methods = []
            while not self._check(TokenType.RIGHT_BRACE) and not self._at_end():
                kind = FunctionKind.INITIALIZER if self._peek().lexeme == "init" else FunctionKind.METHOD
                methods.append(self._function(kind))
        finally:
            self._class = enclosing

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return syntax.Class(name, superclass, tuple(methods))

    def _function(self, kind):
        noun = "function" if kind is FunctionKind.FUNCTION else "method"
        name = self._consume(TokenType.IDENTIFIER, f"Expect {noun} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {noun} name.")

        params = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self._error(self._peek(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {noun} body.")
        enclosing = self._function_kind
        self._function_kind = kind
        try:
            body = self._block()
        finally:
            self._function_kind = enclosing

        return syntax.Function(name, tuple(params), body)

    def _var_declaration(self):
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return syntax.Var(name, initializer)

    # statements

    def _statement(self):
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.PRINT):
            return self._print_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.LEFT_BRACE):
            return syntax.Block(self._block())
        return self._expression_statement()

    def _for_statement(self):
        """Desugars `for (init; cond; incr) body` into `{ init; while (cond) body incr }`."""
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()

        if condition is None:
            condition = syntax.Literal(True)
        loop = syntax.While(condition, body, increment, fresh_per_iteration=isinstance(initializer, syntax.Var))

        if initializer is None:
            return loop
        return syntax.Block((initializer, loop))

    def _if_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._statement()

        return syntax.If(condition, then_branch, else_branch)

    def _print_statement(self):
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return syntax.Print(value)

    def _return_statement(self):
        keyword = self._previous()
        if self._function_kind is FunctionKind.NONE:
            self._error(keyword, "Can't return from top-level code.")

        value = None
        if not self._check(TokenType.SEMICOLON):
            if self._function_kind is FunctionKind.INITIALIZER:
                self._error(keyword, "Can't return a value from an initializer.")
            value = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return syntax.Return(keyword, value)

    def _while_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return syntax.While(condition, self._statement())

    def _block(self):
        """Parses declarations up to the closing brace. The opening brace must already be consumed."""
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return tuple(statements)

    def _expression_statement(self):
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return syntax.Expression(expr)

    # expressions

    def _expression(self):
        return self._assignment()

    def _assignment(self):
        expr = self._or()

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._assignment()

            if isinstance(expr, syntax.Variable):
                return syntax.Assign(expr.name, value)
            if isinstance(expr, syntax.Get):
                return syntax.Set(expr.object, expr.name, value)

            self._error(equals, "Invalid assignment target.")  # no need to synchronize

        return expr

    def _or(self):
        return self._logical(self._and, TokenType.OR)

    def _and(self):
        return self._logical(self._equality, TokenType.AND)

    def _logical(self, operand, *types):
        expr = operand()
        while self._match(*types):
            operator = self._previous()
            expr = syntax.Logical(expr, operator, operand())
        return expr

    def _equality(self):
        return self._binary(self._comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def _comparison(self):
        return self._binary(self._term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS,
                            TokenType.LESS_EQUAL)

    def _term(self):
        return self._binary(self._factor, TokenType.MINUS, TokenType.PLUS)

    def _factor(self):
        return self._binary(self._unary, TokenType.SLASH, TokenType.STAR)

    def _binary(self, operand, *types):
        """Left-associative binary operator loop shared by every precedence level from equality to factor."""
        expr = operand()
        while self._match(*types):
            operator = self._previous()
            expr = syntax.Binary(expr, operator, operand())
        return expr

    def _unary(self):
        if self._match(TokenType.BANG, TokenType.MINUS):
            operator = self._previous()
            return syntax.Unary(operator, self._unary())
        return self._call()

    def _call(self):
        expr = self._primary()

        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = syntax.Get(expr, name)
            else:
                break

        return expr

    def _finish_call(self, callee):
        arguments = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self._error(self._peek(), f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return syntax.Call(callee, paren, tuple(arguments))

    def _primary(self):
        if self._match(TokenType.FALSE):
            return syntax.Literal(False)
        if self._match(TokenType.TRUE):
            return syntax.Literal(True)
        if self._match(TokenType.NIL):
            return syntax.Literal(None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return syntax.Literal(self._previous().literal)

        if self._match(TokenType.THIS):
            keyword = self._previous()
            if self._class is ClassKind.NONE:
                self._error(keyword, "Can't use 'this' outside of a class.")
            return syntax.This(keyword)

        if self._match(TokenType.SUPER):
            keyword = self._previous()
            if self._class is ClassKind.NONE:
                self._error(keyword, "Can't use 'super' outside of a class.")
            elif self._class is not ClassKind.SUBCLASS:
                self._error(keyword, "Can't use 'super' in a class with no superclass.")
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return syntax.Super(keyword, method)

        if self._match(TokenType.IDENTIFIER):
            return syntax.Variable(self._previous())

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return syntax.Grouping(expr)

        raise self._error(self._peek(), "Expect expression.")

    # helpers

    def _error(self, token, msg):
        """Records a ParseError at token and returns it, so callers that need to panic can raise it."""
        error = ParseError.at_token(token, msg)
        self.errors.append(error)
        return error

    def _synchronize(self):
        """Discards tokens until a likely statement boundary."""
        self._advance()
        while not self._at_end():
            if self._previous().type is TokenType.SEMICOLON:
                return
            if self._peek().type in BOUNDARIES:
                return
            self._advance()

    def _consume(self, token_type, msg):
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), msg)

    def _match(self, *types):
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _check(self, token_type):
        if self._at_end():
            return False
        return self._peek().type is token_type

    def _advance(self):
        if not self._at_end():
            self._current += 1
        return self._previous()

    def _at_end(self):
        return self._peek().type is TokenType.EOF

    def _peek(self):
        return self.tokens[self._current]

    def _previous(self):
        return self.tokens[self._current - 1]


def parse(tokens):
    """Returns (statements, errors) for tokens."""
    parser = Parser(tokens)
    return parser.parse(), parser.errors
