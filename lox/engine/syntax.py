"""Abstract syntax tree for Lox. Nodes are immutable and never reference their parents, so the evaluator can walk them
top-down. Child sequences are stored as tuples.

```
<expr> ::= Literal | Grouping | Unary | Binary | Logical | Variable | Assign | Call | Get | Set | This | Super
<stmt> ::= Expression | Print | Var | Block | If | While | Function | Return | Class
```
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from lox.engine.tokens import Token


class Expr:
    """Superclass of every expression node."""


class Stmt:
    """Superclass of every statement node."""


@dataclass(frozen=True)
class Literal(Expr):
    value: object


@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    """Short-circuiting `and`/`or`."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: Tuple[Expr, ...]


@dataclass(frozen=True)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(frozen=True)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(frozen=True)
class This(Expr):
    keyword: Token


@dataclass(frozen=True)
class Super(Expr):
    keyword: Token
    method: Token


@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr] = None


@dataclass(frozen=True)
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


@dataclass(frozen=True)
class While(Stmt):
    """Also the target of `for` desugaring. increment runs after each pass of body; fresh_per_iteration gives every
    pass its own copy of the enclosing loop scope, so closures created in body see that pass's loop variable.
    """
    condition: Expr
    body: Stmt
    increment: Optional[Expr] = None
    fresh_per_iteration: bool = False


@dataclass(frozen=True)
class Function(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]


@dataclass(frozen=True)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr] = None


@dataclass(frozen=True)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: Tuple[Function, ...]
