"""Lexical scopes. An Environment maps names to values and may enclose another Environment, forming a chain that ends
at the session's single global scope.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """A single scope. Lookups and assignments only ever walk outward through `enclosing`."""

    def __init__(self, enclosing=None, values=None):
        self.enclosing = enclosing
        self.values = {} if values is None else values

    def define(self, name, value):
        """Binds name in this scope, shadowing (never mutating) any outer binding. Redefinition is allowed."""
        self.values[name] = value

    def get(self, name):
        """Returns the value bound to token name in the nearest scope that has it."""
        scope = self._resolve(name.lexeme)
        if scope is None:
            raise LoxRuntimeError.at_token(name, f"Undefined variable '{name.lexeme}'.")
        return scope.values[name.lexeme]

    def assign(self, name, value):
        """Mutates the nearest existing binding of token name in place."""
        scope = self._resolve(name.lexeme)
        if scope is None:
            raise LoxRuntimeError.at_token(name, f"Undefined variable '{name.lexeme}'.")
        scope.values[name.lexeme] = value

    def copy(self):
        """Shallow copy of this scope sharing the same enclosing chain. Used to give loop iterations fresh bindings."""
        return Environment(self.enclosing, dict(self.values))

    def _resolve(self, name):
        scope = self
        while scope is not None:
            if name in scope.values:
                return scope
            scope = scope.enclosing
        return None

    def __contains__(self, name):
        return self._resolve(name) is not None

    def __repr__(self):
        content = "<globals>" if self.enclosing is None else ", ".join(self.values)
        return f"[{content}]" + (f" < {self.enclosing!r}" if self.enclosing is not None else "")
