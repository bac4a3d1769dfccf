"""Tree-walking evaluator for Lox. Statements are executed against an Environment; expressions evaluate to values (see
values.py for the value model).

Non-local `return` is not implemented with Python exceptions: executing a statement yields either None (normal
completion) or a Completion carrying the returned value, and every statement that contains other statements passes a
Completion straight back up until a function call consumes it.
"""

import sys

from lox.engine import syntax
from lox.engine.environment import Environment
from lox.engine.tokens import Token, TokenType
from lox.engine.values import NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, is_equal, is_truthy, stringify
from lox.lang.error import LoxRuntimeError


class Completion:
    """Result of executing a `return` statement: unwinds to the nearest call with value."""
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Completion({self.value!r})"


class Evaluator:
    """Executes statements against environments chained to a single global scope. One Evaluator per session, so
    globals survive between inputs.
    """
    MAX_CALL_DEPTH = 4000
    FRAMES_PER_CALL = 25  # Python frames one Lox call costs, with room for nested expressions
    RECURSION_LIMIT = MAX_CALL_DEPTH * FRAMES_PER_CALL

    def __init__(self, out=None):
        # raised up front so that parsing deeply nested input in the same session benefits too
        if sys.getrecursionlimit() < Evaluator.RECURSION_LIMIT:
            sys.setrecursionlimit(Evaluator.RECURSION_LIMIT)

        self.out = out  # None means sys.stdout at time of printing
        self.globals = Environment()
        for native in NATIVES:
            self.globals.define(native.name, native)

        self._depth = 0
        self._line = None  # line of the innermost call, for stack overflows

        self._statements = {
            syntax.Expression: self._expression_stmt,
            syntax.Print: self._print_stmt,
            syntax.Var: self._var_stmt,
            syntax.Block: self._block_stmt,
            syntax.If: self._if_stmt,
            syntax.While: self._while_stmt,
            syntax.Function: self._function_stmt,
            syntax.Return: self._return_stmt,
            syntax.Class: self._class_stmt,
        }
        self._expressions = {
            syntax.Literal: self._literal,
            syntax.Grouping: self._grouping,
            syntax.Unary: self._unary,
            syntax.Binary: self._binary,
            syntax.Logical: self._logical,
            syntax.Variable: self._variable,
            syntax.Assign: self._assign,
            syntax.Call: self._call,
            syntax.Get: self._get,
            syntax.Set: self._set,
            syntax.This: self._this,
            syntax.Super: self._super,
        }

    def interpret(self, statements, environment=None):
        """Executes statements in order against environment (the globals by default). Raises LoxRuntimeError on the
        first runtime error; bindings made before it are kept.
        """
        if environment is None:
            environment = self.globals

        self._depth = 0
        try:
            for stmt in statements:
                self.execute(stmt, environment)
        except RecursionError:
            raise LoxRuntimeError("Stack overflow.", self._line) from None

    # statements

    def execute(self, stmt, environment):
        """Executes one statement. Returns a Completion if a `return` was executed, None otherwise."""
        return self._statements[type(stmt)](stmt, environment)

    def execute_block(self, statements, environment):
        """Executes statements in environment, stopping early (and passing it on) at the first Completion."""
        for stmt in statements:
            completion = self.execute(stmt, environment)
            if completion is not None:
                return completion
        return None

    def _expression_stmt(self, stmt, environment):
        self.evaluate(stmt.expression, environment)

    def _print_stmt(self, stmt, environment):
        value = self.evaluate(stmt.expression, environment)
        print(stringify(value), file=self.out if self.out is not None else sys.stdout)

    def _var_stmt(self, stmt, environment):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer, environment)
        environment.define(stmt.name.lexeme, value)

    def _block_stmt(self, stmt, environment):
        return self.execute_block(stmt.statements, Environment(environment))

    def _if_stmt(self, stmt, environment):
        if is_truthy(self.evaluate(stmt.condition, environment)):
            return self.execute(stmt.then_branch, environment)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch, environment)
        return None

    def _while_stmt(self, stmt, environment):
        # a fresh copy per pass, taken before the increment, so closures keep the value they saw
        scope = environment.copy() if stmt.fresh_per_iteration else environment

        while is_truthy(self.evaluate(stmt.condition, scope)):
            completion = self.execute(stmt.body, scope)
            if completion is not None:
                return completion

            if stmt.fresh_per_iteration:
                scope = scope.copy()
            if stmt.increment is not None:
                self.evaluate(stmt.increment, scope)
        return None

    def _function_stmt(self, stmt, environment):
        # bound by name in the same scope it closes over, so it can call itself
        environment.define(stmt.name.lexeme, LoxFunction(stmt, environment))

    def _return_stmt(self, stmt, environment):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value, environment)
        return Completion(value)

    def _class_stmt(self, stmt, environment):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass, environment)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError.at_token(stmt.superclass.name, "Superclass must be a class.")

        environment.define(stmt.name.lexeme, None)

        closure = environment
        if superclass is not None:
            closure = Environment(environment)
            closure.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(method, closure, method.name.lexeme == "init")

        environment.assign(stmt.name, LoxClass(stmt.name.lexeme, superclass, methods))

    # expressions

    def evaluate(self, expr, environment):
        """Evaluates expr to a value."""
        return self._expressions[type(expr)](expr, environment)

    def _literal(self, expr, environment):
        return expr.value

    def _grouping(self, expr, environment):
        return self.evaluate(expr.expression, environment)

    def _unary(self, expr, environment):
        right = self.evaluate(expr.right, environment)

        if expr.operator.type is TokenType.BANG:
            return not is_truthy(right)

        # only MINUS is left
        Evaluator._check_number_operand(expr.operator, right)
        return -right

    def _binary(self, expr, environment):
        left = self.evaluate(expr.left, environment)
        right = self.evaluate(expr.right, environment)
        operator = expr.operator
        kind = operator.type

        if kind is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError.at_token(operator, "Operands must be two numbers or two strings.")

        Evaluator._check_number_operands(operator, left, right)

        if kind is TokenType.MINUS:
            return left - right
        if kind is TokenType.STAR:
            return left * right
        if kind is TokenType.SLASH:
            if right == 0:
                raise LoxRuntimeError.at_token(operator, "Division by zero.")
            return left / right
        if kind is TokenType.GREATER:
            return left > right
        if kind is TokenType.GREATER_EQUAL:
            return left >= right
        if kind is TokenType.LESS:
            return left < right
        if kind is TokenType.LESS_EQUAL:
            return left <= right

        raise LoxRuntimeError.at_token(operator, f"Unknown operator '{operator.lexeme}'.")

    def _logical(self, expr, environment):
        left = self.evaluate(expr.left, environment)

        if expr.operator.type is TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right, environment)

    def _variable(self, expr, environment):
        return environment.get(expr.name)

    def _assign(self, expr, environment):
        value = self.evaluate(expr.value, environment)
        environment.assign(expr.name, value)
        return value

    def _call(self, expr, environment):
        callee = self.evaluate(expr.callee, environment)
        arguments = [self.evaluate(argument, environment) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError.at_token(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            msg = f"Expected {callee.arity()} arguments but got {len(arguments)}."
            raise LoxRuntimeError.at_token(expr.paren, msg)

        if self._depth >= Evaluator.MAX_CALL_DEPTH:
            raise LoxRuntimeError.at_token(expr.paren, "Stack overflow.")

        self._depth += 1
        self._line = expr.paren.line
        try:
            return callee.call(self, arguments)
        finally:
            self._depth -= 1

    def _get(self, expr, environment):
        obj = self.evaluate(expr.object, environment)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)
        raise LoxRuntimeError.at_token(expr.name, "Only instances have properties.")

    def _set(self, expr, environment):
        obj = self.evaluate(expr.object, environment)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError.at_token(expr.name, "Only instances have fields.")

        value = self.evaluate(expr.value, environment)
        obj.set(expr.name, value)
        return value

    def _this(self, expr, environment):
        return environment.get(expr.keyword)

    def _super(self, expr, environment):
        superclass = environment.get(expr.keyword)
        instance = environment.get(Token(TokenType.THIS, "this", None, expr.keyword.line))

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError.at_token(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)

    # helpers

    @staticmethod
    def _check_number_operand(operator, operand):
        if not isinstance(operand, float):
            raise LoxRuntimeError.at_token(operator, "Operand must be a number.")

    @staticmethod
    def _check_number_operands(operator, left, right):
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError.at_token(operator, "Operands must be numbers.")
