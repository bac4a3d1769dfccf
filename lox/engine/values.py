"""Runtime values. Lox values map onto Python objects as follows:

```
nil      -> None
boolean  -> bool
number   -> float
string   -> str
callable -> LoxFunction | NativeFunction
class    -> LoxClass
instance -> LoxInstance
```

Nothing else may ever reach the evaluator, so every operation below handles this closed set explicitly.
"""

import math
import time
from abc import ABC, abstractmethod

from lox.engine.environment import Environment
from lox.lang.error import LoxRuntimeError


def is_truthy(value):
    """nil and false are falsy, everything else (including 0 and "") is truthy."""
    return value is not None and value is not False


def is_equal(left, right):
    """Values of different kinds are never equal. Callables, classes and instances compare by identity."""
    if left is None or right is None:
        return left is right
    if type(left) is not type(right):
        return False
    if isinstance(left, (bool, float, str)):
        return left == right
    return left is right


def stringify(value):
    """Text form used by `print`."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"

        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


class LoxCallable(ABC):
    """Anything that can appear on the left of a call: functions, natives and classes."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, evaluator, arguments):
        """Invokes this callable. Arity has already been checked by the evaluator."""


class NativeFunction(LoxCallable):
    """Function implemented in Python and exposed in the global scope."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, evaluator, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"

    def __repr__(self):
        return f"NativeFunction('{self.name}')"


class LoxFunction(LoxCallable):
    """User-defined function or method, closed over the scope it was declared in."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self):
        return self.declaration.name.lexeme

    def bind(self, instance):
        """Returns a copy of this method whose closure additionally binds `this` to instance."""
        scope = Environment(self.closure)
        scope.define("this", instance)
        return LoxFunction(self.declaration, scope, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, evaluator, arguments):
        scope = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            scope.define(param.lexeme, argument)

        completion = evaluator.execute_block(self.declaration.body, scope)

        # initializers always hand back the instance, even on a bare `return;`
        if self.is_initializer:
            return self.closure.values["this"]
        if completion is not None:
            return completion.value
        return None

    def __str__(self):
        return f"<fn {self.name}>"

    def __repr__(self):
        return f"LoxFunction('{self.name}')"


class LoxClass(LoxCallable):
    """A class: its name, an optional superclass and its methods in declaration order."""

    def __init__(self, name, superclass=None, methods=None):
        self.name = name
        self.superclass = superclass
        self.methods = {} if methods is None else methods

    def find_method(self, name):
        """Walks up the superclass chain and returns the first method called name, or None."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        initializer = self.find_method("init")
        return 0 if initializer is None else initializer.arity()

    def call(self, evaluator, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(evaluator, arguments)

        return instance

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"LoxClass('{self.name}')"


class LoxInstance:
    """An instance of a LoxClass with its own mutable fields."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. Methods are bound to this instance on every access."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError.at_token(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"

    def __repr__(self):
        return f"LoxInstance('{self.klass.name}')"


def clock():
    """Seconds since the epoch, as a Lox number."""
    return float(time.time())


NATIVES = [
    NativeFunction("clock", 0, clock),
]
