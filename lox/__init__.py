"""Lox interpreter.

Basic program flow:
    1. Scanner (engine/scanner.py): source text -> tokens
    2. Parser (engine/parser.py): tokens -> syntax tree, with panic-mode error recovery
    3. Evaluator (engine/evaluator.py): walks the tree against a chain of environments

lang/ wraps the engine for actual use: error reporting, sessions (one global scope across inputs) and the shell.
"""

__version__ = "0.1.0"
