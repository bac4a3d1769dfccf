"""Lox language engine: scanning, parsing and tree-walking evaluation."""
