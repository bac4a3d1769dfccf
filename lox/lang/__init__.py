"""Session, shell and error reporting around the Lox engine."""
