"""Evaluator helper modules for the condition runtime."""

__all__ = [
    "helpers",
    "expr",
]
