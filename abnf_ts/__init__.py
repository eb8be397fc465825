"""Translate ABNF grammars into tree-sitter grammars."""

__version__ = "0.1.0"
