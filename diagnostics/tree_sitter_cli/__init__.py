"""
tree-sitter CLI diagnostic matcher.

Classifies the error output of ``tree-sitter generate``.
"""

from diagnostics.tree_sitter_cli.matcher import TreeSitterMatcher

__all__ = ['TreeSitterMatcher']
