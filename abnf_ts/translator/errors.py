"""Exceptions raised while translating an ABNF syntax tree."""

from typing import Optional

from abnf_ts.models.error import UnsupportedConstruct
from abnf_ts.models.syntax_node import SyntaxNode


class TranslationError(Exception):
    """Base exception for translator errors."""
    pass


class StructuralViolation(TranslationError):
    """The syntax tree breaks an invariant the translator relies on."""

    def __init__(self, message: str, node: Optional[SyntaxNode] = None):
        if node is not None:
            message = f"{message} (line {node.start_line}: {node.kind} {node.text!r})"
        super().__init__(message)
        self.node = node


class UnsupportedNodeError(TranslationError):
    """A node has no translation; the translator records it and moves on."""

    def __init__(self, node: SyntaxNode, reason: str = "unsupported node type"):
        super().__init__(f"{reason}: {node.kind}\t{node.text}")
        self.node = node
        self.reason = reason

    def to_record(self) -> UnsupportedConstruct:
        return UnsupportedConstruct(
            node_kind=self.node.kind,
            text=self.node.text,
            line=self.node.start_line,
            reason=self.reason,
        )
