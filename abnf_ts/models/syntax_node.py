"""Concrete syntax tree node models."""

from typing import List, Optional

from pydantic import BaseModel

# Named nodes that carry no grammar meaning.
TRIVIA_KINDS = frozenset({"comment", "c_wsp", "c_nl"})


class SyntaxNode(BaseModel):
    """Concrete syntax tree node produced by the ABNF parser.

    Punctuation tokens are kept as unnamed children because the repeat
    operator and hex values are only recoverable from their token runs.
    """

    kind: str
    named: bool = True
    text: str = ""
    start_line: int = 1
    start_column: int = 0
    children: List['SyntaxNode'] = []

    @property
    def named_children(self) -> List['SyntaxNode']:
        return [child for child in self.children if child.named]

    @property
    def meaningful_children(self) -> List['SyntaxNode']:
        """Named children without comments and whitespace."""
        return [child for child in self.children if child.named and child.kind not in TRIVIA_KINDS]

    @classmethod
    def token(cls, kind: str, text: Optional[str] = None) -> 'SyntaxNode':
        """Build an unnamed punctuation token such as ``*`` or ``-``."""
        return cls(kind=kind, named=False, text=kind if text is None else text)

    @classmethod
    def leaf(cls, kind: str, text: str) -> 'SyntaxNode':
        return cls(kind=kind, text=text)

    @classmethod
    def branch(cls, kind: str, children: List['SyntaxNode']) -> 'SyntaxNode':
        """Build a named node whose text is the concatenation of its children."""
        text = "".join(child.text for child in children)
        return cls(kind=kind, text=text, children=children)


# Enable forward references for recursive model
SyntaxNode.model_rebuild()
