"""
Shared fixtures for unit tests.

Syntax trees are built by hand in the shape the tree-sitter-abnf parser
produces, so translator tests never need the compiled grammar.
"""

from pathlib import Path
from typing import List, Optional

import pytest

from abnf_ts.models.session import GenerationSession
from abnf_ts.models.syntax_node import SyntaxNode


class TreeBuilder:
    """Builds SyntaxNode trees shaped like tree-sitter-abnf output."""

    def source_file(self, *entries: SyntaxNode) -> SyntaxNode:
        return SyntaxNode.branch("source_file", [self.rulelist(*entries)])

    def rulelist(self, *entries: SyntaxNode) -> SyntaxNode:
        return SyntaxNode.branch("rulelist", list(entries))

    def comment(self, text: str) -> SyntaxNode:
        return SyntaxNode.leaf("comment", f"; {text}\n")

    def rule(self, name: str, body: SyntaxNode, operator: str = "=") -> SyntaxNode:
        return SyntaxNode.branch("rule", [
            SyntaxNode.leaf("rulename", name),
            SyntaxNode.branch("defined_as", [SyntaxNode.token(operator)]),
            SyntaxNode.branch("elements", [body]),
        ])

    def alternation(self, *concatenations: SyntaxNode) -> SyntaxNode:
        return SyntaxNode.branch("alternation", list(concatenations))

    def concatenation(self, *repetitions: SyntaxNode) -> SyntaxNode:
        return SyntaxNode.branch("concatenation", list(repetitions))

    def repetition(self, element: SyntaxNode, operator: Optional[str] = None) -> SyntaxNode:
        children: List[SyntaxNode] = []
        if operator is not None:
            tokens = [SyntaxNode.token(char) if char == "*" else SyntaxNode.leaf("DIGIT", char)
                      for char in operator]
            children.append(SyntaxNode.branch("repeat", tokens))
        children.append(element)
        return SyntaxNode.branch("repetition", children)

    def ref(self, name: str) -> SyntaxNode:
        kind = "core_rulename" if name.isupper() else "rulename"
        return SyntaxNode.branch("element", [SyntaxNode.leaf(kind, name)])

    def string(self, value: str) -> SyntaxNode:
        quoted = SyntaxNode.leaf("quoted_string", f'"{value}"')
        insensitive = SyntaxNode.branch("case_insensitive_string", [quoted])
        return SyntaxNode.branch("element", [SyntaxNode.branch("char_val", [insensitive])])

    def hex(self, value: str) -> SyntaxNode:
        """Numeric value such as ``x41``, ``x0D.0A`` or ``x20-7E``."""
        return SyntaxNode.branch("element", [self.num_val("hex_val", value)])

    def num_val(self, kind: str, value: str) -> SyntaxNode:
        tokens = []
        for index, char in enumerate(value):
            if index == 0 or char in ("-", "."):
                tokens.append(SyntaxNode.token(char))
            else:
                tokens.append(SyntaxNode.leaf("HEXDIG" if kind == "hex_val" else "DIGIT", char))
        return SyntaxNode.branch("num_val", [
            SyntaxNode.token("%"),
            SyntaxNode.branch(kind, tokens),
        ])

    def group(self, body: SyntaxNode) -> SyntaxNode:
        return SyntaxNode.branch("element", [
            SyntaxNode.branch("group", [SyntaxNode.token("("), body, SyntaxNode.token(")")]),
        ])

    def option(self, body: SyntaxNode) -> SyntaxNode:
        return SyntaxNode.branch("element", [
            SyntaxNode.branch("option", [SyntaxNode.token("["), body, SyntaxNode.token("]")]),
        ])

    def seq(self, *elements: SyntaxNode) -> SyntaxNode:
        """Single-alternative body of plain repetitions."""
        return self.alternation(self.concatenation(*(self.repetition(e) for e in elements)))


@pytest.fixture
def abnf() -> TreeBuilder:
    """Syntax tree builder."""
    return TreeBuilder()


@pytest.fixture
def make_session(tmp_path: Path):
    """Factory for generation sessions rooted in a temporary directory."""
    def _make(**overrides) -> GenerationSession:
        values = {
            "source": tmp_path / "test.abnf",
            "location": tmp_path / "build",
            "start_rule": "start",
            "language_name": "test",
        }
        values.update(overrides)
        return GenerationSession(**values)
    return _make
