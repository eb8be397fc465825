"""Generator diagnostic data models."""

from enum import Enum
from typing import List

from pydantic import BaseModel


class DiagnosticKind(str, Enum):
    """Classified kind of a parser-generator failure."""

    EMPTY_RULE_MATCH = "empty_rule_match"
    MISSING_CONFLICT_DECLARATION = "missing_conflict_declaration"
    NEEDS_PRECEDENCE = "needs_precedence"
    NEEDS_ASSOCIATIVITY = "needs_associativity"
    UNRECOGNIZED = "unrecognized"


AUTO_FIXABLE_KINDS = frozenset({
    DiagnosticKind.EMPTY_RULE_MATCH,
    DiagnosticKind.MISSING_CONFLICT_DECLARATION,
})

ACTIONABLE_ONLY_KINDS = frozenset({
    DiagnosticKind.NEEDS_PRECEDENCE,
    DiagnosticKind.NEEDS_ASSOCIATIVITY,
})


class Diagnostic(BaseModel):
    """A classified generator failure."""

    kind: DiagnosticKind
    rules: List[str] = []
    raw: str = ""

    @property
    def auto_fixable(self) -> bool:
        return self.kind in AUTO_FIXABLE_KINDS

    @property
    def actionable_only(self) -> bool:
        return self.kind in ACTIONABLE_ONLY_KINDS

    def guidance(self) -> str:
        """Human readable next step for diagnostics that are not fixed automatically."""
        names = ", ".join(f"`{name}`" for name in self.rules)
        if self.kind == DiagnosticKind.NEEDS_PRECEDENCE:
            return f"Specify a higher precedence for {names} in the grammar configuration."
        if self.kind == DiagnosticKind.NEEDS_ASSOCIATIVITY:
            return f"Specify associativity for {names} in the grammar configuration."
        if self.kind == DiagnosticKind.EMPTY_RULE_MATCH:
            return f"Inline {names} so it no longer matches the empty string as a named rule."
        if self.kind == DiagnosticKind.MISSING_CONFLICT_DECLARATION:
            return f"Declare a conflict between {names}."
        return "Unrecognized generator failure; see the raw diagnostic output."
