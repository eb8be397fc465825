"""Data models for the ABNF to tree-sitter translator."""

from .diagnostic import Diagnostic, DiagnosticKind
from .error import UnsupportedConstruct
from .expression import (
    CharClassExpr,
    ChoiceExpr,
    LiteralExpr,
    OptionalExpr,
    ReferenceExpr,
    RepeatExpr,
    RuleExpression,
    SequenceExpr,
    choice_of,
    referenced_names,
    sequence_of,
)
from .grammar import GrammarDescriptor, GrammarRule
from .session import AppliedFix, ControllerState, GenerationResult, GenerationSession
from .syntax_node import SyntaxNode

__all__ = [
    # Syntax tree models
    "SyntaxNode",
    # Rule expression models
    "RuleExpression",
    "ReferenceExpr",
    "LiteralExpr",
    "CharClassExpr",
    "SequenceExpr",
    "ChoiceExpr",
    "RepeatExpr",
    "OptionalExpr",
    "sequence_of",
    "referenced_names",
    "choice_of",
    # Grammar models
    "GrammarRule",
    "GrammarDescriptor",
    # Diagnostic models
    "DiagnosticKind",
    "Diagnostic",
    # Session models
    "ControllerState",
    "GenerationSession",
    "AppliedFix",
    "GenerationResult",
    # Error models
    "UnsupportedConstruct",
]
