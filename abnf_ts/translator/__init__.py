"""ABNF to tree-sitter grammar translation."""

from .assembler import RuleSetAssembler, render_grammar
from .errors import StructuralViolation, TranslationError, UnsupportedNodeError
from .repetition import RepeatBounds, expand_bounds, parse_repeat_operator
from .rule_translator import RuleTranslator, translate_session

__all__ = [
    "RuleSetAssembler",
    "render_grammar",
    "StructuralViolation",
    "TranslationError",
    "UnsupportedNodeError",
    "RepeatBounds",
    "expand_bounds",
    "parse_repeat_operator",
    "RuleTranslator",
    "translate_session",
]
