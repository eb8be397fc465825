"""
Rule-Set Assembler component.

Serializes a GrammarDescriptor into a tree-sitter ``grammar.js`` file.
Hidden rules are emitted with a leading underscore at their definition and
at every reference. Inline rules are never emitted as named rules: each one
becomes a standalone ``const inline_<name> = $ => ...`` helper and every
reference calls it, which sidesteps the generator's refusal of named rules
that match the empty string.
"""

import json
from typing import Dict, List

from abnf_ts.models.expression import (
    CharClassExpr,
    ChoiceExpr,
    LiteralExpr,
    OptionalExpr,
    ReferenceExpr,
    RepeatExpr,
    RuleExpression,
    SequenceExpr,
)
from abnf_ts.models.grammar import GrammarDescriptor, GrammarRule
from abnf_ts.utils.logging import get_logger
from abnf_ts.utils.naming import hidden_symbol, inline_helper, normalize_rule_name

from .core_rules import CORE_RULES_COMMENT
from .errors import StructuralViolation
from .repetition import expand_bounds

logger = get_logger(__name__)

ENTRY_RULE = "source_file"
INDENT = "    "


class RuleSetAssembler:
    """Renders a GrammarDescriptor in the tree-sitter grammar DSL."""

    def __init__(self, descriptor: GrammarDescriptor):
        self.descriptor = descriptor
        self._rules: Dict[str, GrammarRule] = {
            normalize_rule_name(rule.name): rule for rule in descriptor.rules
        }

    def render(self) -> str:
        """
        Render the complete grammar file.

        Returns:
            ``grammar.js`` source text

        Raises:
            StructuralViolation: If the descriptor breaks a grammar invariant
        """
        self.validate()

        lines: List[str] = []
        for rule in self.descriptor.rules:
            if rule.inline:
                lines.append(f"const {inline_helper(rule.name)} = $ => {self.expression(rule.body)};")
        if lines:
            lines.append("")

        lines.append("module.exports = grammar({")
        lines.append(f"  name: {_quote(self.descriptor.name)},")
        lines.append("")

        conflicts = self._conflict_lines()
        if conflicts:
            lines.append("  conflicts: $ => [")
            lines.extend(conflicts)
            lines.append("  ],")
            lines.append("")

        lines.append("  rules: {")
        entries = [f"{INDENT}{ENTRY_RULE}: $ => {self.reference(self.descriptor.start_rule)}"]
        core_heading = False
        for rule in self.descriptor.rules:
            if rule.inline:
                continue
            comments = list(rule.comments)
            if rule.core and not core_heading:
                comments.insert(0, CORE_RULES_COMMENT)
                core_heading = True
            entries.append(self._rule_entry(rule, comments))
        lines.append(",\n\n".join(entries))
        lines.append("  }")
        lines.append("});")
        return "\n".join(lines) + "\n"

    def validate(self) -> None:
        """Check the descriptor invariants the generator relies on."""
        names = [normalize_rule_name(rule.name) for rule in self.descriptor.rules]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise StructuralViolation(f"rules defined more than once: {', '.join(duplicates)}")

        start = normalize_rule_name(self.descriptor.start_rule)
        if start not in self._rules:
            raise StructuralViolation(f"start rule {start} is not defined")

        for group in self.descriptor.conflicts:
            for name in group:
                rule = self._rules.get(normalize_rule_name(name))
                if rule is None:
                    raise StructuralViolation(f"conflict group references unknown rule {name}")
                if rule.inline:
                    raise StructuralViolation(f"conflict group references inlined rule {name}")

    def reference(self, name: str) -> str:
        """Render a reference to ``name`` applying the hidden and inline policies."""
        rule = self._rules.get(normalize_rule_name(name))
        if rule is not None and rule.inline:
            return f"{inline_helper(name)}($)"
        return f"$.{self.symbol(name)}"

    def symbol(self, name: str) -> str:
        rule = self._rules.get(normalize_rule_name(name))
        if rule is not None and rule.hidden:
            return hidden_symbol(name)
        return normalize_rule_name(name)

    def expression(self, expr: RuleExpression) -> str:
        """Render one rule expression as a tree-sitter DSL call."""
        if isinstance(expr, ReferenceExpr):
            return self.reference(expr.name)
        if isinstance(expr, LiteralExpr):
            return _quote(expr.value)
        if isinstance(expr, CharClassExpr):
            return f"/[{_regex_codepoint(expr.low)}-{_regex_codepoint(expr.high)}]/"
        if isinstance(expr, SequenceExpr):
            return f"seq({', '.join(self.expression(item) for item in expr.items)})"
        if isinstance(expr, ChoiceExpr):
            return f"choice({', '.join(self.expression(item) for item in expr.items)})"
        if isinstance(expr, OptionalExpr):
            return f"optional({self.expression(expr.element)})"
        if isinstance(expr, RepeatExpr):
            if not expr.is_native:
                return self.expression(expand_bounds(expr.min, expr.max, expr.element))
            function = "repeat1" if expr.min == 1 else "repeat"
            return f"{function}({self.expression(expr.element)})"
        raise TypeError(f"unknown rule expression: {expr!r}")

    def _rule_entry(self, rule: GrammarRule, comments: List[str]) -> str:
        lines = [f"{INDENT}// {comment}".rstrip() for comment in comments]
        lines.append(f"{INDENT}{self.symbol(rule.name)}: $ => {self.expression(rule.body)}")
        return "\n".join(lines)

    def _conflict_lines(self) -> List[str]:
        lines = []
        for group in self.descriptor.conflicts:
            members = ", ".join(f"$.{self.symbol(name)}" for name in group)
            lines.append(f"{INDENT}[{members}],")
        return lines


def render_grammar(descriptor: GrammarDescriptor) -> str:
    """Render ``descriptor`` as ``grammar.js`` source text."""
    text = RuleSetAssembler(descriptor).render()
    logger.debug(
        f"Rendered grammar {descriptor.name} ({len(text)} chars)",
        extra={"grammar": descriptor.name, "phase": "assemble"},
    )
    return text


def _quote(value: str) -> str:
    return json.dumps(value)


def _regex_codepoint(codepoint: int) -> str:
    if codepoint > 0xFFFF:
        return f"\\u{{{codepoint:X}}}"
    return f"\\u{codepoint:04X}"
