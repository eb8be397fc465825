"""
Rule Translator component.

This module provides the RuleTranslator class that walks a concrete ABNF
syntax tree and builds a GrammarDescriptor of combinator expressions.
Serialization into the generator's input format is left to the
RuleSetAssembler.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from abnf_ts.models.error import UnsupportedConstruct
from abnf_ts.models.expression import (
    ReferenceExpr,
    RuleExpression,
    choice_of,
    sequence_of,
)
from abnf_ts.models.grammar import GrammarDescriptor, GrammarRule
from abnf_ts.models.session import GenerationSession
from abnf_ts.models.syntax_node import SyntaxNode
from abnf_ts.utils.logging import get_logger, log_unsupported_construct
from abnf_ts.utils.naming import normalize_rule_name

from .core_rules import core_rule_bodies
from .errors import StructuralViolation, UnsupportedNodeError
from .repetition import expand_option, expand_repetition
from .values import convert_hex_val, convert_num_val, convert_quoted_string

logger = get_logger(__name__)

DEFINES = "="
INCREMENTAL_ALTERNATIVE = "=/"
REFERENCE_KINDS = ("rulename", "core_rulename")
PASSTHROUGH_KINDS = ("group", "char_val", "case_insensitive_string", "case_sensitive_string")


class RuleTranslator:
    """
    Translates an ABNF syntax tree into a GrammarDescriptor.

    Unsupported constructs are logged, collected in ``unsupported`` and
    dropped from their parent expression, so translation of sibling nodes
    continues. Broken tree invariants raise StructuralViolation.
    """

    def __init__(
        self,
        start_rule: str,
        language_name: str,
        include_core_rules: bool = False,
        hidden_rules: Iterable[str] = (),
        inline_rules: Iterable[str] = (),
    ):
        self.start_rule = normalize_rule_name(start_rule)
        self.language_name = language_name
        self.include_core_rules = include_core_rules
        self.hidden_rules = {normalize_rule_name(name) for name in hidden_rules}
        self.inline_rules = {normalize_rule_name(name) for name in inline_rules}
        self.unsupported: List[UnsupportedConstruct] = []
        self._logger = logger.with_context(grammar=language_name)

        self._handlers: Dict[str, Callable[[SyntaxNode], Optional[RuleExpression]]] = {
            "elements": self._translate_elements,
            "alternation": self._translate_alternation,
            "concatenation": self._translate_concatenation,
            "repetition": lambda node: expand_repetition(node, self.translate_node),
            "option": lambda node: expand_option(node, self.translate_node),
            "element": self._translate_element,
            "num_val": convert_num_val,
            "hex_val": convert_hex_val,
            "quoted_string": convert_quoted_string,
        }
        for kind in PASSTHROUGH_KINDS:
            self._handlers[kind] = self._translate_passthrough

    @classmethod
    def from_session(cls, session: GenerationSession) -> "RuleTranslator":
        return cls(
            start_rule=session.start_rule,
            language_name=session.language_name,
            include_core_rules=session.include_core_rules,
            hidden_rules=session.hidden_rules,
            inline_rules=session.inline_rules,
        )

    def translate(self, root: SyntaxNode) -> GrammarDescriptor:
        """
        Translate the syntax tree rooted at ``root``.

        Args:
            root: ``source_file`` or ``rulelist`` node

        Returns:
            GrammarDescriptor with the translated rules in source order,
            followed by the core rules when enabled

        Raises:
            StructuralViolation: If the tree breaks a structural invariant
        """
        rules = self._translate_rulelist(self._find_rulelist(root))

        if self.include_core_rules:
            defined = {rule.name for rule in rules}
            for name, body in core_rule_bodies().items():
                if name in defined:
                    self._logger.debug(f"Grammar defines core rule {name}; keeping its definition")
                    continue
                rules.append(self._make_rule(name, body, core=True))

        self._logger.info(
            f"Translated {len(rules)} rules ({len(self.unsupported)} unsupported constructs)",
            extra={"phase": "translate"},
        )
        return GrammarDescriptor(
            name=self.language_name,
            start_rule=self.start_rule,
            include_core_rules=self.include_core_rules,
            rules=rules,
        )

    def translate_node(self, node: SyntaxNode) -> Optional[RuleExpression]:
        """Translate one expression node; None means it was dropped as unsupported."""
        handler = self._handlers.get(node.kind)
        try:
            if handler is None:
                raise UnsupportedNodeError(node)
            return handler(node)
        except UnsupportedNodeError as e:
            self._report(e)
            return None

    def _find_rulelist(self, root: SyntaxNode) -> SyntaxNode:
        if root.kind == "rulelist":
            return root
        if root.kind != "source_file":
            raise StructuralViolation("expected a source_file root", root)

        named = [child for child in root.named_children if child.kind == "rulelist"]
        if len(named) != 1:
            raise StructuralViolation("source_file must contain exactly one rulelist", root)
        return named[0]

    def _translate_rulelist(self, node: SyntaxNode) -> List[GrammarRule]:
        rules: List[GrammarRule] = []
        seen = set()
        pending_comments: List[str] = []

        for child in node.named_children:
            if child.kind == "comment":
                pending_comments.append(child.text.strip().lstrip(";").strip())
                continue
            if child.kind != "rule":
                if child.text.strip():
                    self._report(UnsupportedNodeError(child))
                continue

            rule = self._translate_rule(child, pending_comments)
            pending_comments = []
            if rule is None:
                continue
            if rule.name in seen:
                raise StructuralViolation(f"rule {rule.name} is defined more than once", child)
            seen.add(rule.name)
            rules.append(rule)

        return rules

    def _translate_rule(self, node: SyntaxNode, comments: List[str]) -> Optional[GrammarRule]:
        name_node = _child_of_kind(node, "rulename")
        defined_as = _child_of_kind(node, "defined_as")
        elements = _child_of_kind(node, "elements")
        if name_node is None or not name_node.text.strip():
            raise StructuralViolation("rule has no name", node)
        if elements is None:
            raise StructuralViolation("rule has no body", node)

        name = normalize_rule_name(name_node.text)
        operator = "".join(defined_as.text.split()) if defined_as is not None else DEFINES
        if operator == INCREMENTAL_ALTERNATIVE:
            self._report(UnsupportedNodeError(defined_as, f"unsupported operator in rule {name}"))
            return None
        if operator != DEFINES:
            raise StructuralViolation(f"unknown definition operator {operator!r}", defined_as)

        body = self.translate_node(elements)
        if body is None:
            self._logger.warning(f"Rule {name} has no translatable body; skipped", extra={"rule": name})
            return None
        return self._make_rule(name, body, comments=comments)

    def _make_rule(
        self,
        name: str,
        body: RuleExpression,
        comments: Iterable[str] = (),
        core: bool = False,
    ) -> GrammarRule:
        return GrammarRule(
            name=name,
            body=body,
            hidden=name in self.hidden_rules,
            inline=name in self.inline_rules,
            core=core,
            comments=list(comments),
        )

    def _translate_elements(self, node: SyntaxNode) -> Optional[RuleExpression]:
        return sequence_of(self._translate_all(node.meaningful_children))

    def _translate_alternation(self, node: SyntaxNode) -> Optional[RuleExpression]:
        return choice_of(self._translate_all(_require_children(node)))

    def _translate_concatenation(self, node: SyntaxNode) -> Optional[RuleExpression]:
        return sequence_of(self._translate_all(_require_children(node)))

    def _translate_element(self, node: SyntaxNode) -> Optional[RuleExpression]:
        child = _require_children(node)[0]
        if child.kind in REFERENCE_KINDS:
            return ReferenceExpr(name=normalize_rule_name(child.text))
        return self.translate_node(child)

    def _translate_passthrough(self, node: SyntaxNode) -> Optional[RuleExpression]:
        named = node.meaningful_children
        if not named and node.text.startswith('"'):
            return convert_quoted_string(node)
        if len(named) != 1:
            raise StructuralViolation(f"{node.kind} must wrap exactly one node", node)
        return self.translate_node(named[0])

    def _translate_all(self, nodes: List[SyntaxNode]) -> List[RuleExpression]:
        translated = []
        for child in nodes:
            expression = self.translate_node(child)
            if expression is not None:
                translated.append(expression)
        return translated

    def _report(self, error: UnsupportedNodeError) -> None:
        record = error.to_record()
        self.unsupported.append(record)
        log_unsupported_construct(self._logger, record)


def translate_session(
    root: SyntaxNode,
    session: GenerationSession,
) -> Tuple[GrammarDescriptor, List[UnsupportedConstruct]]:
    """Translate ``root`` with the rule policy and conflict groups of ``session``."""
    translator = RuleTranslator.from_session(session)
    descriptor = translator.translate(root)
    descriptor = descriptor.model_copy(update={
        "conflicts": [list(group) for group in session.conflicts],
    })
    return descriptor, translator.unsupported


def _child_of_kind(node: SyntaxNode, kind: str) -> Optional[SyntaxNode]:
    for child in node.children:
        if child.kind == kind:
            return child
    return None


def _require_children(node: SyntaxNode) -> List[SyntaxNode]:
    named = node.meaningful_children
    if not named:
        raise StructuralViolation(f"{node.kind} has no children", node)
    return named
