"""
Repetition expansion.

The target generator only offers zero-or-more, one-or-more and optional
primitives, so bounded ABNF repetitions are spelled out:

    2*4e  ->  seq(e, e, optional(e), optional(e))
    3*e   ->  seq(e, e, e, repeat(e))
    3e    ->  seq(e, e, e)
"""

import re
from typing import Callable, NamedTuple, Optional

from abnf_ts.models.expression import (
    OptionalExpr,
    RepeatExpr,
    RuleExpression,
    SequenceExpr,
    sequence_of,
)
from abnf_ts.models.syntax_node import SyntaxNode

from .errors import StructuralViolation, UnsupportedNodeError

REPEAT_OPERATOR = re.compile(r"^(\d*)(\*?)(\d*)$")

Translate = Callable[[SyntaxNode], Optional[RuleExpression]]


class RepeatBounds(NamedTuple):
    lower: int
    upper: Optional[int]


def parse_repeat_operator(text: str) -> RepeatBounds:
    """
    Parse a repeat operator such as ``*``, ``1*``, ``*3``, ``2*4`` or ``3``.

    Raises:
        ValueError: If the text is not a repeat operator
    """
    operator = "".join(text.split())
    match = REPEAT_OPERATOR.match(operator)
    if not operator or match is None:
        raise ValueError(f"not a repeat operator: {text!r}")

    lower_digits, star, upper_digits = match.groups()
    if not star:
        count = int(lower_digits)
        return RepeatBounds(count, count)

    lower = int(lower_digits) if lower_digits else 0
    upper = int(upper_digits) if upper_digits else None
    return RepeatBounds(lower, upper)


def expand_bounds(lower: int, upper: Optional[int], element: RuleExpression) -> RuleExpression:
    """
    Express "between ``lower`` and ``upper`` occurrences" with native primitives.

    Raises:
        ValueError: If the bounds are inverted or allow no occurrence at all
    """
    if lower < 0:
        raise ValueError(f"negative repeat lower bound: {lower}")

    if upper is None:
        if lower == 0:
            return RepeatExpr(element=element, min=0)
        if lower == 1:
            return RepeatExpr(element=element, min=1)
        return SequenceExpr(items=[element] * lower + [RepeatExpr(element=element, min=0)])

    if lower > upper:
        raise ValueError(f"repeat lower bound {lower} exceeds upper bound {upper}")

    items = [element] * lower + [OptionalExpr(element=element)] * (upper - lower)
    expanded = sequence_of(items)
    if expanded is None:
        raise ValueError("repetition allows no occurrences")
    return expanded


def expand_repetition(node: SyntaxNode, translate: Translate) -> Optional[RuleExpression]:
    """Translate a ``repetition`` node, expanding its repeat operator if present."""
    named = node.meaningful_children
    if len(named) == 1:
        return translate(named[0])
    if len(named) != 2:
        raise StructuralViolation("repetition must have an element and at most one repeat operator", node)

    operator, target = named
    element = translate(target)
    if element is None:
        return None

    text = "".join(child.text for child in operator.children) or operator.text
    try:
        lower, upper = parse_repeat_operator(text)
        return expand_bounds(lower, upper, element)
    except ValueError as e:
        raise UnsupportedNodeError(operator, str(e))


def expand_option(node: SyntaxNode, translate: Translate) -> Optional[RuleExpression]:
    """Translate an ``option`` node (``[ ... ]``) into an optional expression."""
    named = node.meaningful_children
    if len(named) != 1:
        raise StructuralViolation("option must have exactly one child", node)

    element = translate(named[0])
    if element is None:
        return None
    return OptionalExpr(element=element)
