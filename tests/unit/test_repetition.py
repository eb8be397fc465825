"""
Unit tests for repetition expansion.
"""

import pytest

from abnf_ts.models.expression import (
    LiteralExpr,
    OptionalExpr,
    ReferenceExpr,
    RepeatExpr,
    SequenceExpr,
)
from abnf_ts.models.syntax_node import SyntaxNode
from abnf_ts.translator.errors import StructuralViolation, UnsupportedNodeError
from abnf_ts.translator.repetition import (
    RepeatBounds,
    expand_bounds,
    expand_option,
    expand_repetition,
    parse_repeat_operator,
)

E = ReferenceExpr(name="e")

# Unbounded repetitions are only explored up to this many occurrences.
COUNT_LIMIT = 8

BOUNDS_GRID = [
    (lower, upper)
    for lower in range(5)
    for upper in list(range(lower, 6)) + [None]
    if (lower, upper) != (0, 0)
]


def accepted_counts(expr):
    """Return how many occurrences of ``E`` the expression can match."""
    if expr == E:
        return {1}
    if isinstance(expr, OptionalExpr):
        return {0} | accepted_counts(expr.element)
    if isinstance(expr, SequenceExpr):
        totals = {0}
        for item in expr.items:
            counts = accepted_counts(item)
            totals = {a + b for a in totals for b in counts if a + b <= COUNT_LIMIT}
        return totals
    if isinstance(expr, RepeatExpr):
        single = accepted_counts(expr.element)
        reached = set(single)
        while True:
            grown = reached | {a + b for a in reached for b in single if a + b <= COUNT_LIMIT}
            if grown == reached:
                break
            reached = grown
        return reached | {0} if expr.min == 0 else reached
    raise AssertionError(f"unexpected expression: {expr!r}")


@pytest.mark.parametrize("text,expected", [
    ("*", RepeatBounds(0, None)),
    ("1*", RepeatBounds(1, None)),
    ("*3", RepeatBounds(0, 3)),
    ("2*4", RepeatBounds(2, 4)),
    ("3", RepeatBounds(3, 3)),
    (" 2 * 4 ", RepeatBounds(2, 4)),
])
def test_parse_repeat_operator(text, expected):
    """Test repeat operator parsing."""
    assert parse_repeat_operator(text) == expected


@pytest.mark.parametrize("text", ["", "a*", "1*2*3", "-1"])
def test_parse_repeat_operator_rejects_garbage(text):
    """Test that malformed operators raise ValueError."""
    with pytest.raises(ValueError):
        parse_repeat_operator(text)


class TestExpandBounds:
    """Test the bounded repetition algebra."""

    def test_zero_or_more(self):
        """Test that '*' maps onto repeat."""
        assert expand_bounds(0, None, E) == RepeatExpr(element=E, min=0)

    def test_one_or_more(self):
        """Test that '1*' maps onto repeat1."""
        assert expand_bounds(1, None, E) == RepeatExpr(element=E, min=1)

    def test_at_least_three(self):
        """Test that '3*' spells out the mandatory occurrences."""
        assert expand_bounds(3, None, E) == SequenceExpr(items=[E, E, E, RepeatExpr(element=E, min=0)])

    def test_between_two_and_four(self):
        """Test that '2*4' becomes two occurrences and two optionals."""
        assert expand_bounds(2, 4, E) == SequenceExpr(items=[
            E, E, OptionalExpr(element=E), OptionalExpr(element=E),
        ])

    def test_at_most_one(self):
        """Test that '*1' unwraps to a single optional."""
        assert expand_bounds(0, 1, E) == OptionalExpr(element=E)

    def test_exactly_three(self):
        """Test that an exact count becomes a sequence of copies."""
        assert expand_bounds(3, 3, E) == SequenceExpr(items=[E, E, E])

    def test_exactly_one(self):
        """Test that an exact count of one is the element itself."""
        assert expand_bounds(1, 1, E) == E

    def test_exactly_zero_is_rejected(self):
        """Test that a repetition allowing no occurrence is rejected."""
        with pytest.raises(ValueError):
            expand_bounds(0, 0, E)

    def test_inverted_bounds_are_rejected(self):
        """Test that lower bound above upper bound is rejected."""
        with pytest.raises(ValueError):
            expand_bounds(4, 2, E)

    @pytest.mark.parametrize("lower,upper", BOUNDS_GRID)
    def test_accepts_exactly_the_bounded_counts(self, lower, upper):
        """Test that each expansion accepts every count between the bounds and no other."""
        highest = COUNT_LIMIT if upper is None else upper
        assert accepted_counts(expand_bounds(lower, upper, E)) == set(range(lower, highest + 1))


def translate_literal(node):
    return LiteralExpr(value=node.text)


def test_expand_repetition_without_operator(abnf):
    """Test that a bare element passes through."""
    node = abnf.repetition(SyntaxNode.leaf("element", "x"))
    assert expand_repetition(node, translate_literal) == LiteralExpr(value="x")


def test_expand_repetition_with_operator(abnf):
    """Test that the operator tokens are joined and expanded."""
    node = abnf.repetition(SyntaxNode.leaf("element", "x"), operator="1*2")
    assert expand_repetition(node, translate_literal) == SequenceExpr(items=[
        LiteralExpr(value="x"), OptionalExpr(element=LiteralExpr(value="x")),
    ])


def test_expand_repetition_reports_zero_count(abnf):
    """Test that an exact count of zero is unsupported."""
    node = abnf.repetition(SyntaxNode.leaf("element", "x"), operator="0")
    with pytest.raises(UnsupportedNodeError) as exc_info:
        expand_repetition(node, translate_literal)
    assert exc_info.value.node.kind == "repeat"


def test_expand_repetition_drops_untranslatable_element(abnf):
    """Test that a dropped element drops the repetition."""
    node = abnf.repetition(SyntaxNode.leaf("element", "x"), operator="*")
    assert expand_repetition(node, lambda _: None) is None


def test_expand_repetition_rejects_extra_children():
    """Test that more than two children break the tree invariant."""
    node = SyntaxNode.branch("repetition", [
        SyntaxNode.leaf("repeat", "*"),
        SyntaxNode.leaf("element", "x"),
        SyntaxNode.leaf("element", "y"),
    ])
    with pytest.raises(StructuralViolation):
        expand_repetition(node, translate_literal)


def test_expand_option(abnf):
    """Test that an option wraps its child."""
    node = abnf.option(SyntaxNode.leaf("alternation", "x")).children[0]
    assert expand_option(node, translate_literal) == OptionalExpr(element=LiteralExpr(value="x"))


def test_expand_option_requires_one_child():
    """Test that an empty option breaks the tree invariant."""
    node = SyntaxNode.branch("option", [SyntaxNode.token("["), SyntaxNode.token("]")])
    with pytest.raises(StructuralViolation):
        expand_option(node, translate_literal)
