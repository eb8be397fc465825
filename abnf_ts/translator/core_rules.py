"""Core rules defined in RFC 5234, Appendix B."""

from typing import Dict

from abnf_ts.models.expression import (
    CharClassExpr,
    ChoiceExpr,
    LiteralExpr,
    ReferenceExpr,
    RuleExpression,
    SequenceExpr,
)

CORE_RULES_COMMENT = "Rules defined in RFC 5234, Appendix B."


def core_rule_bodies() -> Dict[str, RuleExpression]:
    """Return the core rules in their RFC order."""
    return {
        "ALPHA": ChoiceExpr(items=[
            CharClassExpr(low=0x41, high=0x5A),
            CharClassExpr(low=0x61, high=0x7A),
        ]),
        "BIT": ChoiceExpr(items=[LiteralExpr(value="0"), LiteralExpr(value="1")]),
        "DIGIT": CharClassExpr(low=0x30, high=0x39),
        "CR": LiteralExpr(value="\r"),
        "CRLF": SequenceExpr(items=[ReferenceExpr(name="CR"), ReferenceExpr(name="LF")]),
        "DQUOTE": LiteralExpr(value='"'),
        # RFC 5234 only defines upper-case HEXDIGs; lower-case is accepted too.
        "HEXDIG": ChoiceExpr(items=[
            CharClassExpr(low=0x30, high=0x39),
            CharClassExpr(low=0x41, high=0x46),
            CharClassExpr(low=0x61, high=0x66),
        ]),
        "HTAB": LiteralExpr(value="\t"),
        "LF": LiteralExpr(value="\n"),
        "SP": LiteralExpr(value=" "),
        "VCHAR": CharClassExpr(low=0x21, high=0x7E),
        "WSP": ChoiceExpr(items=[ReferenceExpr(name="SP"), ReferenceExpr(name="HTAB")]),
    }
