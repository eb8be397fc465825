"""
Numeric and character value conversion.

Decodes ABNF terminal values into literal or character-class expressions:

- ``%x20-7E``   hex range      -> CharClassExpr(0x20, 0x7E)
- ``%x0D.0A``   dotted groups  -> LiteralExpr("\\r\\n")
- ``%x00E9``    single value   -> LiteralExpr("\\u00e9")
- ``"abc"``     quoted string  -> LiteralExpr("abc")

Only the hexadecimal base is supported.
"""

from typing import List, Tuple

from abnf_ts.models.expression import CharClassExpr, LiteralExpr, RuleExpression
from abnf_ts.models.syntax_node import SyntaxNode

from .errors import StructuralViolation, UnsupportedNodeError

HEX_DIGIT = "HEXDIG"
HEX_MARKERS = ("x", "X")
RANGE_SEPARATOR = "-"
GROUP_SEPARATOR = "."
# marker plus at most six hex digits
MAX_SINGLE_VALUE_TOKENS = 7
MAX_CODEPOINT = 0x10FFFF

Token = Tuple[str, str]


def convert_num_val(node: SyntaxNode) -> RuleExpression:
    """Convert a ``num_val`` node (``%`` followed by a base-specific value)."""
    if len(node.children) != 2 or node.children[0].kind != "%":
        raise StructuralViolation("numeric value must be '%' followed by a value", node)

    value = node.children[1]
    if value.kind == "hex_val":
        return convert_hex_val(value)
    raise UnsupportedNodeError(value, "unsupported numeric base")


def convert_hex_val(node: SyntaxNode) -> RuleExpression:
    """Convert a ``hex_val`` node into a char class or a literal."""
    tokens = hex_tokens(node)
    if not tokens:
        raise StructuralViolation("hex value has no tokens", node)

    kinds = [kind for kind, _ in tokens]

    if RANGE_SEPARATOR in kinds:
        separator = kinds.index(RANGE_SEPARATOR)
        low = _digits(tokens[:separator])
        high = _digits(tokens[separator + 1:])
        if not low or not high:
            raise UnsupportedNodeError(node, "incomplete hex range")
        try:
            return CharClassExpr(low=_codepoint(low, node), high=_codepoint(high, node))
        except ValueError:
            raise UnsupportedNodeError(node, "inverted hex range")

    if len(tokens) % 3 == 0 and _is_dotted(tokens):
        chars = []
        for index in range(0, len(tokens), 3):
            chars.append(chr(int(tokens[index + 1][1] + tokens[index + 2][1], 16)))
        return LiteralExpr(value="".join(chars))

    if len(tokens) <= MAX_SINGLE_VALUE_TOKENS and kinds[0] in HEX_MARKERS:
        digits = _digits(tokens[1:])
        if len(digits) == len(tokens) - 1 and digits:
            return LiteralExpr(value=chr(_codepoint(digits, node)))

    raise UnsupportedNodeError(node, "unsupported hex value")


def convert_quoted_string(node: SyntaxNode) -> LiteralExpr:
    """Strip the surrounding quotes; escaping happens at serialization."""
    text = node.text
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    return LiteralExpr(value=text)


def hex_tokens(node: SyntaxNode) -> List[Token]:
    """
    Flatten a ``hex_val`` node into (kind, text) tokens.

    Parsers that expose the value as a single leaf are handled by
    tokenizing its text one character at a time.
    """
    if not node.children:
        return [_classify_char(char) for char in node.text if not char.isspace()]

    tokens: List[Token] = []
    for child in node.children:
        if child.kind == HEX_DIGIT and len(child.text) > 1:
            tokens.extend((HEX_DIGIT, char) for char in child.text)
        else:
            tokens.append((child.kind, child.text))
    return tokens


def _classify_char(char: str) -> Token:
    if char in HEX_MARKERS or char in (RANGE_SEPARATOR, GROUP_SEPARATOR):
        return (char, char)
    return (HEX_DIGIT, char)


def _is_dotted(tokens: List[Token]) -> bool:
    for index in range(0, len(tokens), 3):
        marker = tokens[index][0]
        if index == 0 and marker not in HEX_MARKERS:
            return False
        if index > 0 and marker != GROUP_SEPARATOR:
            return False
        if tokens[index + 1][0] != HEX_DIGIT or tokens[index + 2][0] != HEX_DIGIT:
            return False
    return True


def _digits(tokens: List[Token]) -> str:
    return "".join(text for kind, text in tokens if kind == HEX_DIGIT)


def _codepoint(digits: str, node: SyntaxNode) -> int:
    try:
        value = int(digits.rjust(4, "0"), 16)
    except ValueError:
        raise UnsupportedNodeError(node, "invalid hex digits")
    if value > MAX_CODEPOINT:
        raise UnsupportedNodeError(node, "hex value outside the unicode range")
    return value
