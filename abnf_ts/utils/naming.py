"""Rule name normalization shared by the translator and the session model."""

HIDDEN_PREFIX = "_"
INLINE_PREFIX = "inline_"


def normalize_rule_name(name: str) -> str:
    """Map an ABNF rule name onto a generator-safe identifier (hyphens become underscores)."""
    return name.strip().replace("-", "_")


def hidden_symbol(name: str) -> str:
    return HIDDEN_PREFIX + normalize_rule_name(name)


def inline_helper(name: str) -> str:
    return INLINE_PREFIX + normalize_rule_name(name)
