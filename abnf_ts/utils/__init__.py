"""
Utility modules for the ABNF to tree-sitter translator.
"""

from abnf_ts.utils.logging import (
    get_logger,
    setup_logging,
    LogContext,
    log_state_transition,
    log_generator_call,
    log_unsupported_construct,
    log_error_with_context,
)
from abnf_ts.utils.naming import (
    normalize_rule_name,
    hidden_symbol,
    inline_helper,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_state_transition",
    "log_generator_call",
    "log_unsupported_construct",
    "log_error_with_context",
    "normalize_rule_name",
    "hidden_symbol",
    "inline_helper",
]
