"""Grammar generation services package."""

from abnf_ts.services.abnf_parser import (
    AbnfParser,
    AbnfParseError,
    load_language
)
from abnf_ts.services.generator import (
    GeneratorRunner,
    GeneratorOutcome,
    GeneratorError,
    GeneratorUnavailableError,
    write_descriptor
)
from abnf_ts.services.grammar_config import (
    GrammarConfig,
    GrammarConfigError,
    load_grammar_configs
)
from abnf_ts.services.feedback import (
    FeedbackController,
    apply_fix,
    fix_obstacle,
    run_grammar
)

__all__ = [
    'AbnfParser',
    'AbnfParseError',
    'load_language',
    'GeneratorRunner',
    'GeneratorOutcome',
    'GeneratorError',
    'GeneratorUnavailableError',
    'write_descriptor',
    'GrammarConfig',
    'GrammarConfigError',
    'load_grammar_configs',
    'FeedbackController',
    'apply_fix',
    'fix_obstacle',
    'run_grammar'
]
