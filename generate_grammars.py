#!/usr/bin/env python3
"""
Generate tree-sitter parsers from ABNF grammars.
This script translates every grammar listed in the grammars file and runs
`tree-sitter generate` on it, repairing known generator failures automatically.
"""

import sys
from typing import List

from abnf_ts.config import settings
from abnf_ts.models.session import GenerationResult
from abnf_ts.services import (
    AbnfParser,
    AbnfParseError,
    FeedbackController,
    GeneratorError,
    GrammarConfigError,
    load_grammar_configs,
    run_grammar,
)
from abnf_ts.translator import TranslationError
from abnf_ts.utils.logging import get_logger, log_error_with_context, setup_logging

logger = get_logger(__name__)


def print_summary(results: List[GenerationResult], failed: List[str]) -> None:
    """Print one line per grammar plus guidance for those that gave up."""
    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    for result in results:
        status = "ok" if result.succeeded else "gave up"
        print(f"  {result.language_name}: {status} after {result.attempts} attempt(s)")
        for fix in result.fixes:
            print(f"    - {fix.kind.value}: {', '.join(fix.rules)}")
        if result.unsupported:
            print(f"    - {len(result.unsupported)} unsupported construct(s) skipped")
        if not result.succeeded and result.message:
            print(f"    {result.message}")
    for name in failed:
        print(f"  {name}: aborted")
    print()


def main():
    """Translate and generate all configured grammars."""
    setup_logging(settings.log_level)

    print("=" * 60)
    print("ABNF to tree-sitter Grammar Generator")
    print("=" * 60)

    try:
        configs = load_grammar_configs(settings.grammars_file)
    except GrammarConfigError as e:
        print(f"Failed to load grammar configuration: {e}")
        sys.exit(1)

    try:
        parser = AbnfParser()
    except AbnfParseError as e:
        print(f"Failed to load the ABNF parser: {e}")
        sys.exit(1)

    controller = FeedbackController()
    results: List[GenerationResult] = []
    failed: List[str] = []

    for config in configs:
        print("\n" + "-" * 60)
        print(f"Generating {config.language_name} from {config.source}")
        print("-" * 60)
        try:
            results.append(run_grammar(config, parser=parser, controller=controller))
        except (TranslationError, AbnfParseError, GeneratorError) as e:
            log_error_with_context(logger, f"Generation aborted for {config.language_name}", e,
                                   grammar=config.language_name)
            failed.append(config.language_name)

    print_summary(results, failed)

    if failed or not all(result.succeeded for result in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
