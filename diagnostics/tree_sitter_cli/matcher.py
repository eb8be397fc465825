"""
tree-sitter CLI diagnostic matcher.

Recognizes the failures of ``tree-sitter generate`` that the feedback
controller knows how to react to. The message patterns live in
config.yaml next to this module.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Pattern, Tuple

import yaml

from diagnostics.base import DiagnosticMatcher
from abnf_ts.models.diagnostic import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

BACKTICKED = re.compile(r"`([^`]+)`")


class TreeSitterMatcher(DiagnosticMatcher):
    """Diagnostic matcher for the tree-sitter CLI."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize the tree-sitter matcher.

        Args:
            config_path: Path to config.yaml file. If None, uses default location.
        """
        if config_path is None:
            config_path = Path(__file__).parent / "config.yaml"

        with open(config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f)

        self._patterns: List[Tuple[DiagnosticKind, Pattern[str]]] = []
        for entry in self._config.get('patterns', []):
            kind = DiagnosticKind(entry['kind'])
            self._patterns.append((kind, re.compile(entry['pattern'], re.IGNORECASE)))

        logger.info(f"tree-sitter matcher initialized with {len(self._patterns)} patterns")

    @property
    def generator_name(self) -> str:
        return self._config.get('generator', 'tree-sitter')

    def match(self, text: str) -> Optional[Diagnostic]:
        for kind, pattern in self._patterns:
            found = pattern.search(text)
            if found is None:
                continue

            rules = self._extract_rules(found)
            if not rules:
                logger.debug(f"Pattern for {kind.value} matched without rule names")
                continue
            return Diagnostic(kind=kind, rules=rules, raw=text)
        return None

    def _extract_rules(self, found: re.Match) -> List[str]:
        groups = found.groupdict()
        if groups.get('rules'):
            names = BACKTICKED.findall(groups['rules'])
            if not names:
                names = [name.strip() for name in groups['rules'].split(',')]
            return [name for name in names if name]
        if groups.get('rule'):
            return [groups['rule']]
        return []
