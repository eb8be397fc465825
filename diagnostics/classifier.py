"""
Diagnostic Classifier for parser-generator error output.

This module manages matcher registration and turns raw generator output
into a tagged Diagnostic, falling through to UNRECOGNIZED.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional
import yaml

from diagnostics.base import DiagnosticMatcher
from abnf_ts.models.diagnostic import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)


class DiagnosticClassifier:
    """Manages diagnostic matcher registration and classification."""

    def __init__(self):
        """Initialize the classifier."""
        self._matchers: Dict[str, DiagnosticMatcher] = {}
        self._config_cache: Dict[str, Dict] = {}

    def register_matcher(self, matcher: DiagnosticMatcher) -> None:
        """
        Register a generator matcher.

        Args:
            matcher: DiagnosticMatcher instance to register
        """
        generator_name = matcher.generator_name

        if generator_name in self._matchers:
            logger.warning(f"Matcher for generator '{generator_name}' already registered, overwriting")

        self._matchers[generator_name] = matcher
        logger.info(f"Registered diagnostic matcher for generator '{generator_name}'")

    def unregister_matcher(self, generator_name: str) -> bool:
        """
        Unregister a matcher.

        Args:
            generator_name: Name of the generator whose matcher is removed

        Returns:
            True if the matcher was unregistered, False if not found
        """
        if generator_name not in self._matchers:
            return False

        del self._matchers[generator_name]
        logger.info(f"Unregistered diagnostic matcher for generator '{generator_name}'")
        return True

    def get_matcher(self, generator_name: str) -> Optional[DiagnosticMatcher]:
        return self._matchers.get(generator_name)

    def list_generators(self) -> List[str]:
        return list(self._matchers.keys())

    def classify(self, text: str, generator_name: Optional[str] = None) -> Diagnostic:
        """
        Classify raw generator error output.

        Args:
            text: Complete diagnostic text
            generator_name: Restrict matching to this generator's matcher

        Returns:
            The first matching Diagnostic, or an UNRECOGNIZED one carrying
            the raw text
        """
        if generator_name is not None:
            matcher = self._matchers.get(generator_name)
            matchers = [matcher] if matcher is not None else []
        else:
            matchers = list(self._matchers.values())

        for matcher in matchers:
            diagnostic = matcher.match(text)
            if diagnostic is not None:
                logger.debug(
                    f"Classified {matcher.generator_name} diagnostic as {diagnostic.kind.value}: "
                    f"{', '.join(diagnostic.rules)}"
                )
                return diagnostic

        return Diagnostic(kind=DiagnosticKind.UNRECOGNIZED, raw=text)

    def load_matcher_config(self, matcher_dir: Path) -> Dict:
        """
        Load matcher configuration from YAML file.

        Args:
            matcher_dir: Directory containing the matcher and config.yaml

        Returns:
            Dictionary containing matcher configuration

        Raises:
            FileNotFoundError: If config.yaml is not found
            ValueError: If a required field or pattern kind is invalid
            yaml.YAMLError: If config.yaml is malformed
        """
        config_path = matcher_dir / "config.yaml"

        cache_key = str(config_path)
        if cache_key in self._config_cache:
            return self._config_cache[cache_key]

        if not config_path.exists():
            raise FileNotFoundError(f"Matcher configuration not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse matcher configuration {config_path}: {e}")
            raise

        required_fields = ['name', 'version', 'generator', 'patterns']
        for field in required_fields:
            if field not in config:
                raise ValueError(f"Missing required field '{field}' in {config_path}")

        for entry in config['patterns']:
            if 'kind' not in entry or 'pattern' not in entry:
                raise ValueError(f"Pattern entries need 'kind' and 'pattern' in {config_path}")
            DiagnosticKind(entry['kind'])

        self._config_cache[cache_key] = config
        logger.info(f"Loaded matcher configuration from {config_path}")
        return config


def default_classifier() -> DiagnosticClassifier:
    """Build a classifier with the bundled tree-sitter CLI matcher registered."""
    from diagnostics.tree_sitter_cli import TreeSitterMatcher

    classifier = DiagnosticClassifier()
    matcher_dir = Path(__file__).parent / "tree_sitter_cli"
    classifier.load_matcher_config(matcher_dir)
    classifier.register_matcher(TreeSitterMatcher(matcher_dir / "config.yaml"))
    return classifier
