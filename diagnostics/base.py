"""
Base interface for parser-generator diagnostic matchers.

This module defines the abstract base class that every generator-specific
matcher implements. Matchers are the only code that knows the free-text
format of a generator's error output; the feedback controller only sees the
tagged Diagnostic they produce.
"""

from abc import ABC, abstractmethod
from typing import Optional

from abnf_ts.models.diagnostic import Diagnostic


class DiagnosticMatcher(ABC):
    """Base interface for generator-specific diagnostic matchers."""

    @property
    @abstractmethod
    def generator_name(self) -> str:
        """Return the generator name (e.g., 'tree-sitter')."""
        pass

    @abstractmethod
    def match(self, text: str) -> Optional[Diagnostic]:
        """
        Classify raw generator error output.

        Args:
            text: Complete diagnostic text written by the generator

        Returns:
            Diagnostic if the text matches a known pattern, None otherwise
        """
        pass
