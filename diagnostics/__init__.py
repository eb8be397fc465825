"""
Parser-generator diagnostic matchers.

This package provides the matcher system that classifies generator error
output, including the base matcher interface and the classifier.
"""

from diagnostics.base import DiagnosticMatcher
from diagnostics.classifier import DiagnosticClassifier, default_classifier

__all__ = ['DiagnosticMatcher', 'DiagnosticClassifier', 'default_classifier']
