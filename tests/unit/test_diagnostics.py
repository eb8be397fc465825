"""Unit tests for diagnostic matchers and the DiagnosticClassifier."""

import pytest
from pathlib import Path
from typing import Optional

import diagnostics
from diagnostics import DiagnosticClassifier, DiagnosticMatcher, default_classifier
from diagnostics.tree_sitter_cli import TreeSitterMatcher
from abnf_ts.models.diagnostic import Diagnostic, DiagnosticKind

EMPTY_RULE_OUTPUT = "Error: The rule `foo` matches the empty string.\n"

CONFLICT_OUTPUT = """Unresolved conflict for symbol sequence:

  word  •  word  …

Possible interpretations:

  1:  (phrase  word)  •  word  …
  2:  (name  word)  •  word  …

Possible resolutions:

  1:  Specify a higher precedence in `phrase` than in the other rules.
  2:  Specify a higher precedence in `name` than in the other rules.
  3:  Add a conflict for these rules: `phrase`, `name`
"""

ASSOCIATIVITY_OUTPUT = """Unresolved conflict for symbol sequence:

  expr  '+'  expr  •  '+'  …

Possible resolutions:

  1:  Specify a left or right associativity in `sum`
"""


class MockMatcher(DiagnosticMatcher):
    """Matcher that recognizes a single marker string."""

    def __init__(self, name: str = "mock", marker: str = "MOCK"):
        self._name = name
        self._marker = marker

    @property
    def generator_name(self) -> str:
        return self._name

    def match(self, text: str) -> Optional[Diagnostic]:
        if self._marker in text:
            return Diagnostic(kind=DiagnosticKind.NEEDS_PRECEDENCE, rules=["mocked"], raw=text)
        return None


class TestTreeSitterMatcher:
    """Test classification of tree-sitter CLI output."""

    @pytest.fixture
    def matcher(self):
        return TreeSitterMatcher()

    def test_generator_name(self, matcher):
        assert matcher.generator_name == "tree-sitter"

    def test_empty_rule_match(self, matcher):
        """Test that an empty-string rule is recognized with its name."""
        diagnostic = matcher.match(EMPTY_RULE_OUTPUT)

        assert diagnostic.kind == DiagnosticKind.EMPTY_RULE_MATCH
        assert diagnostic.rules == ["foo"]
        assert diagnostic.raw == EMPTY_RULE_OUTPUT
        assert diagnostic.auto_fixable

    def test_conflict_wins_over_precedence(self, matcher):
        """Test that a conflict report is fixed by declaring the conflict."""
        diagnostic = matcher.match(CONFLICT_OUTPUT)

        assert diagnostic.kind == DiagnosticKind.MISSING_CONFLICT_DECLARATION
        assert diagnostic.rules == ["phrase", "name"]

    def test_conflict_without_backticks(self, matcher):
        """Test that plain comma separated rule lists are accepted."""
        diagnostic = matcher.match("Add a conflict for these rules: phrase, name\n")
        assert diagnostic.rules == ["phrase", "name"]

    def test_associativity(self, matcher):
        """Test that associativity suggestions are actionable only."""
        diagnostic = matcher.match(ASSOCIATIVITY_OUTPUT)

        assert diagnostic.kind == DiagnosticKind.NEEDS_ASSOCIATIVITY
        assert diagnostic.rules == ["sum"]
        assert diagnostic.actionable_only
        assert not diagnostic.auto_fixable

    def test_precedence(self, matcher):
        """Test that precedence suggestions carry the rule name."""
        diagnostic = matcher.match("  1:  Specify a higher precedence for `sum`\n")

        assert diagnostic.kind == DiagnosticKind.NEEDS_PRECEDENCE
        assert diagnostic.rules == ["sum"]
        assert diagnostic.guidance() == "Specify a higher precedence for `sum` in the grammar configuration."

    def test_unknown_output(self, matcher):
        """Test that unknown output is not matched."""
        assert matcher.match("Error: something else went wrong") is None


class TestDiagnosticClassifier:
    """Test matcher registration and classification."""

    @pytest.fixture
    def classifier(self):
        return DiagnosticClassifier()

    def test_register_matcher(self, classifier):
        """Test registering a matcher."""
        matcher = MockMatcher()
        classifier.register_matcher(matcher)

        assert classifier.get_matcher("mock") is matcher
        assert classifier.list_generators() == ["mock"]

    def test_register_overwrites(self, classifier):
        """Test that registering the same generator twice replaces the matcher."""
        classifier.register_matcher(MockMatcher())
        replacement = MockMatcher(marker="OTHER")
        classifier.register_matcher(replacement)

        assert classifier.get_matcher("mock") is replacement
        assert len(classifier.list_generators()) == 1

    def test_unregister_matcher(self, classifier):
        """Test unregistering a matcher."""
        classifier.register_matcher(MockMatcher())

        assert classifier.unregister_matcher("mock") is True
        assert classifier.get_matcher("mock") is None
        assert classifier.unregister_matcher("mock") is False

    def test_classify_unrecognized(self, classifier):
        """Test that unmatched text falls through with the raw output."""
        classifier.register_matcher(MockMatcher())
        diagnostic = classifier.classify("segmentation fault")

        assert diagnostic.kind == DiagnosticKind.UNRECOGNIZED
        assert diagnostic.raw == "segmentation fault"
        assert diagnostic.rules == []

    def test_classify_restricted_to_generator(self, classifier):
        """Test that classification can be limited to one generator."""
        classifier.register_matcher(MockMatcher())
        classifier.register_matcher(MockMatcher(name="other", marker="OTHER"))

        assert classifier.classify("MOCK", generator_name="other").kind == DiagnosticKind.UNRECOGNIZED
        assert classifier.classify("MOCK", generator_name="mock").rules == ["mocked"]
        assert classifier.classify("MOCK", generator_name="missing").kind == DiagnosticKind.UNRECOGNIZED

    def test_default_classifier(self):
        """Test that the bundled tree-sitter matcher is registered."""
        classifier = default_classifier()

        assert classifier.list_generators() == ["tree-sitter"]
        assert classifier.classify(EMPTY_RULE_OUTPUT).kind == DiagnosticKind.EMPTY_RULE_MATCH


class TestMatcherConfig:
    """Test matcher configuration loading."""

    def test_load_bundled_config(self):
        """Test loading the tree-sitter matcher configuration."""
        classifier = DiagnosticClassifier()
        config = classifier.load_matcher_config(Path(diagnostics.__file__).parent / "tree_sitter_cli")

        assert config["generator"] == "tree-sitter"
        assert [entry["kind"] for entry in config["patterns"]][0] == "empty_rule_match"

    def test_config_is_cached(self, tmp_path):
        """Test that configurations are read once."""
        (tmp_path / "config.yaml").write_text(
            "name: t\nversion: '1'\ngenerator: t\npatterns: []\n"
        )
        classifier = DiagnosticClassifier()
        first = classifier.load_matcher_config(tmp_path)
        (tmp_path / "config.yaml").unlink()

        assert classifier.load_matcher_config(tmp_path) is first

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DiagnosticClassifier().load_matcher_config(tmp_path)

    def test_missing_required_field(self, tmp_path):
        """Test that required fields are enforced."""
        (tmp_path / "config.yaml").write_text("name: t\nversion: '1'\npatterns: []\n")
        with pytest.raises(ValueError, match="generator"):
            DiagnosticClassifier().load_matcher_config(tmp_path)

    def test_unknown_pattern_kind(self, tmp_path):
        """Test that pattern kinds must be diagnostic kinds."""
        (tmp_path / "config.yaml").write_text(
            "name: t\nversion: '1'\ngenerator: t\npatterns:\n  - kind: bogus\n    pattern: x\n"
        )
        with pytest.raises(ValueError):
            DiagnosticClassifier().load_matcher_config(tmp_path)

    def test_custom_matcher_config(self, tmp_path):
        """Test that a matcher can be built from a custom pattern file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "name: custom\nversion: '1'\ngenerator: custom-gen\npatterns:\n"
            "  - kind: empty_rule_match\n    pattern: 'rule (?P<rule>\\w+) is empty'\n"
        )
        matcher = TreeSitterMatcher(config_path)

        assert matcher.generator_name == "custom-gen"
        assert matcher.match("rule blank is empty").rules == ["blank"]
