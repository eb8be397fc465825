"""
Per-grammar configuration loading.

Grammars to translate are listed in a YAML file:

    grammars:
      - source: examples/postal.abnf
        start_rule: postal-address
        uses_core_rules: true
        hidden_rules: [suffix, zip-code]

Relative ``source`` and ``location`` paths are resolved against the
directory of the YAML file.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ValidationError

from abnf_ts.models.session import GenerationSession

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("source", "start_rule")


class GrammarConfigError(Exception):
    """Raised when the grammar configuration file is missing or malformed."""
    pass


class GrammarConfig(BaseModel):
    """Configuration of one grammar translation."""

    source: Path
    start_rule: str
    name: Optional[str] = None
    uses_core_rules: bool = False
    hidden_rules: List[str] = []
    inline_rules: List[str] = []
    conflicts: List[List[str]] = []
    location: Optional[Path] = None

    @property
    def language_name(self) -> str:
        """Configured name, defaulting to the source file's base name."""
        return self.name or self.source.stem

    def to_session(self, build_root: Optional[Path] = None) -> GenerationSession:
        """
        Build the initial generation session.

        Args:
            build_root: Parent of per-grammar working directories. If None, uses settings.
        """
        location = self.location
        if location is None:
            if build_root is None:
                from abnf_ts.config import settings
                build_root = settings.build_root
            location = Path(build_root) / self.language_name

        return GenerationSession(
            source=self.source,
            location=location,
            start_rule=self.start_rule,
            language_name=self.language_name,
            include_core_rules=self.uses_core_rules,
            hidden_rules=tuple(self.hidden_rules),
            inline_rules=tuple(self.inline_rules),
            conflicts=tuple(tuple(group) for group in self.conflicts),
        )


def load_grammar_configs(config_path: Path) -> List[GrammarConfig]:
    """
    Load grammar configurations from a YAML file.

    Args:
        config_path: Path to the YAML file

    Returns:
        List of GrammarConfig in file order

    Raises:
        GrammarConfigError: If the file is missing or malformed
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise GrammarConfigError(f"Grammar configuration not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            payload = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse grammar configuration {config_path}: {e}")
        raise GrammarConfigError(f"Malformed grammar configuration {config_path}: {e}") from e

    entries = payload.get('grammars', []) if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise GrammarConfigError(f"'grammars' must be a list in {config_path}")

    base_dir = config_path.parent
    configs = []
    for index, entry in enumerate(entries):
        configs.append(_parse_entry(entry, index, base_dir, config_path))

    logger.info(f"Loaded {len(configs)} grammar configurations from {config_path}")
    return configs


def _parse_entry(entry: Any, index: int, base_dir: Path, config_path: Path) -> GrammarConfig:
    if not isinstance(entry, dict):
        raise GrammarConfigError(f"Grammar entry {index} in {config_path} must be a mapping")

    for field in REQUIRED_FIELDS:
        if field not in entry:
            raise GrammarConfigError(f"Missing required field '{field}' in grammar entry {index} of {config_path}")

    data: Dict[str, Any] = dict(entry)
    for key in ('source', 'location'):
        if data.get(key) is not None and not Path(data[key]).is_absolute():
            data[key] = base_dir / data[key]

    try:
        return GrammarConfig(**data)
    except ValidationError as e:
        raise GrammarConfigError(f"Invalid grammar entry {index} in {config_path}: {e}") from e
