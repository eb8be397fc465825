"""Generation session state and result data models."""

from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from abnf_ts.utils.naming import normalize_rule_name

from .diagnostic import Diagnostic, DiagnosticKind
from .error import UnsupportedConstruct


class ControllerState(str, Enum):
    """Diagnostic-feedback controller states."""

    IDLE = "idle"
    INVOKING = "invoking"
    DIAGNOSING = "diagnosing"
    DONE = "done"
    GIVEN_UP = "given_up"


class GenerationSession(BaseModel):
    """Grammar configuration for one generation attempt.

    Sessions are immutable; every automatic fix produces a new session
    through ``with_inline_rule`` or ``with_conflict``.
    """

    model_config = ConfigDict(frozen=True)

    source: Path
    location: Path
    start_rule: str
    language_name: str
    include_core_rules: bool = False
    hidden_rules: Tuple[str, ...] = ()
    inline_rules: Tuple[str, ...] = ()
    conflicts: Tuple[Tuple[str, ...], ...] = ()

    @field_validator("start_rule")
    @classmethod
    def _normalize_start_rule(cls, value: str) -> str:
        return normalize_rule_name(value)

    @field_validator("hidden_rules", "inline_rules")
    @classmethod
    def _normalize_rule_names(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return _unique(normalize_rule_name(name) for name in value)

    @field_validator("conflicts")
    @classmethod
    def _normalize_conflicts(cls, value: Tuple[Tuple[str, ...], ...]) -> Tuple[Tuple[str, ...], ...]:
        return _unique(_conflict_key(group) for group in value)

    def with_inline_rule(self, name: str) -> "GenerationSession":
        """Return a session that additionally inlines ``name``."""
        return self.model_copy(update={
            "inline_rules": _unique((*self.inline_rules, normalize_rule_name(name))),
        })

    def with_conflict(self, names: Iterable[str]) -> "GenerationSession":
        """Return a session that additionally declares the conflict group ``names``."""
        return self.model_copy(update={
            "conflicts": _unique((*self.conflicts, _conflict_key(names))),
        })

    def is_hidden(self, name: str) -> bool:
        return normalize_rule_name(name) in self.hidden_rules

    def is_inline(self, name: str) -> bool:
        return normalize_rule_name(name) in self.inline_rules


class AppliedFix(BaseModel):
    """An automatic session mutation made in response to a diagnostic."""

    kind: DiagnosticKind
    rules: List[str]
    attempt: int


class GenerationResult(BaseModel):
    """Outcome of a complete diagnostic-feedback run for one grammar."""

    language_name: str
    state: ControllerState
    session: GenerationSession
    attempts: int
    fixes: List[AppliedFix] = []
    diagnostic: Optional[Diagnostic] = None
    message: Optional[str] = None
    descriptor_path: Optional[Path] = None
    emitted_width: Optional[int] = None
    unsupported: List[UnsupportedConstruct] = []

    @property
    def succeeded(self) -> bool:
        return self.state == ControllerState.DONE


def _conflict_key(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted({normalize_rule_name(name) for name in names}))


def _unique(values: Iterable) -> tuple:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)
