"""
Diagnostic-Feedback Controller.

Drives the parser generator until it accepts the translated grammar:

    IDLE -> INVOKING -> DONE
                     -> DIAGNOSING -> INVOKING   (automatic fix applied)
                                   -> GIVEN_UP   (nothing left to fix)

Rules reported as matching the empty string are inlined, and missing
conflict declarations are added. Precedence and associativity problems need
a human decision, so they stop the loop with guidance. Every fix grows the
inline or conflict set of a finite grammar, and a fix that would leave the
session unchanged stops the loop, so a run always terminates.
"""

from pathlib import Path
from typing import List, Optional, Set

from abnf_ts.models.diagnostic import Diagnostic, DiagnosticKind
from abnf_ts.models.error import UnsupportedConstruct
from abnf_ts.models.expression import referenced_names
from abnf_ts.models.grammar import GrammarDescriptor
from abnf_ts.models.session import (
    AppliedFix,
    ControllerState,
    GenerationResult,
    GenerationSession,
)
from abnf_ts.models.syntax_node import SyntaxNode
from abnf_ts.translator import render_grammar, translate_session
from abnf_ts.utils.logging import ContextLoggerAdapter, get_logger, log_state_transition
from abnf_ts.utils.naming import HIDDEN_PREFIX, normalize_rule_name
from diagnostics.classifier import DiagnosticClassifier, default_classifier

from .abnf_parser import AbnfParser
from .generator import GeneratorRunner, write_descriptor
from .grammar_config import GrammarConfig

logger = get_logger(__name__)


def apply_fix(
    session: GenerationSession,
    diagnostic: Diagnostic,
    descriptor: Optional[GrammarDescriptor] = None,
) -> Optional[GenerationSession]:
    """
    Compute the session for the next attempt.

    Args:
        session: Session of the failed attempt
        diagnostic: Classified generator failure
        descriptor: Descriptor of the failed attempt; reported names it does
            not define cannot be fixed, and inlining is checked against it

    Returns:
        The mutated session, or None when the diagnostic is not automatically
        fixable, the fix is blocked or the fix would not change the session
    """
    if not diagnostic.auto_fixable or not diagnostic.rules:
        return None
    if fix_obstacle(session, diagnostic, descriptor) is not None:
        return None

    names = [_rule_name(name, session) for name in diagnostic.rules]
    if descriptor is not None and any(descriptor.get_rule(name) is None for name in names):
        return None

    if diagnostic.kind == DiagnosticKind.EMPTY_RULE_MATCH:
        updated = session
        for name in names:
            updated = updated.with_inline_rule(name)
    else:
        updated = session.with_conflict(names)

    if updated == session:
        return None
    return updated


def fix_obstacle(
    session: GenerationSession,
    diagnostic: Diagnostic,
    descriptor: Optional[GrammarDescriptor] = None,
) -> Optional[str]:
    """
    Explain why inlining the reported rules would produce a broken grammar.

    A rule cannot be inlined while a conflict group names it, or when it
    reaches itself through references to inlined rules, since the inline
    helper would then call itself without end.

    Returns:
        Guidance text, or None when nothing blocks the fix
    """
    if diagnostic.kind != DiagnosticKind.EMPTY_RULE_MATCH:
        return None

    names = [_rule_name(name, session) for name in diagnostic.rules]
    for name in names:
        for group in session.conflicts:
            if name in group:
                return (
                    f"Cannot inline `{name}`: it is named in conflict group [{', '.join(group)}]. "
                    f"Remove the group or give `{name}` a definition that does not match the empty string."
                )

    if descriptor is None:
        return None
    inline = set(session.inline_rules) | set(names)
    for name in names:
        if _reaches_itself(name, inline, descriptor):
            return (
                f"Cannot inline `{name}`: it refers to itself through inlined rules. "
                f"Give `{name}` a definition that does not match the empty string."
            )
    return None


def _reaches_itself(name: str, inline: Set[str], descriptor: GrammarDescriptor) -> bool:
    rule = descriptor.get_rule(name)
    if rule is None:
        return False

    pending = referenced_names(rule.body)
    seen: Set[str] = set()
    while pending:
        target = normalize_rule_name(pending.pop())
        if target == name:
            return True
        if target in seen or target not in inline:
            continue
        seen.add(target)
        referenced = descriptor.get_rule(target)
        if referenced is not None:
            pending.extend(referenced_names(referenced.body))
    return False


def _rule_name(reported: str, session: GenerationSession) -> str:
    """Map a name as the generator reports it back to the rule name."""
    name = normalize_rule_name(reported)
    if name.startswith(HIDDEN_PREFIX) and name[len(HIDDEN_PREFIX):] in session.hidden_rules:
        return name[len(HIDDEN_PREFIX):]
    return name


class FeedbackController:
    """Runs translate, write, generate and diagnose cycles for one grammar."""

    def __init__(
        self,
        runner: Optional[GeneratorRunner] = None,
        classifier: Optional[DiagnosticClassifier] = None,
        descriptor_filename: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize the controller.

        Args:
            runner: Generator runner. If None, uses the configured command.
            classifier: Diagnostic classifier. If None, uses the bundled matchers.
            descriptor_filename: Descriptor file name. If None, uses settings.
            max_attempts: Stop after this many generator runs. If None, uses settings.
        """
        from abnf_ts.config import settings

        self.runner = runner or GeneratorRunner()
        self.classifier = classifier or default_classifier()
        self.descriptor_filename = descriptor_filename or settings.descriptor_filename
        self.max_attempts = max_attempts if max_attempts is not None else settings.max_attempts

    def run(self, tree: SyntaxNode, session: GenerationSession) -> GenerationResult:
        """
        Generate a parser for ``tree`` starting from ``session``.

        Raises:
            StructuralViolation: If the syntax tree or descriptor is malformed
            GeneratorUnavailableError: If the generator cannot be started
        """
        log = logger.with_context(grammar=session.language_name)
        state = ControllerState.IDLE
        attempt = 1
        fixes: List[AppliedFix] = []

        while True:
            state = self._transition(log, session, attempt, state, ControllerState.INVOKING)
            descriptor, unsupported = translate_session(tree, session)
            text = render_grammar(descriptor)
            path = write_descriptor(session.location, text, self.descriptor_filename)
            outcome = self.runner.run(session.location)

            if outcome.succeeded:
                state = self._transition(log, session, attempt, state, ControllerState.DONE)
                log.info(
                    f"Generated parser for {session.language_name} from {path} "
                    f"({len(text)} chars, {attempt} attempts)",
                    extra={"attempt": attempt},
                )
                return self._result(session, state, attempt, fixes, unsupported, path, width=len(text))

            state = self._transition(log, session, attempt, state, ControllerState.DIAGNOSING)
            diagnostic = self.classifier.classify(outcome.diagnostic_text)
            next_session = apply_fix(session, diagnostic, descriptor)

            if next_session is None:
                message = fix_obstacle(session, diagnostic, descriptor) or self._give_up_message(diagnostic)
                log.error(message, extra={"attempt": attempt, "diagnostic_kind": diagnostic.kind.value})
                state = self._transition(log, session, attempt, state, ControllerState.GIVEN_UP)
                return self._result(session, state, attempt, fixes, unsupported, path, diagnostic, message)

            if self.max_attempts is not None and attempt >= self.max_attempts:
                message = f"Giving up after {attempt} attempts; last diagnostic: {diagnostic.kind.value}"
                log.error(message, extra={"attempt": attempt})
                state = self._transition(log, session, attempt, state, ControllerState.GIVEN_UP)
                return self._result(session, state, attempt, fixes, unsupported, path, diagnostic, message)

            fix = AppliedFix(kind=diagnostic.kind, rules=_added_rules(session, next_session), attempt=attempt)
            fixes.append(fix)
            log.warning(_describe_fix(fix), extra={"attempt": attempt, "rule": ", ".join(fix.rules)})
            session = next_session
            attempt += 1

    def _transition(
        self,
        log: ContextLoggerAdapter,
        session: GenerationSession,
        attempt: int,
        from_state: ControllerState,
        to_state: ControllerState,
    ) -> ControllerState:
        log_state_transition(log, session.language_name, attempt, from_state.value, to_state.value)
        return to_state

    def _give_up_message(self, diagnostic: Diagnostic) -> str:
        if diagnostic.kind == DiagnosticKind.UNRECOGNIZED:
            return f"Unrecognized generator failure:\n{diagnostic.raw}"
        if diagnostic.actionable_only:
            return diagnostic.guidance()
        return f"Automatic fix for {diagnostic.kind.value} made no progress: {', '.join(diagnostic.rules)}"

    def _result(
        self,
        session: GenerationSession,
        state: ControllerState,
        attempt: int,
        fixes: List[AppliedFix],
        unsupported: List[UnsupportedConstruct],
        path: Path,
        diagnostic: Optional[Diagnostic] = None,
        message: Optional[str] = None,
        width: Optional[int] = None,
    ) -> GenerationResult:
        return GenerationResult(
            language_name=session.language_name,
            state=state,
            session=session,
            attempts=attempt,
            fixes=fixes,
            diagnostic=diagnostic,
            message=message,
            descriptor_path=path,
            emitted_width=width,
            unsupported=unsupported,
        )


def _added_rules(before: GenerationSession, after: GenerationSession) -> List[str]:
    added_inline = [name for name in after.inline_rules if name not in before.inline_rules]
    if added_inline:
        return added_inline
    added_groups = [group for group in after.conflicts if group not in before.conflicts]
    return list(added_groups[0]) if added_groups else []


def _describe_fix(fix: AppliedFix) -> str:
    names = ", ".join(fix.rules)
    if fix.kind == DiagnosticKind.EMPTY_RULE_MATCH:
        return f"Rule matches the empty string; inlining {names} and retrying"
    return f"Adding conflict group [{names}] and retrying"


def run_grammar(
    config: GrammarConfig,
    parser: Optional[AbnfParser] = None,
    controller: Optional[FeedbackController] = None,
    build_root: Optional[Path] = None,
) -> GenerationResult:
    """
    Parse one configured ABNF grammar and drive it through the feedback loop.

    Args:
        config: Grammar configuration
        parser: ABNF parser. If None, loads the configured tree-sitter-abnf library.
        controller: Feedback controller. If None, uses the configured generator.
        build_root: Parent of working directories. If None, uses settings.
    """
    session = config.to_session(build_root)
    tree = (parser or AbnfParser()).parse_file(session.source)
    return (controller or FeedbackController()).run(tree, session)
