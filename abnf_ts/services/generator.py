"""
Parser-generator invocation.

Writes grammar descriptors to disk and runs the external generator
(``tree-sitter generate`` by default) in the grammar's working directory.
"""

import shlex
import subprocess
import time
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from abnf_ts.utils.logging import get_logger, log_generator_call

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for generator invocation errors."""
    pass


class GeneratorUnavailableError(GeneratorError):
    """The generator command could not be started."""
    pass


class GeneratorOutcome(BaseModel):
    """Exit status and captured output of one generator run."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic_text(self) -> str:
        """Error output, falling back to standard output when stderr is empty."""
        return self.stderr if self.stderr.strip() else self.stdout


def write_descriptor(location: Path, text: str, filename: str = "grammar.js") -> Path:
    """
    Write descriptor text, creating the destination directory if needed.

    Args:
        location: Working directory of the grammar
        text: Rendered grammar descriptor
        filename: Descriptor file name

    Returns:
        Path of the written file
    """
    location.mkdir(parents=True, exist_ok=True)
    path = location / filename
    path.write_text(text, encoding="utf-8")
    logger.debug(f"Wrote grammar descriptor to {path}")
    return path


class GeneratorRunner:
    """Runs the parser generator synchronously and captures its diagnostics."""

    def __init__(self, command: Optional[List[str]] = None):
        """
        Initialize the runner.

        Args:
            command: Generator command line. If None, uses settings.
        """
        if command is None:
            from abnf_ts.config import settings
            command = settings.generator_command
        if not command:
            raise ValueError("generator command must not be empty")
        self.command = list(command)

    def run(self, cwd: Path) -> GeneratorOutcome:
        """
        Invoke the generator with ``cwd`` as working directory.

        Blocks until the process exits; its output is drained completely.

        Raises:
            GeneratorUnavailableError: If the command cannot be started
        """
        command_line = shlex.join(self.command)
        start_time = time.time()
        try:
            completed = subprocess.run(
                self.command,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            log_generator_call(logger, command=command_line, cwd=str(cwd), error=str(e))
            raise GeneratorUnavailableError(f"Cannot run generator command {command_line!r}: {e}") from e

        outcome = GeneratorOutcome(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=(time.time() - start_time) * 1000,
        )
        log_generator_call(
            logger,
            command=command_line,
            cwd=str(cwd),
            returncode=outcome.returncode,
            duration_ms=outcome.duration_ms,
            error=None if outcome.succeeded else (outcome.diagnostic_text or f"exit status {outcome.returncode}"),
        )
        return outcome
