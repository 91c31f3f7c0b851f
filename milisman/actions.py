"""GitHub Actions integration for milisman.

Reads action inputs and the repository context from the runner environment,
and reports progress through workflow commands, log lines and the job step
summary.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn, Optional, TextIO

from .errors import ContextError

if TYPE_CHECKING:
    from .sync import Outcome

logger = logging.getLogger(__name__)


def get_input(name: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Return the value of an action input.

    The runner exposes ``with:`` inputs as ``INPUT_<NAME>`` environment
    variables, upper-cased with spaces replaced by underscores.
    """
    env = os.environ if env is None else env
    key = "INPUT_" + name.replace(" ", "_").upper()
    return env.get(key, "").strip()


def get_repository_context(env: Optional[Mapping[str, str]] = None) -> tuple[str, str]:
    """Return the owner and name of the repository the workflow runs in.

    Args:
        env: Environment to read from (defaults to os.environ)

    Returns:
        Tuple of (owner, name)

    Raises:
        ContextError: If GITHUB_REPOSITORY is missing or malformed
    """
    env = os.environ if env is None else env
    repository = env.get("GITHUB_REPOSITORY", "")
    owner, _, name = repository.partition("/")
    if not owner or not name:
        raise ContextError(
            "failed to get github context",
            hint="GITHUB_REPOSITORY must be set to 'owner/repo'",
        )
    return owner, name


def get_token(env: Optional[Mapping[str, str]] = None) -> str:
    """Return the GitHub token from the environment.

    Raises:
        ContextError: If GITHUB_TOKEN is not set
    """
    env = os.environ if env is None else env
    token = env.get("GITHUB_TOKEN", "")
    if not token:
        raise ContextError(
            "GITHUB_TOKEN is not set",
            hint="Pass 'env: GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}' to the step",
        )
    return token


class ActionsReporter:
    """Renders run progress for the GitHub Actions runner.

    Info lines go to the logger, groups and errors are emitted as workflow
    commands on ``stream``, and summary lines are appended to the file named
    by ``GITHUB_STEP_SUMMARY``. Outside a runner the summary is only logged.
    """

    def __init__(
        self,
        summary_path: Optional[Path] = None,
        stream: Optional[TextIO] = None,
    ):
        if summary_path is None and os.getenv("GITHUB_STEP_SUMMARY"):
            summary_path = Path(os.environ["GITHUB_STEP_SUMMARY"])
        self.summary_path = summary_path
        self.stream = stream or sys.stdout
        self.summary_lines: list[str] = []

    def info(self, message: str) -> None:
        logger.info(message)

    def group(self, title: str) -> None:
        self._command(f"::group::{title}")

    def end_group(self) -> None:
        self._command("::endgroup::")

    def add_step_summary(self, line: str) -> None:
        """Append one line to the job step summary."""
        self.summary_lines.append(line)
        if self.summary_path is None:
            logger.debug(f"Step summary: {line}")
            return

        try:
            with self.summary_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.warning(f"Failed to write step summary to {self.summary_path}: {e}")

    def outcome(self, outcome: Outcome) -> None:
        """Report one reconciliation outcome.

        Failures only get their summary line; the caller ends the run
        through ``fatal`` with the error itself.
        """
        if not outcome.is_failure:
            self.info(str(outcome))
        self.add_step_summary(f"{outcome.key} {outcome.status.value}")

    def fatal(self, message: str) -> NoReturn:
        """Report a fatal error and stop the process with a non-zero exit."""
        logger.error(message)
        self._command(f"::error::{_escape_data(message)}")
        sys.exit(1)

    def _command(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


def _escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
