"""Label and milestone reconciliation for milisman.

This module walks the desired labels and milestones in order and creates
each one in the repository. Entities GitHub reports as already existing are
skipped; any other failure stops the run.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from .config import Config
from .errors import AlreadyExistsError, RemoteError
from .github import GitHubClient

if TYPE_CHECKING:
    from .actions import ActionsReporter

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    CREATED = "Created"
    SKIPPED = "Skipped"
    FAILED = "Failed"


class Outcome:
    """Result of reconciling one label or milestone."""

    def __init__(
        self,
        status: OutcomeStatus,
        kind: str,
        key: str,
        error: Optional[Exception] = None,
    ):
        """Initialize the outcome.

        Args:
            status: What happened to the entity
            kind: Entity kind, 'label' or 'milestone'
            key: Identity key (label name or milestone title)
            error: Exception that caused a failure, if any
        """
        self.status = status
        self.kind = kind
        self.key = key
        self.error = error

    @property
    def is_failure(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return (self.status, self.kind, self.key) == (
            other.status,
            other.kind,
            other.key,
        )

    def __hash__(self) -> int:
        return hash((self.status, self.kind, self.key))

    def __repr__(self) -> str:
        return f"Outcome({self.status.name}, {self.kind!r}, {self.key!r})"

    def __str__(self) -> str:
        if self.status is OutcomeStatus.CREATED:
            return f"✓ {self.kind} {self.key} created."
        if self.status is OutcomeStatus.SKIPPED:
            return f"✓ {self.kind} {self.key} already exists, skipping."
        return f"✗ {self.kind} {self.key} failed: {self.error}"


class ReconcileResult:
    """Ordered outcomes of one reconciliation run."""

    def __init__(self):
        self.outcomes: list[Outcome] = []

    def add(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)

    @property
    def created(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.CREATED]

    @property
    def skipped(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.SKIPPED]

    @property
    def failure(self) -> Optional[Outcome]:
        """The outcome that halted the run, if any."""
        for outcome in self.outcomes:
            if outcome.is_failure:
                return outcome
        return None

    @property
    def is_success(self) -> bool:
        """True if every attempted entity was created or skipped."""
        return self.failure is None

    def __str__(self) -> str:
        """String representation of reconcile results."""
        return (
            f"Reconcile completed: {len(self.created)} created, "
            f"{len(self.skipped)} skipped, "
            f"{0 if self.is_success else 1} failed"
        )


class Reconciler:
    """Creates the configured labels and milestones in a repository.

    Labels are processed before milestones, each in configuration order, so
    the first of two entries with the same identity key is the one created.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        reporter: Optional[ActionsReporter] = None,
    ):
        """Initialize the reconciler.

        Args:
            github_client: Authenticated GitHub client
            reporter: Optional reporter receiving groups, outcomes and summary lines
        """
        self.github_client = github_client
        self.reporter = reporter

    def reconcile(self, config: Config, owner: str, repo: str) -> ReconcileResult:
        """Create missing labels, then missing milestones.

        Args:
            config: Validated desired state
            owner: Repository owner
            repo: Repository name

        Returns:
            Result with one outcome per attempted entity. When a create call
            fails for any reason other than the entity already existing, the
            failed outcome is the last one and nothing after it is attempted.

        Example:
            >>> with GitHubClient(token) as client:
            ...     result = Reconciler(client).reconcile(config, "owner", "repo")
            >>> print(result)
            Reconcile completed: 2 created, 1 skipped, 0 failed
        """
        result = ReconcileResult()
        logger.info(
            f"Reconciling {len(config['labels'])} labels and "
            f"{len(config['milestones'])} milestones in {owner}/{repo}"
        )

        passes = [
            ("Labels", "label", config["labels"], "name", self.github_client.create_label),
            (
                "Milestones",
                "milestone",
                config["milestones"],
                "title",
                self.github_client.create_milestone,
            ),
        ]

        for title, kind, entities, key_field, create in passes:
            self._begin_section(title)
            try:
                for entity in entities:
                    outcome = self._reconcile_one(
                        kind, entity[key_field], create, owner, repo, entity
                    )
                    result.add(outcome)
                    self._report(outcome)
                    if outcome.is_failure:
                        logger.info(str(result))
                        return result
            finally:
                self._end_section()

        logger.info(str(result))
        return result

    def _reconcile_one(
        self,
        kind: str,
        key: str,
        create: Callable[[str, str, Any], dict[str, Any]],
        owner: str,
        repo: str,
        entity: Any,
    ) -> Outcome:
        try:
            create(owner, repo, entity)
        except AlreadyExistsError:
            return Outcome(OutcomeStatus.SKIPPED, kind, key)
        except RemoteError as e:
            return Outcome(OutcomeStatus.FAILED, kind, key, error=e)
        return Outcome(OutcomeStatus.CREATED, kind, key)

    def _begin_section(self, title: str) -> None:
        if self.reporter is not None:
            self.reporter.group(title)
            self.reporter.add_step_summary(f"# {title}")

    def _end_section(self) -> None:
        if self.reporter is not None:
            self.reporter.end_group()

    def _report(self, outcome: Outcome) -> None:
        if self.reporter is not None:
            self.reporter.outcome(outcome)
        elif outcome.is_failure:
            logger.error(str(outcome))
        else:
            logger.info(str(outcome))

