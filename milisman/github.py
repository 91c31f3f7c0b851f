"""GitHub API client for creating labels and milestones.

This module wraps the two REST endpoints the reconciler needs and turns
their failures into typed errors: ``AlreadyExistsError`` when GitHub reports
the entity is already there, ``GitHubAPIError`` for anything else.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

import requests

from .errors import AlreadyExistsError, GitHubAPIError

if TYPE_CHECKING:
    from .config import LabelSpec, MilestoneSpec

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "already_exists"


class GitHubClient:
    """Client for the GitHub issues API.

    Holds a single session carrying the bearer token for the whole run.
    """

    API_URL = "https://api.github.com"

    def __init__(
        self,
        token: str,
        timeout: int = 30,
        api_url: Optional[str] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub token used as bearer credential
            timeout: Request timeout in seconds
            api_url: Base API URL (defaults to GITHUB_API_URL or api.github.com)
        """
        self.token = token
        self.timeout = timeout
        api_url = api_url or os.getenv("GITHUB_API_URL") or self.API_URL
        self.api_url = api_url.rstrip("/")
        self.session = requests.Session()

        self.session.headers.update(
            {
                "User-Agent": "milisman/1.0.0",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "Authorization": f"Bearer {self.token}",
            }
        )

    def create_label(self, owner: str, repo: str, label: LabelSpec) -> dict[str, Any]:
        """Create a label in the repository.

        Args:
            owner: Repository owner
            repo: Repository name
            label: Label to create

        Returns:
            The created label as returned by GitHub

        Raises:
            AlreadyExistsError: If a label with the same name exists
            GitHubAPIError: If the request fails for any other reason
        """
        return self._create(owner, repo, "labels", dict(label))

    def create_milestone(
        self, owner: str, repo: str, milestone: MilestoneSpec
    ) -> dict[str, Any]:
        """Create a milestone in the repository.

        Args:
            owner: Repository owner
            repo: Repository name
            milestone: Milestone to create

        Returns:
            The created milestone as returned by GitHub

        Raises:
            AlreadyExistsError: If a milestone with the same title exists
            GitHubAPIError: If the request fails for any other reason
        """
        return self._create(owner, repo, "milestones", dict(milestone))

    def _create(
        self, owner: str, repo: str, resource: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        url = f"{self.api_url}/repos/{quote(owner)}/{quote(repo)}/{resource}"
        logger.debug(f"POST {url} {payload}")

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(str(e)) from e

        if response.ok:
            try:
                return response.json()
            except ValueError:
                return {}

        raise self._classify_error(response)

    def _classify_error(self, response: requests.Response) -> Exception:
        """Build a typed error from a failed create response.

        Only the code of the first structured error detail decides whether
        the entity already exists.
        """
        message = response.reason or "request failed"
        errors: list[dict[str, Any]] = []
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            message = body.get("message") or message
            if isinstance(body.get("errors"), list):
                errors = body["errors"]

        logger.debug(f"GitHub API error details: {body}")

        error = GitHubAPIError(message, status_code=response.status_code, errors=errors)
        if error.code == ALREADY_EXISTS:
            return AlreadyExistsError(
                message, status_code=response.status_code, errors=errors
            )
        return error

    def close(self) -> None:
        """Close the HTTP session.

        Should be called when done using the client to clean up resources.
        """
        self.session.close()

    def __enter__(self) -> GitHubClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
