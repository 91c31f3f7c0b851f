"""Exception hierarchy for milisman.

Every failure the tool can hit while loading configuration, discovering the
Actions context or talking to GitHub maps to one of these classes, so the CLI
can report each case with its own message.
"""

from __future__ import annotations

from typing import Any, Optional


class MilismanError(Exception):
    """Base exception for all milisman errors."""

    def __init__(self, message: str, hint: Optional[str] = None) -> None:
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


# Configuration errors


class ConfigurationError(MilismanError):
    """The configfile parameter or the decoded configuration is invalid."""


class LoadError(MilismanError):
    """The configuration document could not be read or fetched."""

    def __init__(self, source: str, details: str = "") -> None:
        message = f"Failed to read config file {source}"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
        self.source = source


class ParseError(MilismanError):
    """The configuration document is not valid YAML of the expected shape."""


class ContextError(MilismanError):
    """The GitHub Actions environment is missing repository context or a token."""


# Remote errors


class RemoteError(MilismanError):
    """Base class for failures returned by a create call."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[list[dict[str, Any]]] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message, hint)
        self.status_code = status_code
        self.errors = errors or []

    @property
    def code(self) -> Optional[str]:
        """Code of the first structured error detail, if any."""
        if not self.errors:
            return None
        first = self.errors[0]
        if not isinstance(first, dict):
            return None
        return first.get("code")


class AlreadyExistsError(RemoteError):
    """The entity is already present in the repository."""


class GitHubAPIError(RemoteError):
    """Any other failure of a create call (HTTP error, network fault, timeout)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        status_info = f" (HTTP {status_code})" if status_code else ""
        hint = None
        if status_code in (401, 403, 404):
            hint = "Check that GITHUB_TOKEN has write access to issues"
        super().__init__(
            f"GitHub API error{status_info}: {message}",
            status_code=status_code,
            errors=errors,
            hint=hint,
        )
