"""Configuration loading and validation for milisman.

This module resolves the ``configfile`` parameter into either a local path or
a remote URL, reads the YAML document it points to, and decodes it into the
labels and milestones that should exist in the repository.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union
from urllib.parse import urlparse

import requests
import yaml
from typing_extensions import NotRequired, TypedDict

from .errors import ConfigurationError, LoadError, ParseError

if TYPE_CHECKING:
    from .actions import ActionsReporter

logger = logging.getLogger(__name__)

NULL_SCALARS = ("", "~", "null", "Null", "NULL")


class LabelSpec(TypedDict):
    """A label that should exist in the repository.

    ``name`` is the identity key; the other fields are sent to GitHub as-is.
    """

    name: str
    color: NotRequired[str]
    description: NotRequired[str]


class MilestoneSpec(TypedDict):
    """A milestone that should exist in the repository.

    ``title`` is the identity key; the other fields are sent to GitHub as-is.
    """

    title: str
    description: NotRequired[str]
    due_on: NotRequired[str]
    state: NotRequired[str]


class Config(TypedDict):
    """Desired state of the repository.

    Holds where the configuration came from and the ordered labels and
    milestones to reconcile.
    """

    config_source: str
    labels: list[LabelSpec]
    milestones: list[MilestoneSpec]


class LocalPath:
    """Configuration source read from the local filesystem."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __str__(self) -> str:
        return str(self.path)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, LocalPath) and other.path == self.path

    def __repr__(self) -> str:
        return f"LocalPath({str(self.path)!r})"


class RemoteURL:
    """Configuration source fetched over HTTP."""

    def __init__(self, url: str) -> None:
        self.url = url

    def __str__(self) -> str:
        return self.url

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RemoteURL) and other.url == self.url

    def __repr__(self) -> str:
        return f"RemoteURL({self.url!r})"


ConfigSource = Union[LocalPath, RemoteURL]


def resolve_config_source(value: str) -> ConfigSource:
    """Decide whether ``value`` names a remote URL or a local path.

    Only an absolute URI with both a scheme and a host is treated as a URL.
    Everything else, including strings that fail to parse, is a local path.

    Args:
        value: The configfile parameter

    Returns:
        A RemoteURL or a LocalPath

    Example:
        >>> resolve_config_source("https://example.com/milisman.yaml")
        RemoteURL('https://example.com/milisman.yaml')
        >>> resolve_config_source(".github/milisman.yaml")
        LocalPath('.github/milisman.yaml')
    """
    try:
        parsed = urlparse(value)
    except ValueError:
        return LocalPath(Path(value))

    if parsed.scheme and parsed.netloc:
        return RemoteURL(value)
    return LocalPath(Path(value))


def validate_config_source(value: Any) -> ConfigSource:
    """Validate the configfile parameter before any I/O happens.

    Args:
        value: Raw configfile value

    Returns:
        The resolved configuration source

    Raises:
        ConfigurationError: If the value is empty, not a string, or names a
            local file that does not exist
    """
    if not isinstance(value, str):
        raise ConfigurationError("'configfile' must be a string")

    if not value.strip():
        raise ConfigurationError(
            "missing configfile",
            hint="Set the 'configfile' input to a path or URL",
        )

    source = resolve_config_source(value)
    if isinstance(source, LocalPath) and not source.path.is_file():
        raise ConfigurationError(
            f"'configfile' is neither an existing file nor a URL: {value}"
        )

    return source


def read_config_source(
    source: ConfigSource,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> bytes:
    """Read the raw configuration document.

    Args:
        source: Resolved configuration source
        session: Optional HTTP session used for remote sources
        timeout: Request timeout in seconds

    Returns:
        Document content as bytes

    Raises:
        LoadError: If the file cannot be read or the fetch fails
    """
    if isinstance(source, LocalPath):
        logger.info(f"Reading configuration from file {source.path}")
        try:
            return source.path.read_bytes()
        except OSError as e:
            raise LoadError(str(source), str(e)) from e

    logger.info(f"Fetching configuration from {source.url}")
    http = session or requests.Session()
    try:
        response = http.get(source.url, timeout=timeout)
        response.raise_for_status()
        return response.content
    except requests.exceptions.RequestException as e:
        raise LoadError(str(source), str(e)) from e
    finally:
        if session is None:
            http.close()


def parse_config(raw: bytes, config_source: str) -> Config:
    """Decode a YAML document into the desired state.

    Scalars are kept exactly as written, so ``title: 1.0`` or
    ``color: 000000`` reach GitHub as the strings ``"1.0"`` and ``"000000"``.
    Unknown keys are ignored and missing sequences default to empty lists.

    Args:
        raw: Document content
        config_source: The configfile value the document was read from

    Returns:
        Decoded configuration

    Raises:
        ParseError: If the YAML is malformed or has the wrong shape
    """
    try:
        data = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config file: {e}") from e

    if _is_null(data):
        data = {}

    if not isinstance(data, dict):
        raise ParseError("Configuration must be a dictionary")

    labels = _parse_sequence(data, "labels")
    milestones = _parse_sequence(data, "milestones")

    config: Config = {
        "config_source": config_source,
        "labels": [_parse_label(i, item) for i, item in enumerate(labels)],
        "milestones": [
            _parse_milestone(i, item) for i, item in enumerate(milestones)
        ],
    }
    return config


def _is_null(value: Any) -> bool:
    # BaseLoader leaves null scalars as their source text
    return value is None or value in NULL_SCALARS


def _parse_sequence(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if _is_null(value):
        return []
    if not isinstance(value, list):
        raise ParseError(f"'{key}' must be a list")
    return value


def _parse_label(index: int, item: Any) -> LabelSpec:
    if not isinstance(item, dict):
        raise ParseError(f"Label {index} must be a dictionary")

    label: LabelSpec = {"name": _string_field("Label", index, item, "name")}
    if not _is_null(item.get("color")):
        label["color"] = _string_field("Label", index, item, "color")
    if not _is_null(item.get("description")):
        label["description"] = _string_field("Label", index, item, "description")
    return label


def _parse_milestone(index: int, item: Any) -> MilestoneSpec:
    if not isinstance(item, dict):
        raise ParseError(f"Milestone {index} must be a dictionary")

    milestone: MilestoneSpec = {
        "title": _string_field("Milestone", index, item, "title")
    }
    if not _is_null(item.get("description")):
        milestone["description"] = _string_field(
            "Milestone", index, item, "description"
        )
    if not _is_null(item.get("due_on")):
        milestone["due_on"] = _string_field("Milestone", index, item, "due_on")
    if not _is_null(item.get("state")):
        milestone["state"] = _string_field("Milestone", index, item, "state")
    return milestone


def _string_field(kind: str, index: int, item: dict[str, Any], field: str) -> str:
    value = item.get(field)
    if _is_null(value):
        return ""
    if not isinstance(value, str):
        raise ParseError(f"{kind} {index}: '{field}' must be a scalar value")
    return value


def validate_config(config: Config) -> Config:
    """Validate a decoded configuration.

    Applies the same configfile rules as the pre-fetch check and requires
    every label and milestone to carry a non-empty identity key.

    Args:
        config: Decoded configuration

    Returns:
        The same configuration

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    validate_config_source(config["config_source"])

    for i, label in enumerate(config["labels"]):
        if not label["name"].strip():
            raise ConfigurationError(f"Label {i}: 'name' must not be empty")

    for i, milestone in enumerate(config["milestones"]):
        if not milestone["title"].strip():
            raise ConfigurationError(f"Milestone {i}: 'title' must not be empty")

    return config


def load_config(
    config_source: str,
    reporter: Optional[ActionsReporter] = None,
    session: Optional[requests.Session] = None,
    timeout: int = 30,
) -> Config:
    """Load and validate configuration from a local path or URL.

    Args:
        config_source: The configfile parameter (path or absolute URL)
        reporter: Optional reporter that receives the step summary line
        session: Optional HTTP session used for remote sources
        timeout: Request timeout in seconds

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigurationError: If configfile or the decoded configuration is invalid
        LoadError: If the document cannot be read or fetched
        ParseError: If the YAML is malformed

    Example:
        >>> config = load_config(".github/milisman.yaml")
        >>> print(len(config["labels"]))
        3
    """
    source = validate_config_source(config_source)
    raw = read_config_source(source, session=session, timeout=timeout)
    config = validate_config(parse_config(raw, config_source))

    logger.info(
        f"Successfully loaded configuration with {len(config['labels'])} labels "
        f"and {len(config['milestones'])} milestones from {source}"
    )
    if reporter is not None:
        reporter.add_step_summary(f"Using config file: {config_source}")

    return config
