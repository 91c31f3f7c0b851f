"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest

from milisman.config import Config


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Return the path to a configuration file with labels and milestones."""
    path = tmp_path / "milisman.yaml"
    path.write_text(
        """labels:
  - name: bug
    color: d73a4a
    description: Something isn't working
  - name: enhancement
    color: a2eeef
  - name: documentation
milestones:
  - title: v1.0
    description: First release
    due_on: 2024-12-31T00:00:00Z
    state: open
  - title: v2.0
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def sample_config(config_file: Path) -> Config:
    """Return a decoded desired state."""
    return {
        "config_source": str(config_file),
        "labels": [
            {"name": "bug", "color": "d73a4a"},
            {"name": "enhancement"},
            {"name": "documentation"},
        ],
        "milestones": [{"title": "v1.0"}, {"title": "v2.0"}],
    }


@pytest.fixture
def summary_file(tmp_path: Path) -> Path:
    """Return the path used as GITHUB_STEP_SUMMARY."""
    return tmp_path / "summary.md"


@pytest.fixture
def already_exists_body() -> Callable[[str], dict]:
    """Return a factory for GitHub's 422 payload for a duplicate entity."""

    def build(resource: str) -> dict:
        field = "name" if resource == "Label" else "title"
        return {
            "message": "Validation Failed",
            "errors": [
                {"resource": resource, "code": "already_exists", "field": field}
            ],
            "documentation_url": "https://docs.github.com/rest",
        }

    return build
