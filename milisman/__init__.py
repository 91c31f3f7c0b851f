"""Milisman - GitHub label and milestone synchronization tool.

This package creates the labels and milestones listed in a YAML
configuration file in a GitHub repository, skipping those that already exist.
"""

from .config import Config, LabelSpec, MilestoneSpec, load_config
from .github import GitHubClient
from .sync import Outcome, OutcomeStatus, ReconcileResult, Reconciler

__version__ = "1.0.0"

__all__ = [
    "Config",
    "LabelSpec",
    "MilestoneSpec",
    "load_config",
    "GitHubClient",
    "Outcome",
    "OutcomeStatus",
    "ReconcileResult",
    "Reconciler",
]
