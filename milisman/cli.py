"""Command-line interface for milisman.

This module provides the CLI options and runs a single reconciliation of
labels and milestones against the current repository.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .actions import ActionsReporter, get_repository_context, get_token
from .config import load_config
from .errors import ConfigurationError, MilismanError
from .github import GitHubClient
from .sync import ReconcileResult, Reconciler


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable debug logging if True
    """
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level, format=format_str, handlers=[logging.StreamHandler()]
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Create GitHub labels and milestones from a YAML configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  GITHUB_TOKEN        token used to call the GitHub API (required)
  GITHUB_REPOSITORY   target repository as owner/repo (required)
  GITHUB_API_URL      API base URL for GitHub Enterprise (optional)

Examples:
  # Reconcile from a file in the repository
  milisman -c .github/milisman.yaml

  # Reconcile from a shared configuration
  milisman -c https://example.com/org/milisman.yaml
        """.strip(),
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default="",
        help="Path or absolute URL of the configuration YAML file",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )

    return parser


def run(args: argparse.Namespace, reporter: ActionsReporter) -> ReconcileResult:
    """Load the configuration and reconcile it against the repository.

    Returns:
        Outcomes of the run, ending with the failed one if a create call failed

    Raises:
        MilismanError: On any fatal configuration, context or remote failure
    """
    config = load_config(args.config, reporter=reporter, timeout=args.timeout)

    owner, repo = get_repository_context()
    token = get_token()

    with GitHubClient(token=token, timeout=args.timeout) as client:
        return Reconciler(client, reporter).reconcile(config, owner, repo)


def main() -> None:
    """Main entry point for the CLI application."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    reporter = ActionsReporter()
    reporter.info("milisman starting")
    reporter.add_step_summary("# Milisman Report")

    try:
        result = run(args, reporter)
    except ConfigurationError as e:
        reporter.fatal(f"invalid configuration: {e}")
    except MilismanError as e:
        reporter.fatal(str(e))
    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        sys.exit(130)
    except Exception as e:
        if args.verbose:
            logger.exception("Full traceback:")
        reporter.fatal(f"Unexpected error: {e}")

    failure = result.failure
    if failure is not None:
        reporter.fatal(f"failed to create {failure.kind}: {failure.error}")

    reporter.add_step_summary("Milisman finished.")
    sys.exit(0)


if __name__ == "__main__":
    main()
