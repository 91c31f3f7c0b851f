"""Main entry point for the milisman GitHub Action.

This module translates the action inputs the runner exposes as environment
variables into command-line arguments and runs the CLI.
"""

import os
import sys

from milisman.actions import get_input
from milisman.cli import main


def main_with_env_parsing() -> None:
    """Main entry point that handles GitHub Actions environment variables."""
    configfile = get_input("configfile")
    if configfile:
        sys.argv.extend(["--config", configfile])

    if get_input("timeout"):
        sys.argv.extend(["--timeout", get_input("timeout")])

    if get_input("verbose").lower() == "true" or os.getenv("RUNNER_DEBUG") == "1":
        sys.argv.append("--verbose")

    main()

if __name__ == "__main__":
    main_with_env_parsing()
