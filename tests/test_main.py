"""Tests for the action entry point."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import yaml

from main import main_with_env_parsing

ACTION_FILE = Path(__file__).parent.parent / "action.yml"


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("INPUT_CONFIGFILE", "INPUT_TIMEOUT", "INPUT_VERBOSE", "RUNNER_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestMainWithEnvParsing:
    """Test cases for translating action inputs into CLI arguments."""

    @patch("main.main")
    def test_inputs_become_arguments(self, mock_main: Mock, clean_env) -> None:
        clean_env.setenv("INPUT_CONFIGFILE", ".github/milisman.yaml")
        clean_env.setenv("INPUT_TIMEOUT", "10")
        clean_env.setenv("INPUT_VERBOSE", "true")

        with patch("sys.argv", ["main.py"]) as argv:
            main_with_env_parsing()

        assert argv == [
            "main.py",
            "--config",
            ".github/milisman.yaml",
            "--timeout",
            "10",
            "--verbose",
        ]
        mock_main.assert_called_once_with()

    @patch("main.main")
    def test_verbose_false(self, mock_main: Mock, clean_env) -> None:
        clean_env.setenv("INPUT_VERBOSE", "false")

        with patch("sys.argv", ["main.py"]) as argv:
            main_with_env_parsing()

        assert argv == ["main.py"]

    @patch("main.main")
    def test_runner_debug_enables_verbose(self, mock_main: Mock, clean_env) -> None:
        clean_env.setenv("RUNNER_DEBUG", "1")

        with patch("sys.argv", ["main.py"]) as argv:
            main_with_env_parsing()

        assert argv == ["main.py", "--verbose"]


def test_action_declares_every_input_it_passes() -> None:
    action = yaml.safe_load(ACTION_FILE.read_text(encoding="utf-8"))
    inputs = set(action["inputs"])
    env = action["runs"]["steps"][-1]["env"]

    assert {"configfile", "timeout", "verbose"} <= inputs
    assert {f"INPUT_{name.upper()}" for name in inputs} == set(env)
