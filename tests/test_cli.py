"""Tests for CLI entry point."""

from __future__ import annotations

import subprocess
import sys
from unittest.mock import patch

import pytest

from tracker_server.app import CLI


def test_parser_run_defaults() -> None:
    """Parser parses 'run' with defaults."""
    parser = CLI._build_parser()
    args = parser.parse_args(["run"])
    assert args.command == "run"
    assert args.host == "127.0.0.1"
    assert args.port == 8080
    assert args.reload is False
    assert args.log_level is None


def test_cli_no_command_exits(capsys: pytest.CaptureFixture[str]) -> None:
    """CLI with no command prints help and exits 1."""
    with pytest.raises(SystemExit) as exc_info:
        CLI.main([])
    assert exc_info.value.code == 1
    assert "tracker-server" in capsys.readouterr().out


def test_cli_run_starts_uvicorn_factory() -> None:
    """'run' hands the app factory to uvicorn."""
    with patch("uvicorn.run") as run, patch.object(CLI, "configure_logging"):
        CLI.main(["run", "--port", "9000", "--log-level", "warning"])
    run.assert_called_once()
    assert run.call_args.args == ("tracker_server.app:create_app",)
    assert run.call_args.kwargs["factory"] is True
    assert run.call_args.kwargs["port"] == 9000
    assert run.call_args.kwargs["log_level"] == "warning"


def test_cli_run_failure_exits() -> None:
    """Startup errors exit with status 1 instead of a traceback."""
    with (
        patch("uvicorn.run", side_effect=RuntimeError("port in use")),
        patch.object(CLI, "configure_logging"),
        pytest.raises(SystemExit) as exc_info,
    ):
        CLI.main(["run", "--log-level", "info"])
    assert exc_info.value.code == 1


def test_cli_entry_point_installed() -> None:
    """python -m tracker_server.app prints help and exits 1 without a command."""
    result = subprocess.run(
        [sys.executable, "-m", "tracker_server.app"],
        capture_output=True, text=True, timeout=10,
    )
    assert result.returncode == 1
