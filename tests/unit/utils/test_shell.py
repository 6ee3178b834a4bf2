"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from pkgscope.utils.shell import (
    QUERY_LOCALE,
    CommandResult,
    command_exists,
    run_command,
    run_interactive,
)


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success(self) -> None:
        assert CommandResult(stdout="", stderr="", returncode=0).success is True
        assert CommandResult(stdout="", stderr="", returncode=2).success is False


class TestRunCommand:
    """Tests for run_command function."""

    @patch("pkgscope.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command captures text output and the exit code."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["dpkg-query", "-W"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False
        assert kwargs["timeout"] == 60.0

    @patch("pkgscope.utils.shell.subprocess.run")
    def test_fixed_locale(self, mock_run: MagicMock) -> None:
        """Queries run under a fixed locale, keeping the rest of the env."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["flatpak", "list"])

        env = mock_run.call_args.kwargs["env"]
        assert env["LC_ALL"] == QUERY_LOCALE
        assert "PATH" in env

    @patch("pkgscope.utils.shell.subprocess.run")
    def test_passes_timeout(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["ls"], timeout=5.0)

        assert mock_run.call_args.kwargs["timeout"] == 5.0

    @patch("pkgscope.utils.shell.subprocess.run")
    def test_timeout_propagates(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="snap", timeout=1)

        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["snap", "list"], timeout=1)

    def test_raises_file_not_found(self) -> None:
        """run_command raises FileNotFoundError for missing commands."""
        with pytest.raises(FileNotFoundError):
            run_command(["nonexistent_command_xyz_12345"])


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("pkgscope.utils.shell.shutil.which", return_value="/usr/bin/snap")
    def test_found(self, mock_which: MagicMock) -> None:
        assert command_exists("snap") is True
        mock_which.assert_called_once_with("snap")

    @patch("pkgscope.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        assert command_exists("flatpak") is False


class TestRunInteractive:
    """Tests for run_interactive function."""

    @patch("pkgscope.utils.shell.subprocess.run")
    def test_returns_exit_code(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0)
        assert run_interactive(["echo", "hello"]) == 0

        mock_run.return_value = MagicMock(returncode=100)
        assert run_interactive(["apt-get", "install", "-y", "nope"]) == 100

    @patch("pkgscope.utils.shell.subprocess.run")
    def test_attached_to_terminal(self, mock_run: MagicMock) -> None:
        """Package manager output and privilege prompts reach the terminal."""
        mock_run.return_value = MagicMock(returncode=0)

        run_interactive(["apt-get", "install", "-y", "htop"])

        kwargs = mock_run.call_args.kwargs
        assert "capture_output" not in kwargs
        assert "stdout" not in kwargs
        assert "stderr" not in kwargs
        assert "env" not in kwargs

    def test_raises_file_not_found(self) -> None:
        """run_interactive raises FileNotFoundError for missing commands."""
        with pytest.raises(FileNotFoundError):
            run_interactive(["nonexistent_command_xyz_12345"])
