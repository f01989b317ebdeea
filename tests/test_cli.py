"""
Tests for CLI module.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from remsh.cli import _run_async, main
from remsh.config import RemshSettings
from remsh.exceptions import AuthenticationError
from remsh.session import SessionMode, SessionOptions


@pytest.fixture
def run_async():
    """Replace the async body and logging setup of main()."""
    with patch("remsh.cli._run_async", new_callable=AsyncMock) as mock_run, \
         patch("remsh.cli.setup_logging") as mock_logging:
        mock_run.return_value = 0
        mock_run.setup_logging = mock_logging
        yield mock_run


class TestCLIMain:
    """Test main command."""

    def test_help(self):
        """--help shows usage."""
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Interactive remote shell" in result.output

    def test_version(self):
        """--version shows version."""
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    def test_missing_host(self):
        """HOST is required."""
        runner = CliRunner()
        result = runner.invoke(main, [])
        assert result.exit_code == 2

    def test_invalid_port(self):
        """Ports outside 1..65535 are rejected."""
        runner = CliRunner()
        result = runner.invoke(main, ["my-server", "-p", "70000", "--password", "x"])
        assert result.exit_code == 2


class TestCLIRun:
    """Test argument handling before the session starts."""

    def test_interactive_session(self, run_async, reset_remsh_settings):
        """No command opens an interactive shell."""
        runner = CliRunner()
        result = runner.invoke(main, ["my-server", "--password", "secret"])

        assert result.exit_code == 0
        host, port, username, password, options, settings = run_async.await_args.args
        assert (host, port, username, password) == ("my-server", 22, "root", "secret")
        assert options.mode is SessionMode.INTERACTIVE
        assert options.term == "xterm"

    def test_exit_code_propagated(self, run_async, reset_remsh_settings):
        """The session's exit code becomes the process exit code."""
        run_async.return_value = 3
        runner = CliRunner()
        result = runner.invoke(main, ["my-server", "--password", "x", "false"])
        assert result.exit_code == 3

    def test_command_joined(self, run_async, reset_remsh_settings):
        """Trailing arguments form a single remote command."""
        runner = CliRunner()
        result = runner.invoke(
            main, ["my-server", "-u", "admin", "-p", "2222", "--password", "x", "ls", "-la"]
        )

        assert result.exit_code == 0
        _, port, username, _, options, _ = run_async.await_args.args
        assert port == 2222
        assert username == "admin"
        assert options.command == "ls -la"
        assert options.mode is SessionMode.BATCH
        assert options.force_pty is False

    def test_force_tty(self, run_async, reset_remsh_settings):
        """-t requests a pty for the command."""
        runner = CliRunner()
        result = runner.invoke(
            main, ["my-server", "--password", "x", "-t", "--term", "vt100", "top"]
        )

        assert result.exit_code == 0
        options = run_async.await_args.args[4]
        assert options.force_pty is True
        assert options.term == "vt100"

    def test_password_prompt(self, run_async, reset_remsh_settings):
        """The password is prompted when not given."""
        runner = CliRunner()
        result = runner.invoke(main, ["my-server"], input="secret\n", env={"REMSH_PASSWORD": None})

        assert result.exit_code == 0
        assert run_async.await_args.args[3] == "secret"

    def test_password_from_env(self, run_async, reset_remsh_settings):
        """REMSH_PASSWORD skips the prompt."""
        runner = CliRunner()
        result = runner.invoke(main, ["my-server"], env={"REMSH_PASSWORD": "from-env"})

        assert result.exit_code == 0
        assert run_async.await_args.args[3] == "from-env"

    def test_known_hosts(self, run_async, reset_remsh_settings, tmp_path):
        """--known-hosts overrides the configured file."""
        known_hosts = tmp_path / "known_hosts"
        runner = CliRunner()
        result = runner.invoke(
            main, ["my-server", "--password", "x", "--known-hosts", str(known_hosts)]
        )

        assert result.exit_code == 0
        settings = run_async.await_args.args[5]
        assert settings.known_hosts == Path(known_hosts)

    @pytest.mark.parametrize(
        ("flags", "level"),
        [([], "WARNING"), (["-v"], "INFO"), (["-vv"], "DEBUG"), (["-vvv"], "DEBUG")],
    )
    def test_verbosity(self, run_async, reset_remsh_settings, flags, level):
        """-v raises the log level."""
        runner = CliRunner()
        result = runner.invoke(main, ["my-server", "--password", "x", *flags])

        assert result.exit_code == 0
        assert run_async.setup_logging.call_args.args[0] == level


class TestRunAsync:
    """Test _run_async error handling."""

    async def test_runs_session(self):
        """A connected session is handed to the runner."""
        session = MagicMock()
        runner = MagicMock()
        runner.run = AsyncMock(return_value=7)
        options = SessionOptions(command="true")
        settings = RemshSettings()

        with patch("remsh.cli.Session.connect", return_value=session) as connect, \
             patch("remsh.cli.create_runner", return_value=runner) as factory:
            code = await _run_async("h", 22, "root", "pw", options, settings)

        assert code == 7
        connect.assert_called_once_with("root", "pw", ("h", 22), settings=settings)
        factory.assert_called_once_with(options, settings)
        runner.run.assert_awaited_once_with(session)

    async def test_remsh_error(self):
        """Client errors print a message and exit 1."""
        with patch("remsh.cli.Session.connect", side_effect=AuthenticationError("root")), \
             patch("remsh.cli.err_console") as console:
            code = await _run_async("h", 22, "root", "bad", SessionOptions(), RemshSettings())

        assert code == 1
        printed = console.print.call_args.args[0]
        assert "Error" in printed
        assert "Authentication failed for user 'root'" in printed

    async def test_os_error(self):
        """Local I/O errors print a message and exit 1."""
        runner = MagicMock()
        runner.run = AsyncMock(side_effect=OSError("Bad file descriptor"))

        with patch("remsh.cli.Session.connect", return_value=MagicMock()), \
             patch("remsh.cli.create_runner", return_value=runner), \
             patch("remsh.cli.err_console") as console:
            code = await _run_async("h", 22, "root", "pw", SessionOptions(), RemshSettings())

        assert code == 1
        assert "Bad file descriptor" in console.print.call_args.args[0]
