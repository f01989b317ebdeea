"""
remsh CLI.

Usage:
    remsh my-server
    remsh my-server -u admin -p 2222
    remsh my-server ls -la
    remsh my-server -t -- top -n 1
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from remsh.config import RemshSettings, get_settings
from remsh.exceptions import RemshError
from remsh.logging import setup_logging
from remsh.session import Session, SessionOptions, create_runner
from remsh.transport import DEFAULT_PORT

err_console = Console(stderr=True)

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


@click.command(context_settings={"allow_interspersed_args": False})
@click.argument("host")
@click.argument("command", nargs=-1)
@click.option(
    "--port", "-p",
    default=DEFAULT_PORT,
    show_default=True,
    type=click.IntRange(1, 65535),
    help="SSH port",
)
@click.option("--username", "-u", default="root", show_default=True, help="Remote user")
@click.option(
    "--password",
    envvar="REMSH_PASSWORD",
    help="Password (prompted when omitted)",
)
@click.option("--term", help="Terminal type for the remote pty")
@click.option(
    "--tty", "-t", "force_tty",
    is_flag=True,
    help="Request a pty when running a command",
)
@click.option(
    "--known-hosts",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Verify the host key against this known_hosts file",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity")
@click.version_option(package_name="remsh")
def main(
    host: str,
    command: tuple[str, ...],
    port: int,
    username: str,
    password: str | None,
    term: str | None,
    force_tty: bool,
    known_hosts: Path | None,
    verbose: int,
) -> None:
    """Interactive remote shell over SSH.

    Opens a shell on HOST, or runs COMMAND and exits with its status.

    Examples:

        remsh my-server

        remsh my-server -u admin uname -a
    """
    settings = get_settings()
    if known_hosts is not None:
        settings = settings.model_copy(update={"known_hosts": known_hosts})

    level = VERBOSITY_LEVELS.get(min(verbose, 2), settings.log_level)
    setup_logging(level, json_format=settings.log_json)

    if password is None:
        password = click.prompt(
            f"{username}@{host}'s password", hide_input=True, err=True
        )

    options = SessionOptions(
        command=" ".join(command) if command else None,
        term=term or settings.default_term,
        force_pty=force_tty,
    )
    code = asyncio.run(_run_async(host, port, username, password, options, settings))
    raise SystemExit(code)


async def _run_async(
    host: str,
    port: int,
    username: str,
    password: str,
    options: SessionOptions,
    settings: RemshSettings,
) -> int:
    """Connect and run the session. Errors become a message and exit code 1."""
    try:
        session = await asyncio.to_thread(
            Session.connect, username, password, (host, port), settings=settings
        )
        runner = create_runner(options, settings)
        return await runner.run(session)
    except RemshError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1
    except OSError as e:
        err_console.print(f"[red]I/O error:[/] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    main()
