"""
Session runners.

A runner drives one Session from channel setup to teardown:

1. Open the channel
2. Mode-specific setup (pty, shell or exec)
3. Enter raw mode when a pty was granted and stdin is a terminal
4. Run the EventLoop
5. Restore the terminal and close the session, on every exit path

InteractiveRunner and BatchRunner differ only in setup, in how local EOF
is treated and in how the loop result becomes a process exit code.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from contextlib import ExitStack
from typing import BinaryIO

from remsh.config import RemshSettings, get_settings
from remsh.exceptions import PtyRequestError
from remsh.logging import get_logger
from remsh.session.channel import ChannelSession
from remsh.session.client import Session
from remsh.session.loop import EventLoop
from remsh.session.models import LoopResult, PtyOptions, SessionMode, SessionOptions
from remsh.terminal.modes import is_tty, raw_mode
from remsh.terminal.signals import termination_signals

logger = get_logger(__name__)

# Exit code when the remote side never reported a status
NO_EXIT_STATUS = 255


class SessionRunner(ABC):
    """Base class for the interactive and batch session variants."""

    mode: SessionMode
    eof_terminates: bool = True

    def __init__(
        self,
        options: SessionOptions,
        settings: RemshSettings | None = None,
        *,
        stdin_fd: int | None = None,
        output: BinaryIO | None = None,
    ) -> None:
        self.options = options
        self.settings = settings or get_settings()
        self._stdin_fd = stdin_fd
        self._output = output
        self.result: LoopResult | None = None

    @abstractmethod
    def prepare(self, channel: ChannelSession) -> None:
        """Request a pty (if any) and start the shell or command."""

    @abstractmethod
    def exit_code(self, result: LoopResult) -> int:
        """Translate the loop result into a process exit code."""

    def pty_options(self) -> PtyOptions:
        return PtyOptions.from_terminal(self.options.term)

    def wants_raw_mode(self, channel: ChannelSession) -> bool:
        return channel.pty_requested and is_tty()

    def create_loop(self, channel: ChannelSession) -> EventLoop:
        return EventLoop(
            channel,
            stdin_fd=self._stdin_fd,
            output=self._output,
            buffer_size=self.settings.read_buffer_size,
            poll_interval=self.settings.poll_interval,
            eof_terminates=self.eof_terminates,
        )

    async def run(self, session: Session) -> int:
        """
        Drive the session to completion and return the exit code.

        The session is closed and the terminal restored whether the loop
        ends normally, raises, or is cancelled by SIGTERM/SIGHUP.
        """
        with ExitStack() as stack:
            stack.callback(session.close)

            channel = session.open(timeout=self.settings.channel_timeout)
            self.prepare(channel)

            stack.enter_context(raw_mode(enabled=self.wants_raw_mode(channel)))
            signals = stack.enter_context(termination_signals())

            try:
                self.result = await self.create_loop(channel).run()
            except asyncio.CancelledError:
                if signals.received is None:
                    raise
                return 128 + int(signals.received)

        logger.debug(
            f"Session ended ({self.result.reason.value}): "
            f"{self.result.bytes_sent} bytes sent, "
            f"{self.result.bytes_received} bytes received"
        )
        return self.exit_code(self.result)


class InteractiveRunner(SessionRunner):
    """Pty plus login shell. The shell's exit status is only logged."""

    mode = SessionMode.INTERACTIVE

    def prepare(self, channel: ChannelSession) -> None:
        channel.request_pty(self.pty_options())
        channel.start_shell()

    def exit_code(self, result: LoopResult) -> int:
        if result.exit_status is not None:
            logger.info(f"Shell exited with status {result.exit_status}")
        return 0


class BatchRunner(SessionRunner):
    """Single command. Local EOF is forwarded and the exit status returned."""

    mode = SessionMode.BATCH
    eof_terminates = False

    def prepare(self, channel: ChannelSession) -> None:
        if self.options.force_pty:
            try:
                channel.request_pty(self.pty_options())
            except PtyRequestError as e:
                logger.warning(f"{e}; continuing without a pty")
        channel.exec(self.options.command or "")

    def exit_code(self, result: LoopResult) -> int:
        if result.exit_status is None:
            logger.warning("Remote command ended without an exit status")
            return NO_EXIT_STATUS
        return result.exit_status


def create_runner(
    options: SessionOptions,
    settings: RemshSettings | None = None,
    **kwargs: object,
) -> SessionRunner:
    """Pick the runner for the options' mode."""
    if options.mode is SessionMode.INTERACTIVE:
        return InteractiveRunner(options, settings, **kwargs)  # type: ignore[arg-type]
    return BatchRunner(options, settings, **kwargs)  # type: ignore[arg-type]
