"""
Session channel over an SSH transport.

Wraps a paramiko.Channel and enforces the request order of an SSH session:
an optional pty request, then exactly one shell or exec request, then data.
"""

from __future__ import annotations

import paramiko

from remsh.exceptions import (
    ChannelOpenError,
    ChannelStateError,
    ChannelWriteError,
    CloseError,
    ExecError,
    PtyRequestError,
    ShellStartError,
)
from remsh.logging import get_logger
from remsh.session.models import (
    Closed,
    Data,
    Exit,
    ExtendedData,
    PtyOptions,
    SshEvent,
)

logger = get_logger(__name__)

# Errors paramiko raises for rejected requests or a dead transport
_CHANNEL_ERRORS = (paramiko.SSHException, EOFError, OSError)


class ChannelSession:
    """
    One logical session channel.

    Usage:
        >>> channel = ChannelSession.open(transport)
        >>> channel.request_pty(PtyOptions(width=120, height=40))
        >>> channel.start_shell()
        >>> channel.send(b"ls\\n")
    """

    RECV_SIZE = 32768

    def __init__(self, channel: paramiko.Channel) -> None:
        self._channel = channel
        self.pty_requested = False
        self.started = False
        self._exit_reported = False
        self._close_reported = False

    @classmethod
    def open(
        cls,
        transport: paramiko.Transport,
        *,
        timeout: float | None = None,
    ) -> ChannelSession:
        """
        Open a new session channel.

        Raises:
            ChannelOpenError: If the transport rejects the request.
        """
        try:
            channel = transport.open_session(timeout=timeout)
        except _CHANNEL_ERRORS as e:
            raise ChannelOpenError(f"Could not open session channel: {e}", cause=e) from e

        session = cls(channel)
        logger.debug(f"Opened channel {session.channel_id}")
        return session

    @property
    def channel_id(self) -> int:
        """Identifier assigned by paramiko."""
        return self._channel.get_id()

    @property
    def closed(self) -> bool:
        """True once either side has closed the channel."""
        return self._channel.closed

    def fileno(self) -> int:
        """File descriptor that becomes readable when the channel has data."""
        return self._channel.fileno()

    # =========================================================================
    # Requests
    # =========================================================================

    def request_pty(self, options: PtyOptions) -> None:
        """
        Request a pseudo-terminal with no special terminal modes.

        Raises:
            ChannelStateError: If a pty was already requested or the channel started.
            PtyRequestError: If the remote side declines.
        """
        if self.started:
            raise ChannelStateError("Cannot request a pty after the shell or command started")
        if self.pty_requested:
            raise ChannelStateError("A pty was already requested on this channel")

        try:
            self._channel.get_pty(
                term=options.term,
                width=options.width,
                height=options.height,
            )
        except _CHANNEL_ERRORS as e:
            raise PtyRequestError(f"Pty request declined: {e}", cause=e) from e

        self.pty_requested = True
        logger.debug(f"Pty granted: {options.term} {options.width}x{options.height}")

    def start_shell(self) -> None:
        """
        Request an interactive shell.

        Raises:
            ChannelStateError: If a shell or command was already started.
            ShellStartError: If the remote side declines.
        """
        self._ensure_not_started()
        try:
            self._channel.invoke_shell()
        except _CHANNEL_ERRORS as e:
            raise ShellStartError(f"Shell request declined: {e}", cause=e) from e
        self.started = True

    def exec(self, command: str) -> None:
        """
        Request execution of a single command line.

        Raises:
            ChannelStateError: If a shell or command was already started.
            ExecError: If the remote side declines.
        """
        self._ensure_not_started()
        try:
            self._channel.exec_command(command)
        except _CHANNEL_ERRORS as e:
            raise ExecError(command, cause=e) from e
        self.started = True

    def _ensure_not_started(self) -> None:
        if self.started:
            raise ChannelStateError("A shell or command was already started on this channel")

    # =========================================================================
    # Data
    # =========================================================================

    def send(self, data: bytes) -> None:
        """
        Write all bytes as channel data.

        Raises:
            ChannelStateError: If no shell or command was started yet.
            ChannelWriteError: If the channel is closed or the write fails.
        """
        if not self.started:
            raise ChannelStateError("Cannot send before a shell or command is started")
        if self._channel.closed:
            raise ChannelWriteError("Channel is closed")

        try:
            self._channel.sendall(data)
        except _CHANNEL_ERRORS as e:
            raise ChannelWriteError(f"Channel write failed: {e}", cause=e) from e

    def send_eof(self) -> None:
        """Tell the remote side no more input will follow."""
        if self._channel.closed:
            return
        try:
            self._channel.shutdown_write()
        except _CHANNEL_ERRORS as e:
            raise ChannelWriteError(f"Could not send EOF: {e}", cause=e) from e

    def next_event(self) -> SshEvent | None:
        """
        Return the next pending channel event without blocking.

        Buffered output is always returned before the exit status, and the
        exit status before closure. Returns None when nothing is pending.
        """
        # Read before the buffers: paramiko's transport thread may append
        # final data and then close between the checks.
        closed = self._channel.closed

        if self._channel.recv_ready():
            data = self._channel.recv(self.RECV_SIZE)
            if data:
                return Data(data)

        if self._channel.recv_stderr_ready():
            data = self._channel.recv_stderr(self.RECV_SIZE)
            if data:
                return ExtendedData(data)

        if not self._exit_reported and self._channel.exit_status_ready():
            self._exit_reported = True
            status = self._channel.recv_exit_status()
            # paramiko reports -1 when the channel closed without a status
            if status >= 0:
                return Exit(status)

        if not self._close_reported and closed:
            self._close_reported = True
            return Closed()

        return None

    # =========================================================================
    # Teardown
    # =========================================================================

    def close(self) -> None:
        """
        Close the channel. A no-op if it is already closed.

        Raises:
            CloseError: If paramiko fails while closing.
        """
        if self._channel.closed:
            return
        try:
            self._channel.close()
        except _CHANNEL_ERRORS as e:
            raise CloseError(f"Could not close channel {self.channel_id}: {e}", cause=e) from e
        logger.debug(f"Closed channel {self.channel_id}")
