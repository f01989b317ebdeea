"""
Exception hierarchy for remsh.

All errors raised by the client derive from RemshError so callers can
report them with a single handler.
"""

from __future__ import annotations


class RemshError(Exception):
    """Base error for remsh."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._original_cause = cause

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(RemshError):
    """Network or transport failure while reaching the remote host."""

    def __init__(
        self,
        host: str,
        port: int,
        reason: str = "connection failed",
        cause: BaseException | None = None,
    ) -> None:
        self.host = host
        self.port = port
        super().__init__(f"Cannot connect to {host}:{port}: {reason}", cause)


class AuthenticationError(RemshError):
    """Credentials were rejected by the remote host."""

    def __init__(
        self,
        username: str,
        message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.username = username
        super().__init__(
            message or f"Authentication failed for user '{username}'", cause
        )


class HostKeyError(RemshError):
    """Remote host key could not be verified."""

    def __init__(self, host: str, fingerprint: str, reason: str) -> None:
        self.host = host
        self.fingerprint = fingerprint
        super().__init__(f"Host key for {host} rejected ({fingerprint}): {reason}")


# =============================================================================
# Channel Errors
# =============================================================================


class ChannelOpenError(RemshError):
    """Remote side refused to open a session channel."""


class PtyRequestError(RemshError):
    """Remote side declined the pseudo-terminal request."""


class ShellStartError(RemshError):
    """Remote side declined the shell request."""


class ExecError(RemshError):
    """Remote side declined to execute a command."""

    def __init__(self, command: str, cause: BaseException | None = None) -> None:
        self.command = command
        super().__init__(f"Remote refused to execute: {command}", cause)


class ChannelStateError(RemshError):
    """Channel operation issued in the wrong lifecycle state."""


class ChannelWriteError(RemshError):
    """Writing to the channel failed."""


class CloseError(RemshError):
    """Tearing down the session failed."""


# =============================================================================
# Local I/O Errors
# =============================================================================


class LocalReadError(RemshError):
    """Reading from local standard input failed."""
