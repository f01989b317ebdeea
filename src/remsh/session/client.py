"""
Top-level session handle.

A Session owns one authenticated transport and at most one channel on it.
"""

from __future__ import annotations

import paramiko

from remsh.config import RemshSettings, get_settings
from remsh.exceptions import ChannelStateError, CloseError
from remsh.logging import get_logger
from remsh.session.channel import ChannelSession
from remsh.transport import connect, disconnect
from remsh.transport.host_keys import (
    AcceptAnyHostKey,
    HostKeyVerifier,
    KnownHostsVerifier,
)

logger = get_logger(__name__)


def verifier_from_settings(settings: RemshSettings) -> HostKeyVerifier:
    """Pick the host key policy configured in settings."""
    if settings.known_hosts is not None:
        return KnownHostsVerifier(settings.known_hosts)
    return AcceptAnyHostKey()


class Session:
    """
    Authenticated connection plus its single channel.

    close() tears both down and may be called any number of times.

    Usage:
        >>> with Session.connect("root", "secret", ("example.com", 22)) as session:
        ...     channel = session.open()
        ...     channel.start_shell()
    """

    def __init__(self, transport: paramiko.Transport) -> None:
        self._transport = transport
        self._channel: ChannelSession | None = None
        self._closed = False

    @classmethod
    def connect(
        cls,
        username: str,
        password: str,
        address: tuple[str, int],
        *,
        verifier: HostKeyVerifier | None = None,
        settings: RemshSettings | None = None,
    ) -> Session:
        """Connect, authenticate and wrap the transport."""
        settings = settings or get_settings()
        transport = connect(
            username,
            password,
            address,
            verifier=verifier or verifier_from_settings(settings),
            timeout=settings.connect_timeout,
            keepalive=settings.keepalive_interval,
        )
        return cls(transport)

    @property
    def channel(self) -> ChannelSession | None:
        return self._channel

    @property
    def is_closed(self) -> bool:
        return self._closed

    def open(self, *, timeout: float | None = None) -> ChannelSession:
        """
        Open the session's channel.

        Raises:
            ChannelStateError: If the session is closed or a channel is already open.
            ChannelOpenError: If the remote side refuses.
        """
        if self._closed:
            raise ChannelStateError("Session is closed")
        if self._channel is not None:
            raise ChannelStateError("Session already has an open channel")

        self._channel = ChannelSession.open(self._transport, timeout=timeout)
        return self._channel

    def close(self) -> None:
        """Close the channel and disconnect. Failures are logged, not raised."""
        if self._closed:
            return
        self._closed = True

        if self._channel is not None:
            try:
                self._channel.close()
            except CloseError as e:
                logger.warning(str(e))

        try:
            disconnect(self._transport)
        except (paramiko.SSHException, EOFError, OSError) as e:
            logger.warning(str(CloseError(f"Disconnect failed: {e}", cause=e)))
        else:
            logger.debug("Disconnected")

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
