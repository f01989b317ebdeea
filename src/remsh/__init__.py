"""
remsh - interactive remote shell client over SSH.

Usage:
    >>> import asyncio
    >>> from remsh import Session, SessionOptions, create_runner
    >>>
    >>> session = Session.connect("root", "secret", ("example.com", 22))
    >>> code = asyncio.run(create_runner(SessionOptions()).run(session))
"""

from remsh.config import RemshSettings, configure_settings, get_settings
from remsh.exceptions import (
    AuthenticationError,
    ChannelOpenError,
    ChannelStateError,
    ChannelWriteError,
    CloseError,
    ConnectionError,
    ExecError,
    HostKeyError,
    LocalReadError,
    PtyRequestError,
    RemshError,
    ShellStartError,
)
from remsh.session import (
    BatchRunner,
    ChannelSession,
    EventLoop,
    InteractiveRunner,
    PtyOptions,
    Session,
    SessionOptions,
    create_runner,
)
from remsh.transport import AcceptAnyHostKey, KnownHostsVerifier, connect

__version__ = "0.1.0"

__all__ = [
    # Session
    "Session",
    "ChannelSession",
    "EventLoop",
    "InteractiveRunner",
    "BatchRunner",
    "create_runner",
    "PtyOptions",
    "SessionOptions",
    # Transport
    "connect",
    "AcceptAnyHostKey",
    "KnownHostsVerifier",
    # Config
    "RemshSettings",
    "get_settings",
    "configure_settings",
    # Errors
    "RemshError",
    "ConnectionError",
    "AuthenticationError",
    "HostKeyError",
    "ChannelOpenError",
    "PtyRequestError",
    "ShellStartError",
    "ExecError",
    "ChannelStateError",
    "ChannelWriteError",
    "LocalReadError",
    "CloseError",
]
