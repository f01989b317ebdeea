"""
Remote session: channel setup, event loop and runners.

Usage:
    >>> from remsh.session import Session, SessionOptions, create_runner
    >>> session = Session.connect("root", "secret", ("example.com", 22))
    >>> runner = create_runner(SessionOptions())
    >>> code = await runner.run(session)
"""

from remsh.session.channel import ChannelSession
from remsh.session.client import Session
from remsh.session.loop import EventLoop
from remsh.session.models import (
    Closed,
    Data,
    Exit,
    ExtendedData,
    LoopResult,
    LoopState,
    PtyOptions,
    SessionMode,
    SessionOptions,
    SshEvent,
    TerminationReason,
)
from remsh.session.runner import (
    BatchRunner,
    InteractiveRunner,
    SessionRunner,
    create_runner,
)

__all__ = [
    # Handles
    "Session",
    "ChannelSession",
    "EventLoop",
    # Runners
    "SessionRunner",
    "InteractiveRunner",
    "BatchRunner",
    "create_runner",
    # Models
    "PtyOptions",
    "SessionMode",
    "SessionOptions",
    "LoopResult",
    "LoopState",
    "TerminationReason",
    # Events
    "SshEvent",
    "Data",
    "ExtendedData",
    "Exit",
    "Closed",
]
