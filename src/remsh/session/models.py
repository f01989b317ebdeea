"""
Models for remote sessions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from remsh.terminal.modes import get_terminal_size


class PtyOptions(BaseModel):
    """Pseudo-terminal request parameters."""

    model_config = {"frozen": True}

    term: str = "xterm"
    width: int = Field(default=80, gt=0)
    height: int = Field(default=24, gt=0)

    @classmethod
    def from_terminal(cls, term: str = "xterm") -> PtyOptions:
        """Build options from the local terminal size (80x24 fallback)."""
        width, height = get_terminal_size()
        return cls(term=term, width=width, height=height)


class SessionMode(str, Enum):
    """How the remote side is driven."""

    INTERACTIVE = "interactive"
    BATCH = "batch"


class SessionOptions(BaseModel):
    """What to run once the channel is open."""

    command: str | None = None
    term: str = "xterm"
    force_pty: bool = False

    @property
    def mode(self) -> SessionMode:
        if self.command is None:
            return SessionMode.INTERACTIVE
        return SessionMode.BATCH


# =============================================================================
# Channel Events
# =============================================================================


@dataclass(frozen=True)
class SshEvent:
    """Base class for events read from a channel."""


@dataclass(frozen=True)
class Data(SshEvent):
    """Primary output from the remote side."""

    data: bytes


@dataclass(frozen=True)
class ExtendedData(SshEvent):
    """Secondary output (stderr for stream 1)."""

    data: bytes
    stream: int = 1


@dataclass(frozen=True)
class Exit(SshEvent):
    """Remote command reported its exit status."""

    status: int


@dataclass(frozen=True)
class Closed(SshEvent):
    """Remote side closed the channel. Nothing follows."""


# =============================================================================
# Loop State
# =============================================================================


class LoopState(Enum):
    """Event loop lifecycle states."""

    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"


class TerminationReason(Enum):
    """Why the event loop stopped."""

    LOCAL_EOF = "local_eof"
    REMOTE_CLOSED = "remote_closed"


@dataclass
class LoopResult:
    """Outcome of an event loop run."""

    reason: TerminationReason
    exit_status: int | None = None
    bytes_sent: int = 0
    bytes_received: int = 0
