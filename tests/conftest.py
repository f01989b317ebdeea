"""
Pytest configuration and fixtures for remsh tests.
"""

from __future__ import annotations

import contextlib
import io
import os
from collections import deque
from typing import Callable, Iterable

import pytest

from remsh.exceptions import ChannelWriteError, PtyRequestError
from remsh.session.models import PtyOptions, SshEvent


class ScriptedChannel:
    """
    Stand-in for ChannelSession driven by a list of events.

    The readiness fd is a pipe; when ``readable`` is True a byte is left in
    it so the event loop always sees the channel as ready.
    """

    def __init__(
        self,
        events: Iterable[SshEvent] = (),
        *,
        readable: bool = True,
        refuse_pty: bool = False,
        reply: Callable[[bytes], Iterable[SshEvent]] | None = None,
    ) -> None:
        self.events: deque[SshEvent] = deque(events)
        self.sent: list[bytes] = []
        self.eof_sent = False
        self.pty_requested = False
        self.pty_options: PtyOptions | None = None
        self.started = False
        self.command: str | None = None
        self.shell_started = False
        self.closed = False
        self._refuse_pty = refuse_pty
        self._reply = reply
        self._r, self._w = os.pipe()
        if readable:
            os.write(self._w, b"x")

    def fileno(self) -> int:
        return self._r

    def request_pty(self, options: PtyOptions) -> None:
        if self._refuse_pty:
            raise PtyRequestError("Pty request declined: test")
        self.pty_requested = True
        self.pty_options = options

    def start_shell(self) -> None:
        self.started = True
        self.shell_started = True

    def exec(self, command: str) -> None:
        self.started = True
        self.command = command

    def send(self, data: bytes) -> None:
        if self.closed:
            raise ChannelWriteError("Channel is closed")
        self.sent.append(data)
        if self._reply is not None:
            self.events.extend(self._reply(data))

    def send_eof(self) -> None:
        self.eof_sent = True

    def next_event(self) -> SshEvent | None:
        if self.events:
            return self.events.popleft()
        return None

    def release(self) -> None:
        for fd in (self._r, self._w):
            with contextlib.suppress(OSError):
                os.close(fd)


class FakeSession:
    """Stand-in for Session that hands out a prepared channel."""

    def __init__(self, channel: ScriptedChannel) -> None:
        self.channel = channel
        self.opened = False
        self.close_calls = 0

    def open(self, *, timeout: float | None = None) -> ScriptedChannel:
        self.opened = True
        return self.channel

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def make_channel():
    """Factory for ScriptedChannel instances, released after the test."""
    channels: list[ScriptedChannel] = []

    def _make(*args, **kwargs) -> ScriptedChannel:
        channel = ScriptedChannel(*args, **kwargs)
        channels.append(channel)
        return channel

    yield _make

    for channel in channels:
        channel.release()


@pytest.fixture
def stdin_pipe():
    """A (read_fd, write_fd) pipe used as local input."""
    r, w = os.pipe()
    yield r, w
    for fd in (r, w):
        with contextlib.suppress(OSError):
            os.close(fd)


@pytest.fixture
def local_file(tmp_path):
    """
    Factory opening a regular file (or /dev/null for None) as local input.

    Such descriptors cannot be registered with epoll.
    """
    fds: list[int] = []

    def _open(content: bytes | None = None) -> int:
        if content is None:
            path = os.devnull
        else:
            path = tmp_path / f"stdin-{len(fds)}"
            path.write_bytes(content)
        fd = os.open(path, os.O_RDONLY)
        fds.append(fd)
        return fd

    yield _open

    for fd in fds:
        with contextlib.suppress(OSError):
            os.close(fd)


@pytest.fixture
def output() -> io.BytesIO:
    """Binary sink for remote output."""
    return io.BytesIO()


@pytest.fixture
def reset_remsh_settings():
    """Reset settings before and after test."""
    from remsh.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_session():
    """Factory wrapping a channel in a FakeSession."""
    return FakeSession
