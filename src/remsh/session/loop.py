"""
I/O multiplexing loop for an open channel.

Races local input against channel readiness on the asyncio loop:
local bytes are sent to the channel, channel output is written to the
local output and flushed immediately.

Flow:
1. Watch stdin and the channel fd with add_reader
2. Whichever is reported first is handled first (no priority)
3. Stdin bytes -> ChannelSession.send()
4. Channel events -> output sink, exit status recorded, Closed ends the loop

paramiko only signals its fd for stdout data and closure, so the wait also
times out every poll_interval to pick up stderr data and exit status.

Regular files and /dev/null cannot be registered with epoll. Such stdin is
treated as always readable, and the channel is drained after every local
read so output keeps flowing while the file is sent.
"""

from __future__ import annotations

import asyncio
import os
import sys
from enum import Enum
from typing import BinaryIO

from remsh.exceptions import ChannelWriteError, LocalReadError
from remsh.logging import get_logger
from remsh.session.channel import ChannelSession
from remsh.session.models import (
    Closed,
    Data,
    Exit,
    ExtendedData,
    LoopResult,
    LoopState,
    SshEvent,
    TerminationReason,
)

logger = get_logger(__name__)

DEFAULT_BUFFER_SIZE = 1024
DEFAULT_POLL_INTERVAL = 0.05


class _Source(Enum):
    LOCAL = "local"
    REMOTE = "remote"


class EventLoop:
    """
    Bridges local stdin/stdout with one channel until either side ends.

    Args:
        channel: Channel with a started shell or command.
        stdin_fd: Descriptor to read local input from (default: stdin).
        output: Binary sink for remote output (default: stdout).
        buffer_size: Maximum bytes per local read.
        poll_interval: Seconds between channel re-checks.
        eof_terminates: End the loop on local EOF. When False, EOF is
            forwarded to the remote side and output is drained until the
            channel closes.
    """

    def __init__(
        self,
        channel: ChannelSession,
        *,
        stdin_fd: int | None = None,
        output: BinaryIO | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        eof_terminates: bool = True,
    ) -> None:
        self._channel = channel
        self._stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._output = output if output is not None else sys.stdout.buffer
        self._buffer_size = buffer_size
        self._poll_interval = poll_interval
        self._eof_terminates = eof_terminates

        self.state = LoopState.RUNNING
        self._local_eof = False
        self._stdin_pollable = True
        self._reason: TerminationReason | None = None
        self._exit_status: int | None = None
        self._bytes_sent = 0
        self._bytes_received = 0

    @property
    def exit_status(self) -> int | None:
        """Exit status reported by the remote side, if any."""
        return self._exit_status

    async def run(self) -> LoopResult:
        """
        Run until local EOF, channel closure, or an error.

        Raises:
            LocalReadError: If reading stdin fails.
            ChannelWriteError: If sending to the channel fails.
        """
        loop = asyncio.get_running_loop()
        self._stdin_pollable = _can_poll(loop, self._stdin_fd)
        if not self._stdin_pollable:
            logger.debug("stdin cannot be polled, reading it directly")

        try:
            while self.state is not LoopState.TERMINATED:
                source = await self._wait_ready(loop)
                if source is _Source.LOCAL:
                    self._forward_local()
                    if not self._stdin_pollable:
                        self._drain_remote()
                else:
                    self._drain_remote()
        finally:
            self.state = LoopState.TERMINATED

        return LoopResult(
            reason=self._reason or TerminationReason.REMOTE_CLOSED,
            exit_status=self._exit_status,
            bytes_sent=self._bytes_sent,
            bytes_received=self._bytes_received,
        )

    async def _wait_ready(self, loop: asyncio.AbstractEventLoop) -> _Source:
        """Suspend until stdin or the channel is readable, or the poll tick."""
        watch_local = not self._local_eof
        if watch_local and not self._stdin_pollable:
            # Always readable; let other tasks and signal handlers run first
            await asyncio.sleep(0)
            return _Source.LOCAL

        ready: asyncio.Future[_Source] = loop.create_future()

        def _on_ready(source: _Source) -> None:
            if not ready.done():
                ready.set_result(source)

        channel_fd = self._channel.fileno()
        if watch_local:
            loop.add_reader(self._stdin_fd, _on_ready, _Source.LOCAL)
        loop.add_reader(channel_fd, _on_ready, _Source.REMOTE)
        try:
            return await asyncio.wait_for(ready, timeout=self._poll_interval)
        except asyncio.TimeoutError:
            return _Source.REMOTE
        finally:
            if watch_local:
                loop.remove_reader(self._stdin_fd)
            loop.remove_reader(channel_fd)

    def _forward_local(self) -> None:
        try:
            data = os.read(self._stdin_fd, self._buffer_size)
        except BlockingIOError:
            return
        except OSError as e:
            raise LocalReadError(f"Error reading from stdin: {e}", cause=e) from e

        if not data:
            self._on_local_eof()
            return

        try:
            self._channel.send(data)
        except ChannelWriteError:
            if not self._channel.closed:
                raise
            # Remote side already ended; its pending output and Closed
            # end the loop instead.
            logger.debug(f"Dropped {len(data)} bytes of input after remote close")
            self._drain_remote()
            return
        self._bytes_sent += len(data)

    def _on_local_eof(self) -> None:
        self._local_eof = True
        if self._eof_terminates:
            logger.debug("Local EOF, ending session")
            self._reason = TerminationReason.LOCAL_EOF
            self.state = LoopState.TERMINATED
        else:
            logger.debug("Local EOF, forwarding to remote")
            self._channel.send_eof()

    def _drain_remote(self) -> None:
        while self.state is not LoopState.TERMINATED:
            event = self._channel.next_event()
            if event is None:
                return
            self._handle_event(event)

    def _handle_event(self, event: SshEvent) -> None:
        if isinstance(event, (Data, ExtendedData)):
            self._output.write(event.data)
            self._output.flush()
            self._bytes_received += len(event.data)
        elif isinstance(event, Exit):
            logger.info(f"Exit status: {event.status}")
            self._exit_status = event.status
            self.state = LoopState.DRAINING
        elif isinstance(event, Closed):
            logger.debug("Channel closed by remote")
            self._reason = TerminationReason.REMOTE_CLOSED
            self.state = LoopState.TERMINATED


def _can_poll(loop: asyncio.AbstractEventLoop, fd: int) -> bool:
    """False for descriptors epoll refuses (regular files, /dev/null)."""
    try:
        loop.add_reader(fd, lambda: None)
    except PermissionError:
        return False
    loop.remove_reader(fd)
    return True
