"""
Termination signal handling for a running session.

SIGTERM and SIGHUP are turned into cancellation of the current task so
that cleanup scopes (raw mode, session close) unwind normally.
"""

from __future__ import annotations

import asyncio
import signal
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Generator

from remsh.logging import get_logger

logger = get_logger(__name__)

TERMINATION_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


@dataclass
class SignalState:
    """Signals hooked by termination_signals() and the one received, if any."""

    installed: list[signal.Signals] = field(default_factory=list)
    received: signal.Signals | None = None


@contextmanager
def termination_signals(
    task: asyncio.Task | None = None,
) -> Generator[SignalState, None, None]:
    """
    Cancel ``task`` (the current task by default) on SIGTERM/SIGHUP.

    Must be used from inside a running event loop. Handlers are removed
    on exit.
    """
    loop = asyncio.get_running_loop()
    target = task or asyncio.current_task()
    state = SignalState()

    def _on_signal(signum: signal.Signals) -> None:
        logger.info(f"Received {signum.name}, ending session")
        state.received = signum
        if target is not None:
            target.cancel()

    for sig in TERMINATION_SIGNALS:
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (NotImplementedError, RuntimeError, ValueError):
            continue
        state.installed.append(sig)

    try:
        yield state
    finally:
        for sig in state.installed:
            loop.remove_signal_handler(sig)
