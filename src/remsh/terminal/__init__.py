"""
Local terminal support.

Usage:
    >>> from remsh.terminal import raw_mode, get_terminal_size
    >>> cols, rows = get_terminal_size()
    >>> with raw_mode():
    ...     ...
"""

from remsh.terminal.modes import (
    TerminalMode,
    enter_raw_mode,
    exit_raw_mode,
    get_terminal_size,
    is_tty,
    raw_mode,
)
from remsh.terminal.signals import termination_signals

__all__ = [
    # Modes
    "TerminalMode",
    "enter_raw_mode",
    "exit_raw_mode",
    "get_terminal_size",
    "is_tty",
    "raw_mode",
    # Signals
    "termination_signals",
]
