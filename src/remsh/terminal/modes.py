"""
Terminal mode management utilities.

Provides TTY state management for raw mode terminal operations.
Supports Unix (Linux, macOS) systems via termios.
"""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator

from remsh.logging import get_logger

logger = get_logger(__name__)

FALLBACK_SIZE = (80, 24)


@dataclass
class TerminalMode:
    """
    Container for terminal mode state.

    Stores the original terminal settings for restoration.
    """

    original_settings: Any | None = None
    is_raw: bool = False
    fd: int | None = None


# Global terminal mode state
_terminal_mode = TerminalMode()


def is_tty() -> bool:
    """Check if stdin is a TTY."""
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def get_terminal_size() -> tuple[int, int]:
    """
    Get current terminal size.

    Returns:
        Tuple of (columns, rows). Falls back to 80x24 when stdout is not
        attached to a terminal or reports a zero dimension.
    """
    try:
        size = os.get_terminal_size()
    except (OSError, ValueError):
        return FALLBACK_SIZE
    if size.columns <= 0 or size.lines <= 0:
        return FALLBACK_SIZE
    return size.columns, size.lines


def enter_raw_mode() -> bool:
    """
    Enter raw terminal mode (unbuffered, no echo).

    Raw mode:
    - Disables line buffering
    - Disables local echo
    - Disables signal generation (Ctrl+C, Ctrl+Z)
    - Allows reading individual keypresses

    Returns:
        True if the terminal is in raw mode, False if not supported.

    Note:
        Always call exit_raw_mode() to restore terminal state.
    """
    if _terminal_mode.is_raw:
        return True  # Already in raw mode

    if not is_tty():
        return False

    try:
        import termios
        import tty
    except ImportError:
        return False

    try:
        fd = sys.stdin.fileno()
        _terminal_mode.original_settings = termios.tcgetattr(fd)
        tty.setraw(fd)
    except (OSError, termios.error) as e:
        logger.debug(f"Could not enter raw mode: {e}")
        _terminal_mode.original_settings = None
        return False

    _terminal_mode.fd = fd
    _terminal_mode.is_raw = True
    return True


def exit_raw_mode() -> bool:
    """
    Exit raw terminal mode and restore original settings.

    Returns:
        True if successful, False if not in raw mode.
    """
    if not _terminal_mode.is_raw:
        return False  # Not in raw mode

    try:
        import termios

        termios.tcsetattr(
            _terminal_mode.fd, termios.TCSADRAIN, _terminal_mode.original_settings
        )
    except (ImportError, OSError) as e:
        logger.warning(f"Could not restore terminal mode: {e}")
        return False
    finally:
        _terminal_mode.original_settings = None
        _terminal_mode.is_raw = False
        _terminal_mode.fd = None

    return True


@contextmanager
def raw_mode(enabled: bool = True) -> Generator[bool, None, None]:
    """
    Context manager for raw terminal mode.

    Yields whether raw mode was actually entered. The original mode is
    restored on every exit path, including exceptions and cancellation.

    Usage:
        >>> with raw_mode():
        ...     data = os.read(sys.stdin.fileno(), 1024)
    """
    entered = False
    try:
        entered = enter_raw_mode() if enabled else False
        yield entered
    finally:
        if entered:
            exit_raw_mode()
