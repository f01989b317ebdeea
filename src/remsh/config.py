"""
Client configuration.

Settings are read from REMSH_* environment variables. A single instance is
shared across the process through get_settings().

Usage:
    >>> from remsh.config import get_settings
    >>> settings = get_settings()
    >>> settings.connect_timeout
    10.0
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemshSettings(BaseSettings):
    """Runtime settings for the remote shell client."""

    model_config = SettingsConfigDict(
        env_prefix="REMSH_",
        extra="ignore",
    )

    # Connection
    connect_timeout: float = Field(default=10.0, ge=1.0, le=120.0)
    channel_timeout: float = Field(default=10.0, ge=1.0, le=120.0)
    keepalive_interval: int = Field(default=0, ge=0, le=3600)

    # Host verification
    known_hosts: Path | None = None

    # Event loop
    read_buffer_size: int = Field(default=1024, ge=1, le=65536)
    poll_interval: float = Field(default=0.05, ge=0.001, le=1.0)

    # Terminal
    default_term: str = "xterm"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_json: bool = False


_settings: RemshSettings | None = None


def get_settings() -> RemshSettings:
    """Return the process-wide settings, creating them on first use."""
    global _settings
    if _settings is None:
        _settings = RemshSettings()
    return _settings


def configure_settings(**overrides: object) -> RemshSettings:
    """Replace the process-wide settings with explicit overrides."""
    global _settings
    _settings = RemshSettings(**overrides)  # type: ignore[arg-type]
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the env."""
    global _settings
    _settings = None
