"""
Host key verification strategies.

The gateway hands the server key to a HostKeyVerifier after the key
exchange and before authentication. Strategies are swappable so the
session code never depends on a particular trust policy.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import paramiko

from remsh.exceptions import HostKeyError
from remsh.logging import get_logger

logger = get_logger(__name__)


def known_hosts_entry(host: str, port: int) -> str:
    """Name used for a host in OpenSSH known_hosts files."""
    if port == 22:
        return host
    return f"[{host}]:{port}"


def key_fingerprint(key: paramiko.PKey) -> str:
    """SHA256 fingerprint of a server key."""
    return key.fingerprint


class HostKeyVerifier(Protocol):
    """Decides whether a server key is trusted."""

    def verify(self, host: str, port: int, key: paramiko.PKey) -> None:
        """Return normally to accept, raise HostKeyError to reject."""
        ...


class AcceptAnyHostKey:
    """Trust every server key."""

    def verify(self, host: str, port: int, key: paramiko.PKey) -> None:
        logger.debug(
            f"Accepting {key.get_name()} key for {known_hosts_entry(host, port)} "
            f"without verification ({key_fingerprint(key)})"
        )


class KnownHostsVerifier:
    """
    Check server keys against an OpenSSH known_hosts file.

    Unknown hosts and mismatching keys are both rejected. The file is
    never written to.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._host_keys = paramiko.HostKeys()
        if self.path.exists():
            self._host_keys.load(str(self.path))
        else:
            logger.warning(f"Known hosts file not found: {self.path}")

    def verify(self, host: str, port: int, key: paramiko.PKey) -> None:
        entry = known_hosts_entry(host, port)
        fingerprint = key_fingerprint(key)
        known = self._host_keys.lookup(entry)

        if not known:
            raise HostKeyError(entry, fingerprint, f"host not found in {self.path}")

        expected = known.get(key.get_name())
        if expected is None:
            raise HostKeyError(
                entry, fingerprint, f"no {key.get_name()} key recorded in {self.path}"
            )
        if expected != key:
            raise HostKeyError(entry, fingerprint, "key does not match known_hosts")

        logger.debug(f"Host key for {entry} verified ({fingerprint})")
