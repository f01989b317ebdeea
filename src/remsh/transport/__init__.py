"""
SSH transport: connection, authentication and host key policy.
"""

from remsh.transport.gateway import DEFAULT_PORT, connect, disconnect
from remsh.transport.host_keys import (
    AcceptAnyHostKey,
    HostKeyVerifier,
    KnownHostsVerifier,
)

__all__ = [
    "DEFAULT_PORT",
    "connect",
    "disconnect",
    "AcceptAnyHostKey",
    "HostKeyVerifier",
    "KnownHostsVerifier",
]
