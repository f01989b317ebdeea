"""
SSH transport gateway.

Opens a TCP connection, runs the paramiko key exchange, verifies the host
key and authenticates with a password. The result is a connected,
authenticated paramiko.Transport ready for channels. disconnect() ends it
with a disconnect notice.
"""

from __future__ import annotations

import socket

import paramiko
from paramiko.common import cMSG_DISCONNECT

from remsh.exceptions import AuthenticationError, ConnectionError, HostKeyError
from remsh.logging import get_logger
from remsh.transport.host_keys import AcceptAnyHostKey, HostKeyVerifier

logger = get_logger(__name__)

DEFAULT_PORT = 22

# SSH_DISCONNECT_BY_APPLICATION (RFC 4250)
DISCONNECT_BY_APPLICATION = 11


def connect(
    username: str,
    password: str,
    address: tuple[str, int],
    *,
    verifier: HostKeyVerifier | None = None,
    timeout: float = 10.0,
    keepalive: int = 0,
) -> paramiko.Transport:
    """
    Connect and authenticate to an SSH server.

    Args:
        username: Remote account name.
        password: Password for the account.
        address: (host, port) tuple.
        verifier: Host key policy. Defaults to AcceptAnyHostKey.
        timeout: Seconds allowed for TCP connect, key exchange and auth.
        keepalive: Keepalive interval in seconds (0 disables).

    Returns:
        Authenticated transport.

    Raises:
        ConnectionError: Network or protocol failure.
        HostKeyError: Server key rejected by the verifier.
        AuthenticationError: Password rejected.
    """
    host, port = address
    verifier = verifier or AcceptAnyHostKey()

    logger.info(f"Connecting to {host}:{port}")
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as e:
        raise ConnectionError(host, port, str(e) or type(e).__name__, cause=e) from e

    transport = paramiko.Transport(sock)
    try:
        transport.start_client(timeout=timeout)
        verifier.verify(host, port, transport.get_remote_server_key())
        transport.auth_password(username, password)
    except HostKeyError:
        transport.close()
        raise
    except paramiko.AuthenticationException as e:
        transport.close()
        raise AuthenticationError(username, cause=e) from e
    except (paramiko.SSHException, EOFError, OSError) as e:
        transport.close()
        raise ConnectionError(host, port, str(e) or type(e).__name__, cause=e) from e

    if not transport.is_authenticated():
        transport.close()
        raise AuthenticationError(username)

    if keepalive > 0:
        transport.set_keepalive(keepalive)

    logger.info(f"Authenticated as {username}@{host}")
    return transport


def disconnect(transport: paramiko.Transport, description: str = "") -> None:
    """
    Send a disconnect notice (by application) and close the transport.

    paramiko's Transport.close() drops the socket without SSH_MSG_DISCONNECT.
    A notice that cannot be sent is logged; the transport is closed anyway.
    """
    if transport.is_active():
        m = paramiko.Message()
        m.add_byte(cMSG_DISCONNECT)
        m.add_int(DISCONNECT_BY_APPLICATION)
        m.add_string(description)
        m.add_string("en")
        try:
            # No public paramiko API sends this message
            transport._send_user_message(m)
        except (paramiko.SSHException, EOFError, OSError) as e:
            logger.debug(f"Could not send disconnect notice: {e}")
    transport.close()
