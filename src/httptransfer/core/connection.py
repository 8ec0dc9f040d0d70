"""
=============================================================================
CLIENT CONNECTION
=============================================================================

This module wraps ONE outbound TCP (or TLS over TCP) socket to one
host:port with the four operations a transfer needs:

    open()       resolve, connect, optionally TLS handshake
    write_all()  send every byte or fail
    read_some()  return whatever the kernel has, b"" only at end-of-stream
    close()      release the socket, safe to call twice

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

The server may send its response in any split:

    Server sends:
        "HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nHello"

    Client might receive:
        recv() → "HTTP/1.1 2"
        recv() → "00 OK\r\nContent-Length: 5\r\n\r\nHel"
        recv() → "lo"

So read_some() makes NO attempt to find message boundaries. That is the
ResponseParser's job; the connection only moves bytes.

=============================================================================
OPENING A CONNECTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                    open() Flow                                   │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   getaddrinfo(host, port)       ──► gaierror → dns_failed        │
    │          │                                                       │
    │   for each address:                                              │
    │          ├── socket() + connect()                                │
    │          │     refused      → try next address                   │
    │          │     timeout      → try next address                   │
    │          │                                                       │
    │          └── connected? ─── https? ── wrap_socket() + handshake  │
    │                                        SSLError → tls_handshake  │
    │                                                                  │
    │   no address worked → report the LAST failure                    │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

A timeout never leaves a half-open socket behind: whatever was created
is closed before the ConnectError is raised.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► OPEN ──────► CLOSED
     │                          ▲
     └──────────────────────────┘   (connect failed)

=============================================================================
"""

import socket
import ssl
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ConnectError, TransportError, ErrorKind


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"          # Created, not yet connected
    OPEN = "open"        # Connected (and handshaken for TLS)
    CLOSED = "closed"    # Socket released


@dataclass
class Connection:
    """
    An outbound connection owned by exactly one Transfer.

    Attributes:
        socket: The connected (possibly TLS-wrapped) socket.
        host: Host name the caller asked for.
        port: Remote port.
        use_tls: Whether the socket is TLS-wrapped.
        id: Short identifier used in log lines.
        state: Current connection state.
        bytes_sent: Total bytes handed to the kernel.
        bytes_received: Total bytes read from the kernel.
    """

    socket: socket.socket
    host: str
    port: int
    use_tls: bool = False

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.OPEN
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0
    bytes_received: int = 0

    # =========================================================================
    # OPENING
    # =========================================================================

    @classmethod
    def open(
        cls,
        host: str,
        port: int,
        use_tls: bool = False,
        timeout: Optional[float] = None,
        *,
        verify_tls: bool = True,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> "Connection":
        """
        Connect to host:port, performing a TLS handshake when use_tls.

        Args:
            host: Host name or IP literal.
            port: TCP port.
            use_tls: Wrap the socket in TLS after connecting.
            timeout: Seconds allowed for connect + handshake. Name
                     resolution (getaddrinfo) is not bounded by it.
                     None blocks indefinitely.
            verify_tls: Verify the server certificate and host name.
            ssl_context: Use this context instead of building one.

        Returns:
            An OPEN Connection.

        Raises:
            ConnectError: timeout, refused, dns_failed or
                          tls_handshake_failed.
        """
        started = time.monotonic()

        def remaining() -> Optional[float]:
            if timeout is None:
                return None
            left = timeout - (time.monotonic() - started)
            if left <= 0:
                raise ConnectError(
                    ErrorKind.TIMEOUT, f"Connect to {host}:{port} timed out"
                )
            return left

        try:
            addresses = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
        except socket.gaierror as e:
            raise ConnectError(ErrorKind.DNS_FAILED, f"Cannot resolve {host}: {e}") from e

        last_error: Optional[ConnectError] = None
        sock: Optional[socket.socket] = None

        for family, socktype, proto, _, address in addresses:
            sock = socket.socket(family, socktype, proto)
            try:
                sock.settimeout(remaining())
                sock.connect(address)
                break
            except ConnectError:
                # Budget spent between attempts
                sock.close()
                raise
            except socket.timeout as e:
                sock.close()
                sock = None
                last_error = ConnectError(ErrorKind.TIMEOUT, f"Connect to {host}:{port} timed out")
                last_error.__cause__ = e
            except ConnectionRefusedError as e:
                sock.close()
                sock = None
                last_error = ConnectError(ErrorKind.REFUSED, f"Connection to {host}:{port} refused")
                last_error.__cause__ = e
            except OSError as e:
                # Unreachable network, reset during SYN, ...
                sock.close()
                sock = None
                last_error = ConnectError(ErrorKind.REFUSED, f"Cannot connect to {host}:{port}: {e}")
                last_error.__cause__ = e
        else:
            sock = None

        if sock is None:
            if last_error is None:
                raise ConnectError(ErrorKind.DNS_FAILED, f"No addresses for {host}")
            raise last_error

        # ─────────────────────────────────────────────────────────────────
        # TLS HANDSHAKE
        # ─────────────────────────────────────────────────────────────────
        # wrap_socket() performs the handshake immediately on a connected
        # socket, so it runs under whatever connect budget is left.

        if use_tls:
            try:
                context = ssl_context or _client_context(verify_tls)
                sock.settimeout(remaining())
                sock = context.wrap_socket(sock, server_hostname=host)
            except ConnectError:
                sock.close()
                raise
            except socket.timeout as e:
                sock.close()
                raise ConnectError(
                    ErrorKind.TIMEOUT, f"TLS handshake with {host}:{port} timed out"
                ) from e
            except (ssl.SSLError, ssl.CertificateError, OSError) as e:
                sock.close()
                raise ConnectError(
                    ErrorKind.TLS_HANDSHAKE_FAILED, f"TLS handshake with {host}:{port} failed: {e}"
                ) from e

        conn = cls(socket=sock, host=host, port=port, use_tls=use_tls)
        logger.debug(f"[{conn.id}] Connected to {host}:{port}{' (tls)' if use_tls else ''}")
        return conn

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # WRITING
    # =========================================================================

    def write_all(self, data: bytes, timeout: Optional[float] = None) -> None:
        """
        Send every byte of data.

        sendall() keeps calling send() until the kernel has accepted
        everything, so partial writes are retried for us. The timeout
        applies to the whole call.

        Raises:
            TransportError: broken_pipe or timeout.
        """
        self._require_open()
        try:
            self.socket.settimeout(timeout)
            self.socket.sendall(data)
        except socket.timeout as e:
            raise TransportError(ErrorKind.TIMEOUT, "Write timed out") from e
        except OSError as e:
            # BrokenPipeError, ConnectionResetError, ...
            raise TransportError(ErrorKind.BROKEN_PIPE, f"Write failed: {e}") from e
        self.bytes_sent += len(data)

    # =========================================================================
    # READING
    # =========================================================================

    def read_some(self, max_bytes: int = 8192, timeout: Optional[float] = None) -> bytes:
        """
        Read up to max_bytes.

        Returns:
            The bytes available. b"" means the peer closed the stream;
            any other short read is normal TCP behaviour.

        Raises:
            TransportError: timeout, or broken_pipe if the peer reset.
        """
        self._require_open()
        try:
            self.socket.settimeout(timeout)
            data = self.socket.recv(max_bytes)
        except socket.timeout as e:
            raise TransportError(ErrorKind.TIMEOUT, "Read timed out") from e
        except OSError as e:
            raise TransportError(ErrorKind.BROKEN_PIPE, f"Read failed: {e}") from e
        self.bytes_received += len(data)
        return data

    def _require_open(self) -> None:
        if self.state != ConnectionState.OPEN:
            raise TransportError(ErrorKind.BROKEN_PIPE, f"Connection is {self.state.value}")

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Release the socket.

        Idempotent, and safe after any error: shutdown() on a socket the
        peer already dropped raises OSError, which only means there is
        nothing left to shut down.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed after {self.age:.3f}s "
            f"(sent {self.bytes_sent} bytes, received {self.bytes_received} bytes)"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def _client_context(verify: bool) -> ssl.SSLContext:
    """Default client TLS context; verification can be switched off."""
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context
