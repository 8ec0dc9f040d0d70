"""
Unit tests for the client connection and deadline.
"""

import logging
import socket
import time

import pytest

from httptransfer.core.connection import Connection, ConnectionState
from httptransfer.core.deadline import Deadline
from httptransfer.errors import ConnectError, ErrorKind, TransferError, TransportError
from stub_server import ok, silent


class TestConnectionOpen:
    """Tests for Connection.open()."""

    def test_connect_and_exchange(self, stub_server):
        """Test a plain request/response over a real socket."""
        server = stub_server(ok(b"hello"))

        with Connection.open("127.0.0.1", server.port, timeout=2.0) as conn:
            assert conn.state == ConnectionState.OPEN
            conn.write_all(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n", timeout=2.0)

            received = b""
            while True:
                data = conn.read_some(1024, timeout=2.0)
                if not data:
                    break
                received += data

        assert received.endswith(b"hello")
        assert conn.bytes_received == len(received)
        assert conn.bytes_sent > 0
        assert conn.state == ConnectionState.CLOSED

    def test_refused(self, free_port: int):
        """Test that nothing listening gives refused."""
        with pytest.raises(ConnectError) as exc_info:
            Connection.open("127.0.0.1", free_port, timeout=2.0)

        assert exc_info.value.kind is ErrorKind.REFUSED

    def test_dns_failure(self, monkeypatch):
        """Test that a resolver failure gives dns_failed."""
        def fail(*args, **kwargs):
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

        monkeypatch.setattr(socket, "getaddrinfo", fail)

        with pytest.raises(ConnectError) as exc_info:
            Connection.open("no-such-host.invalid", 80, timeout=2.0)

        assert exc_info.value.kind is ErrorKind.DNS_FAILED
        assert isinstance(exc_info.value.__cause__, socket.gaierror)

    def test_tls_handshake_failure(self, stub_server):
        """Test that a non-TLS server fails the handshake."""
        server = stub_server(b"HTTP/1.1 400 Bad Request\r\n\r\n", read_request=False)

        with pytest.raises(ConnectError) as exc_info:
            Connection.open("127.0.0.1", server.port, use_tls=True, timeout=2.0, verify_tls=False)

        assert exc_info.value.kind is ErrorKind.TLS_HANDSHAKE_FAILED


class TestConnectionIO:
    """Tests for reads, writes and closing."""

    def test_read_timeout(self, stub_server):
        """Test that a silent server times out the read."""
        server = stub_server(silent)

        with Connection.open("127.0.0.1", server.port, timeout=2.0) as conn:
            conn.write_all(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n", timeout=2.0)

            started = time.monotonic()
            with pytest.raises(TransportError) as exc_info:
                conn.read_some(timeout=0.2)

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert time.monotonic() - started < 2.0

    def test_close_is_idempotent(self, stub_server):
        """Test that close() may be called repeatedly."""
        server = stub_server(ok())
        conn = Connection.open("127.0.0.1", server.port, timeout=2.0)

        conn.close()
        conn.close()

        assert not conn.is_open

    def test_close_logs_age(self, stub_server, caplog):
        """Test that the close line reports how long the connection lived."""
        server = stub_server(ok())
        conn = Connection.open("127.0.0.1", server.port, timeout=2.0)
        conn.created_at -= 2.0

        assert conn.age >= 2.0

        with caplog.at_level(logging.DEBUG, logger="httptransfer.core.connection"):
            conn.close()

        messages = [r.getMessage() for r in caplog.records if r.name == "httptransfer.core.connection"]
        assert any(f"[{conn.id}] Connection closed after 2." in m for m in messages)

    def test_io_after_close(self, stub_server):
        """Test that a closed connection refuses I/O."""
        server = stub_server(ok())
        conn = Connection.open("127.0.0.1", server.port, timeout=2.0)
        conn.close()

        with pytest.raises(TransportError) as exc_info:
            conn.read_some()

        assert exc_info.value.kind is ErrorKind.BROKEN_PIPE


class TestDeadline:
    """Tests for Deadline."""

    def test_unbounded(self):
        """Test that Deadline(None) never expires."""
        deadline = Deadline(None)

        assert deadline.remaining() is None
        assert not deadline.expired()
        assert deadline.timeout() is None
        assert deadline.timeout(3.0) == 3.0

    def test_remaining_with_fake_clock(self):
        """Test remaining time and limit capping."""
        now = [100.0]
        deadline = Deadline(5.0, clock=lambda: now[0])

        now[0] = 102.0
        assert deadline.remaining() == 3.0
        assert deadline.timeout(1.0) == 1.0
        assert deadline.timeout(10.0) == 3.0
        assert deadline.elapsed == 2.0

    def test_expired_raises_timeout(self):
        """Test that an exhausted deadline raises TransferError(timeout)."""
        now = [0.0]
        deadline = Deadline(1.0, clock=lambda: now[0])
        now[0] = 1.5

        assert deadline.expired()
        assert deadline.remaining() == 0.0
        with pytest.raises(TransferError) as exc_info:
            deadline.timeout()

        assert exc_info.value.kind is ErrorKind.TIMEOUT

    def test_from_ms(self):
        """Test the millisecond constructor."""
        assert Deadline.from_ms(None).expires_at is None
        deadline = Deadline.from_ms(1500)
        assert deadline.expires_at - deadline.started_at == pytest.approx(1.5)
