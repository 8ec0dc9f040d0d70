"""
pytest configuration and fixtures.
"""

import socket
from typing import Callable, Generator
import pytest

# Add src (and this directory, for stub_server) to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from httptransfer import TransferOptions
from stub_server import Reply, StubServer


@pytest.fixture
def fixed_length_response() -> bytes:
    """200 response with a Content-Length body."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/plain\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"Hello"
    )


@pytest.fixture
def chunked_response() -> bytes:
    """200 response with a chunked body and one trailer."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"4\r\nWiki\r\n"
        b"5\r\npedia\r\n"
        b"0\r\n"
        b"Expires: never\r\n"
        b"\r\n"
    )


@pytest.fixture
def close_delimited_response() -> bytes:
    """HTTP/1.0 response whose body ends when the server closes."""
    return (
        b"HTTP/1.0 200 OK\r\n"
        b"Content-Type: text/plain\r\n"
        b"\r\n"
        b"until the end"
    )


@pytest.fixture
def options() -> TransferOptions:
    """Options with timeouts short enough for tests."""
    return TransferOptions(connect_timeout_ms=2000, total_timeout_ms=5000)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def stub_server() -> Generator[Callable[..., StubServer], None, None]:
    """Factory: stub_server(reply, reply, ...) returns a started server."""
    servers = []

    def make(*replies: Reply, read_request: bool = True) -> StubServer:
        server = StubServer(list(replies), read_request=read_request).start()
        servers.append(server)
        return server

    yield make

    for server in servers:
        server.stop()
