"""
Scripted loopback HTTP server for transfer tests.
"""

import socket
import threading
import time
from typing import Callable, Union


# A scripted reply: raw bytes to send, or a callable that drives the
# accepted socket itself (conn, request_bytes, stop_event).
Reply = Union[bytes, Callable[[socket.socket, bytes, threading.Event], None]]


def redirect(location: str, status: int = 302) -> bytes:
    """A redirect response with an empty body."""
    return (
        f"HTTP/1.1 {status} Found\r\n"
        f"Location: {location}\r\n"
        f"Content-Length: 0\r\n"
        f"\r\n"
    ).encode()


def ok(body: bytes = b"ok") -> bytes:
    """A 200 response with a Content-Length body."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


def silent(conn: socket.socket, request: bytes, stop: threading.Event) -> None:
    """Accept the request and never answer."""
    stop.wait(10.0)


def in_pieces(*pieces: bytes, delay: float = 0.02):
    """Send a response split into separate writes."""
    def reply(conn: socket.socket, request: bytes, stop: threading.Event) -> None:
        for piece in pieces:
            conn.sendall(piece)
            time.sleep(delay)
    return reply


class StubServer:
    """
    Loopback HTTP server that answers from a script.

    Connections are handled one at a time, in order. The n-th request
    gets replies[n]; once the script runs out the last reply repeats.
    Every request's raw head is recorded in .requests. With
    read_request=False the reply is sent as soon as the connection is
    accepted, before the client has written anything.
    """

    def __init__(self, replies: list[Reply], read_request: bool = True):
        self.replies = list(replies)
        self.read_request = read_request
        self.requests: list[bytes] = []
        self._stop = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(16)
        self._sock.settimeout(0.05)
        self.port = self._sock.getsockname()[1]
        self._thread: threading.Thread = None

    def url(self, path: str = "/") -> str:
        return f"http://127.0.0.1:{self.port}{path}"

    def start(self) -> "StubServer":
        """Start serving in a background thread."""
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()
        return self

    def stop(self):
        """Stop serving and release the port."""
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._sock.close()

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                self._handle(conn)

    def _handle(self, conn: socket.socket):
        conn.settimeout(5.0)
        request = b""
        try:
            while self.read_request and b"\r\n\r\n" not in request:
                data = conn.recv(4096)
                if not data:
                    return
                request += data
        except OSError:
            return

        self.requests.append(request)
        reply = self.replies[min(len(self.requests), len(self.replies)) - 1]
        try:
            if callable(reply):
                reply(conn, request, self._stop)
            else:
                conn.sendall(reply)
        except OSError:
            # Client hung up first (e.g. after reading a redirect head)
            pass
