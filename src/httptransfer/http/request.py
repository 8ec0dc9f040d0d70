"""
=============================================================================
HTTP REQUEST WRITER
=============================================================================

Turns a RequestDescriptor into the exact bytes sent to the server.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /api/items?page=2 HTTP/1.1\r\n      ← request line           │
    │    ─┬─ ────────┬──────── ────┬───                                    │
    │   Method     Target       Version                                   │
    │                                                                      │
    │    Host: example.com\r\n                   ← ALWAYS first, ALWAYS   │
    │                                              exactly once           │
    │    User-Agent: httptransfer/1.0\r\n        ← caller headers, in     │
    │    Accept: */*\r\n                           insertion order        │
    │    \r\n                                    ← blank line: end        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No body is written: the client only issues GET.

=============================================================================
WHY IS HOST MANDATORY?
=============================================================================

HTTP/1.1 servers MUST answer 400 to a request without a Host header
(RFC 7230 §5.4). One IP address commonly serves many sites (virtual
hosting); Host is how the server picks which one. We derive it from the
URL so the caller cannot forget it, and we never emit it twice because two
Host headers is also a 400.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional

from .headers import Headers, HeaderInput
from .url import URL


# Only GET is issued; the field exists so the wire format reads naturally.
SUPPORTED_METHODS = {"GET"}


@dataclass
class RequestDescriptor:
    """
    What to send: method, target URL and headers.

    Owned by one Transfer for the duration of one exchange.
    """

    url: URL
    method: str = "GET"
    headers: Headers = field(default_factory=Headers)

    def __post_init__(self):
        self.method = self.method.upper()
        if self.method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported method: {self.method}")
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)


def _check_header(name: str, value: str) -> None:
    """
    Reject header text that would break the message framing.

    A CR or LF inside a name or value lets the caller inject extra
    header lines (or a whole second request) into the stream.
    """
    if not name or any(c in name for c in "\r\n:"):
        raise ValueError(f"Invalid header name: {name!r}")
    if "\r" in value or "\n" in value:
        raise ValueError(f"Invalid header value for {name}: {value!r}")


def serialize_request(request: RequestDescriptor) -> bytes:
    """
    Serialize a request to HTTP/1.1 wire bytes.

    The Host header is always emitted exactly once and first. A Host value
    set by the caller replaces the one derived from the URL.

    Args:
        request: The request to serialize.

    Returns:
        Request line, headers and the terminating blank line.

    Raises:
        ValueError: If a header name or value contains CR/LF.
    """
    host = request.headers.get_all("host")
    host_value = host[0] if host else request.url.host_header

    lines = [
        f"{request.method} {request.url.target} HTTP/1.1",
        f"Host: {host_value}",
    ]

    for name, value in request.headers.items():
        if name.lower() == "host":
            continue
        _check_header(name, value)
        lines.append(f"{name}: {value}")

    _check_header("Host", host_value)

    # Empty line terminates the header section
    lines.append("")
    lines.append("")

    # Header text is ISO-8859-1 on the wire (RFC 7230 §3.2.4)
    return "\r\n".join(lines).encode("latin-1")


class RequestWriter:
    """
    Builds RequestDescriptors with client-wide default headers.

    The defaults are only applied when the caller did not set the header
    themselves:

        writer = RequestWriter(user_agent="my-app/2.0")
        data = writer.serialize(writer.build(url, {"Accept": "text/html"}))
        # → GET ... User-Agent: my-app/2.0 ... Accept: text/html
    """

    def __init__(self, user_agent: Optional[str] = None, default_headers: HeaderInput = None):
        self.default_headers = Headers(default_headers)
        if user_agent:
            self.default_headers["User-Agent"] = user_agent
        self.default_headers.setdefault("Accept", "*/*")

    def build(self, url: URL, headers: HeaderInput = None) -> RequestDescriptor:
        merged = Headers(headers)
        for name, value in self.default_headers.items():
            if name not in merged:
                merged.add(name, value)
        return RequestDescriptor(url=url, headers=merged)

    def serialize(self, request: RequestDescriptor) -> bytes:
        return serialize_request(request)
