"""
=============================================================================
HTTPTRANSFER - Minimal HTTP/1.1 Client Transfer Engine
=============================================================================

Fetches one URL over one HTTP/1.1 connection and streams the response
body, piece by piece, into a callback you supply. Raw sockets, no
third-party runtime dependencies.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTPTRANSFER ARCHITECTURE                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   fetch(url, sink, options)                                         │
    │      │                                                              │
    │      ▼                                                              │
    │   TransferEngine ── redirects, total deadline, access log           │
    │      │                                                              │
    │      ▼                                                              │
    │   Transfer ──────── one request/response over one connection        │
    │      │                                                              │
    │      ├── Connection      TCP / TLS socket, timeouts                 │
    │      ├── RequestWriter   GET request bytes                          │
    │      └── ResponseParser  bytes → ResponseHead + body frames ──► sink│
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httptransfer/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m httptransfer)
    ├── engine.py            # TransferEngine, fetch()
    ├── transfer.py          # Transfer, TransferResult, SinkChannel
    ├── config.py            # TransferOptions dataclass
    ├── errors.py            # ErrorKind and the exception classes
    ├── sinks.py             # BufferSink, StreamSink, WriteFunctionSink
    ├── options.py           # Option codes (CURLOPT_* numbering)
    ├── easy.py              # EasyHandle: setopt() / perform()
    ├── transfer_log.py      # Access log record
    ├── core/                # Transport
    │   ├── connection.py    # Connection wrapper
    │   └── deadline.py      # Total timeout bookkeeping
    └── http/                # HTTP/1.1 wire format
        ├── url.py           # URL parsing
        ├── headers.py       # Header collection
        ├── request.py       # Request serialization
        ├── parser.py        # Incremental response parser
        ├── response.py      # ResponseHead and body frames
        └── status_codes.py  # HTTP status enum

=============================================================================
QUICK START
=============================================================================

    from httptransfer import fetch, BufferSink

    sink = BufferSink()
    result = fetch("http://example.com/", sink, follow_redirects=True,
                   total_timeout_ms=5000)
    print(result.status_code, sink.data[:100])

    # Streaming to a file
    with open("big.iso", "wb") as f:
        fetch("http://example.com/big.iso", f)

    # curl style
    from httptransfer import EasyHandle, Option

    handle = EasyHandle()
    handle.setopt(Option.URL, "http://example.com/")
    handle.setopt(Option.WRITEFUNCTION, lambda data: len(data))
    handle.perform()

=============================================================================
"""

__version__ = "1.0.0"

from .config import TransferOptions
from .engine import TransferEngine, fetch
from .transfer import Transfer, TransferResult
from .errors import (
    ErrorKind,
    HTTPTransferError,
    ConnectError,
    TransportError,
    ParseError,
    TransferError,
)
from .sinks import BufferSink, StreamSink, WriteFunctionSink
from .options import Option, UnknownOption, CURLOPT_URL, CURLOPT_WRITEFUNCTION
from .easy import EasyHandle
from .http import BodyChunk, BodyEnd, BodyError, ResponseHead, Headers

__all__ = [
    "__version__",
    # Entry points
    "fetch",
    "TransferEngine",
    "Transfer",
    "TransferResult",
    "TransferOptions",
    # Errors
    "ErrorKind",
    "HTTPTransferError",
    "ConnectError",
    "TransportError",
    "ParseError",
    "TransferError",
    # Sinks and frames
    "BufferSink",
    "StreamSink",
    "WriteFunctionSink",
    "BodyChunk",
    "BodyEnd",
    "BodyError",
    "ResponseHead",
    "Headers",
    # curl-style facade
    "Option",
    "UnknownOption",
    "CURLOPT_URL",
    "CURLOPT_WRITEFUNCTION",
    "EasyHandle",
]
