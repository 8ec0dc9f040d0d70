"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Everything that knows the HTTP/1.1 wire format, and nothing that touches
a socket:

    ┌──────────────────────────────────────────────────────────────────────┐
    │  url.py          parse_url() → URL (scheme, host, port, target)      │
    │  headers.py      Headers: ordered, case-insensitive, multi-valued    │
    │  request.py      RequestDescriptor + serialize_request() → bytes     │
    │  parser.py       ResponseParser: bytes in, head + body frames out    │
    │  response.py     ResponseHead, BodyChunk / BodyEnd / BodyError       │
    │  status_codes.py HTTPStatus enum, redirect set, has_body()           │
    └──────────────────────────────────────────────────────────────────────┘

Because none of these do I/O, they can be tested with plain byte strings:

    parser, frames = parse_response(b"HTTP/1.1 200 OK\\r\\n...")

=============================================================================
"""

from .url import URL, URLError, parse_url
from .headers import Headers
from .request import RequestDescriptor, RequestWriter, serialize_request
from .response import ResponseHead, BodyChunk, BodyEnd, BodyError, BodyFrame
from .parser import ResponseParser, ParserState, BodyMode, parse_response
from .status_codes import HTTPStatus, REDIRECT_STATUSES

__all__ = [
    # URL
    "URL",
    "URLError",
    "parse_url",
    # Headers
    "Headers",
    # Request
    "RequestDescriptor",
    "RequestWriter",
    "serialize_request",
    # Response
    "ResponseHead",
    "BodyChunk",
    "BodyEnd",
    "BodyError",
    "BodyFrame",
    "ResponseParser",
    "ParserState",
    "BodyMode",
    "parse_response",
    # Status codes
    "HTTPStatus",
    "REDIRECT_STATUSES",
]
