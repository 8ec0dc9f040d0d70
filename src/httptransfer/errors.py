"""
=============================================================================
TRANSFER ERRORS
=============================================================================

Every failure a fetch can hit is reported as an exception carrying an
ErrorKind. The kinds are grouped by the layer that detects them:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ERROR TAXONOMY                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ConnectError     opening the socket                               │
    │     └── timeout, refused, dns_failed, tls_handshake_failed          │
    │                                                                      │
    │   TransportError   reading/writing an open socket                   │
    │     └── broken_pipe, timeout                                        │
    │                                                                      │
    │   ParseError       the bytes the server sent                        │
    │     └── malformed_status, malformed_header, malformed_chunk,        │
    │         truncated_body, ambiguous_framing, empty_response,          │
    │         truncated_head, headers_too_large                           │
    │                                                                      │
    │   TransferError    what fetch()/run() raise to the caller           │
    │     └── any kind above (original exception is __cause__)            │
    │     └── too_many_redirects, bad_redirect, write_aborted             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Callers only ever need to catch TransferError. The lower-level classes
exist so that Connection and ResponseParser can be used on their own.

Nothing in this package retries. If a caller wants retry/backoff, it
catches TransferError, looks at .kind and calls fetch() again.

=============================================================================
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Machine-readable failure reason shared by every error class."""

    # Connect
    TIMEOUT = "timeout"
    REFUSED = "refused"
    DNS_FAILED = "dns_failed"
    TLS_HANDSHAKE_FAILED = "tls_handshake_failed"

    # Transport
    BROKEN_PIPE = "broken_pipe"

    # Parse
    MALFORMED_STATUS = "malformed_status"
    MALFORMED_HEADER = "malformed_header"
    MALFORMED_CHUNK = "malformed_chunk"
    TRUNCATED_BODY = "truncated_body"
    AMBIGUOUS_FRAMING = "ambiguous_framing"
    EMPTY_RESPONSE = "empty_response"
    TRUNCATED_HEAD = "truncated_head"
    HEADERS_TOO_LARGE = "headers_too_large"

    # Transfer
    TOO_MANY_REDIRECTS = "too_many_redirects"
    BAD_REDIRECT = "bad_redirect"
    WRITE_ABORTED = "write_aborted"


CONNECT_KINDS = frozenset({
    ErrorKind.TIMEOUT,
    ErrorKind.REFUSED,
    ErrorKind.DNS_FAILED,
    ErrorKind.TLS_HANDSHAKE_FAILED,
})

TRANSPORT_KINDS = frozenset({
    ErrorKind.BROKEN_PIPE,
    ErrorKind.TIMEOUT,
})

PARSE_KINDS = frozenset({
    ErrorKind.MALFORMED_STATUS,
    ErrorKind.MALFORMED_HEADER,
    ErrorKind.MALFORMED_CHUNK,
    ErrorKind.TRUNCATED_BODY,
    ErrorKind.AMBIGUOUS_FRAMING,
    ErrorKind.EMPTY_RESPONSE,
    ErrorKind.TRUNCATED_HEAD,
    ErrorKind.HEADERS_TOO_LARGE,
})


class HTTPTransferError(Exception):
    """
    Base class for every error raised by this package.

    Like HTTP status codes on a server, the kind tells the caller WHAT went
    wrong without parsing the message:

        try:
            fetch(url, sink)
        except TransferError as e:
            if e.kind is ErrorKind.TIMEOUT:
                ...
    """

    allowed_kinds: Optional[frozenset] = None

    def __init__(self, kind: ErrorKind, message: str = ""):
        if self.allowed_kinds is not None and kind not in self.allowed_kinds:
            raise ValueError(f"{type(self).__name__} cannot carry kind {kind.value}")
        super().__init__(message or kind.value)
        self.kind = kind

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {str(self)!r})"


class ConnectError(HTTPTransferError):
    """The connection could not be opened."""

    allowed_kinds = CONNECT_KINDS


class TransportError(HTTPTransferError):
    """Reading from or writing to an open connection failed."""

    allowed_kinds = TRANSPORT_KINDS


class ParseError(HTTPTransferError):
    """The server's response violates HTTP/1.1 framing."""

    allowed_kinds = PARSE_KINDS


class TransferError(HTTPTransferError):
    """
    Raised by Transfer.run() and TransferEngine.fetch().

    Lower-level errors are wrapped, not replaced: the kind is copied and
    the original exception is chained as __cause__.
    """

    @classmethod
    def wrap(cls, error: HTTPTransferError) -> "TransferError":
        """Build a TransferError with the same kind and message as error."""
        wrapped = cls(error.kind, str(error))
        wrapped.__cause__ = error
        return wrapped
