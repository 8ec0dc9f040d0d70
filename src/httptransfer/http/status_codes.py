"""
=============================================================================
HTTP STATUS CODES (client view)
=============================================================================

A client cares about status codes for three decisions:

    ┌────────┬─────────────────────────────────────────────────────────────┐
    │ Class  │ What the client does                                        │
    ├────────┼─────────────────────────────────────────────────────────────┤
    │  1xx   │ Interim. Skip it and keep reading for the real response.    │
    │  2xx   │ Deliver the body to the sink.                               │
    │  3xx   │ Maybe follow Location (301/302/303/307/308 only).           │
    │  4xx   │ Deliver the body; the caller decides what an error means.   │
    │  5xx   │ Same as 4xx. No automatic retry.                            │
    └────────┴─────────────────────────────────────────────────────────────┘

Some responses never carry a body no matter what their headers say
(RFC 7230 §3.3.3): every 1xx, 204 No Content and 304 Not Modified.

Servers may send codes this enum does not list (e.g. 299, 599). The parser
accepts any code from 100 to 599; lookup() returns None for unlisted ones.

=============================================================================
"""

from enum import IntEnum
from typing import Optional


class HTTPStatus(IntEnum):
    """
    Status codes a client is likely to see.

    IntEnum, so HTTPStatus.FOUND == 302.
    """

    # 1xx
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101
    PROCESSING = 102
    EARLY_HINTS = 103

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206

    # 3xx
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PAYLOAD_TOO_LARGE = 413
    URI_TOO_LONG = 414
    RANGE_NOT_SATISFIABLE = 416
    TOO_MANY_REQUESTS = 429

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Standard reason phrase, e.g. "Not Found"."""
        return _PHRASE_OVERRIDES.get(self, self.name.replace("_", " ").title())

    @property
    def is_informational(self) -> bool:
        return 100 <= self < 200

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        """True only for codes that are followed (see REDIRECT_STATUSES)."""
        return self in REDIRECT_STATUSES

    @property
    def is_error(self) -> bool:
        return self >= 400


# title() gets most phrases right; these are the exceptions.
_PHRASE_OVERRIDES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NON_AUTHORITATIVE_INFORMATION: "Non-Authoritative Information",
    HTTPStatus.URI_TOO_LONG: "URI Too Long",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}


# 300 and 305 are redirection-class but carry no single target to follow.
REDIRECT_STATUSES = frozenset({
    HTTPStatus.MOVED_PERMANENTLY,
    HTTPStatus.FOUND,
    HTTPStatus.SEE_OTHER,
    HTTPStatus.TEMPORARY_REDIRECT,
    HTTPStatus.PERMANENT_REDIRECT,
})


def lookup(code: int) -> Optional[HTTPStatus]:
    """HTTPStatus for code, or None if the code is not listed."""
    try:
        return HTTPStatus(code)
    except ValueError:
        return None


def has_body(code: int) -> bool:
    """Whether a response with this status may carry a body."""
    return not (100 <= code < 200 or code in (204, 304))
