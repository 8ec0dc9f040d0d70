"""
=============================================================================
RESPONSE HEAD AND BODY FRAMES
=============================================================================

The ResponseParser produces two kinds of output:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                 ┐                              │
    │  Content-Type: text/plain\r\n        ├──► ResponseHead (once)       │
    │  Transfer-Encoding: chunked\r\n      │                              │
    │  \r\n                                ┘                              │
    │  4\r\nWiki\r\n                       ───► BodyChunk(b"Wiki")        │
    │  5\r\npedia\r\n                      ───► BodyChunk(b"pedia")       │
    │  0\r\n\r\n                           ───► BodyEnd()                 │
    └─────────────────────────────────────────────────────────────────────┘

The head is complete (and frozen) as soon as the blank line is seen. The
body is never held in memory as a whole: it is a stream of frames handed
to the sink as they are decoded.

=============================================================================
FRAME SEQUENCE RULES
=============================================================================

    BodyChunk* BodyEnd          success
    BodyChunk* BodyError(kind)  failure (chunks already delivered stay
                                delivered: there is no rollback)

Exactly one terminal frame, and nothing after it.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Union

from ..errors import ErrorKind
from .headers import Headers
from .status_codes import HTTPStatus, REDIRECT_STATUSES, lookup

# ASCII only: str.isdigit() also accepts superscripts and other scripts
DIGITS_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ResponseHead:
    """
    Status line plus headers of a response.

    Attributes:
        version: "HTTP/1.1" or "HTTP/1.0".
        status_code: Numeric status (100-599).
        reason: Reason phrase as sent (may be empty).
        headers: Response headers; repeated names are kept.
    """

    version: str
    status_code: int
    reason: str = ""
    headers: Headers = field(default_factory=Headers, compare=False)

    @property
    def status(self) -> Optional[HTTPStatus]:
        return lookup(self.status_code)

    @property
    def is_redirect(self) -> bool:
        """A followable redirect: 301/302/303/307/308 WITH a Location."""
        return self.status_code in REDIRECT_STATUSES and self.location is not None

    @property
    def location(self) -> Optional[str]:
        values = self.headers.get_all("location")
        if not values or not values[0].strip():
            return None
        return values[0].strip()

    @property
    def content_length(self) -> Optional[int]:
        """Declared body length, or None if absent or unparseable."""
        values = {v.strip() for raw in self.headers.get_all("content-length") for v in raw.split(",")}
        if len(values) != 1:
            return None
        value = values.pop()
        if not DIGITS_PATTERN.fullmatch(value):
            return None
        return int(value)

    @property
    def is_chunked(self) -> bool:
        """True when the LAST transfer coding is chunked (RFC 7230 §3.3.3)."""
        codings = [
            part.strip().lower()
            for value in self.headers.get_all("transfer-encoding")
            for part in value.split(",")
            if part.strip()
        ]
        return bool(codings) and codings[-1] == "chunked"

    @property
    def keep_alive(self) -> bool:
        """
        Whether the server intends to keep the connection open.

        HTTP/1.1 defaults to keep-alive unless "Connection: close".
        HTTP/1.0 defaults to close unless "Connection: keep-alive".
        """
        if self.headers.has_token("connection", "close"):
            return False
        if self.version == "HTTP/1.0":
            return self.headers.has_token("connection", "keep-alive")
        return True

    @property
    def status_line(self) -> str:
        return f"{self.version} {self.status_code} {self.reason}".rstrip()


@dataclass(frozen=True)
class BodyChunk:
    """A piece of the decoded body."""
    data: bytes


@dataclass(frozen=True)
class BodyEnd:
    """The body ended cleanly."""


@dataclass(frozen=True)
class BodyError:
    """The body could not be completed."""
    kind: ErrorKind


BodyFrame = Union[BodyChunk, BodyEnd, BodyError]


def is_terminal(frame: BodyFrame) -> bool:
    return isinstance(frame, (BodyEnd, BodyError))
