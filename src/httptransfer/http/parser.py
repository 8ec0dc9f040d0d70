"""
=============================================================================
INCREMENTAL HTTP/1.1 RESPONSE PARSER
=============================================================================

Bytes arrive from the socket in arbitrary pieces. The parser accepts them
one piece at a time (feed) and emits body frames as soon as they can be
decoded, so a 2 GB download never sits in memory.

=============================================================================
STATE MACHINE
=============================================================================

    ┌──────────────────────┐   CRLF    ┌──────────────────┐
    │ AWAITING_STATUS_LINE │ ────────► │ AWAITING_HEADERS │ ◄──┐ Name: value
    └──────────────────────┘           └────────┬─────────┘ ───┘
               ▲                                │ blank line
               │ 1xx interim response           │
               └────────────────────────────────┤
                                                ▼
                                   ┌────────────────────────┐
                                   │ STREAMING_BODY(mode)   │ ──► BodyChunk*
                                   │   chunked / fixed(n) / │
                                   │   until_close          │
                                   └───────────┬────────────┘
                                               │
                           ┌───────────────────┴──────────────┐
                           ▼                                  ▼
                       ┌──────┐                         ┌────────────┐
                       │ DONE │ ──► BodyEnd             │ FAILED(k)  │ ──► BodyError(k)
                       └──────┘                         └────────────┘

Any state can go to FAILED. DONE and FAILED are terminal: further input
is ignored and no further frames are produced.

=============================================================================
BODY FRAMING (RFC 7230 §3.3.3)
=============================================================================

How does the client know where the body ends? In priority order:

    1. Status 1xx / 204 / 304        → no body at all
    2. Transfer-Encoding: chunked    → size-prefixed chunks, 0 = end
    3. Content-Length: n             → exactly n bytes
    4. otherwise                     → until the server closes

Option 4 is only trustworthy when the server SAID it will close
(HTTP/1.0, or "Connection: close"). An HTTP/1.1 keep-alive response with
neither length nor chunking has no detectable end: we refuse it as
ambiguous_framing rather than hang until the timeout.

=============================================================================
CHUNKED ENCODING
=============================================================================

    4\r\n            ← size in HEX, optionally followed by ;extensions
    Wiki\r\n         ← exactly 4 bytes, then CRLF
    5\r\n
    pedia\r\n
    0\r\n            ← last chunk
    Expires: x\r\n   ← optional trailer headers
    \r\n             ← end of message

=============================================================================
"""

import re
from enum import Enum
from typing import Optional

from ..errors import ErrorKind, ParseError
from .headers import Headers
from .response import BodyChunk, BodyEnd, BodyError, BodyFrame, ResponseHead
from .status_codes import has_body


class ParserState(Enum):
    AWAITING_STATUS_LINE = "awaiting_status_line"
    AWAITING_HEADERS = "awaiting_headers"
    STREAMING_BODY = "streaming_body"
    DONE = "done"
    FAILED = "failed"


class BodyMode(Enum):
    CHUNKED = "chunked"
    FIXED = "fixed"
    UNTIL_CLOSE = "until_close"
    EMPTY = "empty"


class _ChunkStep(Enum):
    """Position inside a chunked body."""
    SIZE = "size"
    DATA = "data"
    DATA_CRLF = "data_crlf"
    TRAILERS = "trailers"


class ResponseParser:
    """
    Push parser for one HTTP/1.1 response.

    Usage:

        parser = ResponseParser()
        while parser.state not in (ParserState.DONE, ParserState.FAILED):
            data = conn.read_some()
            frames = parser.feed(data) if data else parser.feed_eof()
            for frame in frames:
                sink(frame)

    One parser handles exactly one response and is never reset.
    """

    STATUS_LINE_PATTERN = re.compile(r"^(HTTP/1\.\d) (\S+)(?: (.*))?$")
    STATUS_CODE_PATTERN = re.compile(r"[0-9]{3}")
    HEX_PATTERN = re.compile(r"^[0-9A-Fa-f]+$")

    # A chunk-size line is a hex number plus optional extensions.
    MAX_CHUNK_LINE = 4096

    def __init__(self, max_header_size: int = 64 * 1024):
        """
        Args:
            max_header_size: Upper bound in bytes for the head section (and,
                             separately, for the trailer section).
        """
        self.max_header_size = max_header_size

        self.state = ParserState.AWAITING_STATUS_LINE
        self.mode: Optional[BodyMode] = None
        self.head: Optional[ResponseHead] = None
        self.trailers = Headers()
        self.failure: Optional[ParseError] = None

        self.bytes_received = 0
        self.body_bytes = 0
        self.interim_responses = 0

        self._buffer = bytearray()
        self._section_size = 0

        # Head under construction
        self._version = ""
        self._status_code = 0
        self._reason = ""
        self._headers = Headers()

        # Body bookkeeping
        self._remaining = 0
        self._chunk_step = _ChunkStep.SIZE

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def buffered(self) -> int:
        """Bytes received but not consumed."""
        return len(self._buffer)

    @property
    def is_finished(self) -> bool:
        return self.state in (ParserState.DONE, ParserState.FAILED)

    def feed(self, data: bytes) -> list[BodyFrame]:
        """
        Consume more bytes from the connection.

        Returns:
            Frames decoded from the data (possibly none).
        """
        if self.is_finished or not data:
            return []
        self.bytes_received += len(data)
        self._buffer += data
        frames: list[BodyFrame] = []
        self._advance(frames)
        return frames

    def feed_eof(self) -> list[BodyFrame]:
        """
        Signal that the server closed the connection.

        Returns:
            The terminal frame: BodyEnd for until_close bodies, otherwise
            BodyError describing what was cut off.
        """
        if self.is_finished:
            return []

        frames: list[BodyFrame] = []

        if self.state == ParserState.AWAITING_STATUS_LINE:
            if self.bytes_received == 0:
                self._fail(ErrorKind.EMPTY_RESPONSE, "Server closed without sending a response", frames)
            else:
                self._fail(ErrorKind.TRUNCATED_HEAD, "Connection closed inside the status line", frames)
        elif self.state == ParserState.AWAITING_HEADERS:
            self._fail(ErrorKind.TRUNCATED_HEAD, "Connection closed inside the headers", frames)
        elif self.mode == BodyMode.UNTIL_CLOSE:
            self._finish(frames)
        elif self.mode == BodyMode.FIXED:
            self._fail(
                ErrorKind.TRUNCATED_BODY,
                f"Connection closed with {self._remaining} body bytes outstanding",
                frames,
            )
        else:
            self._fail(ErrorKind.TRUNCATED_BODY, "Connection closed inside a chunked body", frames)

        return frames

    # =========================================================================
    # DRIVER
    # =========================================================================

    def _advance(self, frames: list[BodyFrame]) -> None:
        """Run the state machine until it needs more input or terminates."""
        while True:
            if self.state == ParserState.AWAITING_STATUS_LINE:
                if not self._parse_status_line(frames):
                    return
            elif self.state == ParserState.AWAITING_HEADERS:
                if not self._parse_header_line(frames):
                    return
            elif self.state == ParserState.STREAMING_BODY:
                if not self._parse_body(frames):
                    return
            else:
                return

    def _take_line(self, frames: list[BodyFrame], limit: int, too_long: ErrorKind) -> Optional[str]:
        """
        Remove one line from the buffer.

        Accepts CRLF and bare LF endings. Returns None when no complete
        line is buffered yet (or after failing because the section grew
        past limit).
        """
        end = self._buffer.find(b"\n")
        if end == -1:
            if self._section_size + len(self._buffer) > limit:
                self._fail(too_long, f"Line section exceeds {limit} bytes", frames)
            return None

        self._section_size += end + 1
        if self._section_size > limit:
            self._fail(too_long, f"Line section exceeds {limit} bytes", frames)
            return None

        raw = bytes(self._buffer[:end])
        del self._buffer[:end + 1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        # Header octets are ISO-8859-1; latin-1 decoding never fails
        return raw.decode("latin-1")

    # =========================================================================
    # STATUS LINE
    # =========================================================================

    def _parse_status_line(self, frames: list[BodyFrame]) -> bool:
        line = self._take_line(frames, self.max_header_size, ErrorKind.HEADERS_TOO_LARGE)
        if line is None:
            return False

        # RFC 7230 §3.5: ignore empty lines before the status line
        if not line:
            return True

        match = self.STATUS_LINE_PATTERN.match(line)
        if not match:
            self._fail(ErrorKind.MALFORMED_STATUS, f"Invalid status line: {line!r}", frames)
            return False

        version, code, reason = match.groups()
        if not self.STATUS_CODE_PATTERN.fullmatch(code) or not 100 <= int(code) <= 599:
            self._fail(ErrorKind.MALFORMED_STATUS, f"Invalid status code: {code!r}", frames)
            return False

        self._version = version
        self._status_code = int(code)
        self._reason = (reason or "").strip()
        self._headers = Headers()
        self.state = ParserState.AWAITING_HEADERS
        return True

    # =========================================================================
    # HEADERS
    # =========================================================================

    def _parse_header_line(self, frames: list[BodyFrame]) -> bool:
        line = self._take_line(frames, self.max_header_size, ErrorKind.HEADERS_TOO_LARGE)
        if line is None:
            return False

        if not line:
            return self._end_of_head(frames)

        return self._add_field(line, self._headers, frames)

    def _add_field(self, line: str, target: Headers, frames: list[BodyFrame]) -> bool:
        """
        Parse one "Name: value" line (or a continuation) into target.

        Obsolete line folding: a line starting with SP or HT continues the
        previous field's value, joined by a single space.
        """
        if line[0] in (" ", "\t"):
            if not len(target):
                self._fail(ErrorKind.MALFORMED_HEADER, "Continuation line without a header", frames)
                return False
            target.extend_last(line.strip())
            return True

        name, sep, value = line.partition(":")
        if not sep:
            self._fail(ErrorKind.MALFORMED_HEADER, f"Header line without colon: {line!r}", frames)
            return False
        if not name or name != name.strip() or " " in name or "\t" in name:
            self._fail(ErrorKind.MALFORMED_HEADER, f"Invalid header name: {name!r}", frames)
            return False

        target.add(name, value.strip())
        return True

    def _end_of_head(self, frames: list[BodyFrame]) -> bool:
        """Blank line seen: freeze the head and pick the body framing."""
        if 100 <= self._status_code < 200:
            if self._status_code == 101:
                self._fail(ErrorKind.MALFORMED_STATUS, "Protocol upgrades are not supported", frames)
                return False
            # Interim response (100 Continue, 103 Early Hints): discard and
            # wait for the final one
            self.interim_responses += 1
            self._section_size = 0
            self.state = ParserState.AWAITING_STATUS_LINE
            return True

        self.head = ResponseHead(
            version=self._version,
            status_code=self._status_code,
            reason=self._reason,
            headers=self._headers,
        )
        return self._select_mode(frames)

    def _select_mode(self, frames: list[BodyFrame]) -> bool:
        head = self.head
        self.state = ParserState.STREAMING_BODY

        if not has_body(head.status_code):
            self.mode = BodyMode.EMPTY
            self._finish(frames)
            return False

        if head.is_chunked:
            self.mode = BodyMode.CHUNKED
            self._chunk_step = _ChunkStep.SIZE
            return True

        lengths = {
            part.strip()
            for value in head.headers.get_all("content-length")
            for part in value.split(",")
        }
        # A Transfer-Encoding other than chunked overrides Content-Length
        if lengths and "transfer-encoding" not in head.headers:
            if len(lengths) > 1:
                self._fail(ErrorKind.MALFORMED_HEADER, f"Conflicting Content-Length values: {sorted(lengths)}", frames)
                return False
            # None for anything but ASCII digits; falls through to close framing
            length = head.content_length
            if length is not None:
                self.mode = BodyMode.FIXED
                self._remaining = length
                if self._remaining == 0:
                    self._finish(frames)
                    return False
                return True

        if head.version == "HTTP/1.0" or head.headers.has_token("connection", "close"):
            self.mode = BodyMode.UNTIL_CLOSE
            return True

        self._fail(
            ErrorKind.AMBIGUOUS_FRAMING,
            "HTTP/1.1 keep-alive response without Content-Length or chunked encoding",
            frames,
        )
        return False

    # =========================================================================
    # BODY
    # =========================================================================

    def _parse_body(self, frames: list[BodyFrame]) -> bool:
        if self.mode == BodyMode.FIXED:
            return self._parse_fixed(frames)
        if self.mode == BodyMode.UNTIL_CLOSE:
            self._emit(bytes(self._buffer), frames)
            self._buffer.clear()
            return False
        return self._parse_chunked(frames)

    def _parse_fixed(self, frames: list[BodyFrame]) -> bool:
        take = min(self._remaining, len(self._buffer))
        if take:
            self._emit(bytes(self._buffer[:take]), frames)
            del self._buffer[:take]
            self._remaining -= take
        if self._remaining == 0:
            self._finish(frames)
        return False

    def _parse_chunked(self, frames: list[BodyFrame]) -> bool:
        step = self._chunk_step

        if step == _ChunkStep.SIZE:
            self._section_size = 0
            line = self._take_line(frames, self.MAX_CHUNK_LINE, ErrorKind.MALFORMED_CHUNK)
            if line is None:
                return False
            size_text = line.split(";", 1)[0].strip()
            if not self.HEX_PATTERN.match(size_text):
                self._fail(ErrorKind.MALFORMED_CHUNK, f"Invalid chunk size: {line!r}", frames)
                return False
            size = int(size_text, 16)
            if size == 0:
                self._section_size = 0
                self._chunk_step = _ChunkStep.TRAILERS
            else:
                self._remaining = size
                self._chunk_step = _ChunkStep.DATA
            return True

        if step == _ChunkStep.DATA:
            take = min(self._remaining, len(self._buffer))
            if take == 0:
                return False
            self._emit(bytes(self._buffer[:take]), frames)
            del self._buffer[:take]
            self._remaining -= take
            if self._remaining == 0:
                self._chunk_step = _ChunkStep.DATA_CRLF
                return True
            return False

        if step == _ChunkStep.DATA_CRLF:
            if self._buffer.startswith(b"\r\n"):
                del self._buffer[:2]
            elif self._buffer.startswith(b"\n"):
                del self._buffer[:1]
            elif self._buffer in (b"", b"\r"):
                return False
            else:
                self._fail(ErrorKind.MALFORMED_CHUNK, "Missing CRLF after chunk data", frames)
                return False
            self._chunk_step = _ChunkStep.SIZE
            return True

        # Trailers: header lines until a blank line
        line = self._take_line(frames, self.max_header_size, ErrorKind.HEADERS_TOO_LARGE)
        if line is None:
            return False
        if not line:
            self._finish(frames)
            return False
        return self._add_field(line, self.trailers, frames)

    # =========================================================================
    # FRAME EMISSION
    # =========================================================================

    def _emit(self, data: bytes, frames: list[BodyFrame]) -> None:
        if data:
            self.body_bytes += len(data)
            frames.append(BodyChunk(data))

    def _finish(self, frames: list[BodyFrame]) -> None:
        self.state = ParserState.DONE
        frames.append(BodyEnd())

    def _fail(self, kind: ErrorKind, message: str, frames: list[BodyFrame]) -> None:
        self.state = ParserState.FAILED
        self.failure = ParseError(kind, message)
        frames.append(BodyError(kind))


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_response(data: bytes, eof: bool = True, max_header_size: int = 64 * 1024):
    """
    Parse a complete response held in memory.

    Args:
        data: Raw response bytes.
        eof: Treat the end of data as the server closing the connection.
        max_header_size: Head size limit.

    Returns:
        (parser, frames) so callers can inspect parser.head, parser.state
        and parser.failure alongside the frames.
    """
    parser = ResponseParser(max_header_size=max_header_size)
    frames = parser.feed(data)
    if eof:
        frames += parser.feed_eof()
    return parser, frames
