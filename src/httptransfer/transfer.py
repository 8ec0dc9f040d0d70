"""
=============================================================================
TRANSFER - ONE REQUEST/RESPONSE EXCHANGE
=============================================================================

A Transfer ties the pieces together for exactly one URL:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      Transfer.run() Flow                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Connection.open(host, port, tls)                               │
    │         timeout = min(connect_timeout, time left)                   │
    │                                                                      │
    │   2. write_all(serialize_request(request))                          │
    │                                                                      │
    │   3. loop:                                                          │
    │         data = read_some(buffer_size, time left)                    │
    │         frames = parser.feed(data)   (feed_eof() on b"")            │
    │         for frame in frames: sink(frame)                            │
    │      until BodyEnd / BodyError                                      │
    │                                                                      │
    │   4. close the connection (always, success or not)                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No retries and no connection reuse: a failed transfer closes its socket
and raises TransferError. Bytes already handed to the sink stay handed.

=============================================================================
TALKING TO THE SINK
=============================================================================

The sink sees a strict frame sequence:

    BodyChunk* (BodyEnd | BodyError)

A SinkChannel enforces that. If the transfer dies after the request was
sent (read timeout, reset, malformed chunk...), the sink is told with one
BodyError before the exception reaches the caller, so a streaming consumer
can clean up without wrapping fetch() in try/except. If the SINK raises,
the transfer stops with write_aborted and the sink is left alone.

=============================================================================
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .config import TransferOptions
from .core.connection import Connection
from .core.deadline import Deadline
from .errors import ErrorKind, HTTPTransferError, TransferError
from .http.headers import Headers
from .http.parser import ParserState, ResponseParser
from .http.request import RequestDescriptor, RequestWriter, serialize_request
from .http.response import BodyChunk, BodyError, BodyFrame, ResponseHead, is_terminal
from .http.url import URL, parse_url
from .sinks import SinkCallback, as_sink


logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    """
    What a finished transfer (or fetch) reports back.

    Attributes:
        head: Status line and headers of the final response.
        bytes_delivered: Body bytes handed to the sink.
        url: URL that produced `head`.
        trailers: Trailer headers of a chunked body (usually empty).
        redirects: URLs followed to get here, in order (engine only).
        elapsed: Seconds from start to finish.
    """

    head: ResponseHead
    bytes_delivered: int
    url: URL
    trailers: Headers = field(default_factory=Headers)
    redirects: list[URL] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def status_code(self) -> int:
        return self.head.status_code


class SinkChannel:
    """
    Delivers frames to one sink and keeps the frame sequence legal.

    One channel can span several transfers (a redirect chain) so the
    "at most one terminal frame" rule holds for the whole fetch.
    """

    def __init__(self, sink: SinkCallback):
        self.sink = sink
        self.bytes_delivered = 0
        self.terminated = False
        # Armed once a request is on the wire; connect failures are not
        # reported to the sink.
        self.armed = False

    def deliver(self, frames: list[BodyFrame]) -> None:
        """
        Forward frames to the sink in order.

        Raises:
            TransferError(write_aborted): The sink raised.
        """
        for frame in frames:
            if self.terminated:
                return
            self.terminated = is_terminal(frame)
            try:
                self.sink(frame)
            except Exception as e:
                self.terminated = True
                if isinstance(e, TransferError) and e.kind is ErrorKind.WRITE_ABORTED:
                    raise
                raise TransferError(
                    ErrorKind.WRITE_ABORTED, f"Sink raised {type(e).__name__}: {e}"
                ) from e
            if isinstance(frame, BodyChunk):
                self.bytes_delivered += len(frame.data)

    def fail(self, kind: ErrorKind) -> None:
        """Send BodyError(kind) unless the sink already saw its last frame."""
        if not self.armed or self.terminated or kind is ErrorKind.WRITE_ABORTED:
            return
        self.terminated = True
        try:
            self.sink(BodyError(kind))
        except Exception as e:
            # The transfer error is already on its way to the caller
            logger.warning(f"Sink raised while being notified of {kind.value}: {e}")


class Transfer:
    """
    Runs one request/response exchange over one fresh connection.

    Holds only immutable configuration, so one Transfer may be used for
    many sequential runs (the engine uses one per redirect chain) and
    separate Transfers may run on separate threads.
    """

    def __init__(self, options: Optional[TransferOptions] = None, writer: Optional[RequestWriter] = None):
        self.options = options or TransferOptions()
        self.writer = writer or RequestWriter(
            user_agent=self.options.user_agent,
            default_headers=self.options.headers,
        )

    def run(
        self,
        request: Union[RequestDescriptor, URL, str],
        sink: Union[SinkCallback, SinkChannel],
        deadline: Optional[Deadline] = None,
        stop_at_redirect: bool = False,
    ) -> TransferResult:
        """
        Perform the exchange.

        Args:
            request: What to send. A URL (or URL string) is turned into a
                     GET with this Transfer's default headers.
            sink: Receives the body frames.
            deadline: Total deadline; defaults to one built from
                      options.total_timeout_ms.
            stop_at_redirect: Return as soon as a redirect head (with a
                              Location) is parsed, without delivering its
                              body.

        Returns:
            TransferResult for this single exchange.

        Raises:
            TransferError: Any connect, transport or parse failure, a sink
                           failure (write_aborted) or the deadline (timeout).
            URLError: If request is a string that is not an http(s) URL.
        """
        if not isinstance(request, RequestDescriptor):
            url = request if isinstance(request, URL) else parse_url(request)
            request = self.writer.build(url)

        channel = sink if isinstance(sink, SinkChannel) else SinkChannel(as_sink(sink))
        deadline = deadline or Deadline.from_ms(self.options.total_timeout_ms)
        delivered_before = channel.bytes_delivered
        started = time.monotonic()

        url = request.url
        parser = ResponseParser(max_header_size=self.options.max_header_size)
        conn: Optional[Connection] = None

        try:
            conn = Connection.open(
                url.host,
                url.port,
                use_tls=url.use_tls,
                timeout=deadline.timeout(self.options.connect_timeout),
                verify_tls=self.options.verify_tls,
            )
            logger.debug(f"[{conn.id}] {request.method} {url}")

            conn.write_all(serialize_request(request), timeout=deadline.timeout())
            channel.armed = True

            while True:
                data = conn.read_some(self.options.buffer_size, timeout=deadline.timeout())
                frames = parser.feed(data) if data else parser.feed_eof()

                if stop_at_redirect and parser.head is not None and parser.head.is_redirect:
                    logger.debug(
                        f"[{conn.id}] {parser.head.status_code} redirect to {parser.head.location}"
                    )
                    break

                channel.deliver(frames)

                if parser.state == ParserState.FAILED:
                    raise TransferError.wrap(parser.failure) from parser.failure
                if parser.state == ParserState.DONE:
                    break

        except TransferError as e:
            channel.fail(e.kind)
            raise
        except HTTPTransferError as e:
            channel.fail(e.kind)
            raise TransferError.wrap(e) from e
        finally:
            if conn is not None:
                conn.close()

        return TransferResult(
            head=parser.head,
            bytes_delivered=channel.bytes_delivered - delivered_before,
            url=url,
            trailers=parser.trailers,
            elapsed=time.monotonic() - started,
        )
