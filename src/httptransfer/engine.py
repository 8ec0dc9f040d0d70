"""
=============================================================================
TRANSFER ENGINE
=============================================================================

The public entry point. fetch() runs one Transfer, and when asked to,
keeps running Transfers along a redirect chain:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     fetch() with follow_redirects                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /old ───────► 301 Location: /new      (body not delivered)    │
    │   GET /new ───────► 302 Location: //cdn/x   (body not delivered)    │
    │   GET cdn/x ──────► 200 OK                  ──► sink gets the body  │
    │                                                                      │
    │   ◄──────────────── one total_timeout_ms budget ───────────────────► │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REDIRECT LIMITS
=============================================================================

A chain issues at most max_redirects requests. When the response to the
last allowed request is yet another redirect, the fetch fails with
too_many_redirects instead of issuing one more. A redirect back to a URL
already visited in the same chain fails the same way straight away: the
server would only send us around the loop until the limit.

Which statuses are followed:

    301 Moved Permanently    ┐
    302 Found                │  followed when a Location header is present,
    303 See Other            ├─ always re-issued as GET (the only method
    307 Temporary Redirect   │  this client sends)
    308 Permanent Redirect   ┘

Anything else (300, 304, a 3xx without Location) is a normal response and
its body is delivered.

=============================================================================
THREAD SAFETY
=============================================================================

The engine holds only its default TransferOptions. Each fetch() builds
its own Deadline, SinkChannel, Transfer, Connection and ResponseParser,
so concurrent fetch() calls on one engine share no mutable state.

=============================================================================
"""

import uuid
import logging
from typing import Optional, Union

from .config import TransferOptions
from .core.deadline import Deadline
from .errors import ErrorKind, TransferError
from .http.request import RequestDescriptor
from .http.response import ResponseHead
from .http.url import URL, URLError, parse_url
from .sinks import as_sink
from .transfer import SinkChannel, Transfer, TransferResult
from .transfer_log import TransferLog, emit, timestamp


logger = logging.getLogger(__name__)


class TransferEngine:
    """
    Fetches URLs into sinks.

        engine = TransferEngine(TransferOptions(follow_redirects=True))
        sink = BufferSink()
        result = engine.fetch("http://example.com/", sink)
        print(result.status_code, len(sink.data))
    """

    def __init__(self, options: Optional[TransferOptions] = None):
        self.options = options or TransferOptions()
        self.options.validate()

    def fetch(
        self,
        url: Union[str, URL],
        sink,
        options: Optional[TransferOptions] = None,
        **overrides,
    ) -> TransferResult:
        """
        Fetch url and stream its body into sink.

        Args:
            url: http:// or https:// URL.
            sink: Frame callback, or a binary file object.
            options: Replaces the engine defaults for this call.
            **overrides: Individual TransferOptions fields to change.

        Returns:
            TransferResult of the final response.

        Raises:
            TransferError: The fetch failed; .kind says why.
            URLError: url is not an http(s) URL.
            ValueError: Invalid options.
        """
        options = options or self.options
        if overrides:
            options = options.replace(**overrides)
        options.validate()

        start_url = url if isinstance(url, URL) else parse_url(url)
        transfer_id = str(uuid.uuid4())[:8]
        deadline = Deadline.from_ms(options.total_timeout_ms)
        channel = SinkChannel(as_sink(sink))
        transfer = Transfer(options)

        current = start_url
        visited = {str(start_url)}
        redirects: list[URL] = []
        last_head: Optional[ResponseHead] = None
        requests = 0

        try:
            while True:
                requests += 1
                result = transfer.run(
                    self._request_for(transfer, current, start_url),
                    channel,
                    deadline=deadline,
                    stop_at_redirect=options.follow_redirects,
                )
                last_head = result.head

                if not (options.follow_redirects and result.head.is_redirect):
                    break

                if requests >= options.max_redirects:
                    raise TransferError(
                        ErrorKind.TOO_MANY_REDIRECTS,
                        f"Maximum ({options.max_redirects}) redirects followed",
                    )

                location = result.head.location
                try:
                    target = current.resolve(location)
                except URLError as e:
                    raise TransferError(
                        ErrorKind.BAD_REDIRECT, f"Cannot follow redirect to {location!r}: {e}"
                    ) from e

                if str(target) in visited:
                    raise TransferError(ErrorKind.TOO_MANY_REDIRECTS, f"Redirect loop at {target}")

                logger.debug(f"[{transfer_id}] {result.head.status_code} {current} -> {target}")
                visited.add(str(target))
                redirects.append(target)
                current = target

        except TransferError as e:
            channel.fail(e.kind)
            logger.warning(f"[{transfer_id}] GET {current} failed: {e.kind.value}: {e}")
            self._log(transfer_id, start_url, current, last_head, channel, redirects, deadline, e.kind.value, options)
            raise

        result.redirects = redirects
        result.elapsed = deadline.elapsed
        self._log(transfer_id, start_url, current, result.head, channel, redirects, deadline, "ok", options)
        return result

    @staticmethod
    def _request_for(transfer: Transfer, url: URL, origin: URL) -> RequestDescriptor:
        request = transfer.writer.build(url)
        # A caller-supplied Host only applies to the host it was meant for
        if url.host_header != origin.host_header and "host" in request.headers:
            del request.headers["host"]
        return request

    @staticmethod
    def _log(transfer_id, start_url, final_url, head, channel, redirects, deadline, outcome, options) -> None:
        emit(
            TransferLog(
                transfer_id=transfer_id,
                method="GET",
                url=str(start_url),
                final_url=str(final_url),
                status_code=head.status_code if head is not None else None,
                bytes_delivered=channel.bytes_delivered,
                redirects=len(redirects),
                duration_ms=deadline.elapsed * 1000,
                outcome=outcome,
                timestamp=timestamp(),
            ),
            options.log_format,
        )


_default_engine = TransferEngine()


def fetch(url: Union[str, URL], sink, options: Optional[TransferOptions] = None, **overrides) -> TransferResult:
    """
    Fetch url with a shared default engine.

        from httptransfer import fetch, BufferSink

        sink = BufferSink()
        fetch("http://example.com/", sink, follow_redirects=True, total_timeout_ms=5000)
    """
    return _default_engine.fetch(url, sink, options, **overrides)
