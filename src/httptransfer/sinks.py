"""
=============================================================================
BODY SINKS
=============================================================================

A sink is any callable that takes one BodyFrame:

    def sink(frame):
        if isinstance(frame, BodyChunk):
            out.write(frame.data)

The Transfer calls it synchronously, once per frame, in order, and never
again after BodyEnd or BodyError. Whatever the sink does (write a file,
hash the bytes, feed another parser) happens on the fetching thread and
counts against total_timeout_ms.

=============================================================================
READY-MADE SINKS
=============================================================================

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ Sink                 │ Use it for                                   │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ BufferSink()         │ small bodies you want as bytes               │
    │ StreamSink(fileobj)  │ writing to a file / sys.stdout.buffer        │
    │ WriteFunctionSink(f) │ curl-style write callbacks: f(data) -> int   │
    └──────────────────────┴──────────────────────────────────────────────┘

Raising from a sink aborts the transfer with TransferError(write_aborted).

=============================================================================
"""

import logging
from typing import BinaryIO, Callable, Optional

from .errors import ErrorKind, TransferError
from .http.response import BodyChunk, BodyEnd, BodyError, BodyFrame


logger = logging.getLogger(__name__)


SinkCallback = Callable[[BodyFrame], None]


class BufferSink:
    """
    Collects the body in memory.

        sink = BufferSink()
        fetch("http://example.com/", sink)
        print(sink.data.decode())
    """

    def __init__(self):
        self.chunks: list[bytes] = []
        self.finished = False
        self.error: Optional[ErrorKind] = None

    def __call__(self, frame: BodyFrame) -> None:
        if isinstance(frame, BodyChunk):
            self.chunks.append(frame.data)
        elif isinstance(frame, BodyEnd):
            self.finished = True
        elif isinstance(frame, BodyError):
            self.error = frame.kind

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)


class StreamSink:
    """Writes chunks to a binary file object and flushes at the end."""

    def __init__(self, fileobj: BinaryIO):
        self.fileobj = fileobj
        self.bytes_written = 0

    def __call__(self, frame: BodyFrame) -> None:
        if isinstance(frame, BodyChunk):
            self.fileobj.write(frame.data)
            self.bytes_written += len(frame.data)
        elif isinstance(frame, (BodyEnd, BodyError)):
            self.fileobj.flush()


class WriteFunctionSink:
    """
    Adapter for a libcurl-style write function.

    The callback receives each chunk's bytes and returns how many it
    consumed. Returning anything other than len(data) stops the transfer,
    exactly like returning a short count from CURLOPT_WRITEFUNCTION.
    Returning None counts as "everything consumed" so plain functions
    such as list.append work too.
    """

    def __init__(self, callback: Callable[[bytes], Optional[int]]):
        if not callable(callback):
            raise TypeError(f"Write function must be callable, got {type(callback).__name__}")
        self.callback = callback

    def __call__(self, frame: BodyFrame) -> None:
        if not isinstance(frame, BodyChunk):
            return

        consumed = self.callback(frame.data)
        if consumed is not None and consumed != len(frame.data):
            logger.debug(f"Write function consumed {consumed} of {len(frame.data)} bytes")
            raise TransferError(
                ErrorKind.WRITE_ABORTED,
                f"Write function consumed {consumed} of {len(frame.data)} bytes",
            )


def as_sink(target) -> SinkCallback:
    """
    Turn what the caller passed into a frame sink.

    Callables are used as they are; objects with a write() method (open
    files, BytesIO) are wrapped in a StreamSink.

    Raises:
        TypeError: If target is neither.
    """
    if callable(target):
        return target
    if hasattr(target, "write"):
        return StreamSink(target)
    raise TypeError(f"Sink must be callable or have write(), got {type(target).__name__}")
