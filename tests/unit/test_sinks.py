"""
Unit tests for the ready-made sinks.
"""

import io

import pytest

from httptransfer.errors import ErrorKind, TransferError
from httptransfer.http.response import BodyChunk, BodyEnd, BodyError
from httptransfer.sinks import BufferSink, StreamSink, WriteFunctionSink, as_sink


class TestBufferSink:
    """Tests for BufferSink."""

    def test_collects_chunks(self):
        """Test that chunks are joined in order."""
        sink = BufferSink()
        sink(BodyChunk(b"Wiki"))
        sink(BodyChunk(b"pedia"))
        sink(BodyEnd())

        assert sink.data == b"Wikipedia"
        assert len(sink) == 9
        assert sink.finished
        assert sink.error is None

    def test_records_error(self):
        """Test that BodyError is remembered."""
        sink = BufferSink()
        sink(BodyChunk(b"Hel"))
        sink(BodyError(ErrorKind.TRUNCATED_BODY))

        assert sink.data == b"Hel"
        assert not sink.finished
        assert sink.error is ErrorKind.TRUNCATED_BODY


class TestStreamSink:
    """Tests for StreamSink."""

    def test_writes_and_flushes(self):
        """Test that chunks reach the stream."""
        stream = io.BytesIO()
        sink = StreamSink(stream)
        sink(BodyChunk(b"abc"))
        sink(BodyChunk(b"def"))
        sink(BodyEnd())

        assert stream.getvalue() == b"abcdef"
        assert sink.bytes_written == 6


class TestWriteFunctionSink:
    """Tests for the curl-style write function adapter."""

    def test_full_count_continues(self):
        """Test that returning len(data) accepts the chunk."""
        received = []

        def write(data: bytes) -> int:
            received.append(data)
            return len(data)

        sink = WriteFunctionSink(write)
        sink(BodyChunk(b"abc"))
        sink(BodyEnd())

        assert received == [b"abc"]

    def test_none_counts_as_consumed(self):
        """Test that a function returning None is accepted."""
        received = []
        sink = WriteFunctionSink(received.append)
        sink(BodyChunk(b"abc"))

        assert received == [b"abc"]

    def test_short_count_aborts(self):
        """Test that a short return aborts with write_aborted."""
        sink = WriteFunctionSink(lambda data: 0)

        with pytest.raises(TransferError) as exc_info:
            sink(BodyChunk(b"abc"))

        assert exc_info.value.kind is ErrorKind.WRITE_ABORTED

    def test_terminal_frames_not_forwarded(self):
        """Test that the write function only ever sees bytes."""
        received = []
        sink = WriteFunctionSink(received.append)
        sink(BodyEnd())
        sink(BodyError(ErrorKind.TIMEOUT))

        assert received == []

    def test_requires_callable(self):
        """Test that a non-callable is rejected."""
        with pytest.raises(TypeError):
            WriteFunctionSink("not callable")


class TestAsSink:
    """Tests for as_sink()."""

    def test_callable_passthrough(self):
        """Test that callables are used unchanged."""
        frames = []

        assert as_sink(frames.append) == frames.append

    def test_file_wrapped(self):
        """Test that writable objects become StreamSinks."""
        sink = as_sink(io.BytesIO())

        assert isinstance(sink, StreamSink)

    def test_rejects_other(self):
        """Test that anything else is a TypeError."""
        with pytest.raises(TypeError):
            as_sink(42)
