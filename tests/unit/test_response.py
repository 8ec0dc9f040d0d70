"""
Unit tests for the response head, body frames and status codes.
"""

import pytest

from httptransfer.errors import ErrorKind
from httptransfer.http.headers import Headers
from httptransfer.http.response import (
    ResponseHead,
    BodyChunk,
    BodyEnd,
    BodyError,
    is_terminal,
)
from httptransfer.http.status_codes import (
    HTTPStatus,
    REDIRECT_STATUSES,
    has_body,
    lookup,
)


def head(status: int = 200, version: str = "HTTP/1.1", **headers) -> ResponseHead:
    return ResponseHead(
        version=version,
        status_code=status,
        reason="",
        headers=Headers([(k.replace("_", "-"), v) for k, v in headers.items()]),
    )


class TestResponseHead:
    """Tests for ResponseHead properties."""

    def test_redirect_needs_location(self):
        """Test that a redirect status alone is not followable."""
        assert head(302, Location="/next").is_redirect
        assert not head(302).is_redirect
        assert not head(302, Location="  ").is_redirect
        assert not head(300, Location="/next").is_redirect
        assert not head(200, Location="/next").is_redirect

    def test_location(self):
        """Test that Location is returned stripped."""
        assert head(301, Location=" /a ").location == "/a"
        assert head(200).location is None

    def test_content_length(self):
        """Test declared length parsing."""
        assert head(Content_Length="42").content_length == 42
        assert head(Content_Length="7, 7").content_length == 7
        assert head(Content_Length="x").content_length is None
        assert head(Content_Length="²").content_length is None
        assert head(Content_Length="-1").content_length is None
        assert head().content_length is None

    def test_is_chunked(self):
        """Test that only a final chunked coding counts."""
        assert head(Transfer_Encoding="chunked").is_chunked
        assert head(Transfer_Encoding="gzip, Chunked").is_chunked
        assert not head(Transfer_Encoding="chunked, gzip").is_chunked
        assert not head().is_chunked

    def test_keep_alive(self):
        """Test the per-version keep-alive defaults."""
        assert head().keep_alive
        assert not head(Connection="close").keep_alive
        assert not head(version="HTTP/1.0").keep_alive
        assert head(version="HTTP/1.0", Connection="keep-alive").keep_alive

    def test_status(self):
        """Test the enum view of the status code."""
        assert head(404).status is HTTPStatus.NOT_FOUND
        assert head(299).status is None

    def test_status_line(self):
        """Test the textual status line."""
        response = ResponseHead("HTTP/1.1", 404, "Not Found")

        assert response.status_line == "HTTP/1.1 404 Not Found"
        assert ResponseHead("HTTP/1.1", 204).status_line == "HTTP/1.1 204"

    def test_frozen(self):
        """Test that the head cannot be modified."""
        response = head()

        with pytest.raises(AttributeError):
            response.status_code = 500


class TestBodyFrames:
    """Tests for body frames."""

    def test_equality(self):
        """Test that frames compare by value."""
        assert BodyChunk(b"a") == BodyChunk(b"a")
        assert BodyError(ErrorKind.TIMEOUT) != BodyError(ErrorKind.BROKEN_PIPE)
        assert BodyEnd() == BodyEnd()

    def test_terminal(self):
        """Test which frames end the sequence."""
        assert not is_terminal(BodyChunk(b"x"))
        assert is_terminal(BodyEnd())
        assert is_terminal(BodyError(ErrorKind.TRUNCATED_BODY))


class TestHTTPStatus:
    """Tests for the status code enum."""

    def test_int_comparison(self):
        """Test that statuses compare equal to ints."""
        assert HTTPStatus.FOUND == 302

    def test_phrases(self):
        """Test reason phrases, including the irregular ones."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.URI_TOO_LONG.phrase == "URI Too Long"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_classes(self):
        """Test class predicates."""
        assert HTTPStatus.CONTINUE.is_informational
        assert HTTPStatus.NO_CONTENT.is_success
        assert HTTPStatus.PERMANENT_REDIRECT.is_redirect
        assert not HTTPStatus.NOT_MODIFIED.is_redirect
        assert HTTPStatus.BAD_GATEWAY.is_error

    def test_redirect_set(self):
        """Test exactly which statuses are followed."""
        assert set(REDIRECT_STATUSES) == {301, 302, 303, 307, 308}

    def test_lookup(self):
        """Test lookup of listed and unlisted codes."""
        assert lookup(200) is HTTPStatus.OK
        assert lookup(599) is None

    @pytest.mark.parametrize("code,expected", [
        (100, False), (103, False), (200, True), (204, False),
        (304, False), (404, True), (500, True),
    ])
    def test_has_body(self, code: int, expected: bool):
        """Test which statuses may carry a body."""
        assert has_body(code) is expected
