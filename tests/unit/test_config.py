"""
Unit tests for TransferOptions.
"""

import pytest

from httptransfer.config import DEFAULT_USER_AGENT, TransferOptions


class TestTransferOptions:
    """Tests for option defaults and validation."""

    def test_defaults(self):
        """Test the documented defaults."""
        options = TransferOptions()

        assert options.connect_timeout_ms is None
        assert options.total_timeout_ms is None
        assert options.follow_redirects is False
        assert options.max_redirects == 10
        assert options.user_agent == DEFAULT_USER_AGENT
        assert options.verify_tls is True
        assert options.buffer_size == 8192
        assert options.max_header_size == 64 * 1024
        options.validate()

    @pytest.mark.parametrize("field,value", [
        ("connect_timeout_ms", 0),
        ("connect_timeout_ms", -5),
        ("total_timeout_ms", 0),
        ("max_redirects", -1),
        ("buffer_size", 512),
        ("max_header_size", 100),
        ("log_format", "xml"),
    ])
    def test_invalid(self, field: str, value):
        """Test that validate() rejects bad values."""
        options = TransferOptions(**{field: value})

        with pytest.raises(ValueError):
            options.validate()

    def test_zero_redirects_allowed(self):
        """Test that max_redirects=0 is valid."""
        TransferOptions(max_redirects=0).validate()

    def test_replace_returns_copy(self):
        """Test that replace() leaves the original alone."""
        options = TransferOptions()
        changed = options.replace(follow_redirects=True, total_timeout_ms=1000)

        assert changed.follow_redirects is True
        assert changed.total_timeout_ms == 1000
        assert options.follow_redirects is False

    def test_connect_timeout_seconds(self):
        """Test the seconds view of connect_timeout_ms."""
        assert TransferOptions(connect_timeout_ms=1500).connect_timeout == 1.5
        assert TransferOptions().connect_timeout is None
