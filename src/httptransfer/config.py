"""
=============================================================================
TRANSFER CONFIGURATION
=============================================================================

Every knob a fetch understands, in one dataclass.

=============================================================================
WHERE OPTIONS COME FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION SOURCES                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Code                                                           │
    │      └── TransferOptions(follow_redirects=True)                    │
    │                                                                      │
    │   2. Per-call overrides                                             │
    │      └── fetch(url, sink, total_timeout_ms=5000)                   │
    │                                                                      │
    │   3. Named option codes (curl style)                                │
    │      └── handle.setopt(Option.FOLLOWLOCATION, True)                │
    │                                                                      │
    │   4. Command line                                                   │
    │      └── python -m httptransfer -L --max-time 5000 URL             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

All four end up as a TransferOptions. The engine itself never reads
environment variables or files: what you pass is what you get.

=============================================================================
TIMEOUTS
=============================================================================

    connect_timeout_ms   bounds resolve + TCP connect + TLS handshake of
                         ONE connection
    total_timeout_ms     bounds the WHOLE fetch, every redirect hop and
                         the time spent inside the sink included

None means "no limit". A fetch with neither limit can block forever on a
silent server, so production callers should set total_timeout_ms.

=============================================================================
"""

from dataclasses import dataclass, field, replace as dataclass_replace
from typing import Optional

from .http.headers import HeaderInput


DEFAULT_USER_AGENT = "httptransfer/1.0"


@dataclass
class TransferOptions:
    """
    Options for one fetch (or the defaults of a TransferEngine).

    Development:
        TransferOptions(total_timeout_ms=2000)

    Following redirects:
        TransferOptions(follow_redirects=True, max_redirects=5)
    """

    # ─────────────────────────────────────────────────────────────────────
    # TIMEOUTS
    # ─────────────────────────────────────────────────────────────────────

    connect_timeout_ms: Optional[int] = None
    """
    Milliseconds allowed to open one connection.
    Always capped by what is left of total_timeout_ms.
    """

    total_timeout_ms: Optional[int] = None
    """
    Milliseconds allowed for the whole fetch, redirects included.
    Expiry aborts the in-flight read and raises TransferError(timeout).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REDIRECTS
    # ─────────────────────────────────────────────────────────────────────

    follow_redirects: bool = False
    """
    Follow 301/302/303/307/308 responses that carry a Location.
    When False the redirect response itself is delivered to the sink.
    """

    max_redirects: int = 10
    """
    Maximum number of requests one redirect chain may issue.
    A redirect seen after that many requests fails with too_many_redirects.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST
    # ─────────────────────────────────────────────────────────────────────

    user_agent: Optional[str] = DEFAULT_USER_AGENT
    """
    Value of the User-Agent header. None sends no User-Agent.
    A User-Agent in `headers` wins over this.
    """

    headers: HeaderInput = field(default_factory=list)
    """
    Extra request headers: a dict, a Headers, or (name, value) pairs.
    A "Host" entry replaces the Host derived from the URL.
    """

    # ─────────────────────────────────────────────────────────────────────
    # TLS
    # ─────────────────────────────────────────────────────────────────────

    verify_tls: bool = True
    """
    Verify the server certificate and host name for https URLs.
    Turning this off is only sensible against test servers.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 8192
    """
    Maximum bytes read from the socket per recv() call (8 KB default).
    Also the largest BodyChunk a fixed or until-close body produces.
    """

    max_header_size: int = 64 * 1024
    """
    Maximum size of the response head (and of the chunked trailer block).
    Larger heads fail with headers_too_large.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_format: str = "text"
    """
    Format of the completion record on the httptransfer.access logger:
    'text' (one line) or 'json'.
    """

    def validate(self) -> None:
        """
        Validate option values.

        Called by the engine before any socket is opened, so a typo in a
        timeout fails immediately instead of as a confusing socket error.

        Raises:
            ValueError: On the first invalid value.
        """
        if self.connect_timeout_ms is not None and self.connect_timeout_ms <= 0:
            raise ValueError(f"connect_timeout_ms must be > 0, got {self.connect_timeout_ms}")

        if self.total_timeout_ms is not None and self.total_timeout_ms <= 0:
            raise ValueError(f"total_timeout_ms must be > 0, got {self.total_timeout_ms}")

        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must be >= 0, got {self.max_redirects}")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_header_size < 1024:
            raise ValueError("max_header_size must be >= 1024")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")

    def replace(self, **overrides) -> "TransferOptions":
        """
        Return a copy with some fields changed.

            fast = options.replace(total_timeout_ms=1000)

        Raises:
            TypeError: If an override names an unknown field.
        """
        return dataclass_replace(self, **overrides)

    @property
    def connect_timeout(self) -> Optional[float]:
        """connect_timeout_ms in seconds, the unit sockets use."""
        if self.connect_timeout_ms is None:
            return None
        return self.connect_timeout_ms / 1000.0
