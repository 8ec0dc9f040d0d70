"""
=============================================================================
TARGET URL
=============================================================================

A transfer needs four things from the URL the caller passes in:

    https://example.com:8443/api/items?page=2#top
    ──┬──   ─────┬─────  ─┬─ ────┬──── ───┬── ─┬─
      │          │        │      │        │    └── fragment (dropped,
      │          │        │      │        │        never sent on the wire)
      │          │        │      │        └── query
      │          │        │      └── path
      │          │        └── port (defaults: http=80, https=443)
      │          └── host
      └── scheme (decides the default port AND whether to do TLS)

The request line only carries "path?query" (the request TARGET); the host
travels in the Host header. Both are derived here so the rest of the
package never looks at the raw string again.

=============================================================================
"""

from dataclasses import dataclass
from urllib.parse import quote, urlsplit, urljoin


DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
}

# Left alone when percent-encoding path and query. "%" is included so
# already-encoded input is not encoded twice.
_SAFE_CHARS = "/%:@!$&'()*+,;=-._~"


class URLError(ValueError):
    """Raised for URLs this client cannot fetch."""


@dataclass(frozen=True)
class URL:
    """
    A parsed http/https URL.

    Immutable: the Transfer parses it once and everything downstream
    (Host header, request line, TLS decision) reads from the same value.
    """

    scheme: str
    host: str
    port: int
    path: str = "/"
    query: str = ""

    @property
    def use_tls(self) -> bool:
        return self.scheme == "https"

    @property
    def is_default_port(self) -> bool:
        return self.port == DEFAULT_PORTS[self.scheme]

    @property
    def target(self) -> str:
        """Request target for the request line: "/path?query"."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def host_header(self) -> str:
        """
        Value for the Host header.

        The port is only included when it is not the scheme default, and
        IPv6 literals keep their brackets ("[::1]:8080").
        """
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.is_default_port:
            return host
        return f"{host}:{self.port}"

    def resolve(self, location: str) -> "URL":
        """
        Resolve a Location header value against this URL.

        Handles absolute ("https://other/x"), scheme-relative ("//other/x"),
        absolute-path ("/x") and relative ("x", "../x") references.
        """
        return parse_url(urljoin(str(self), location.strip()))

    def __str__(self) -> str:
        return f"{self.scheme}://{self.host_header}{self.target}"


def parse_url(raw: str) -> URL:
    """
    Parse and validate a URL string.

    Raises:
        URLError: unsupported scheme, missing host, invalid port, or
                  embedded credentials.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise URLError("URL must be a non-empty string")

    try:
        parts = urlsplit(raw.strip())
        port = parts.port
    except ValueError as e:
        # urlsplit raises for bad ports ("http://host:99999") and
        # malformed IPv6 literals
        raise URLError(f"Invalid URL {raw!r}: {e}") from e

    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise URLError(f"Unsupported scheme {parts.scheme!r} in {raw!r} (use http or https)")

    if not parts.hostname:
        raise URLError(f"Missing host in {raw!r}")

    if parts.username is not None or parts.password is not None:
        raise URLError("Credentials in URLs are not supported")

    if port == 0:
        raise URLError(f"Invalid port 0 in {raw!r}")

    return URL(
        scheme=scheme,
        host=parts.hostname,
        port=port or DEFAULT_PORTS[scheme],
        path=quote(parts.path, safe=_SAFE_CHARS) or "/",
        query=quote(parts.query, safe=_SAFE_CHARS + "?"),
    )
