"""
=============================================================================
HTTPTRANSFER CLI ENTRY POINT
=============================================================================

A small curl-like command line on top of TransferEngine.

=============================================================================
USAGE
=============================================================================

    # Body to stdout
    python -m httptransfer http://example.com/

    # Body to a file, following redirects
    python -m httptransfer -L -o page.html http://example.com/

    # Give up after 5 seconds in total
    python -m httptransfer --max-time 5000 http://slow.example.com/

    # Extra headers and a custom User-Agent
    python -m httptransfer -H "Accept: application/json" -A my-tool/1.0 URL

    # See what is happening on the wire
    python -m httptransfer -l DEBUG -i URL

=============================================================================
EXIT CODES
=============================================================================

    0   transfer completed (whatever the HTTP status)
    1   transfer failed (message on stderr)
    2   bad command line (argparse)

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import TransferOptions
from .engine import TransferEngine
from .errors import TransferError
from .http.url import URLError
from .sinks import StreamSink


def _header(value: str) -> tuple[str, str]:
    name, sep, field_value = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {value!r}")
    return name.strip(), field_value.strip()


def _positive_ms(value: str) -> int:
    try:
        ms = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected milliseconds, got {value!r}") from None
    if ms <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return ms


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httptransfer",
        description="Fetch a URL over HTTP/1.1 and stream the body",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httptransfer http://example.com/             # Body to stdout
  python -m httptransfer -L -o out.html http://host/     # Follow redirects, save
  python -m httptransfer --max-time 5000 http://host/    # 5 second budget
        """
    )

    parser.add_argument("url", help="http:// or https:// URL to fetch")

    # ─────────────────────────────────────────────────────────────────────
    # OUTPUT
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the body to FILE instead of stdout"
    )

    parser.add_argument(
        "--include", "-i",
        action="store_true",
        help="Print the final status line and headers to stderr"
    )

    # ─────────────────────────────────────────────────────────────────────
    # REDIRECTS AND TIMEOUTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--location", "-L",
        action="store_true",
        help="Follow redirects"
    )

    parser.add_argument(
        "--max-redirs",
        type=int,
        default=10,
        help="Maximum requests in a redirect chain (default: 10)"
    )

    parser.add_argument(
        "--connect-timeout",
        type=_positive_ms,
        default=None,
        metavar="MS",
        help="Milliseconds allowed for each connect"
    )

    parser.add_argument(
        "--max-time", "-m",
        type=_positive_ms,
        default=None,
        metavar="MS",
        help="Milliseconds allowed for the whole transfer"
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--header", "-H",
        type=_header,
        action="append",
        default=[],
        help="Extra request header 'Name: value' (repeatable)"
    )

    parser.add_argument(
        "--user-agent", "-A",
        default=None,
        help="User-Agent to send"
    )

    parser.add_argument(
        "--insecure", "-k",
        action="store_true",
        help="Do not verify TLS certificates"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httptransfer {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """Run the CLI; returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    overrides = {}
    if args.user_agent is not None:
        overrides["user_agent"] = args.user_agent

    try:
        options = TransferOptions(
            connect_timeout_ms=args.connect_timeout,
            total_timeout_ms=args.max_time,
            follow_redirects=args.location,
            max_redirects=args.max_redirs,
            headers=args.header,
            verify_tls=not args.insecure,
            **overrides,
        )
        engine = TransferEngine(options)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        output = open(args.output, "wb") if args.output else sys.stdout.buffer
    except OSError as e:
        print(f"Error: cannot write {args.output}: {e.strerror or e}", file=sys.stderr)
        return 1

    try:
        result = engine.fetch(args.url, StreamSink(output))
    except (TransferError, URLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if args.output:
            output.close()

    if args.include:
        print(result.head.status_line, file=sys.stderr)
        for name, value in result.head.headers.items():
            print(f"{name}: {value}", file=sys.stderr)

    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
