"""
=============================================================================
EASY HANDLE
=============================================================================

A small setopt()/perform() facade over TransferEngine, shaped like
libcurl's easy interface:

    handle = EasyHandle()
    handle.setopt(Option.URL, "http://example.com/")
    handle.setopt(Option.WRITEFUNCTION, chunks.append)
    handle.perform()
    print(handle.response_code)

Each setopt() is translated into a TransferOptions field straight away,
so a bad value fails at setopt() time and not in the middle of perform():

    ┌────────────────────┬──────────────────────┬────────────────────────┐
    │ Option             │ Value                │ TransferOptions field  │
    ├────────────────────┼──────────────────────┼────────────────────────┤
    │ URL                │ str / bytes          │ (the URL to fetch)     │
    │ WRITEFUNCTION      │ f(data) -> int|None  │ (the sink)             │
    │ FOLLOWLOCATION     │ bool / int           │ follow_redirects       │
    │ MAXREDIRS          │ int                  │ max_redirects          │
    │ TIMEOUT_MS         │ int, 0 = no limit    │ total_timeout_ms       │
    │ CONNECTTIMEOUT_MS  │ int, 0 = no limit    │ connect_timeout_ms     │
    │ USERAGENT          │ str / bytes / None   │ user_agent             │
    │ HTTPHEADER         │ ["Name: value", ...] │ headers                │
    │ SSL_VERIFYPEER     │ bool / int           │ verify_tls             │
    └────────────────────┴──────────────────────┴────────────────────────┘

Without a WRITEFUNCTION the body goes to stdout, as it does in curl.

=============================================================================
"""

import sys
import logging
from typing import Any, Callable, Optional, Union

from .engine import TransferEngine
from .http.url import parse_url
from .options import Option
from .sinks import StreamSink, WriteFunctionSink
from .transfer import TransferResult


logger = logging.getLogger(__name__)


def _text(option: Option, value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if not isinstance(value, str):
        raise TypeError(f"{option.curl_name} expects a string, got {type(value).__name__}")
    return value


def _integer(option: Option, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{option.curl_name} expects an integer, got {type(value).__name__}")
    return value


def _flag(option: Option, value: Any) -> bool:
    if not isinstance(value, int):
        raise TypeError(f"{option.curl_name} expects a bool or integer, got {type(value).__name__}")
    return bool(value)


def _milliseconds(option: Option, value: Any) -> Optional[int]:
    value = _integer(option, value)
    if value < 0:
        raise ValueError(f"{option.curl_name} must be >= 0, got {value}")
    return value or None


def _header_list(option: Option, value: Any) -> list[tuple[str, str]]:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise TypeError(f"{option.curl_name} expects a list of 'Name: value' strings")
    pairs = []
    for line in value:
        name, sep, field_value = _text(option, line).partition(":")
        if not sep or not name.strip():
            raise ValueError(f"{option.curl_name} entry is not 'Name: value': {line!r}")
        pairs.append((name.strip(), field_value.strip()))
    return pairs


class EasyHandle:
    """One reusable transfer handle; options persist across perform() calls."""

    def __init__(self, engine: Optional[TransferEngine] = None):
        self.engine = engine or TransferEngine()
        self.reset()

    def reset(self) -> None:
        """Forget every option and the last result."""
        self._url: Optional[str] = None
        self._write_function: Optional[Callable[[bytes], Optional[int]]] = None
        self._fields: dict[str, Any] = {}
        self._result: Optional[TransferResult] = None

    def setopt(self, option: Union[Option, int, str], value: Any) -> None:
        """
        Set one option.

        Raises:
            UnknownOption: option is not a supported code or name.
            TypeError: value has the wrong type for option.
            ValueError: value has the right type but is out of range.
        """
        option = Option.lookup(option)

        if option is Option.URL:
            url = _text(option, value)
            parse_url(url)
            self._url = url
        elif option is Option.WRITEFUNCTION:
            if value is not None and not callable(value):
                raise TypeError(f"{option.curl_name} expects a callable, got {type(value).__name__}")
            self._write_function = value
        elif option is Option.FOLLOWLOCATION:
            self._fields["follow_redirects"] = _flag(option, value)
        elif option is Option.MAXREDIRS:
            self._fields["max_redirects"] = _integer(option, value)
        elif option is Option.TIMEOUT_MS:
            self._fields["total_timeout_ms"] = _milliseconds(option, value)
        elif option is Option.CONNECTTIMEOUT_MS:
            self._fields["connect_timeout_ms"] = _milliseconds(option, value)
        elif option is Option.USERAGENT:
            self._fields["user_agent"] = None if value is None else _text(option, value)
        elif option is Option.HTTPHEADER:
            self._fields["headers"] = _header_list(option, value)
        elif option is Option.SSL_VERIFYPEER:
            self._fields["verify_tls"] = _flag(option, value)

        logger.debug(f"setopt {option.curl_name}")

    def perform(self) -> TransferResult:
        """
        Run the transfer with the current options.

        Raises:
            ValueError: No URL was set.
            TransferError: The transfer failed.
        """
        if self._url is None:
            raise ValueError("No URL set (setopt(Option.URL, ...))")

        if self._write_function is not None:
            sink = WriteFunctionSink(self._write_function)
        else:
            sink = StreamSink(sys.stdout.buffer)

        options = self.engine.options.replace(**self._fields)
        self._result = None
        self._result = self.engine.fetch(self._url, sink, options)
        return self._result

    # ─────────────────────────────────────────────────────────────────────
    # INFO
    # ─────────────────────────────────────────────────────────────────────

    @property
    def response_code(self) -> int:
        """Status of the last successful perform(), 0 before that."""
        return self._result.status_code if self._result else 0

    @property
    def effective_url(self) -> Optional[str]:
        """URL of the last response, after redirects."""
        if self._result is None:
            return self._url
        return str(self._result.url)
