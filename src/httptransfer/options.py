"""
Named option codes, curl style.

Embedding layers (FFI bindings, scripting hosts, config files) tend to
address options by number or by name rather than by keyword argument.
These are the codes libcurl uses for the options this engine supports,
so a binding that already speaks CURLOPT_* can drive it unchanged:

    CURLOPT_URL            = 10002   (10000 + 2:  string option)
    CURLOPT_WRITEFUNCTION  = 20011   (20000 + 11: function option)
    CURLOPT_FOLLOWLOCATION = 52      (0 + 52:     long option)

The thousands digit is libcurl's type class: 0 long, 10000 object/string,
20000 function pointer.
"""

from enum import IntEnum
from typing import Union


_LONG = 0
_OBJECT = 10000
_FUNCTION = 20000


class UnknownOption(KeyError):
    """Raised for an option code or name this engine does not support."""


class Option(IntEnum):
    URL = _OBJECT + 2
    WRITEFUNCTION = _FUNCTION + 11
    FOLLOWLOCATION = _LONG + 52
    SSL_VERIFYPEER = _LONG + 64
    MAXREDIRS = _LONG + 68
    TIMEOUT_MS = _LONG + 155
    CONNECTTIMEOUT_MS = _LONG + 156
    USERAGENT = _OBJECT + 18
    HTTPHEADER = _OBJECT + 23

    @property
    def curl_name(self) -> str:
        return f"CURLOPT_{self.name}"

    @classmethod
    def lookup(cls, key: Union["Option", int, str]) -> "Option":
        """
        Resolve an Option, its integer code, or its name.

        Names are accepted with or without the CURLOPT_ prefix and in any
        case: "CURLOPT_URL", "URL" and "url" are the same option.

        Raises:
            UnknownOption: If key names no supported option.
        """
        if isinstance(key, cls):
            return key
        if isinstance(key, bool):
            raise UnknownOption(key)
        if isinstance(key, int):
            try:
                return cls(key)
            except ValueError:
                raise UnknownOption(key) from None
        if isinstance(key, str):
            name = key.strip().upper()
            if name.startswith("CURLOPT_"):
                name = name[len("CURLOPT_"):]
            try:
                return cls[name]
            except KeyError:
                raise UnknownOption(key) from None
        raise UnknownOption(key)


# Exported by name, the way the embedding layer sees them
CURLOPT_URL = Option.URL
CURLOPT_WRITEFUNCTION = Option.WRITEFUNCTION
