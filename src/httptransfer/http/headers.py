"""
=============================================================================
HEADER COLLECTION
=============================================================================

HTTP headers are NOT a plain dict:

1. CASE-INSENSITIVE NAMES
   "Content-Length" and "content-length" are the same header.

2. ORDER MATTERS (for serialization)
   A request is written in the order the caller set its headers.

3. NAMES MAY REPEAT
   A response can legally contain

       Set-Cookie: a=1
       Set-Cookie: b=2

   and both values must survive parsing.

Headers keeps an ordered list of (name, value) pairs with the original
spelling of each name, and does case-insensitive lookups on top of it:

    ┌────────────────────────┬──────────────────────────────────────────┐
    │  Operation             │  Behaviour                               │
    ├────────────────────────┼──────────────────────────────────────────┤
    │  add(name, value)      │  append another entry                    │
    │  headers[name] = value │  replace ALL entries of name, keeping    │
    │                        │  the position of the first one           │
    │  headers.get(name)     │  values joined with ", " (RFC 7230)      │
    │  headers.get_all(name) │  list of every value, in order           │
    │  del headers[name]     │  remove every entry of name              │
    └────────────────────────┴──────────────────────────────────────────┘

=============================================================================
"""

from typing import Iterable, Iterator, Optional, Tuple, Union, Mapping


HeaderInput = Union["Headers", Mapping[str, str], Iterable[Tuple[str, str]], None]


class Headers:
    """Ordered, case-insensitive, multi-valued header collection."""

    def __init__(self, initial: HeaderInput = None):
        self._items: list[tuple[str, str]] = []
        if initial is None:
            return
        if isinstance(initial, Headers):
            pairs = initial.items()
        elif isinstance(initial, Mapping):
            pairs = initial.items()
        else:
            pairs = initial
        for name, value in pairs:
            self.add(name, value)

    # =========================================================================
    # MUTATION
    # =========================================================================

    def add(self, name: str, value: str) -> None:
        """Append an entry, keeping any existing values of name."""
        self._items.append((str(name), str(value)))

    def __setitem__(self, name: str, value: str) -> None:
        key = name.lower()
        replaced = False
        items = []
        for existing_name, existing_value in self._items:
            if existing_name.lower() != key:
                items.append((existing_name, existing_value))
            elif not replaced:
                items.append((str(name), str(value)))
                replaced = True
        if not replaced:
            items.append((str(name), str(value)))
        self._items = items

    def __delitem__(self, name: str) -> None:
        key = name.lower()
        if key not in self:
            raise KeyError(name)
        self._items = [(n, v) for n, v in self._items if n.lower() != key]

    def setdefault(self, name: str, value: str) -> str:
        if name not in self:
            self.add(name, value)
        return self.get(name)

    def extend_last(self, extra: str) -> None:
        """
        Append text to the value of the most recently added entry.

        Used for obsolete line folding, where a header line starting with
        whitespace continues the previous header's value.
        """
        if not self._items:
            raise IndexError("No header to continue")
        name, value = self._items[-1]
        self._items[-1] = (name, f"{value} {extra}" if value else extra)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """All values of name joined with ", ", or default when absent."""
        values = self.get_all(name)
        if not values:
            return default
        return ", ".join(values)

    def get_all(self, name: str) -> list[str]:
        key = name.lower()
        return [value for n, value in self._items if n.lower() == key]

    def __getitem__(self, name: str) -> str:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.lower()
        return any(n.lower() == key for n, _ in self._items)

    def has_token(self, name: str, token: str) -> bool:
        """
        Check a comma-separated header for a token, case-insensitively.

            Connection: keep-alive, Close   → has_token("connection", "close")
        """
        token = token.lower()
        return any(
            part.strip().lower() == token
            for value in self.get_all(name)
            for part in value.split(",")
        )

    # =========================================================================
    # ITERATION
    # =========================================================================

    def items(self) -> list[tuple[str, str]]:
        """Every (name, value) entry in order, duplicates included."""
        return list(self._items)

    def keys(self) -> list[str]:
        """Distinct names in first-seen order."""
        seen: dict[str, str] = {}
        for name, _ in self._items:
            seen.setdefault(name.lower(), name)
        return list(seen.values())

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return [(n.lower(), v) for n, v in self._items] == [
            (n.lower(), v) for n, v in other._items
        ]

    def copy(self) -> "Headers":
        return Headers(self)

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"
