"""
Deadline tracking for a whole fetch.

A fetch has two time budgets:

    connect_timeout   how long ONE connect() may take
    total_timeout     how long the WHOLE fetch may take, redirects included

Sockets only understand per-call timeouts, so the total budget is kept as
an absolute point on the monotonic clock and every socket call is given
whatever is left of it.
"""

import time
from typing import Optional

from ..errors import ErrorKind, TransferError


class Deadline:
    """
    An absolute point in time after which a fetch is abandoned.

    Deadline(None) never expires, which is what you get when no
    total_timeout_ms is configured.
    """

    def __init__(self, seconds: Optional[float], clock=time.monotonic):
        self._clock = clock
        self.started_at = clock()
        self.expires_at = None if seconds is None else self.started_at + seconds

    @classmethod
    def from_ms(cls, milliseconds: Optional[int]) -> "Deadline":
        return cls(None if milliseconds is None else milliseconds / 1000.0)

    @property
    def elapsed(self) -> float:
        return self._clock() - self.started_at

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when unbounded. Never negative."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def timeout(self, limit: Optional[float] = None) -> Optional[float]:
        """
        Socket timeout to use for the next call.

        The smaller of `limit` and the time remaining. Raises
        TransferError(timeout) when nothing is left, so callers never pass
        a zero timeout (which would switch the socket to non-blocking).
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= 0.0:
            raise TransferError(ErrorKind.TIMEOUT, "Total timeout elapsed")
        if remaining is None:
            return limit
        if limit is None:
            return remaining
        return min(limit, remaining)
