"""
=============================================================================
CORE TRANSPORT COMPONENTS
=============================================================================

The low-level plumbing underneath a transfer:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Resolves the host and opens one TCP socket                        │
    │  • Performs the TLS handshake for https URLs                         │
    │  • Moves raw bytes: write_all() / read_some()                        │
    │  • Maps socket failures onto ConnectError / TransportError           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ every socket call is bounded by
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                           DEADLINE                                   │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Absolute monotonic expiry for the whole fetch                     │
    │  • Hands out per-call socket timeouts from the remaining budget     │
    └─────────────────────────────────────────────────────────────────────┘

Nothing here knows about HTTP; see httptransfer.http for that.

=============================================================================
"""

from .connection import Connection, ConnectionState
from .deadline import Deadline

__all__ = [
    "Connection",       # Outbound socket wrapper
    "ConnectionState",  # NEW / OPEN / CLOSED
    "Deadline",         # Total-timeout bookkeeping
]
