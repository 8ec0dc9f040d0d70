"""
=============================================================================
TRANSFER LOG
=============================================================================

One structured record per fetch, emitted on the "httptransfer.access"
logger once the fetch has finished (successfully or not).

    TEXT FORMAT (default):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ [a1b2c3d4] GET http://example.com/a 200 1256B 1 redirect 42.10ms ok │
    └─────────────────────────────────────────────────────────────────────┘

    JSON FORMAT (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"transfer_id": "a1b2c3d4", "method": "GET",                        │
    │  "url": "http://example.com/a", "status_code": 200,                 │
    │  "bytes_delivered": 1256, "redirects": 1,                           │
    │  "duration_ms": 42.1, "outcome": "ok", "timestamp": "..."}          │
    └─────────────────────────────────────────────────────────────────────┘

The access logger is separate from the per-module loggers so it can be
routed on its own:

    logging.getLogger("httptransfer.access").addHandler(file_handler)

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger("httptransfer.access")


@dataclass
class TransferLog:
    """
    Completion record for one fetch.

    transfer_id:     Short random id, also used in DEBUG lines
    method:          Always "GET"
    url:             URL the caller asked for
    final_url:       URL of the last response (differs after redirects)
    status_code:     Status of the last response, None if none arrived
    bytes_delivered: Body bytes handed to the sink
    redirects:       Redirect hops followed
    duration_ms:     Wall time of the whole fetch
    outcome:         "ok" or the ErrorKind value of the failure
    timestamp:       When the fetch finished
    """

    transfer_id: str
    method: str
    url: str
    final_url: str
    status_code: Optional[int]
    bytes_delivered: int
    redirects: int
    duration_ms: float
    outcome: str
    timestamp: str

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"

    def to_dict(self) -> dict:
        return {
            "transfer_id": self.transfer_id,
            "method": self.method,
            "url": self.url,
            "final_url": self.final_url,
            "status_code": self.status_code,
            "bytes_delivered": self.bytes_delivered,
            "redirects": self.redirects,
            "duration_ms": round(self.duration_ms, 2),
            "outcome": self.outcome,
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        status = self.status_code if self.status_code is not None else "-"
        hops = f" {self.redirects} redirect{'s' if self.redirects != 1 else ''}" if self.redirects else ""
        return (
            f"[{self.transfer_id}] {self.method} {self.final_url} {status} "
            f"{self.bytes_delivered}B{hops} {self.duration_ms:.2f}ms {self.outcome}"
        )


def emit(entry: TransferLog, log_format: str = "text") -> None:
    """Write entry to the access logger: INFO on success, WARNING on failure."""
    level = logging.INFO if entry.ok else logging.WARNING
    if not logger.isEnabledFor(level):
        return
    if log_format == "json":
        logger.log(level, json.dumps(entry.to_dict()))
    else:
        logger.log(level, entry.to_text())


def timestamp() -> str:
    return time.strftime("%d/%b/%Y:%H:%M:%S %z")
