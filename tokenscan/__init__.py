"""Discovery of ERC-721 contracts an account approved or received tokens from."""
from __future__ import annotations

from tokenscan.errors import FetchError, InvalidAddress, ProbeError, ScanError
from tokenscan.models import EventKind, EventLog, ScanResult, TokenRecord

__all__ = [
    "EventKind",
    "EventLog",
    "FetchError",
    "InvalidAddress",
    "ProbeError",
    "ScanError",
    "ScanResult",
    "TokenRecord",
]
