from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union


class EventKind(enum.Enum):
    APPROVAL = "Approval"
    APPROVAL_FOR_ALL = "ApprovalForAll"
    TRANSFER = "Transfer"


@dataclass(frozen=True)
class EventLog:
    """One log entry as returned by the log fetcher."""
    address: str                      # checksummed contract address
    topics: Tuple[str, ...]           # 0x-prefixed 32-byte hex values
    block_number: int
    transaction_hash: Optional[str] = None
    log_index: Optional[int] = None


@dataclass(frozen=True)
class TokenData:
    """Fields returned by a successful ERC-721 probe."""
    symbol: str
    name: str
    balance: str                      # decimal text, "0" when nothing held


@dataclass(frozen=True)
class ProbeFailure:
    address: str
    reason: str


ProbeOutcome = Union[TokenData, ProbeFailure]


@dataclass(frozen=True)
class TokenRecord:
    address: str
    symbol: str
    name: str
    balance: str
    icon: Optional[str] = None
    registered: bool = True
    approvals: Tuple[EventLog, ...] = ()
    approvals_for_all: Tuple[EventLog, ...] = ()


TokenList = Tuple[TokenRecord, ...]


@dataclass(frozen=True)
class ScanResult:
    account: str
    tokens: TokenList = ()
    proxy_address: Optional[str] = None
    from_block: int = 0
    to_block: int = 0
