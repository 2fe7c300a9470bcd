from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from web3 import Web3

from tokenscan.errors import FetchError
from tokenscan.models import EventLog

logger = logging.getLogger("tokenscan.chain")

# Substrings providers use when a log query covers too many blocks or results.
_TOO_LARGE_MARKERS = (
    "query returned more than",
    "block range",
    "range too large",
    "range is too large",
    "too many",
    "limit exceeded",
    "response size exceeded",
    "exceeds max results",
)


class ChainClient(Protocol):
    """Read-only chain access shared by every concurrent step of a scan."""

    async def current_height(self) -> int: ...

    async def fetch_logs(self, filter_params: Mapping[str, Any], from_block: int, to_block: int) -> List[EventLog]: ...

    async def call(self, address: str, abi: Sequence[Dict[str, Any]], method: str, *args: Any) -> Any: ...


def _hex(value: Any) -> str:
    if isinstance(value, str):
        return value.lower() if value.startswith("0x") else "0x" + value.lower()
    return Web3.to_hex(value).lower()


def to_event_log(raw: Mapping[str, Any]) -> EventLog:
    """Convert a web3 log dict (AttributeDict) into an EventLog."""
    tx = raw.get("transactionHash")
    return EventLog(
        address=Web3.to_checksum_address(raw["address"]),
        topics=tuple(_hex(t) for t in raw.get("topics") or ()),
        block_number=int(raw.get("blockNumber") or 0),
        transaction_hash=_hex(tx) if tx is not None else None,
        log_index=raw.get("logIndex"),
    )


def is_range_too_large(exc: BaseException) -> bool:
    text = str(exc).lower()
    return any(marker in text for marker in _TOO_LARGE_MARKERS)


def block_windows(from_block: int, to_block: int, span: int) -> List[tuple[int, int]]:
    """Split [from_block, to_block] into consecutive windows of at most ``span`` blocks."""
    if to_block < from_block:
        return []
    if span <= 0:
        return [(from_block, to_block)]
    windows = []
    start = from_block
    while start <= to_block:
        end = min(to_block, start + span - 1)
        windows.append((start, end))
        start = end + 1
    return windows


class Web3ChainClient:
    """ChainClient backed by a (synchronous) web3 HTTP provider.

    Blocking web3 calls run in worker threads so the asyncio fan-out can keep
    several of them in flight at once.
    """

    def __init__(
        self,
        rpc_url: str = "",
        web3: Optional[Web3] = None,
        timeout: float = 15.0,
        max_block_span: int = 0,
    ):
        self.rpc_url = (rpc_url or "").strip()
        self.timeout = timeout
        self.max_block_span = max(0, int(max_block_span or 0))
        self._web3 = web3

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            if not self.rpc_url:
                raise FetchError("no RPC URL configured")
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.timeout}))
        return self._web3

    async def current_height(self) -> int:
        try:
            return int(await asyncio.to_thread(lambda: self.web3.eth.block_number))
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(f"block height query failed: {exc}") from exc

    async def fetch_logs(self, filter_params: Mapping[str, Any], from_block: int, to_block: int) -> List[EventLog]:
        logs: List[EventLog] = []
        for start, end in block_windows(from_block, to_block, self.max_block_span):
            logs.extend(await self._fetch_range(filter_params, start, end))
        return logs

    async def _fetch_range(self, filter_params: Mapping[str, Any], from_block: int, to_block: int) -> List[EventLog]:
        params = dict(filter_params)
        params["fromBlock"] = from_block
        params["toBlock"] = to_block
        try:
            raw_logs = await asyncio.to_thread(self.web3.eth.get_logs, params)
        except FetchError:
            raise
        except Exception as exc:
            if from_block < to_block and is_range_too_large(exc):
                middle = (from_block + to_block) // 2
                logger.debug("log range %s-%s too large, splitting at %s", from_block, to_block, middle)
                left = await self._fetch_range(filter_params, from_block, middle)
                right = await self._fetch_range(filter_params, middle + 1, to_block)
                return left + right
            raise FetchError(f"log query {from_block}-{to_block} failed: {exc}") from exc
        return [to_event_log(raw) for raw in raw_logs]

    async def call(self, address: str, abi: Sequence[Dict[str, Any]], method: str, *args: Any) -> Any:
        def _call():
            contract = self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=list(abi))
            return getattr(contract.functions, method)(*args).call()

        return await asyncio.to_thread(_call)
