# tokenscan/discovery.py
"""
ERC-721 approval discovery for one account.

Public API:
- scan_account(account, client, ...) -> ScanResult

Strategy:
1) Validate the account (no network before this).
2) Read the chain head once; the scan range is always [0, head].
3) Fetch Approval / ApprovalForAll (owner = account) and Transfer (to = account)
   logs concurrently.
4) Merge the three streams in that order and keep unique contract addresses,
   first occurrence first.
5) For every candidate, with bounded concurrency: pick its approval events,
   resolve an icon and probe the contract. Failed probes are dropped.
6) Sort by symbol (stable, case-insensitive). The proxy lookup runs alongside.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from web3 import Web3

from tokenscan.chain import ChainClient
from tokenscan.errors import FetchError
from tokenscan.filters import build_filter, validate_account
from tokenscan.icons import IconResolver
from tokenscan.models import (
    EventKind,
    EventLog,
    ProbeFailure,
    ScanResult,
    TokenList,
    TokenRecord,
)
from tokenscan.probe import ContractProber
from tokenscan.proxy import ProxyResolver

logger = logging.getLogger("tokenscan.discovery")

DEFAULT_MAX_CONCURRENCY = 8

Outcome = Union[TokenRecord, ProbeFailure]
T = TypeVar("T")


async def _fetch(awaitable: Awaitable[T], what: str) -> T:
    # Any ChainClient, not only Web3ChainClient, must fail a load with FetchError.
    try:
        return await awaitable
    except FetchError:
        raise
    except Exception as exc:
        raise FetchError(f"{what} failed: {exc}") from exc


async def resolve_block_range(client: ChainClient) -> Tuple[int, int]:
    """Full history: genesis through the current head."""
    head = int(await _fetch(client.current_height(), "block height query"))
    return 0, max(0, head)


async def fetch_events(client: ChainClient, kind: EventKind, account: str, from_block: int, to_block: int) -> List[EventLog]:
    logs = await _fetch(client.fetch_logs(build_filter(kind, account), from_block, to_block), f"{kind.value} log query")
    return list(logs)


def merge_events(
    approvals: Iterable[EventLog],
    approvals_for_all: Iterable[EventLog],
    transfers: Iterable[EventLog],
) -> List[EventLog]:
    return [*approvals, *approvals_for_all, *transfers]


def _uniq_preserve_order(seq):
    seen = set()
    out = []
    for x in seq:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out


def unique_contracts(events: Iterable[EventLog]) -> List[str]:
    """Checksummed contract addresses in first-occurrence order."""
    return _uniq_preserve_order(Web3.to_checksum_address(e.address) for e in events)


def approvals_for(address: str, events: Iterable[EventLog]) -> Tuple[EventLog, ...]:
    target = Web3.to_checksum_address(address)
    return tuple(e for e in events if Web3.to_checksum_address(e.address) == target)


def symbol_sort_key(record: TokenRecord) -> Tuple[str, str]:
    """Case-insensitive first, exact text as the tie-break; independent of the process locale."""
    return record.symbol.casefold(), record.symbol


def assemble_token_list(outcomes: Sequence[Outcome]) -> TokenList:
    """Drop failed probes and stable-sort the rest by symbol.

    ``outcomes`` must be in candidate order; ties keep that order.
    """
    records = [o for o in outcomes if isinstance(o, TokenRecord)]
    return tuple(sorted(records, key=symbol_sort_key))


async def aggregate_contract(
    address: str,
    account: str,
    approval_events: Sequence[EventLog],
    approval_for_all_events: Sequence[EventLog],
    prober: ContractProber,
    icons: Optional[IconResolver],
) -> Outcome:
    approvals = approvals_for(address, approval_events)
    approvals_for_all = approvals_for(address, approval_for_all_events)

    if icons is not None:
        icon, outcome = await asyncio.gather(icons.resolve(address), prober.probe(address, account))
    else:
        icon, outcome = None, await prober.probe(address, account)

    if isinstance(outcome, ProbeFailure):
        return outcome
    return TokenRecord(
        address=address,
        symbol=outcome.symbol,
        name=outcome.name,
        balance=outcome.balance,
        icon=icon,
        # Registration is not checked for ERC-721 tokens.
        registered=True,
        approvals=approvals,
        approvals_for_all=approvals_for_all,
    )


async def scan_account(
    account: str,
    client: ChainClient,
    *,
    prober: Optional[ContractProber] = None,
    icons: Optional[IconResolver] = None,
    proxy: Optional[ProxyResolver] = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> ScanResult:
    """Main entrypoint. Raises InvalidAddress or FetchError; probe failures never escape."""
    account = validate_account(account)
    prober = prober or ContractProber(client)

    proxy_task = asyncio.ensure_future(proxy.resolve(account)) if proxy is not None else None
    try:
        from_block, to_block = await resolve_block_range(client)
        logger.info("scanning %s over blocks %s-%s", account, from_block, to_block)

        approval_events, approval_for_all_events, transfer_events = await asyncio.gather(
            fetch_events(client, EventKind.APPROVAL, account, from_block, to_block),
            fetch_events(client, EventKind.APPROVAL_FOR_ALL, account, from_block, to_block),
            fetch_events(client, EventKind.TRANSFER, account, from_block, to_block),
        )
        candidates = unique_contracts(merge_events(approval_events, approval_for_all_events, transfer_events))
        logger.info(
            "%d approval, %d approval-for-all, %d transfer logs -> %d candidate contracts",
            len(approval_events), len(approval_for_all_events), len(transfer_events), len(candidates),
        )

        sem = asyncio.Semaphore(max(1, int(max_concurrency)))

        async def worker(address: str) -> Outcome:
            async with sem:
                return await aggregate_contract(
                    address, account, approval_events, approval_for_all_events, prober, icons,
                )

        outcomes = await asyncio.gather(*(worker(a) for a in candidates))
        proxy_address = await proxy_task if proxy_task is not None else None
    except BaseException:
        if proxy_task is not None and not proxy_task.done():
            proxy_task.cancel()
        raise

    tokens = assemble_token_list(outcomes)
    logger.info("%s: %d ERC-721 tokens (%d candidates dropped)", account, len(tokens), len(outcomes) - len(tokens))
    return ScanResult(
        account=account,
        tokens=tokens,
        proxy_address=proxy_address,
        from_block=from_block,
        to_block=to_block,
    )
