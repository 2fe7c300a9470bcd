from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest
from web3 import Web3

from tokenscan.filters import event_topic
from tokenscan.models import EventKind, EventLog

ACCOUNT = Web3.to_checksum_address("0x" + "ab" * 20)


def addr(n: int) -> str:
    return Web3.to_checksum_address("0x" + f"{n:040x}")


def log(address: str, kind: EventKind, block: int = 1) -> EventLog:
    owner = "0x" + ACCOUNT[2:].lower().rjust(64, "0")
    if kind is EventKind.TRANSFER:
        topics = (event_topic(kind), "0x" + "0" * 64, owner, "0x" + "0" * 63 + "1")
    else:
        topics = (event_topic(kind), owner, "0x" + "0" * 64)
    return EventLog(address=address, topics=topics, block_number=block)


class Revert(Exception):
    pass


class FakeChain:
    """In-memory ChainClient.

    ``contracts`` maps address -> {method: value}; a value that is an
    exception instance is raised instead. ``delays`` maps address -> seconds
    slept before answering, to shuffle completion order.
    """

    def __init__(self, height=100, logs=None, contracts=None, delays=None, fail_kinds=()):
        self.height = height
        self.logs: Dict[EventKind, List[EventLog]] = logs or {}
        self.contracts: Dict[str, Dict[str, Any]] = contracts or {}
        self.delays: Dict[str, float] = delays or {}
        self.fail_kinds = set(fail_kinds)
        self.calls: List[tuple] = []
        self.log_queries: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def current_height(self) -> int:
        self.calls.append(("current_height",))
        return self.height

    async def fetch_logs(self, filter_params, from_block, to_block):
        topic0 = filter_params["topics"][0]
        kind = next(k for k in EventKind if event_topic(k) == topic0)
        self.log_queries.append((kind, tuple(filter_params["topics"]), from_block, to_block))
        if kind in self.fail_kinds:
            raise RuntimeError(f"{kind.value} query exploded")
        return list(self.logs.get(kind, []))

    async def call(self, address, abi, method, *args):
        self.calls.append((address, method, args))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(address, 0))
            value = self.contracts.get(address, {}).get(method, Revert(f"{method} reverted"))
            if isinstance(value, BaseException):
                raise value
            return value
        finally:
            self.in_flight -= 1


def nft(symbol, name=None, balance=1):
    return {"symbol": symbol, "name": name or symbol.title(), "balanceOf": balance}


@pytest.fixture
def account():
    return ACCOUNT
