from __future__ import annotations

import asyncio

from conftest import ACCOUNT, FakeChain, Revert, addr
from tokenscan.proxy import ZERO_ADDRESS, ProxyResolver

REGISTRY = addr(0x99)


def resolve(chain, chain_id=1):
    return asyncio.run(ProxyResolver(chain, chain_id, registries={1: REGISTRY}).resolve(ACCOUNT))


def test_registered_proxy():
    proxy = addr(0xBEEF)
    chain = FakeChain(contracts={REGISTRY: {"proxies": proxy.lower()}})
    assert resolve(chain) == proxy
    assert chain.calls == [(REGISTRY, "proxies", (ACCOUNT,))]


def test_zero_proxy_is_none():
    assert resolve(FakeChain(contracts={REGISTRY: {"proxies": ZERO_ADDRESS}})) is None


def test_no_registry_for_chain():
    chain = FakeChain()
    assert resolve(chain, chain_id=10) is None
    assert chain.calls == []


def test_failing_registry_is_none():
    assert resolve(FakeChain(contracts={REGISTRY: {"proxies": Revert("nope")}})) is None
