from __future__ import annotations

import logging
from typing import Dict, Optional

from web3 import Web3

from tokenscan.chain import ChainClient

logger = logging.getLogger("tokenscan.proxy")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# OpenSea (Wyvern) proxy registry per chain id
PROXY_REGISTRIES: Dict[int, str] = {
    1: "0xa5409ec958C83C3f309868babACA7c86DCB077c1",
    4: "0xF57B2c51dED3A29e6891aba85459d600256Cf317",
}

PROXY_REGISTRY_ABI = [
    {"constant": True, "inputs": [{"name": "", "type": "address"}], "name": "proxies", "outputs": [{"name": "", "type": "address"}], "type": "function"},
]


class ProxyResolver:
    """Looks up the marketplace proxy an account has registered, if any."""

    def __init__(self, client: ChainClient, chain_id: int, registries: Optional[Dict[int, str]] = None):
        self.client = client
        self.chain_id = chain_id
        self.registries = PROXY_REGISTRIES if registries is None else registries

    async def resolve(self, account: str) -> Optional[str]:
        registry = self.registries.get(int(self.chain_id))
        if not registry:
            return None
        try:
            proxy = await self.client.call(registry, PROXY_REGISTRY_ABI, "proxies", Web3.to_checksum_address(account))
        except Exception as exc:
            logger.warning("proxy registry lookup for %s failed: %s", account, exc)
            return None
        if not proxy or int(str(proxy), 16) == 0:
            return None
        return Web3.to_checksum_address(proxy)
