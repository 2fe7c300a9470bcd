from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

import aiohttp
from web3 import Web3

logger = logging.getLogger("tokenscan.icons")

TRUSTWALLET_BASE = "https://raw.githubusercontent.com/trustwallet/assets/master/blockchains"

# chain id -> trustwallet assets directory
TRUSTWALLET_CHAINS = {
    1: "ethereum",
    10: "optimism",
    56: "smartchain",
    100: "xdai",
    137: "polygon",
    250: "fantom",
    42161: "arbitrum",
    43114: "avalanchec",
}


def trustwallet_icon_url(address: str, chain_id: int) -> Optional[str]:
    chain = TRUSTWALLET_CHAINS.get(int(chain_id))
    if not chain:
        return None
    return f"{TRUSTWALLET_BASE}/{chain}/assets/{Web3.to_checksum_address(address)}/logo.png"


class IconResolver:
    """Picks a display icon for a token contract.

    Order: ``logoURI`` from the token mapping, then the trustwallet asset
    repository (only if a HEAD request finds it), else None.
    """

    def __init__(
        self,
        chain_id: int,
        token_mapping: Optional[Mapping[str, Mapping[str, Any]]] = None,
        session: Optional[aiohttp.ClientSession] = None,
        check: bool = True,
        timeout: float = 10.0,
    ):
        self.chain_id = chain_id
        self.token_mapping = token_mapping or {}
        self.session = session
        self.check = check
        self.timeout = timeout

    async def resolve(self, address: str) -> Optional[str]:
        address = Web3.to_checksum_address(address)
        mapped = (self.token_mapping.get(address) or {}).get("logoURI")
        if mapped:
            return mapped
        url = trustwallet_icon_url(address, self.chain_id)
        if url is None or not self.check or self.session is None:
            return None
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with self.session.head(url, timeout=timeout, allow_redirects=True) as resp:
                if resp.status == 200:
                    return url
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("icon lookup for %s failed: %s", address, exc)
        return None
