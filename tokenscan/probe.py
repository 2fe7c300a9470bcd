from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from web3 import Web3

from tokenscan.chain import ChainClient
from tokenscan.errors import ProbeError
from tokenscan.models import ProbeFailure, ProbeOutcome, TokenData

logger = logging.getLogger("tokenscan.probe")

ERC721_METADATA_ABI = [
    {"constant": True, "inputs": [], "name": "symbol", "outputs": [{"name": "", "type": "string"}], "type": "function"},
    {"constant": True, "inputs": [], "name": "name", "outputs": [{"name": "", "type": "string"}], "type": "function"},
    {"constant": True, "inputs": [{"name": "owner", "type": "address"}], "name": "balanceOf", "outputs": [{"name": "", "type": "uint256"}], "type": "function"},
]

TokenMapping = Mapping[str, Mapping[str, Any]]


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", "ignore").replace("\x00", "")
    if not isinstance(value, str):
        raise ProbeError(f"expected string result, got {type(value).__name__}")
    return value.strip()


class ContractProber:
    """Checks that a contract answers the ERC-721 metadata calls for an owner.

    ``symbol`` and ``name`` come from the token mapping when it has them;
    ``balanceOf`` is always read on-chain.
    """

    def __init__(self, client: ChainClient, token_mapping: Optional[TokenMapping] = None):
        self.client = client
        self.token_mapping = token_mapping or {}

    def _mapped(self, address: str) -> Dict[str, Any]:
        return dict(self.token_mapping.get(Web3.to_checksum_address(address)) or {})

    async def _read(self, address: str, method: str, *args: Any) -> Any:
        try:
            return await self.client.call(address, ERC721_METADATA_ABI, method, *args)
        except Exception as exc:
            raise ProbeError(f"{method}() failed: {exc}") from exc

    async def read_token_data(self, address: str, account: str) -> TokenData:
        mapped = self._mapped(address)

        raw_balance = await self._read(address, "balanceOf", Web3.to_checksum_address(account))
        try:
            balance = int(raw_balance)
        except (TypeError, ValueError) as exc:
            raise ProbeError(f"balanceOf() returned {raw_balance!r}") from exc
        if balance < 0:
            raise ProbeError(f"balanceOf() returned {balance}")

        symbol = mapped.get("symbol") or _text(await self._read(address, "symbol"))
        name = mapped.get("name") or _text(await self._read(address, "name"))
        return TokenData(symbol=str(symbol), name=str(name), balance=str(balance))

    async def probe(self, address: str, account: str) -> ProbeOutcome:
        try:
            return await self.read_token_data(address, account)
        except ProbeError as exc:
            logger.debug("probe %s failed: %s", address, exc)
            return ProbeFailure(address=address, reason=str(exc))
