"""Wires a ScanConfig into the discovery pipeline."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

import aiohttp

from tokenscan.chain import ChainClient, Web3ChainClient
from tokenscan.config import ScanConfig
from tokenscan.discovery import scan_account
from tokenscan.filters import validate_account
from tokenscan.icons import IconResolver
from tokenscan.models import ScanResult
from tokenscan.probe import ContractProber
from tokenscan.proxy import ProxyResolver
from tokenscan.state import ScanController
from tokenscan.token_mapping import load_token_mapping

logger = logging.getLogger("tokenscan.service")


def make_client(config: ScanConfig) -> Web3ChainClient:
    return Web3ChainClient(
        rpc_url=config.rpc_url,
        timeout=config.rpc_timeout,
        max_block_span=config.max_block_span,
    )


async def run_scan(
    account: str,
    config: ScanConfig,
    client: Optional[ChainClient] = None,
    token_mapping: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> ScanResult:
    """One full load: token list, icons, probes and proxy for ``account``."""
    account = validate_account(account)
    client = client or make_client(config)
    if token_mapping is None and config.token_list_url:
        token_mapping = await asyncio.to_thread(load_token_mapping, config.token_list_url, config.chain_id)
    token_mapping = token_mapping or {}

    async with aiohttp.ClientSession() as session:
        return await scan_account(
            account,
            client,
            prober=ContractProber(client, token_mapping),
            icons=IconResolver(config.chain_id, token_mapping, session=session, check=config.icon_check),
            proxy=ProxyResolver(client, config.chain_id),
            max_concurrency=config.max_concurrency,
        )


def make_controller(
    config: ScanConfig,
    client: Optional[ChainClient] = None,
    token_mapping: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> ScanController:
    """A controller whose loads share one chain client."""
    client = client or make_client(config)

    async def _scan(account: str) -> ScanResult:
        return await run_scan(account, config, client=client, token_mapping=token_mapping)

    return ScanController(_scan)
