"""
Token list loading.

A token list is the usual ``{"tokens": [{"chainId", "address", "symbol",
"name", "logoURI"}, ...]}`` JSON document. Entries are keyed by checksummed
address and restricted to a single chain.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from web3 import Web3

from utils.http import get_json

logger = logging.getLogger("tokenscan.token_mapping")

_FIELDS = ("symbol", "name", "logoURI")


def build_token_mapping(entries: Iterable[Mapping[str, Any]], chain_id: Optional[int] = None) -> Dict[str, Dict[str, Any]]:
    mapping: Dict[str, Dict[str, Any]] = {}
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            continue
        if chain_id is not None and entry.get("chainId") is not None:
            try:
                if int(entry["chainId"]) != int(chain_id):
                    continue
            except (TypeError, ValueError):
                continue
        address = entry.get("address")
        if not isinstance(address, str) or not Web3.is_address(address):
            continue
        mapping[Web3.to_checksum_address(address)] = {k: entry[k] for k in _FIELDS if entry.get(k)}
    return mapping


def load_token_mapping(url: str, chain_id: Optional[int] = None, timeout: int = 10) -> Dict[str, Dict[str, Any]]:
    """Fetch a token list from ``url``. Returns an empty mapping on failure."""
    if not url:
        return {}
    data = get_json(url, timeout=timeout)
    if not isinstance(data, dict):
        logger.warning("token list %s unavailable", url)
        return {}
    mapping = build_token_mapping(data.get("tokens") or [], chain_id)
    logger.info("loaded %d token list entries from %s", len(mapping), url)
    return mapping
