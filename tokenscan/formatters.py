from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from tokenscan.models import EventLog, ScanResult, TokenRecord

__all__ = ["format_token", "format_tokens", "result_to_dict", "to_json"]


def format_token(token: TokenRecord) -> str:
    name = f" ({token.name})" if token.name and token.name != token.symbol else ""
    return (
        f"{token.symbol}{name} {token.address}\n"
        f"  balance: {token.balance}"
        f" | approvals: {len(token.approvals)}"
        f" | approvals for all: {len(token.approvals_for_all)}"
    )


def format_tokens(tokens: Iterable[TokenRecord], proxy_address: str | None = None) -> str:
    lines: List[str] = [format_token(t) for t in tokens]
    if not lines:
        return "No token balances"
    if proxy_address:
        lines.append(f"Marketplace proxy: {proxy_address}")
    return "\n".join(lines)


def _event_dict(event: EventLog) -> Dict[str, Any]:
    return {
        "address": event.address,
        "topics": list(event.topics),
        "block_number": event.block_number,
        "transaction_hash": event.transaction_hash,
        "log_index": event.log_index,
    }


def result_to_dict(result: ScanResult, tokens: Iterable[TokenRecord] | None = None) -> Dict[str, Any]:
    """JSON-ready view of a result; ``tokens`` overrides the unfiltered list."""
    tokens = result.tokens if tokens is None else tokens
    return {
        "account": result.account,
        "from_block": result.from_block,
        "to_block": result.to_block,
        "proxy_address": result.proxy_address,
        "tokens": [
            {
                "address": t.address,
                "symbol": t.symbol,
                "name": t.name,
                "balance": t.balance,
                "icon": t.icon,
                "registered": t.registered,
                "approvals": [_event_dict(e) for e in t.approvals],
                "approvals_for_all": [_event_dict(e) for e in t.approvals_for_all],
            }
            for t in tokens
        ],
    }


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True, default=str)
