from __future__ import annotations

from typing import Iterable

from tokenscan.models import TokenList, TokenRecord

__all__ = ["is_registered", "has_balance", "apply_filters"]


def is_registered(record: TokenRecord) -> bool:
    return record.registered is True


def has_balance(record: TokenRecord) -> bool:
    return str(record.balance) != "0"


def apply_filters(
    tokens: Iterable[TokenRecord],
    registered_only: bool = False,
    non_zero_balance_only: bool = False,
) -> TokenList:
    """Return the records that pass every enabled filter, in their original order."""
    return tuple(
        t for t in tokens
        if (not registered_only or is_registered(t))
        and (not non_zero_balance_only or has_balance(t))
    )
