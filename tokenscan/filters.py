"""
Topic filters for the three ERC-721 event kinds an account can show up in.

- Approval(owner, approved, tokenId)        -> owner in topic 1
- ApprovalForAll(owner, operator, approved) -> owner in topic 1
- Transfer(from, to, tokenId)               -> to in topic 2 (topic 1 wildcard)
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from web3 import Web3

from tokenscan.errors import InvalidAddress
from tokenscan.models import EventKind

__all__ = [
    "EVENT_SIGNATURES",
    "event_topic",
    "pad_address_topic",
    "validate_account",
    "build_filter",
]

EVENT_SIGNATURES: Dict[EventKind, str] = {
    EventKind.APPROVAL: "Approval(address,address,uint256)",
    EventKind.APPROVAL_FOR_ALL: "ApprovalForAll(address,address,bool)",
    EventKind.TRANSFER: "Transfer(address,address,uint256)",
}

_topic_cache: Dict[EventKind, str] = {}


def event_topic(kind: EventKind) -> str:
    """Return keccak-256 of the event's canonical signature as 0x-hex."""
    if kind not in _topic_cache:
        _topic_cache[kind] = Web3.to_hex(Web3.keccak(text=EVENT_SIGNATURES[kind])).lower()
    return _topic_cache[kind]


def validate_account(address: Any) -> str:
    """Return the checksummed form of ``address`` or raise InvalidAddress.

    All-lowercase and all-uppercase hex are accepted as-is; mixed case must
    carry a valid EIP-55 checksum.
    """
    if not isinstance(address, str):
        raise InvalidAddress(address)
    text = address.strip()
    if not text.startswith("0x") or len(text) != 42:
        raise InvalidAddress(address)
    if not Web3.is_address(text):
        raise InvalidAddress(address)
    return Web3.to_checksum_address(text)


def pad_address_topic(address: str) -> str:
    """20-byte address right-aligned in a 32-byte topic (12 zero bytes in front)."""
    account = validate_account(address)
    return "0x" + account[2:].lower().rjust(64, "0")


def build_filter(kind: EventKind, account: str) -> Dict[str, List[Optional[str]]]:
    topic = pad_address_topic(account)
    if kind is EventKind.TRANSFER:
        return {"topics": [event_topic(kind), None, topic]}
    return {"topics": [event_topic(kind), topic]}
