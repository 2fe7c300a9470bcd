from __future__ import annotations

__all__ = ["ScanError", "InvalidAddress", "FetchError", "ProbeError"]


class ScanError(Exception):
    """Base class for errors raised by a token scan."""


class InvalidAddress(ScanError, ValueError):
    """Account address is not a valid 20-byte hex address (or fails EIP-55)."""

    def __init__(self, address: object):
        self.address = address
        super().__init__(f"invalid account address: {address!r}")


class FetchError(ScanError):
    """Head-height or log query failed. Fatal for the whole load."""


class ProbeError(ScanError):
    """A candidate contract did not behave like an ERC-721 token.

    Only raised inside the prober; the fan-out turns it into a
    :class:`tokenscan.models.ProbeFailure` outcome.
    """
