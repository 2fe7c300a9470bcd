#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
One-off ERC-721 approval scan.
- Prints the token list (or JSON) to stdout.
- Exit codes: 0 ok, 1 chain access failed, 2 invalid address.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from tokenscan.config import ScanConfig
from tokenscan.errors import InvalidAddress
from tokenscan.formatters import format_tokens, result_to_dict, to_json
from tokenscan.service import make_controller
from tokenscan.state import LoadStatus
from tokenscan.view import apply_filters


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="List ERC-721 contracts an account approved or received tokens from")
    ap.add_argument("address", help="account address (0x...)")
    ap.add_argument("--rpc-url", default=None, help="JSON-RPC endpoint (default: $RPC_URL)")
    ap.add_argument("--chain-id", type=int, default=None, help="chain id (default: $CHAIN_ID or 1)")
    ap.add_argument("--concurrency", type=int, default=None, help="max contracts probed at once")
    ap.add_argument("--max-block-span", type=int, default=None, help="split log queries into windows of N blocks")
    ap.add_argument("--registered-only", action="store_true", help="only show registered tokens")
    ap.add_argument("--non-zero-only", action="store_true", help="hide tokens with a zero balance")
    ap.add_argument("--no-icons", action="store_true", help="skip icon lookups")
    ap.add_argument("--json", action="store_true", help="print JSON instead of text")
    return ap


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    config = ScanConfig.from_env().with_overrides(
        rpc_url=args.rpc_url,
        chain_id=args.chain_id,
        max_concurrency=args.concurrency,
        max_block_span=args.max_block_span,
        icon_check=False if args.no_icons else None,
    )
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    controller = make_controller(config)
    state = asyncio.run(controller.run(args.address))

    if state.status is LoadStatus.FAILED:
        print(f"⚠️ Scan failed: {state.error}", file=sys.stderr)
        return 2 if isinstance(state.error, InvalidAddress) else 1

    result = state.result
    tokens = apply_filters(
        result.tokens,
        registered_only=args.registered_only,
        non_zero_balance_only=args.non_zero_only,
    )
    if args.json:
        print(to_json(result_to_dict(result, tokens)))
    else:
        print(format_tokens(tokens, result.proxy_address))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
