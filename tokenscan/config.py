# -*- coding: utf-8 -*-
"""
tokenscan/config.py

Centralized configuration for the approval scanner.
Typed getters over the environment feed a frozen ScanConfig dataclass.

Usage:
    from tokenscan.config import ScanConfig
    config = ScanConfig.from_env()
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional


def get_str(key: str, default: Optional[str] = None, env: Mapping[str, str] = os.environ) -> str:
    return (env.get(key) or default or "").strip()


def get_int(key: str, default: int = 0, env: Mapping[str, str] = os.environ) -> int:
    try:
        return int(env.get(key, default))
    except Exception:
        return default


def get_float(key: str, default: float = 0.0, env: Mapping[str, str] = os.environ) -> float:
    try:
        return float(env.get(key, default))
    except Exception:
        return default


def get_bool(key: str, default: bool = False, env: Mapping[str, str] = os.environ) -> bool:
    val = env.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ScanConfig:
    # Chain access
    rpc_url: str = ""
    chain_id: int = 1
    rpc_timeout: float = 15.0

    # Fan-out / pagination
    max_concurrency: int = 8
    max_block_span: int = 0          # 0 -> query the whole range at once

    # Metadata
    token_list_url: str = ""
    icon_check: bool = True

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] = os.environ) -> "ScanConfig":
        return cls(
            rpc_url=get_str("RPC_URL", env=env) or get_str("ETH_RPC_URL", env=env),
            chain_id=get_int("CHAIN_ID", 1, env=env),
            rpc_timeout=get_float("RPC_TIMEOUT", 15.0, env=env),
            max_concurrency=max(1, get_int("SCAN_MAX_CONCURRENCY", 8, env=env)),
            max_block_span=max(0, get_int("SCAN_MAX_BLOCK_SPAN", 0, env=env)),
            token_list_url=get_str("TOKEN_LIST_URL", env=env),
            icon_check=get_bool("ICON_CHECK", True, env=env),
            log_level=get_str("LOG_LEVEL", "INFO", env=env).upper(),
        )

    def with_overrides(self, **overrides) -> "ScanConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
