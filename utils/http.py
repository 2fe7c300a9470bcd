# -*- coding: utf-8 -*-
"""Blocking HTTP helpers (requests) for small JSON documents such as token lists."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger("utils.http")

DEFAULT_HEADERS = {
    "User-Agent": "erc721-approval-scanner/0.1",
    "Accept": "application/json",
}


def safe_get(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = 10,
    retries: int = 1,
    backoff: float = 0.5,
) -> Optional[requests.Response]:
    """GET with a small number of retries. Returns the response, or None once retries run out."""
    for attempt in range(retries + 1):
        try:
            response = requests.get(url, params=params or {}, headers=DEFAULT_HEADERS, timeout=timeout)
            response.raise_for_status()
            return response
        except requests.RequestException as exc:
            if attempt >= retries:
                logger.warning("GET %s failed: %s", url, exc)
                return None
            time.sleep(backoff * (2 ** attempt))
    return None


def safe_json(resp: Optional[requests.Response]) -> Optional[Any]:
    if resp is None:
        return None
    try:
        return resp.json()
    except ValueError:
        logger.warning("non-JSON response from %s", resp.url)
        return None


def get_json(url: str, params: Optional[Dict[str, Any]] = None, timeout: int = 10, retries: int = 1) -> Optional[Any]:
    return safe_json(safe_get(url, params=params, timeout=timeout, retries=retries))
