"""
Load state for the token list.

IDLE -> LOADING -> SETTLED | FAILED, back to LOADING on the next trigger.
Every load carries a generation number; completion events from a load that
is no longer the latest one are ignored, so an older scan finishing last can
not overwrite a newer result.
"""
from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Union

from tokenscan.errors import FetchError, ScanError
from tokenscan.models import ScanResult

logger = logging.getLogger("tokenscan.state")


class LoadStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadState:
    status: LoadStatus = LoadStatus.IDLE
    generation: int = 0
    account: Optional[str] = None
    result: Optional[ScanResult] = None
    error: Optional[ScanError] = None


@dataclass(frozen=True)
class LoadStarted:
    generation: int
    account: str


@dataclass(frozen=True)
class LoadSucceeded:
    generation: int
    result: ScanResult


@dataclass(frozen=True)
class LoadFailed:
    generation: int
    error: ScanError


LoadEvent = Union[LoadStarted, LoadSucceeded, LoadFailed]


def reduce(state: LoadState, event: LoadEvent) -> LoadState:
    """Pure transition function."""
    if isinstance(event, LoadStarted):
        if event.generation <= state.generation:
            return state
        # The previous result stays visible until the new load settles.
        return replace(state, status=LoadStatus.LOADING, generation=event.generation, account=event.account, error=None)
    if event.generation != state.generation or state.status is not LoadStatus.LOADING:
        return state
    if isinstance(event, LoadSucceeded):
        return replace(state, status=LoadStatus.SETTLED, result=event.result, error=None)
    if isinstance(event, LoadFailed):
        return replace(state, status=LoadStatus.FAILED, result=None, error=event.error)
    raise TypeError(f"unknown load event: {event!r}")


ScanFn = Callable[[str], Awaitable[ScanResult]]


class ScanController:
    """Runs scans and commits their outcome through :func:`reduce`."""

    def __init__(self, scan: ScanFn):
        self._scan = scan
        self._lock = threading.Lock()
        self._generation = 0
        self._state = LoadState()

    @property
    def state(self) -> LoadState:
        with self._lock:
            return self._state

    def dispatch(self, event: LoadEvent) -> LoadState:
        with self._lock:
            new_state = reduce(self._state, event)
            if new_state is self._state and not isinstance(event, LoadStarted):
                logger.debug("discarded stale %s for generation %s", type(event).__name__, event.generation)
            self._state = new_state
            return new_state

    def begin(self, account: str) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
        self.dispatch(LoadStarted(generation=generation, account=account))
        return generation

    async def run(self, account: str) -> LoadState:
        """Start a load for ``account`` and return the state once it is done.

        The returned state belongs to whichever load is current at that point,
        which is not this one if a newer load started meanwhile.
        """
        generation = self.begin(account)
        try:
            result = await self._scan(account)
        except ScanError as exc:
            logger.error("load %s for %s failed: %s", generation, account, exc)
            return self.dispatch(LoadFailed(generation=generation, error=exc))
        except Exception as exc:
            logger.exception("load %s for %s crashed", generation, account)
            error = FetchError(f"scan failed: {exc}")
            error.__cause__ = exc
            return self.dispatch(LoadFailed(generation=generation, error=error))
        return self.dispatch(LoadSucceeded(generation=generation, result=result))
