"""
Async Utilities for concurrent source calls.

Provides:
- gather_settled: wait for every coroutine, collecting failures as values
- sleep_between: self-throttling pause between sequential requests
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_settled(*coros: Awaitable[T]) -> list[T | BaseException]:
    """
    Execute coroutines concurrently and wait for all of them.

    Never fails fast: each slot of the returned list holds either the
    coroutine's result or the exception it raised, in argument order.

    Example:
        outcomes = await gather_settled(search_a(), search_b())
        ok = [o for o in outcomes if not isinstance(o, BaseException)]
    """
    if not coros:
        return []
    outcomes = await asyncio.gather(*coros, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
    return list(outcomes)


async def sleep_between(delay: float) -> None:
    """Pause between sequential requests to the same upstream registry."""
    if delay > 0:
        await asyncio.sleep(delay)
