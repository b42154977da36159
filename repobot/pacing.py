"""Chained-delay queue used to space out clones and hosting-API writes."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

Sleep = Callable[[float], Awaitable[None]]


class Pacer:
    """Each ``wait(delay)`` finishes after every earlier wait plus its own delay.

    Calls made concurrently are therefore spaced out rather than batched.
    Must be used from within a running event loop.
    """

    def __init__(self, sleep: Optional[Sleep] = None) -> None:
        self._sleep = sleep or asyncio.sleep
        self._tail: Optional[asyncio.Future[None]] = None

    def wait(self, delay: float) -> "asyncio.Future[None]":
        previous = self._tail

        async def _chained() -> None:
            if previous is not None:
                await previous
            await self._sleep(max(delay, 0.0))

        current = asyncio.ensure_future(_chained())
        self._tail = current
        return current


__all__ = ["Pacer"]
