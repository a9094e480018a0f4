"""Bounded concurrency gate.

Caps how many wrapped calls run at once. Extra calls wait in a FIFO queue and
are started in arrival order as running calls finish. One gate is created per
`Scanner` and shared by every probe it issues.
"""

from __future__ import annotations

import asyncio
import inspect
from collections import deque
from typing import Any, Awaitable, Callable, Deque, TypeVar, Union

from .errors import ConfigError

T = TypeVar("T")


class ConcurrencyGate:
    def __init__(self, capacity: int):
        if capacity < 1:
            raise ConfigError(f"Concurrency gate capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.active = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def pending(self) -> int:
        """Number of calls queued behind the running ones."""
        return sum(1 for fut in self._waiters if not fut.done())

    async def call(
        self, fn: Callable[..., Union[Awaitable[T], T]], *args: Any, **kwargs: Any
    ) -> T:
        """Run `fn(*args, **kwargs)` once a slot is free and return its result.

        Coroutine functions are awaited inside the slot; plain callables run
        inline.
        """
        await self._acquire()
        try:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self.active < self.capacity and not self._waiters:
            self.active += 1
            return

        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # The slot was already handed to us, pass it on
                self._release()
            elif fut in self._waiters:
                self._waiters.remove(fut)
            raise

    def _release(self) -> None:
        # Hand the slot straight to the oldest waiter so `active` never dips
        # and a newcomer cannot jump the queue.
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_result(None)
                return
        self.active -= 1

    def __repr__(self) -> str:
        return f"<ConcurrencyGate capacity={self.capacity} active={self.active} pending={self.pending}>"
