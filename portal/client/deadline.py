"""Wall-clock deadlines passed into remote calls.

A ``Deadline`` is created once by the caller and threaded through every
client call made on its behalf, so several sequential calls share one
budget (e.g. profile fetch → create → re-fetch on first sign-in).
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

from portal.client.errors import RemoteTimeout

T = TypeVar("T")


class Deadline:
    """An absolute point in time after which remote calls are abandoned."""

    def __init__(
        self,
        seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def __repr__(self) -> str:
        return f"<Deadline remaining={self.remaining():.3f}s>"


async def run_with_deadline(
    awaitable: Awaitable[T],
    deadline: Optional[Deadline],
) -> T:
    """Await *awaitable*, cancelling it when *deadline* runs out."""
    if deadline is None:
        return await awaitable
    if deadline.expired:
        # Close the coroutine so it is not reported as never awaited
        close = getattr(awaitable, "close", None)
        if close is not None:
            close()
        raise RemoteTimeout()
    try:
        return await asyncio.wait_for(awaitable, timeout=deadline.remaining())
    except asyncio.TimeoutError:
        raise RemoteTimeout() from None
