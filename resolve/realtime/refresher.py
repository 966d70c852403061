"""
View refresh with stale-response discard
"""
import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from resolve.logging_config import logger

T = TypeVar("T")


class ViewRefresher(Generic[T]):
    """Re-fetches a whole view and publishes it, newest fetch wins.

    Every call takes a ticket from a monotonically increasing sequence.
    A response is published only if no newer fetch has been published
    before it, so a slow older fetch can never overwrite a newer view.
    Concurrent calls may overlap freely; publication is serialized.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        on_update: Callable[[T], Awaitable[None]],
    ):
        self._fetch = fetch
        self._on_update = on_update
        self._issued = 0
        self._published = 0
        self._lock = asyncio.Lock()
        self.current: Optional[T] = None

    @property
    def published_ticket(self) -> int:
        return self._published

    async def refresh(self) -> bool:
        """Fetch and publish. Returns False when the result was stale.

        Fetch errors propagate to the caller; the current view is kept.
        """
        self._issued += 1
        ticket = self._issued

        view = await self._fetch()

        async with self._lock:
            if ticket < self._published:
                logger.debug(f"Discarding stale view fetch {ticket} (published {self._published})")
                return False
            self._published = ticket
            self.current = view
            await self._on_update(view)
            return True
