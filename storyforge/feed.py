"""Recent stories feed.

A presentation convenience, never authoritative: it caches the last list
the backend returned and refreshes in the background after state-changing
operations. The refresh waits a short fixed delay first so the backend has a
chance to persist a just-created story. Failures keep the previous items.
"""

from __future__ import annotations

import asyncio
import logging

from storyforge.client import BackendClient, TransportError
from storyforge.models import StorySummary

logger = logging.getLogger(__name__)

REFRESH_DELAY = 0.4  # seconds


class RecentStoriesFeed:
    def __init__(self, backend: BackendClient, refresh_delay: float = REFRESH_DELAY) -> None:
        self._backend = backend
        self._refresh_delay = refresh_delay
        self._items: tuple[StorySummary, ...] = ()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def items(self) -> tuple[StorySummary, ...]:
        return self._items

    @property
    def refresh_delay(self) -> float:
        return self._refresh_delay

    async def refresh(self) -> tuple[StorySummary, ...]:
        """Re-read the story list. Never raises for transport failures."""
        try:
            listing = await self._backend.list()
        except TransportError as e:
            logger.warning("Recent stories refresh failed, keeping %d cached: %s", len(self._items), e)
            return self._items
        self._items = tuple(listing.items)
        logger.debug("Recent stories refreshed: %d items", len(self._items))
        return self._items

    def schedule_refresh(self, delay: float | None = None) -> asyncio.Task[None]:
        """Fire-and-forget refresh after *delay* seconds (default: refresh_delay)."""
        wait = self._refresh_delay if delay is None else delay
        task = asyncio.get_running_loop().create_task(self._delayed_refresh(wait))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _delayed_refresh(self, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        await self.refresh()

    async def wait_pending(self) -> None:
        """Wait for every scheduled refresh to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel scheduled refreshes that have not run yet."""
        for task in list(self._pending):
            task.cancel()
        await self.wait_pending()
