"""
Per-repository cache of decoded file listings.

Each repository identifier has its own asyncio.Lock, so a slow manifest fetch
for one repository never stalls begin() for another, while concurrent callers
for the same repository still share a single fetch.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from ..models import FileItem

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[List[FileItem]]]


class _KeyState:
    """Lock and invalidation generation for one repository identifier."""

    __slots__ = ("lock", "users", "generation")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0
        self.generation = 0


class ListingCache:
    """
    Repository identifier -> file listing, for the lifetime of the process.
    
    Listings are copied on the way in and on the way out; callers never hold
    a reference to the stored list. Per-key lock state exists only while a
    get_or_load for that key is in flight.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, List[FileItem]] = {}
        self._states: Dict[str, _KeyState] = {}

    async def get_or_load(self, key: str, loader: Loader) -> List[FileItem]:
        """
        Return the cached listing for key, loading it at most once.
        
        A loader failure leaves the key uncached so the next call retries.
        If key is invalidated while the loader runs, the loaded listing is
        returned to the caller but not stored.
        """
        # No await between lookup and insert, so this is atomic on the event loop
        state = self._states.get(key)
        if state is None:
            state = self._states[key] = _KeyState()
        state.users += 1
        try:
            async with state.lock:
                if key in self._entries:
                    logger.debug(f"Listing cache hit for {key}")
                    return list(self._entries[key])

                logger.debug(f"Listing cache miss for {key}")
                generation = state.generation
                listing = list(await loader())
                if state.generation == generation:
                    self._entries[key] = listing
                else:
                    logger.debug(f"Listing for {key} invalidated during load; not cached")
                return list(listing)
        finally:
            state.users -= 1
            if state.users == 0:
                del self._states[key]

    def invalidate(self, key: str) -> None:
        """Drop the entry for key so the next get_or_load re-fetches."""
        state = self._states.get(key)
        if state is not None:
            state.generation += 1
        if self._entries.pop(key, None) is not None:
            logger.debug(f"Listing cache invalidated for {key}")

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ListingCache"]
