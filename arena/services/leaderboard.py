"""
Leaderboard service for the active competition cycle.

Loads the cycle's records, runs the pure aggregation and serves the result
as whole boards, pages or single-player rows. Results are cached briefly;
every write path clears the cache so a fresh read reflects it immediately.
"""

from typing import Optional, List, Tuple
import asyncio
import math
import time
import logging

from arena.constants import PaginationConstants
from arena.data_models.leaderboard import LeaderboardPage, LeaderboardEntry
from arena.services.base import BaseService
from arena.utils.aggregation import compute_leaderboard

logger = logging.getLogger(__name__)


class LeaderboardService(BaseService):
    """Service for leaderboard queries with a short-lived cache."""

    def __init__(self, database, cache_ttl: int = 60):
        super().__init__(database)
        self._cache: Optional[Tuple[Optional[str], List[LeaderboardEntry]]] = None
        self._cache_timestamp = 0.0
        self._cache_ttl = cache_ttl
        self._cache_lock = asyncio.Lock()

    async def _is_cache_valid(self) -> bool:
        async with self._cache_lock:
            return self._cache is not None and time.time() - self._cache_timestamp < self._cache_ttl

    async def clear_cache(self):
        """Clears the cached leaderboard."""
        async with self._cache_lock:
            self._cache = None
            self._cache_timestamp = 0.0
        logger.debug("Leaderboard cache cleared.")

    async def _load(self) -> Tuple[Optional[str], List[LeaderboardEntry]]:
        """(cycle name, ranked entries) for the active cycle"""
        if await self._is_cache_valid():
            async with self._cache_lock:
                return self._cache

        async def fetch_standings():
            async with self.get_session() as session:
                cycle = await self.db.get_active_cycle(session)
                if cycle is None:
                    return None
                players = await self.db.get_player_infos(session)
                records = await self.db.load_cycle_records(session, cycle.id)
                return cycle.name, compute_leaderboard(players, records)

        cached = await self.execute_with_retry(fetch_standings)
        if cached is None:
            logger.info("No active cycle; serving an empty leaderboard")
            return None, []

        async with self._cache_lock:
            self._cache = cached
            self._cache_timestamp = time.time()
        return cached

    async def get_standings(self) -> Tuple[Optional[str], List[LeaderboardEntry]]:
        """(active cycle name, ranked entries); (None, []) when no cycle is active."""
        return await self._load()

    async def get_leaderboard(self) -> List[LeaderboardEntry]:
        """Full ranked leaderboard; empty when no cycle is active."""
        _, entries = await self._load()
        return entries

    async def get_page(self, page: int = 1, page_size: int = PaginationConstants.DEFAULT_PAGE_SIZE) -> LeaderboardPage:
        """Get one page of the leaderboard."""
        if not isinstance(page, int) or page < 1:
            raise ValueError("page must be a positive integer")
        if not isinstance(page_size, int) or page_size < 1 or page_size > 50:
            raise ValueError("page_size must be between 1 and 50")

        cycle_name, entries = await self._load()
        total_players = len(entries)
        total_pages = max(1, math.ceil(total_players / page_size))
        page = min(page, total_pages)
        offset = (page - 1) * page_size

        return LeaderboardPage(
            entries=entries[offset:offset + page_size],
            current_page=page,
            total_pages=total_pages,
            total_players=total_players,
            cycle_name=cycle_name
        )

    async def get_player_entry(self, player_id: int) -> Optional[LeaderboardEntry]:
        """A single player's row, or None when they are not on the board."""
        for entry in await self.get_leaderboard():
            if entry.player_id == player_id:
                return entry
        return None
