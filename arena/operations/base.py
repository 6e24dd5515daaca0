"""
Shared session handling for the operations layer.
"""

from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database.models import Cycle, Player
from arena.utils.arena_exceptions import NoActiveCycleError, PlayerNotFoundError


class BaseOperations:
    """Base class giving every operations module the same session semantics."""

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database

    @asynccontextmanager
    async def _get_session_context(self, session: Optional[AsyncSession] = None):
        """
        Provides a session context. Uses the provided session if available,
        otherwise opens a transaction that commits when the block succeeds.
        """
        if session:
            # If a session is provided, we do not manage its lifecycle
            yield session
        else:
            async with self.db.transaction() as new_session:
                yield new_session

    async def _require_active_cycle(self, session: AsyncSession) -> Cycle:
        cycle = await self.db.get_active_cycle(session)
        if cycle is None:
            raise NoActiveCycleError()
        return cycle

    async def _require_player(self, session: AsyncSession, player_id: int) -> Player:
        player = await session.get(Player, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    async def _require_player_by_discord_id(self, session: AsyncSession, discord_id: int) -> Player:
        result = await session.execute(select(Player).where(Player.discord_id == discord_id))
        player = result.scalar_one_or_none()
        if player is None:
            raise PlayerNotFoundError(discord_id)
        return player
