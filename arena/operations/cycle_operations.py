"""
Cycle Operations Module

Competition cycles are bounded periods (normally six months). Exactly one
cycle is active at a time; starting a new cycle deactivates every other one
inside the same transaction.
"""

from datetime import date, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from arena.config import Config
from arena.database.models import Cycle
from arena.operations.base import BaseOperations
from arena.utils.arena_exceptions import RecordValidationError
from arena.utils.logger import setup_logger

logger = setup_logger(__name__)


class CycleOperations(BaseOperations):
    """Competition cycle lifecycle."""

    async def start_cycle(
        self,
        name: str,
        start_date: date,
        end_date: Optional[date] = None,
        session: Optional[AsyncSession] = None
    ) -> Cycle:
        """
        Create a cycle and make it the only active one.

        Args:
            name: e.g. "January - June 2026"
            start_date: First day of the cycle
            end_date: Last day; defaults to start_date + Config.CYCLE_LENGTH_DAYS - 1

        Raises:
            RecordValidationError: If the name is empty or the dates are reversed
        """
        if not name or not name.strip():
            raise RecordValidationError('name', "Cycle name cannot be empty.")
        if end_date is None:
            end_date = start_date + timedelta(days=Config.CYCLE_LENGTH_DAYS - 1)
        if end_date < start_date:
            raise RecordValidationError('end_date', "A cycle cannot end before it starts.")

        async with self._get_session_context(session) as s:
            await s.execute(update(Cycle).where(Cycle.is_active == True).values(is_active=False))

            cycle = Cycle(name=name.strip(), start_date=start_date, end_date=end_date, is_active=True)
            s.add(cycle)
            await s.flush()

            logger.info(f"Started cycle {cycle.id} '{cycle.name}' ({start_date} to {end_date})")
            return cycle

    async def get_active_cycle(self, session: Optional[AsyncSession] = None) -> Cycle:
        """
        Raises:
            NoActiveCycleError: If no cycle is active
        """
        async with self._get_session_context(session) as s:
            return await self._require_active_cycle(s)
