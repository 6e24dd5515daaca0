"""
Attendance bonus service.

Suggests streak and champion bonuses for the active cycle from its
attendance, and lets admins apply them as BonusAward records. Applying is
idempotent per cycle: earlier awards of the same kind are replaced, never
stacked.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete

from arena.data_models.leaderboard import ChampionBonus, StreakBonus
from arena.database.models import BonusAward
from arena.services.base import BaseService
from arena.utils.arena_exceptions import NoActiveCycleError, RecordValidationError
from arena.utils.bonuses import compute_champion, compute_streaks

logger = logging.getLogger(__name__)


class BonusService(BaseService):
    """Streak and champion bonuses for the active cycle."""

    async def suggest_streaks(self) -> List[StreakBonus]:
        """Streak suggestions; empty when no cycle is active."""
        async with self.get_session() as session:
            cycle = await self.db.get_active_cycle(session)
            if cycle is None:
                return []
            dates_by_player = await self.db.get_attendance_dates_by_player(session, cycle.id)
        return compute_streaks(dates_by_player)

    async def suggest_champion(self) -> Optional[ChampionBonus]:
        """Champion suggestion; None when no cycle is active or nobody attended."""
        async with self.get_session() as session:
            cycle = await self.db.get_active_cycle(session)
            if cycle is None:
                return None
            counts = await self.db.get_attendance_counts(session, cycle.id)
        return compute_champion(counts)

    async def apply_streak_bonuses(self, awarded_by: Optional[str] = None) -> List[StreakBonus]:
        """
        Persist the current streak suggestions, replacing any streak awards
        already applied this cycle.

        Raises:
            NoActiveCycleError: If no cycle is active
        """
        async with self.get_session() as session:
            cycle = await self.db.get_active_cycle(session)
            if cycle is None:
                raise NoActiveCycleError()

            suggestions = compute_streaks(await self.db.get_attendance_dates_by_player(session, cycle.id))

            await session.execute(
                delete(BonusAward).where(BonusAward.cycle_id == cycle.id, BonusAward.kind == 'streak')
            )
            for suggestion in suggestions:
                session.add(BonusAward(
                    player_id=suggestion.player_id,
                    cycle_id=cycle.id,
                    kind='streak',
                    points=suggestion.bonus_points,
                    reason=f"{suggestion.consecutive_weeks} consecutive weekly check-ins",
                    awarded_by=awarded_by
                ))

        logger.info(f"Applied {len(suggestions)} streak bonuses for cycle {cycle.id}")
        return suggestions

    async def apply_champion_bonus(
        self,
        player_id: Optional[int] = None,
        awarded_by: Optional[str] = None
    ) -> Optional[ChampionBonus]:
        """
        Award the attendance champion bonus, replacing any earlier champion award.

        Args:
            player_id: Pick a specific player among those tied for the top
                count; defaults to the suggested champion

        Returns:
            The applied bonus, or None when nobody has attended

        Raises:
            NoActiveCycleError: If no cycle is active
            RecordValidationError: If player_id is not among the top attenders
        """
        async with self.get_session() as session:
            cycle = await self.db.get_active_cycle(session)
            if cycle is None:
                raise NoActiveCycleError()

            champion = compute_champion(await self.db.get_attendance_counts(session, cycle.id))
            if champion is None:
                return None

            if player_id is not None and player_id != champion.player_id:
                if player_id not in champion.tied_player_ids:
                    raise RecordValidationError("player_id", "That player is not tied for the most check-ins.")
                champion = ChampionBonus(
                    player_id=player_id,
                    attendance_count=champion.attendance_count,
                    bonus_points=champion.bonus_points,
                    tied_player_ids=champion.tied_player_ids
                )

            await session.execute(
                delete(BonusAward).where(BonusAward.cycle_id == cycle.id, BonusAward.kind == 'champion')
            )
            session.add(BonusAward(
                player_id=champion.player_id,
                cycle_id=cycle.id,
                kind='champion',
                points=champion.bonus_points,
                reason=f"Attendance champion with {champion.attendance_count} check-ins",
                awarded_by=awarded_by
            ))

        logger.info(f"Applied champion bonus to player {champion.player_id} for cycle {cycle.id}")
        return champion
