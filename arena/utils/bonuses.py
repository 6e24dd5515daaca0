"""
Attendance bonus calculators.

Both calculators only *suggest* bonuses. Applying them is a separate,
admin-triggered action that persists BonusAward records, so these functions
stay pure and can be re-run at any time.

- Streak: +1 for every two consecutive weekly check-ins (longest run only)
- Champion: +10 for the highest attendance count of the cycle
"""

import logging
from datetime import date
from typing import Iterable, List, Mapping, Optional

from arena.constants import PointConstants
from arena.data_models.leaderboard import ChampionBonus, StreakBonus

logger = logging.getLogger(__name__)


def longest_weekly_run(check_in_dates: Iterable[date]) -> int:
    """
    Length of the longest run of check-ins exactly one week apart.

    Any gap other than 7 days (including a repeated date) resets the run to 1.

    Returns:
        0 for no dates, otherwise at least 1
    """
    ordered = sorted(check_in_dates)
    if not ordered:
        return 0

    max_run = 1
    current_run = 1
    for previous, current in zip(ordered, ordered[1:]):
        if (current - previous).days == PointConstants.STREAK_GAP_DAYS:
            current_run += 1
            max_run = max(max_run, current_run)
        else:
            current_run = 1
    return max_run


def compute_streaks(attendance_by_player: Mapping[int, Iterable[date]]) -> List[StreakBonus]:
    """
    Suggest streak bonuses for every player.

    Args:
        attendance_by_player: Player id to check-in dates within the active cycle

    Returns:
        StreakBonus rows for players earning at least one bonus point, highest
        bonus first, then by player id
    """
    suggestions = []
    for player_id, dates in attendance_by_player.items():
        max_run = longest_weekly_run(dates)
        bonus_points = (max_run // 2) * PointConstants.STREAK_BONUS
        if bonus_points > 0:
            suggestions.append(StreakBonus(
                player_id=player_id,
                consecutive_weeks=max_run,
                bonus_points=bonus_points,
            ))

    suggestions.sort(key=lambda s: (-s.bonus_points, -s.consecutive_weeks, s.player_id))
    logger.debug(f"Computed {len(suggestions)} streak suggestions from {len(attendance_by_player)} players")
    return suggestions


def compute_champion(attendance_count_by_player: Mapping[int, int]) -> Optional[ChampionBonus]:
    """
    Pick the attendance champion of the cycle.

    Ties resolve to the lowest player id; every tied id is reported so an
    admin can decide whether to share the bonus.

    Returns:
        ChampionBonus, or None when nobody has attended
    """
    best_count = max(attendance_count_by_player.values(), default=0)
    if best_count <= 0:
        return None

    tied = tuple(sorted(
        player_id for player_id, count in attendance_count_by_player.items()
        if count == best_count
    ))
    if len(tied) > 1:
        logger.info(f"Attendance champion tie at {best_count} check-ins between players {tied}")

    return ChampionBonus(
        player_id=tied[0],
        attendance_count=best_count,
        bonus_points=PointConstants.ATTENDANCE_CHAMPION,
        tied_player_ids=tied,
    )
