"""
Leaderboard aggregation for a single competition cycle.

Turns the raw achievement records of the active cycle into ranked
LeaderboardEntry rows. The computation is pure: no I/O, no shared state, and
identical input always yields identical output, so callers simply re-run it
whenever the underlying records change.

Ranking:
- Players are ordered by total points descending
- Equal totals are ordered by player name (case-insensitive), then player id
- rank is the 1-based position in that order
- is_last_place marks only the final row, and only with 2+ players
"""

from collections import defaultdict
from typing import Dict, Iterable, List

from arena.data_models.leaderboard import LeaderboardEntry
from arena.data_models.records import CycleRecords, PlayerInfo
from arena.utils.points import PointCalculator


def _category_totals(players: Dict[int, PlayerInfo], records: CycleRecords) -> Dict[str, Dict[int, int]]:
    """Sum every category per player, skipping records of unknown players."""
    totals: Dict[str, Dict[int, int]] = defaultdict(lambda: defaultdict(int))

    for record in records.attendance:
        player = players.get(record.player_id)
        if player is None:
            continue
        totals['attendance'][record.player_id] += PointCalculator.attendance_points(
            record.is_early_bird, player.remote
        )

    for record in records.activities:
        if record.player_id in players:
            totals['activity'][record.player_id] += PointCalculator.activity_points(
                record.is_top_performer, record.double_points_used
            )

    for record in records.courses:
        if record.verified and record.player_id in players:
            totals['course'][record.player_id] += PointCalculator.course_points(
                record.hours, record.completion_percent
            )

    for record in records.books:
        if record.verified and record.player_id in players:
            totals['book'][record.player_id] += PointCalculator.book_points(
                record.pages_read, record.points_per_10_pages
            )

    for record in records.blogs:
        if record.player_id in players:
            totals['blog'][record.player_id] += PointCalculator.blog_points(record.is_first)

    for record in records.presentations:
        if record.player_id in players:
            totals['presentation'][record.player_id] += record.points

    for record in records.ideas:
        if record.verified and record.player_id in players:
            totals['idea'][record.player_id] += record.points

    for record in records.penalties:
        if record.player_id in players:
            totals['penalty'][record.player_id] += record.points

    for record in records.bonuses:
        if record.player_id in players:
            totals['bonus'][record.player_id] += record.points

    return totals


def compute_leaderboard(players: Iterable[PlayerInfo], records: CycleRecords) -> List[LeaderboardEntry]:
    """
    Compute the ranked leaderboard for one cycle.

    Args:
        players: Every registered player; players without records still appear
        records: All achievement records of the cycle

    Returns:
        LeaderboardEntry rows ordered by rank
    """
    players_by_id = {player.player_id: player for player in players}
    totals = _category_totals(players_by_id, records)

    rows = []
    for player in players_by_id.values():
        subtotals = {
            category: totals[category].get(player.player_id, 0)
            for category in (
                'attendance', 'activity', 'course', 'book', 'blog',
                'presentation', 'idea', 'penalty', 'bonus'
            )
        }
        rows.append((player, subtotals, sum(subtotals.values())))

    rows.sort(key=lambda row: (-row[2], row[0].name.casefold(), row[0].player_id))

    player_count = len(rows)
    entries = []
    for position, (player, subtotals, total) in enumerate(rows, start=1):
        entries.append(LeaderboardEntry(
            rank=position,
            player_id=player.player_id,
            player_name=player.name,
            attendance_points=subtotals['attendance'],
            activity_points=subtotals['activity'],
            course_points=subtotals['course'],
            book_points=subtotals['book'],
            blog_points=subtotals['blog'],
            presentation_points=subtotals['presentation'],
            idea_points=subtotals['idea'],
            penalty_points=subtotals['penalty'],
            bonus_points=subtotals['bonus'],
            total_points=total,
            is_last_place=player_count > 1 and position == player_count,
        ))

    return entries
