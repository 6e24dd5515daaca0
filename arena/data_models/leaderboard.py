"""
Leaderboard data models for the engagement arena.

Provides immutable data transfer objects for aggregated leaderboard data and
the bonus suggestions derived from attendance.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    player_id: int
    player_name: str
    attendance_points: int
    activity_points: int
    course_points: int
    book_points: int
    blog_points: int
    presentation_points: int
    idea_points: int
    penalty_points: int
    bonus_points: int
    total_points: int
    is_last_place: bool

    def category_points(self) -> dict:
        """Map of category name to subtotal, in display order."""
        return {
            'attendance': self.attendance_points,
            'activity': self.activity_points,
            'course': self.course_points,
            'book': self.book_points,
            'blog': self.blog_points,
            'presentation': self.presentation_points,
            'idea': self.idea_points,
            'penalty': self.penalty_points,
            'bonus': self.bonus_points,
        }


@dataclass(frozen=True)
class LeaderboardPage:
    """Paginated leaderboard data."""
    entries: List[LeaderboardEntry]
    current_page: int
    total_pages: int
    total_players: int
    cycle_name: Optional[str] = None


@dataclass(frozen=True)
class StreakBonus:
    """Suggested bonus for consecutive weekly check-ins."""
    player_id: int
    consecutive_weeks: int
    bonus_points: int


@dataclass(frozen=True)
class ChampionBonus:
    """Suggested bonus for the highest attendance of the cycle."""
    player_id: int
    attendance_count: int
    bonus_points: int
    tied_player_ids: Tuple[int, ...] = ()

    @property
    def is_tied(self) -> bool:
        return len(self.tied_player_ids) > 1
