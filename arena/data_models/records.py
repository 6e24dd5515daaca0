"""
Achievement record data models for the scoring core.

Provides immutable data transfer objects that the database layer fills for one
competition cycle and hands to the pure aggregation functions.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass(frozen=True)
class PlayerInfo:
    """A registered player as seen by the scoring core."""
    player_id: int
    name: str
    remote: bool = False


@dataclass(frozen=True)
class AttendanceRecord:
    """One weekly check-in."""
    player_id: int
    check_in_date: date
    is_early_bird: bool = False


@dataclass(frozen=True)
class CourseRecord:
    player_id: int
    hours: float
    completion_percent: int
    verified: bool = False


@dataclass(frozen=True)
class BookRecord:
    player_id: int
    pages_read: int
    points_per_10_pages: int = 1
    verified: bool = False


@dataclass(frozen=True)
class BlogRecord:
    player_id: int
    url: str
    is_first: bool = False


@dataclass(frozen=True)
class PresentationRecord:
    """One presenter's share of a presentation; pairs produce two records."""
    player_id: int
    is_solo: bool
    presentation_order: int
    points: int
    co_presenter_id: Optional[int] = None


@dataclass(frozen=True)
class ActivityParticipation:
    player_id: int
    activity_id: int
    is_top_performer: bool = False
    double_points_used: bool = False


@dataclass(frozen=True)
class IdeaRecord:
    player_id: int
    points: int
    verified: bool = False


@dataclass(frozen=True)
class PenaltyRecord:
    player_id: int
    points: int  # Always <= 0
    reason: str = 'other'


@dataclass(frozen=True)
class BonusAward:
    """Points applied by an admin: top performer, streak or champion."""
    player_id: int
    points: int
    kind: str = 'top_performer'


@dataclass(frozen=True)
class CycleRecords:
    """Every achievement record of a single cycle, already fetched."""
    attendance: List[AttendanceRecord] = field(default_factory=list)
    courses: List[CourseRecord] = field(default_factory=list)
    books: List[BookRecord] = field(default_factory=list)
    blogs: List[BlogRecord] = field(default_factory=list)
    presentations: List[PresentationRecord] = field(default_factory=list)
    activities: List[ActivityParticipation] = field(default_factory=list)
    ideas: List[IdeaRecord] = field(default_factory=list)
    penalties: List[PenaltyRecord] = field(default_factory=list)
    bonuses: List[BonusAward] = field(default_factory=list)
