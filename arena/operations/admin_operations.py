"""
Admin Operations Module

Admin-only data entry for the active cycle: bulk attendance, presentations,
activities, penalties, bonus awards, verification and the book catalog.

Key invariants enforced here:
- At most one attendance row per (player, date)
- A two-presenter event produces two independent presentation records
- A player may use double points at most once per cycle (pre-insert check,
  backed by a partial unique index)
- Penalties are always stored as negative points
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.constants import CategoryConstants, PointConstants
from arena.database.models import (
    Attendance, Activity, ActivityParticipation, BonusAward, Book, BookCatalogEntry,
    Course, Idea, Penalty, Player, Presentation
)
from arena.operations.base import BaseOperations
from arena.utils.arena_exceptions import (
    DoublePointsAlreadyUsedError, RecordNotFoundError, RecordValidationError
)
from arena.utils.logger import setup_logger
from arena.utils.points import PointCalculator

logger = setup_logger(__name__)


@dataclass
class AttendanceResult:
    """Outcome of a bulk attendance entry"""
    created: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)  # Already checked in for the date


class AdminOperations(BaseOperations):
    """Admin data entry and verification."""

    async def record_attendance(
        self,
        player_ids: Iterable[int],
        check_in_date: date,
        early_bird_ids: Iterable[int] = (),
        recorded_by: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> AttendanceResult:
        """
        Bulk attendance entry for one date.

        Players who already have a row for the date are skipped rather than
        failing the whole batch.
        """
        player_ids = list(dict.fromkeys(player_ids))
        early_bird_ids = set(early_bird_ids)
        if not player_ids:
            raise RecordValidationError('player_ids', "Select at least one player.")
        stray = early_bird_ids - set(player_ids)
        if stray:
            raise RecordValidationError('early_bird_ids', "Early birds must also be marked as attending.")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            if not cycle.start_date <= check_in_date <= cycle.end_date:
                raise RecordValidationError('check_in_date', f"{check_in_date} is outside the active cycle.")

            existing = await s.execute(
                select(Attendance.player_id).where(
                    Attendance.check_in_date == check_in_date,
                    Attendance.player_id.in_(player_ids)
                )
            )
            already_present = set(existing.scalars().all())

            result = AttendanceResult()
            for player_id in player_ids:
                await self._require_player(s, player_id)
                if player_id in already_present:
                    result.skipped.append(player_id)
                    continue
                s.add(Attendance(
                    player_id=player_id,
                    cycle_id=cycle.id,
                    check_in_date=check_in_date,
                    is_early_bird=player_id in early_bird_ids,
                    recorded_by=recorded_by
                ))
                result.created.append(player_id)

            await s.flush()
            logger.info(
                f"Recorded attendance for {check_in_date}: {len(result.created)} created, "
                f"{len(result.skipped)} skipped"
            )
            return result

    async def log_presentation(
        self,
        topic: str,
        presentation_date: date,
        presenter_id: int,
        second_presenter_id: Optional[int] = None,
        slides_url: Optional[str] = None,
        recording_url: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> List[Presentation]:
        """
        Log a presentation.

        Solo: one record; order 1 for the player's first solo presentation of
        the cycle, order 2 afterwards. Pair: two records, order 1 for the lead
        presenter and order 2 for the second presenter.

        Returns:
            The created records (one or two)
        """
        if not topic or not topic.strip():
            raise RecordValidationError('topic', "Presentation topic cannot be empty.")
        if second_presenter_id is not None and second_presenter_id == presenter_id:
            raise RecordValidationError('second_presenter_id', "The second presenter must be a different player.")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            await self._require_player(s, presenter_id)
            is_solo = second_presenter_id is None

            if is_solo:
                prior_solo = await s.execute(
                    select(Presentation.id).where(
                        Presentation.player_id == presenter_id,
                        Presentation.cycle_id == cycle.id,
                        Presentation.is_solo == True
                    ).limit(1)
                )
                shares = [(presenter_id, None, 2 if prior_solo.first() else 1)]
            else:
                await self._require_player(s, second_presenter_id)
                shares = [
                    (presenter_id, second_presenter_id, 1),
                    (second_presenter_id, presenter_id, 2),
                ]

            created = []
            for player_id, partner_id, order in shares:
                presentation = Presentation(
                    player_id=player_id,
                    second_presenter_id=partner_id,
                    cycle_id=cycle.id,
                    topic=topic.strip(),
                    date=presentation_date,
                    slides_url=slides_url,
                    recording_url=recording_url,
                    is_solo=is_solo,
                    presentation_order=order,
                    points=PointCalculator.presentation_points(is_solo, order)
                )
                s.add(presentation)
                created.append(presentation)

            await s.flush()
            logger.info(
                f"Logged presentation '{topic}' for players "
                f"{[p.player_id for p in created]} ({[p.points for p in created]} pts)"
            )
            return created

    async def _player_used_double_points(self, session: AsyncSession, player_id: int, cycle_id: int) -> bool:
        result = await session.execute(
            select(ActivityParticipation.id).where(
                ActivityParticipation.player_id == player_id,
                ActivityParticipation.cycle_id == cycle_id,
                ActivityParticipation.double_points_used == True
            ).limit(1)
        )
        return result.first() is not None

    async def log_activity(
        self,
        activity_type: str,
        attendee_ids: Iterable[int],
        top_performer_id: Optional[int] = None,
        double_points_player_id: Optional[int] = None,
        activity_date: Optional[date] = None,
        name: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> Activity:
        """
        Log an activity with its participants.

        Raises:
            RecordValidationError: Unknown type, no attendees, or a top performer /
                double points player who did not attend
            DoublePointsAlreadyUsedError: If the double points player already used it this cycle
        """
        if activity_type not in CategoryConstants.ACTIVITY_TYPES:
            raise RecordValidationError(
                'activity_type',
                f"Activity must be one of: {', '.join(CategoryConstants.ACTIVITY_TYPES)}"
            )
        attendee_ids = list(dict.fromkeys(attendee_ids))
        if not attendee_ids:
            raise RecordValidationError('attendee_ids', "Select at least one attendee.")
        if top_performer_id is not None and top_performer_id not in attendee_ids:
            raise RecordValidationError('top_performer_id', "The top performer must be one of the attendees.")
        if double_points_player_id is not None and double_points_player_id not in attendee_ids:
            raise RecordValidationError('double_points_player_id', "Double points can only be used by an attendee.")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            for player_id in attendee_ids:
                await self._require_player(s, player_id)

            double_player = None
            if double_points_player_id is not None:
                double_player = await s.get(Player, double_points_player_id)
                if await self._player_used_double_points(s, double_points_player_id, cycle.id):
                    raise DoublePointsAlreadyUsedError(double_player.name)

            activity = Activity(
                cycle_id=cycle.id,
                name=name or CategoryConstants.ACTIVITY_TYPES[activity_type],
                activity_type=activity_type,
                date=activity_date or date.today()
            )
            for player_id in attendee_ids:
                activity.participations.append(ActivityParticipation(
                    player_id=player_id,
                    cycle_id=cycle.id,
                    is_top_performer=player_id == top_performer_id,
                    double_points_used=player_id == double_points_player_id
                ))
            s.add(activity)
            try:
                await s.flush()
            except IntegrityError as e:
                if double_player is not None:
                    raise DoublePointsAlreadyUsedError(double_player.name) from e
                raise

            logger.info(
                f"Logged activity {activity.id} '{activity.name}' with {len(attendee_ids)} attendees "
                f"(top: {top_performer_id}, double: {double_points_player_id})"
            )
            return activity

    async def apply_double_points(
        self,
        participation_id: int,
        session: Optional[AsyncSession] = None
    ) -> ActivityParticipation:
        """
        Turn on double points for an existing participation.

        Raises:
            RecordNotFoundError: If the participation does not exist
            DoublePointsAlreadyUsedError: If the player already used it this cycle
        """
        async with self._get_session_context(session) as s:
            participation = await s.get(ActivityParticipation, participation_id)
            if participation is None:
                raise RecordNotFoundError("Participation", participation_id)

            player = await self._require_player(s, participation.player_id)
            if participation.double_points_used or await self._player_used_double_points(
                s, participation.player_id, participation.cycle_id
            ):
                raise DoublePointsAlreadyUsedError(player.name)

            participation.double_points_used = True
            try:
                await s.flush()
            except IntegrityError as e:
                raise DoublePointsAlreadyUsedError(player.name) from e

            logger.info(f"Applied double points to participation {participation_id} for player {player.id}")
            return participation

    async def add_penalty(
        self,
        player_id: int,
        points: int,
        reason: str = 'other',
        description: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> Penalty:
        """Record a penalty; the sign of ``points`` is ignored and stored negative."""
        if not points:
            raise RecordValidationError('points', "Penalty points cannot be zero.")
        if reason not in CategoryConstants.PENALTY_REASONS:
            raise RecordValidationError('reason', f"Reason must be one of: {', '.join(CategoryConstants.PENALTY_REASONS)}")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            await self._require_player(s, player_id)

            penalty = Penalty(
                player_id=player_id,
                cycle_id=cycle.id,
                reason=reason,
                points=-abs(points),
                description=description
            )
            s.add(penalty)
            await s.flush()

            logger.info(f"Penalty of {penalty.points} for player {player_id} ({reason})")
            return penalty

    async def award_bonus(
        self,
        player_id: int,
        points: int,
        kind: str = 'top_performer',
        reason: Optional[str] = None,
        awarded_by: Optional[str] = None,
        cycle_id: Optional[int] = None,
        session: Optional[AsyncSession] = None
    ) -> BonusAward:
        """Award bonus points (top performer, streak or champion)"""
        if points is None or points <= 0:
            raise RecordValidationError('points', "Bonus points must be greater than zero.")
        if kind not in CategoryConstants.AWARD_KINDS:
            raise RecordValidationError('kind', f"Award kind must be one of: {', '.join(CategoryConstants.AWARD_KINDS)}")

        async with self._get_session_context(session) as s:
            if cycle_id is None:
                cycle_id = (await self._require_active_cycle(s)).id
            await self._require_player(s, player_id)

            award = BonusAward(
                player_id=player_id,
                cycle_id=cycle_id,
                kind=kind,
                points=points,
                reason=reason,
                awarded_by=awarded_by
            )
            s.add(award)
            await s.flush()

            logger.info(f"Awarded {points} {kind} points to player {player_id}")
            return award

    async def verify_course(self, course_id: int, verified: bool = True,
                            session: Optional[AsyncSession] = None) -> Course:
        async with self._get_session_context(session) as s:
            course = await s.get(Course, course_id)
            if course is None:
                raise RecordNotFoundError("Course", course_id)
            course.verified = verified
            await s.flush()
            logger.info(
                f"Course {course_id} verified={verified} "
                f"({PointCalculator.course_points(course.total_hours, course.completion_percent)} pts)"
            )
            return course

    async def verify_book(self, book_id: int, verified: bool = True,
                          session: Optional[AsyncSession] = None) -> Book:
        async with self._get_session_context(session) as s:
            book = await s.get(Book, book_id)
            if book is None:
                raise RecordNotFoundError("Book", book_id)
            book.verified = verified
            await s.flush()
            logger.info(f"Book {book_id} verified={verified}")
            return book

    async def verify_idea(self, idea_id: int, points: int,
                          session: Optional[AsyncSession] = None) -> Idea:
        """Verify an idea and set its vote-based points (5-30)"""
        if points is None or not PointConstants.IDEA_MIN <= points <= PointConstants.IDEA_MAX:
            raise RecordValidationError(
                'points', f"Idea points must be between {PointConstants.IDEA_MIN} and {PointConstants.IDEA_MAX}."
            )

        async with self._get_session_context(session) as s:
            idea = await s.get(Idea, idea_id)
            if idea is None:
                raise RecordNotFoundError("Idea", idea_id)
            idea.points = points
            idea.verified = True
            await s.flush()
            logger.info(f"Idea {idea_id} verified with {points} pts")
            return idea

    async def add_catalog_book(
        self,
        name: str,
        author: Optional[str] = None,
        category: Optional[str] = None,
        points_per_10_pages: int = PointConstants.DEFAULT_POINTS_PER_10_PAGES,
        session: Optional[AsyncSession] = None
    ) -> BookCatalogEntry:
        if not name or not name.strip():
            raise RecordValidationError('name', "Book name cannot be empty.")
        if points_per_10_pages is None or points_per_10_pages < 1:
            raise RecordValidationError('points_per_10_pages', "Points per 10 pages must be at least 1.")
        if category is not None and category not in CategoryConstants.BOOK_CATEGORIES:
            raise RecordValidationError(
                'category', f"Category must be one of: {', '.join(CategoryConstants.BOOK_CATEGORIES)}"
            )

        async with self._get_session_context(session) as s:
            entry = BookCatalogEntry(
                name=name.strip(),
                author=author,
                category=category,
                points_per_10_pages=points_per_10_pages
            )
            s.add(entry)
            try:
                await s.flush()
            except IntegrityError as e:
                raise RecordValidationError('name', f"'{name}' is already in the library.") from e

            logger.info(f"Added catalog book {entry.id} '{entry.name}' ({points_per_10_pages} pts/10 pages)")
            return entry
