"""
Submission Operations Module

Player-facing data entry: weekly check-ins and achievement submissions
(courses, books, blogs, ideas). Every submission is validated here before it
reaches the store; the scoring core assumes well-formed records.

Courses, books and ideas start unverified and only count once an admin
verifies them. Blogs count immediately.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.constants import CategoryConstants
from arena.database.models import Attendance, Course, Book, BookCatalogEntry, Blog, Idea
from arena.operations.base import BaseOperations
from arena.utils.arena_exceptions import (
    DuplicateCheckInError, DuplicateBlogUrlError, RecordNotFoundError, RecordValidationError
)
from arena.utils.check_in import last_check_in_day, is_early_bird, local_now
from arena.utils.logger import setup_logger

logger = setup_logger(__name__)


class SubmissionOperations(BaseOperations):
    """Check-ins and player submissions for the active cycle."""

    async def check_in(
        self,
        player_id: int,
        checked_in_at: Optional[datetime] = None,
        session: Optional[AsyncSession] = None
    ) -> Attendance:
        """
        Record a self check-in for the most recent meeting day.

        The early bird flag is derived from the check-in time: only a check-in
        made on the meeting day before the cutoff earns it.

        Args:
            player_id: Player checking in
            checked_in_at: Local check-in time; defaults to now in Config.TIMEZONE

        Raises:
            NoActiveCycleError: If no cycle is active
            RecordValidationError: If that meeting day falls outside the active cycle
            DuplicateCheckInError: If the player already checked in for that day
        """
        checked_in_at = checked_in_at or local_now()
        check_in_date = last_check_in_day(checked_in_at.date())
        early = is_early_bird(checked_in_at)

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            if not cycle.start_date <= check_in_date <= cycle.end_date:
                raise RecordValidationError(
                    'check_in_date', f"The meeting on {check_in_date} is outside the active cycle."
                )
            player = await self._require_player(s, player_id)

            existing = await s.execute(
                select(Attendance.id).where(
                    Attendance.player_id == player_id,
                    Attendance.check_in_date == check_in_date
                )
            )
            if existing.first():
                raise DuplicateCheckInError(player.name, check_in_date)

            attendance = Attendance(
                player_id=player_id,
                cycle_id=cycle.id,
                check_in_date=check_in_date,
                is_early_bird=early,
                recorded_by='self'
            )
            s.add(attendance)
            try:
                await s.flush()
            except IntegrityError as e:
                raise DuplicateCheckInError(player.name, check_in_date) from e

            logger.info(f"Player {player_id} checked in for {check_in_date} (early bird: {early})")
            return attendance

    async def add_course(
        self,
        player_id: int,
        name: str,
        hours: float,
        completion_percent: int,
        course_url: Optional[str] = None,
        notes_link: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> Course:
        """
        Submit a course for verification.

        Raises:
            RecordValidationError: If hours are not positive or completion is outside 0-100
        """
        if not name or not name.strip():
            raise RecordValidationError('name', "Course name cannot be empty.")
        if hours is None or hours <= 0:
            raise RecordValidationError('hours', "Course hours must be greater than zero.")
        if hours >= 1000:
            raise RecordValidationError('hours', "Course hours must be below 1000.")
        if completion_percent is None or not 0 <= completion_percent <= 100:
            raise RecordValidationError('completion_percent', "Completion must be between 0 and 100%.")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            await self._require_player(s, player_id)

            course = Course(
                player_id=player_id,
                cycle_id=cycle.id,
                name=name.strip(),
                course_url=course_url,
                total_hours=round(hours, 2),
                completion_percent=completion_percent,
                notes_link=notes_link,
                verified=False
            )
            s.add(course)
            await s.flush()

            logger.info(f"Player {player_id} submitted course {course.id} ({hours}h at {completion_percent}%)")
            return course

    async def add_book(
        self,
        player_id: int,
        catalog_id: int,
        pages_read: int,
        notes_link: Optional[str] = None,
        session: Optional[AsyncSession] = None
    ) -> Book:
        """
        Submit reading progress for a catalog book.

        The catalog's points_per_10_pages is copied onto the record so later
        catalog edits do not rewrite past scores.

        Raises:
            RecordNotFoundError: If the catalog entry does not exist
            RecordValidationError: If pages_read is negative
        """
        if pages_read is None or pages_read < 0:
            raise RecordValidationError('pages_read', "Pages read cannot be negative.")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            await self._require_player(s, player_id)

            entry = await s.get(BookCatalogEntry, catalog_id)
            if entry is None:
                raise RecordNotFoundError("Book", catalog_id)

            book = Book(
                player_id=player_id,
                cycle_id=cycle.id,
                catalog_id=entry.id,
                title=entry.name,
                pages_read=pages_read,
                points_per_10_pages=entry.points_per_10_pages,
                notes_link=notes_link,
                verified=False
            )
            s.add(book)
            await s.flush()

            logger.info(f"Player {player_id} submitted book {book.id} '{entry.name}' ({pages_read} pages)")
            return book

    async def update_book_pages(
        self,
        player_id: int,
        book_id: int,
        pages_read: int,
        session: Optional[AsyncSession] = None
    ) -> Book:
        """
        Update reading progress on one of the player's own books.

        Progress changes need verifying again, so the record returns to unverified.
        """
        if pages_read is None or pages_read < 0:
            raise RecordValidationError('pages_read', "Pages read cannot be negative.")

        async with self._get_session_context(session) as s:
            book = await s.get(Book, book_id)
            if book is None or book.player_id != player_id:
                raise RecordNotFoundError("Book", book_id)

            book.pages_read = pages_read
            book.verified = False
            await s.flush()

            logger.info(f"Player {player_id} updated book {book_id} to {pages_read} pages")
            return book

    async def add_blog(
        self,
        player_id: int,
        title: str,
        url: str,
        session: Optional[AsyncSession] = None
    ) -> Blog:
        """
        Submit a blog post.

        The player's first blog ever is worth more; that is decided here by
        looking at every blog the player has submitted in any cycle.

        Raises:
            DuplicateBlogUrlError: If anyone already submitted this URL
        """
        if not title or not title.strip():
            raise RecordValidationError('title', "Blog title cannot be empty.")
        url = (url or '').strip()
        if not url.lower().startswith(('http://', 'https://')):
            raise RecordValidationError('url', "Blog link must start with http:// or https://")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            await self._require_player(s, player_id)

            duplicate = await s.execute(select(Blog.id).where(Blog.url == url))
            if duplicate.first():
                raise DuplicateBlogUrlError(url)

            prior_blogs = await s.scalar(select(func.count(Blog.id)).where(Blog.player_id == player_id))

            blog = Blog(
                player_id=player_id,
                cycle_id=cycle.id,
                title=title.strip(),
                url=url,
                is_first=prior_blogs == 0
            )
            s.add(blog)
            try:
                await s.flush()
            except IntegrityError as e:
                raise DuplicateBlogUrlError(url) from e

            logger.info(f"Player {player_id} submitted blog {blog.id} (first: {blog.is_first})")
            return blog

    async def submit_idea(
        self,
        player_id: int,
        title: str,
        description: Optional[str] = None,
        idea_type: str = 'idea',
        session: Optional[AsyncSession] = None
    ) -> Idea:
        """Submit an idea or tool; points are assigned when an admin verifies it."""
        if not title or not title.strip():
            raise RecordValidationError('title', "Idea title cannot be empty.")
        if idea_type not in CategoryConstants.IDEA_TYPES:
            raise RecordValidationError('idea_type', f"Idea type must be one of: {', '.join(CategoryConstants.IDEA_TYPES)}")

        async with self._get_session_context(session) as s:
            cycle = await self._require_active_cycle(s)
            await self._require_player(s, player_id)

            idea = Idea(
                player_id=player_id,
                cycle_id=cycle.id,
                title=title.strip(),
                description=description,
                idea_type=idea_type,
                points=0,
                verified=False
            )
            s.add(idea)
            await s.flush()

            logger.info(f"Player {player_id} submitted {idea_type} {idea.id} '{idea.title}'")
            return idea
