from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from arena.config import Config
from arena.data_models import records
from arena.database.models import (
    Base, Player, Cycle, Attendance, Course, Book, BookCatalogEntry, Blog,
    Presentation, ActivityParticipation, Idea, Penalty, BonusAward
)
from arena.utils.arena_exceptions import DatabaseError
from arena.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None

    @property
    def session_factory(self):
        """Async session factory shared with the services layer"""
        return self.async_session

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        # Convert sqlite URL to async if needed
        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        engine_kwargs = {'echo': Config.DEBUG}
        if ':memory:' in database_url:
            # A single shared connection keeps the in-memory database alive
            engine_kwargs['poolclass'] = StaticPool
            engine_kwargs['connect_args'] = {'check_same_thread': False}

        self.engine = create_async_engine(database_url, **engine_kwargs)

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to create tables: {e}")
            raise DatabaseError("initialize", str(e)) from e

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure.

        Usage:
            async with db.transaction() as session:
                await submission_ops.log_presentation(..., session=session)
                await bonus_ops.award_bonus(..., session=session)
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Cycle queries
    async def get_active_cycle(self, session: Optional[AsyncSession] = None) -> Optional[Cycle]:
        """Get the single active cycle, if any"""
        query = select(Cycle).where(Cycle.is_active == True).order_by(Cycle.id.desc()).limit(1)
        if session is not None:
            return (await session.execute(query)).scalar_one_or_none()
        async with self.get_session() as s:
            return (await s.execute(query)).scalar_one_or_none()

    # Player queries
    async def get_player_by_discord_id(self, discord_id: int) -> Optional[Player]:
        """Get a player by their Discord ID"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Player).where(Player.discord_id == discord_id)
            )
            return result.scalar_one_or_none()

    async def get_all_players(self) -> List[Player]:
        """Get every registered player ordered by name"""
        async with self.get_session() as session:
            result = await session.execute(select(Player).order_by(Player.name))
            return list(result.scalars().all())

    async def get_player_infos(self, session: AsyncSession) -> List[records.PlayerInfo]:
        """Players as plain scoring-core records"""
        result = await session.execute(select(Player.id, Player.name, Player.remote))
        return [
            records.PlayerInfo(player_id=row.id, name=row.name, remote=bool(row.remote))
            for row in result
        ]

    # Record queries for the scoring core
    async def load_cycle_records(self, session: AsyncSession, cycle_id: int) -> records.CycleRecords:
        """Fetch every achievement record of a cycle as plain dataclasses"""
        attendance = await session.execute(
            select(Attendance.player_id, Attendance.check_in_date, Attendance.is_early_bird)
            .where(Attendance.cycle_id == cycle_id)
        )
        courses = await session.execute(
            select(Course.player_id, Course.total_hours, Course.completion_percent, Course.verified)
            .where(Course.cycle_id == cycle_id)
        )
        books = await session.execute(
            select(Book.player_id, Book.pages_read, Book.points_per_10_pages, Book.verified)
            .where(Book.cycle_id == cycle_id)
        )
        blogs = await session.execute(
            select(Blog.player_id, Blog.url, Blog.is_first).where(Blog.cycle_id == cycle_id)
        )
        presentations = await session.execute(
            select(
                Presentation.player_id, Presentation.is_solo, Presentation.presentation_order,
                Presentation.points, Presentation.second_presenter_id
            ).where(Presentation.cycle_id == cycle_id)
        )
        participations = await session.execute(
            select(
                ActivityParticipation.player_id, ActivityParticipation.activity_id,
                ActivityParticipation.is_top_performer, ActivityParticipation.double_points_used
            ).where(ActivityParticipation.cycle_id == cycle_id)
        )
        ideas = await session.execute(
            select(Idea.player_id, Idea.points, Idea.verified).where(Idea.cycle_id == cycle_id)
        )
        penalties = await session.execute(
            select(Penalty.player_id, Penalty.points, Penalty.reason).where(Penalty.cycle_id == cycle_id)
        )
        bonuses = await session.execute(
            select(BonusAward.player_id, BonusAward.points, BonusAward.kind).where(BonusAward.cycle_id == cycle_id)
        )

        return records.CycleRecords(
            attendance=[
                records.AttendanceRecord(r.player_id, r.check_in_date, bool(r.is_early_bird))
                for r in attendance
            ],
            courses=[
                records.CourseRecord(r.player_id, r.total_hours, r.completion_percent, bool(r.verified))
                for r in courses
            ],
            books=[
                records.BookRecord(r.player_id, r.pages_read, r.points_per_10_pages, bool(r.verified))
                for r in books
            ],
            blogs=[records.BlogRecord(r.player_id, r.url, bool(r.is_first)) for r in blogs],
            presentations=[
                records.PresentationRecord(
                    r.player_id, bool(r.is_solo), r.presentation_order, r.points, r.second_presenter_id
                )
                for r in presentations
            ],
            activities=[
                records.ActivityParticipation(
                    r.player_id, r.activity_id, bool(r.is_top_performer), bool(r.double_points_used)
                )
                for r in participations
            ],
            ideas=[records.IdeaRecord(r.player_id, r.points, bool(r.verified)) for r in ideas],
            penalties=[records.PenaltyRecord(r.player_id, r.points, r.reason) for r in penalties],
            bonuses=[records.BonusAward(r.player_id, r.points, r.kind) for r in bonuses],
        )

    async def get_attendance_dates_by_player(self, session: AsyncSession, cycle_id: int) -> Dict[int, List[date]]:
        """Check-in dates per player for a cycle, sorted ascending"""
        result = await session.execute(
            select(Attendance.player_id, Attendance.check_in_date)
            .where(Attendance.cycle_id == cycle_id)
            .order_by(Attendance.player_id, Attendance.check_in_date)
        )
        dates_by_player: Dict[int, List[date]] = defaultdict(list)
        for row in result:
            dates_by_player[row.player_id].append(row.check_in_date)
        return dict(dates_by_player)

    async def get_attendance_counts(self, session: AsyncSession, cycle_id: int) -> Dict[int, int]:
        """Number of check-ins per player for a cycle"""
        result = await session.execute(
            select(Attendance.player_id, func.count(Attendance.id))
            .where(Attendance.cycle_id == cycle_id)
            .group_by(Attendance.player_id)
        )
        return {player_id: count for player_id, count in result}

    async def get_book_catalog(self) -> List[BookCatalogEntry]:
        """All catalog books ordered by name"""
        async with self.get_session() as session:
            result = await session.execute(select(BookCatalogEntry).order_by(BookCatalogEntry.name))
            return list(result.scalars().all())
