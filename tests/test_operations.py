"""
Operations layer against an in-memory SQLite database.
"""

import asyncio
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import func, select

from arena.database.database import Database
from arena.database.models import BonusAward, Cycle, Penalty
from arena.operations import AdminOperations, CycleOperations, PlayerOperations, SubmissionOperations
from arena.services.bonus_service import BonusService
from arena.services.leaderboard import LeaderboardService
from arena.utils.arena_exceptions import (
    DoublePointsAlreadyUsedError, DuplicateBlogUrlError, DuplicateCheckInError, DuplicatePlayerError,
    NoActiveCycleError, RecordValidationError
)

CYCLE_START = date(2026, 1, 1)
FIRST_WEDNESDAY = date(2026, 1, 7)


class Arena:
    """Fresh database with the operations and services wired to it."""

    def __init__(self, db: Database):
        self.db = db
        self.players = PlayerOperations(db)
        self.cycles = CycleOperations(db)
        self.submissions = SubmissionOperations(db)
        self.admin = AdminOperations(db)
        self.leaderboard = LeaderboardService(db, cache_ttl=0)
        self.bonuses = BonusService(db)

    async def player(self, name: str, remote: bool = False) -> int:
        player = await self.players.register_player(name, f"{name.lower()}@incrypt.test", remote=remote)
        return player.id

    async def entry(self, player_id: int):
        return await self.leaderboard.get_player_entry(player_id)


def run_scenario(scenario, start_cycle: bool = True):
    async def runner():
        db = Database("sqlite+aiosqlite:///:memory:")
        await db.initialize()
        try:
            arena = Arena(db)
            if start_cycle:
                await arena.cycles.start_cycle("January - June 2026", CYCLE_START)
            await scenario(arena)
        finally:
            await db.close()

    asyncio.run(runner())


def test_register_rejects_duplicate_email():
    async def scenario(arena):
        await arena.players.register_player("Nour", "Nour@Incrypt.test")
        with pytest.raises(DuplicatePlayerError):
            await arena.players.register_player("Nour Again", "nour@incrypt.test")

    run_scenario(scenario)


def test_join_links_roster_player_without_discord_account():
    async def scenario(arena):
        roster = await arena.players.register_player("Ahmed Ali", "ahmed@incrypt.test")
        assert roster.discord_id is None

        joined = await arena.players.register_player("Ahmed", "Ahmed@Incrypt.test", discord_id=222)
        assert joined.id == roster.id
        assert joined.name == "Ahmed Ali"

        linked = await arena.players.get_player_by_discord_id(222)
        attendance = await arena.submissions.check_in(linked.id, datetime(2026, 1, 7, 9, 0))
        assert attendance.player_id == roster.id

        # Once linked, the email can no longer be claimed by another account
        with pytest.raises(DuplicatePlayerError):
            await arena.players.register_player("Ahmed", "ahmed@incrypt.test", discord_id=333)

    run_scenario(scenario)


def test_register_rejects_invalid_email():
    async def scenario(arena):
        with pytest.raises(RecordValidationError):
            await arena.players.register_player("Nour", "not-an-email")

    run_scenario(scenario)


def test_starting_a_cycle_leaves_exactly_one_active():
    async def scenario(arena):
        await arena.cycles.start_cycle("July - December 2026", date(2026, 7, 1))
        async with arena.db.get_session() as session:
            active = await session.scalar(select(func.count(Cycle.id)).where(Cycle.is_active == True))
        assert active == 1
        cycle = await arena.cycles.get_active_cycle()
        assert cycle.name == "July - December 2026"
        assert cycle.end_date == date(2026, 7, 1) + timedelta(days=180)

    run_scenario(scenario)


def test_cycle_end_before_start_is_rejected():
    async def scenario(arena):
        with pytest.raises(RecordValidationError):
            await arena.cycles.start_cycle("Backwards", date(2026, 7, 1), date(2026, 6, 1))

    run_scenario(scenario, start_cycle=False)


def test_submissions_need_an_active_cycle():
    async def scenario(arena):
        player_id = await arena.player("Nour")
        with pytest.raises(NoActiveCycleError):
            await arena.submissions.add_blog(player_id, "Hello", "https://blog.test/hello")
        assert await arena.leaderboard.get_leaderboard() == []

    run_scenario(scenario, start_cycle=False)


def test_second_check_in_for_same_meeting_is_rejected():
    async def scenario(arena):
        player_id = await arena.player("Nour")
        attendance = await arena.submissions.check_in(player_id, datetime(2026, 1, 7, 9, 15))
        assert attendance.check_in_date == FIRST_WEDNESDAY
        assert attendance.is_early_bird

        with pytest.raises(DuplicateCheckInError):
            await arena.submissions.check_in(player_id, datetime(2026, 1, 9, 16, 0))

        assert (await arena.entry(player_id)).attendance_points == 2

    run_scenario(scenario)


def test_late_check_in_is_not_early_bird():
    async def scenario(arena):
        player_id = await arena.player("Ahmed", remote=True)
        attendance = await arena.submissions.check_in(player_id, datetime(2026, 1, 8, 8, 0))
        assert attendance.check_in_date == FIRST_WEDNESDAY
        assert not attendance.is_early_bird
        assert (await arena.entry(player_id)).attendance_points == 2

    run_scenario(scenario)


def test_bulk_attendance_skips_existing_rows():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")
        await arena.submissions.check_in(nour, datetime(2026, 1, 7, 12, 0))

        result = await arena.admin.record_attendance([nour, mona], FIRST_WEDNESDAY, early_bird_ids=[mona])
        assert result.created == [mona]
        assert result.skipped == [nour]
        assert (await arena.entry(mona)).attendance_points == 2

    run_scenario(scenario)


def test_bulk_attendance_outside_cycle_is_rejected():
    async def scenario(arena):
        nour = await arena.player("Nour")
        with pytest.raises(RecordValidationError):
            await arena.admin.record_attendance([nour], date(2025, 12, 31))

    run_scenario(scenario)


def test_self_check_in_before_cycle_start_is_rejected():
    async def scenario(arena):
        nour = await arena.player("Nour")
        # Friday 2 January resolves to Wednesday 31 December, before the cycle opens
        with pytest.raises(RecordValidationError):
            await arena.submissions.check_in(nour, datetime(2026, 1, 2, 9, 0))
        assert (await arena.entry(nour)).attendance_points == 0

    run_scenario(scenario)


def test_second_blog_is_worth_twenty_and_urls_are_unique():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")

        first = await arena.submissions.add_blog(nour, "First", "https://blog.test/one")
        second = await arena.submissions.add_blog(nour, "Second", "https://blog.test/two")
        assert first.is_first and not second.is_first

        with pytest.raises(DuplicateBlogUrlError):
            await arena.submissions.add_blog(mona, "Copy", "https://blog.test/one")

        mona_first = await arena.submissions.add_blog(mona, "Mine", "https://blog.test/three")
        assert mona_first.is_first
        assert (await arena.entry(nour)).blog_points == 50

    run_scenario(scenario)


def test_pair_presentation_creates_two_records():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")

        created = await arena.admin.log_presentation("Threat Modeling", FIRST_WEDNESDAY, nour, mona)
        assert [(p.player_id, p.presentation_order, p.points) for p in created] == [(nour, 1, 20), (mona, 2, 15)]
        assert (await arena.entry(nour)).presentation_points == 20
        assert (await arena.entry(mona)).presentation_points == 15

    run_scenario(scenario)


def test_solo_presentation_order_follows_history():
    async def scenario(arena):
        nour = await arena.player("Nour")
        first = await arena.admin.log_presentation("Intro", FIRST_WEDNESDAY, nour)
        second = await arena.admin.log_presentation("Follow-up", FIRST_WEDNESDAY, nour)
        assert first[0].points == 30
        assert second[0].points == 20

    run_scenario(scenario)


def test_presenting_with_yourself_is_rejected():
    async def scenario(arena):
        nour = await arena.player("Nour")
        with pytest.raises(RecordValidationError):
            await arena.admin.log_presentation("Echo", FIRST_WEDNESDAY, nour, nour)

    run_scenario(scenario)


def test_double_points_only_once_per_cycle():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")

        plain = await arena.admin.log_activity('padel', [nour, mona])
        await arena.admin.log_activity(
            'trivia_game', [nour, mona], top_performer_id=nour, double_points_player_id=nour
        )

        with pytest.raises(DoublePointsAlreadyUsedError):
            await arena.admin.log_activity('escape_room', [nour], double_points_player_id=nour)

        nour_plain = next(p for p in plain.participations if p.player_id == nour)
        with pytest.raises(DoublePointsAlreadyUsedError):
            await arena.admin.apply_double_points(nour_plain.id)

        # 10 for padel, (10 + 20) * 2 for trivia
        assert (await arena.entry(nour)).activity_points == 70
        assert (await arena.entry(mona)).activity_points == 20

    run_scenario(scenario)


def test_double_points_applied_after_the_fact():
    async def scenario(arena):
        mona = await arena.player("Mona")
        activity = await arena.admin.log_activity('fifa_cup', [mona], top_performer_id=mona)
        await arena.admin.apply_double_points(activity.participations[0].id)
        assert (await arena.entry(mona)).activity_points == 60

    run_scenario(scenario)


def test_top_performer_must_attend():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")
        with pytest.raises(RecordValidationError):
            await arena.admin.log_activity('padel', [nour], top_performer_id=mona)
        with pytest.raises(RecordValidationError):
            await arena.admin.log_activity('padel', [])

    run_scenario(scenario)


def test_courses_books_and_ideas_count_once_verified():
    async def scenario(arena):
        nour = await arena.player("Nour")
        course = await arena.submissions.add_course(nour, "Web Security", 10, 80)
        entry = await arena.admin.add_catalog_book("Clean Code", points_per_10_pages=2)
        book = await arena.submissions.add_book(nour, entry.id, 45)
        idea = await arena.submissions.submit_idea(nour, "Phishing drill bot", idea_type='tool')

        before = await arena.entry(nour)
        assert (before.course_points, before.book_points, before.idea_points) == (0, 0, 0)

        await arena.admin.verify_course(course.id)
        await arena.admin.verify_book(book.id)
        await arena.admin.verify_idea(idea.id, 25)

        after = await arena.entry(nour)
        assert (after.course_points, after.book_points, after.idea_points) == (32, 8, 25)

        await arena.submissions.update_book_pages(nour, book.id, 100)
        assert (await arena.entry(nour)).book_points == 0

    run_scenario(scenario)


def test_idea_points_out_of_range_rejected():
    async def scenario(arena):
        nour = await arena.player("Nour")
        idea = await arena.submissions.submit_idea(nour, "Idea")
        with pytest.raises(RecordValidationError):
            await arena.admin.verify_idea(idea.id, 31)

    run_scenario(scenario)


def test_course_validation():
    async def scenario(arena):
        nour = await arena.player("Nour")
        with pytest.raises(RecordValidationError):
            await arena.submissions.add_course(nour, "Zero", 0, 100)
        with pytest.raises(RecordValidationError):
            await arena.submissions.add_course(nour, "Over", 5, 101)

    run_scenario(scenario)


def test_penalty_is_stored_negative():
    async def scenario(arena):
        nour = await arena.player("Nour")
        penalty = await arena.admin.add_penalty(nour, 5, 'absences')
        assert penalty.points == -5
        with pytest.raises(RecordValidationError):
            await arena.admin.add_penalty(nour, 0)

        async with arena.db.get_session() as session:
            stored = await session.scalar(select(Penalty.points).where(Penalty.id == penalty.id))
        assert stored == -5
        assert (await arena.entry(nour)).total_points == -5

    run_scenario(scenario)


def test_applying_streaks_twice_does_not_double_count():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")
        for week in range(4):
            await arena.admin.record_attendance([nour], FIRST_WEDNESDAY + timedelta(weeks=week))
        await arena.admin.record_attendance([mona], FIRST_WEDNESDAY)

        suggestions = await arena.bonuses.suggest_streaks()
        assert [(s.player_id, s.bonus_points) for s in suggestions] == [(nour, 2)]

        await arena.bonuses.apply_streak_bonuses(awarded_by="admin")
        await arena.bonuses.apply_streak_bonuses(awarded_by="admin")

        async with arena.db.get_session() as session:
            count = await session.scalar(select(func.count(BonusAward.id)).where(BonusAward.kind == 'streak'))
        assert count == 1
        assert (await arena.entry(nour)).bonus_points == 2

    run_scenario(scenario)


def test_champion_bonus_replaces_earlier_award():
    async def scenario(arena):
        nour = await arena.player("Nour")
        mona = await arena.player("Mona")
        await arena.admin.record_attendance([nour, mona], FIRST_WEDNESDAY)
        await arena.admin.record_attendance([mona], FIRST_WEDNESDAY + timedelta(weeks=1))

        champion = await arena.bonuses.apply_champion_bonus()
        assert champion.player_id == mona
        assert champion.attendance_count == 2
        await arena.bonuses.apply_champion_bonus()

        assert (await arena.entry(mona)).bonus_points == 10
        assert (await arena.entry(nour)).bonus_points == 0

    run_scenario(scenario)


def test_champion_is_none_without_attendance():
    async def scenario(arena):
        await arena.player("Nour")
        assert await arena.bonuses.suggest_champion() is None
        assert await arena.bonuses.apply_champion_bonus() is None

    run_scenario(scenario)


def test_award_bonus_validation():
    async def scenario(arena):
        nour = await arena.player("Nour")
        with pytest.raises(RecordValidationError):
            await arena.admin.award_bonus(nour, 0)
        award = await arena.admin.award_bonus(nour, 20, 'top_performer', reason="Hackathon winner")
        assert award.points == 20
        assert (await arena.entry(nour)).bonus_points == 20

    run_scenario(scenario)
