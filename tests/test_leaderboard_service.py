"""
Leaderboard service paging and caching, plus the command rate limiter.
"""

import asyncio
from datetime import date

import pytest

from arena.database.database import Database
from arena.operations import AdminOperations, CycleOperations, PlayerOperations
from arena.services.leaderboard import LeaderboardService
from arena.services.rate_limiter import SimpleRateLimiter


async def _seeded_db(player_count: int) -> Database:
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.initialize()
    await CycleOperations(db).start_cycle("January - June 2026", date(2026, 1, 1))
    players = PlayerOperations(db)
    admin = AdminOperations(db)
    for i in range(player_count):
        player = await players.register_player(f"Player {i:02d}", f"player{i}@incrypt.test")
        if i:
            await admin.award_bonus(player.id, i)
    return db


def test_pages_split_the_ranked_board():
    async def scenario():
        db = await _seeded_db(23)
        try:
            service = LeaderboardService(db)
            first = await service.get_page(page=1, page_size=10)
            last = await service.get_page(page=3, page_size=10)

            assert first.total_players == 23
            assert first.total_pages == 3
            assert first.cycle_name == "January - June 2026"
            assert [e.rank for e in first.entries] == list(range(1, 11))
            assert first.entries[0].total_points == 22

            assert len(last.entries) == 3
            assert last.entries[-1].is_last_place
            assert last.entries[-1].total_points == 0
        finally:
            await db.close()

    asyncio.run(scenario())


def test_page_past_the_end_clamps_to_last_page():
    async def scenario():
        db = await _seeded_db(3)
        try:
            page = await LeaderboardService(db).get_page(page=5, page_size=10)
            assert page.current_page == 1
            assert len(page.entries) == 3
        finally:
            await db.close()

    asyncio.run(scenario())


def test_invalid_page_arguments():
    async def scenario():
        db = await _seeded_db(1)
        try:
            service = LeaderboardService(db)
            with pytest.raises(ValueError):
                await service.get_page(page=0)
            with pytest.raises(ValueError):
                await service.get_page(page=1, page_size=51)
        finally:
            await db.close()

    asyncio.run(scenario())


def test_cache_is_served_until_cleared():
    async def scenario():
        db = await _seeded_db(2)
        try:
            service = LeaderboardService(db, cache_ttl=300)
            leader = (await service.get_leaderboard())[0]

            await AdminOperations(db).award_bonus(leader.player_id, 100)
            assert (await service.get_player_entry(leader.player_id)).total_points == leader.total_points

            await service.clear_cache()
            assert (await service.get_player_entry(leader.player_id)).total_points == leader.total_points + 100
        finally:
            await db.close()

    asyncio.run(scenario())


def test_empty_board_without_active_cycle():
    async def scenario():
        db = Database("sqlite+aiosqlite:///:memory:")
        await db.initialize()
        try:
            service = LeaderboardService(db)
            page = await service.get_page()
            assert page.entries == []
            assert page.total_pages == 1
            assert page.cycle_name is None
            assert await service.get_player_entry(1) is None
        finally:
            await db.close()

    asyncio.run(scenario())


def test_rate_limiter_window():
    async def scenario():
        limiter = SimpleRateLimiter()
        assert await limiter.is_allowed(1, "checkin", limit=2, window=60)
        assert await limiter.is_allowed(1, "checkin", limit=2, window=60)
        assert not await limiter.is_allowed(1, "checkin", limit=2, window=60)
        # Separate keys per user and per command
        assert await limiter.is_allowed(2, "checkin", limit=2, window=60)
        assert await limiter.is_allowed(1, "leaderboard", limit=2, window=60)

        await limiter.reset(1, "checkin")
        assert await limiter.is_allowed(1, "checkin", limit=2, window=60)
        assert not await limiter.is_allowed(1, "checkin", limit=0, window=60)

    asyncio.run(scenario())


def test_rate_limiter_drops_idle_keys(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr("arena.services.rate_limiter.time.time", lambda: clock[0])

    async def scenario():
        limiter = SimpleRateLimiter()
        for user_id in range(5):
            assert await limiter.is_allowed(user_id, "checkin", limit=1, window=60)
        assert len(limiter._requests) == 5

        clock[0] += 61
        assert await limiter.is_allowed(99, "leaderboard", limit=1, window=60)
        assert list(limiter._requests) == ["99:leaderboard"]

    asyncio.run(scenario())
