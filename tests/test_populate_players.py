"""
Roster CSV population script.
"""

import asyncio

from arena.database.database import Database
from populate_players import parse_discord_id, parse_flag, populate_players

ROSTER = """Name,Email,Discord ID,Remote,Admin
Nour Hassan,nour@incrypt.test,111111111111111111,no,yes
Ahmed Ali,ahmed@incrypt.test,,yes,
Duplicate,NOUR@incrypt.test,,,
,,,,
Broken,not-an-email,,,
"""


def test_flag_and_id_parsing():
    assert parse_flag("Yes") and parse_flag("1") and parse_flag(" true ")
    assert not parse_flag("") and not parse_flag(None) and not parse_flag("no")
    assert parse_discord_id(" 42 ") == 42
    assert parse_discord_id("") is None


def test_populate_players_from_roster(tmp_path):
    csv_path = tmp_path / "roster.csv"
    csv_path.write_text(ROSTER, encoding="utf-8")

    async def scenario():
        db = Database("sqlite+aiosqlite:///:memory:")
        await db.initialize()
        try:
            results = await populate_players(db, str(csv_path), "January - June 2026", "2026-01-01")
            assert results == {'players_created': 2, 'players_skipped': 2, 'cycles_created': 1}

            players = {p.email: p for p in await db.get_all_players()}
            assert players['nour@incrypt.test'].is_admin
            assert players['nour@incrypt.test'].discord_id == 111111111111111111
            assert players['ahmed@incrypt.test'].remote

            # Re-running keeps the existing cycle
            again = await populate_players(db, str(csv_path))
            assert again['players_created'] == 0
            assert again['cycles_created'] == 0
            assert (await db.get_active_cycle()).name == "January - June 2026"
        finally:
            await db.close()

    asyncio.run(scenario())
