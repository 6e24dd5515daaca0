#!/usr/bin/env python3
"""
Player roster population.

Standalone script that loads the team roster CSV into the arena database and
opens the first competition cycle when none is active.

CSV columns: Name, Email, Discord ID, Remote, Admin
(Discord ID may be blank; Remote/Admin accept yes/no, true/false, 1/0)

Usage:
    python populate_players.py roster.csv --cycle-name "January - June 2026" --cycle-start 2026-01-01
"""

import os
import sys
import csv
import asyncio
import argparse
import logging
from typing import Dict, Optional
from datetime import datetime

from arena.database.database import Database
from arena.operations import CycleOperations, PlayerOperations
from arena.utils.arena_exceptions import ArenaException, DuplicatePlayerError
from arena.utils.check_in import parse_date

TRUE_VALUES = {'yes', 'y', 'true', '1', 'x'}


def setup_logging() -> logging.Logger:
    """Setup logging for the population script"""
    os.makedirs('logs', exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(f'logs/player_population_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'),
            logging.StreamHandler()
        ]
    )
    return logging.getLogger(__name__)


def parse_flag(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in TRUE_VALUES


def parse_discord_id(value: Optional[str]) -> Optional[int]:
    value = (value or '').strip()
    return int(value) if value.isdigit() else None


async def populate_players(
    db: Database,
    csv_path: str,
    cycle_name: Optional[str] = None,
    cycle_start: Optional[str] = None
) -> Dict[str, int]:
    """
    Register every roster row and open the first cycle.

    Rows with a duplicate email or Discord ID are skipped, so the script can
    be re-run after adding people to the roster.

    Returns:
        Dictionary with counts of created and skipped records
    """
    logger = logging.getLogger(__name__)

    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    player_ops = PlayerOperations(db)
    cycle_ops = CycleOperations(db)
    results = {'players_created': 0, 'players_skipped': 0, 'cycles_created': 0}

    with open(csv_path, 'r', encoding='utf-8') as file:
        reader = csv.DictReader(file)
        for row_num, row in enumerate(reader, start=2):  # Start at 2 for CSV line numbers
            name = (row.get('Name') or '').strip()
            email = (row.get('Email') or '').strip()
            if not name and not email:
                logger.debug(f"Line {row_num}: Skipping empty row")
                continue

            try:
                await player_ops.register_player(
                    name=name,
                    email=email,
                    discord_id=parse_discord_id(row.get('Discord ID')),
                    remote=parse_flag(row.get('Remote')),
                    is_admin=parse_flag(row.get('Admin'))
                )
                results['players_created'] += 1
            except DuplicatePlayerError:
                logger.info(f"Line {row_num}: {email} already registered, skipping")
                results['players_skipped'] += 1
            except ArenaException as e:
                logger.warning(f"Line {row_num}: {e}")
                results['players_skipped'] += 1

    if await db.get_active_cycle() is None:
        start_date = parse_date(cycle_start) if cycle_start else datetime.now().date()
        cycle = await cycle_ops.start_cycle(cycle_name or f"Cycle starting {start_date:%B %Y}", start_date)
        results['cycles_created'] = 1
        logger.info(f"Opened cycle '{cycle.name}' ({cycle.start_date} to {cycle.end_date})")
    else:
        logger.info("An active cycle already exists; leaving it unchanged")

    logger.info(
        f"Population complete: {results['players_created']} players created, "
        f"{results['players_skipped']} skipped"
    )
    return results


async def main():
    """Main entry point for standalone script execution"""
    parser = argparse.ArgumentParser(description="Load the arena player roster")
    parser.add_argument('csv_path', help="Roster CSV (Name, Email, Discord ID, Remote, Admin)")
    parser.add_argument('--cycle-name', help="Name for the first cycle")
    parser.add_argument('--cycle-start', help="First cycle start date (YYYY-MM-DD); defaults to today")
    args = parser.parse_args()

    logger = setup_logging()
    db = Database()

    try:
        await db.initialize()
        logger.info("Starting player population script...")
        results = await populate_players(db, args.csv_path, args.cycle_name, args.cycle_start)

        print("\n" + "="*50)
        print("PLAYER POPULATION COMPLETED SUCCESSFULLY")
        print("="*50)
        print(f"Players created: {results['players_created']}")
        print(f"Players skipped: {results['players_skipped']}")
        print(f"Cycles created: {results['cycles_created']}")
        print("="*50)

    except Exception as e:
        logger.error(f"Player population failed: {e}")
        print(f"\nERROR: {e}")
        sys.exit(1)
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())
