"""
Player Operations Module

Business logic for Player lifecycle: self-registration through Discord and
admin edits. Players are never hard-deleted because achievement records
reference them.
"""

import re
from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database.models import Player
from arena.operations.base import BaseOperations
from arena.utils.arena_exceptions import DuplicatePlayerError, RecordValidationError
from arena.utils.logger import setup_logger

logger = setup_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class PlayerOperations(BaseOperations):
    """Registration and admin maintenance of Player records."""

    def _validate_registration(self, name: str, email: str):
        if not name or not name.strip():
            raise RecordValidationError('name', "Player name cannot be empty.")
        if len(name.strip()) > 255:
            raise RecordValidationError('name', "Player name must be 255 characters or fewer.")
        if not email or not EMAIL_PATTERN.match(email.strip()):
            raise RecordValidationError('email', f"'{email}' is not a valid email address.")

    async def register_player(
        self,
        name: str,
        email: str,
        discord_id: Optional[int] = None,
        remote: bool = False,
        is_admin: bool = False,
        session: Optional[AsyncSession] = None
    ) -> Player:
        """
        Register a new player.

        Args:
            name: Display name
            email: Unique email address (stored lower-case)
            discord_id: Linked Discord account, if any
            remote: Whether attendance points are doubled for this player
            is_admin: Whether the player can use admin commands

        Raises:
            RecordValidationError: If the name or email is invalid
            DuplicatePlayerError: If the email or Discord account is already registered.
                A roster row with this email and no Discord account is linked
                and returned instead.
        """
        self._validate_registration(name, email)
        email = email.strip().lower()

        async with self._get_session_context(session) as s:
            conditions = [Player.email == email]
            if discord_id is not None:
                conditions.append(Player.discord_id == discord_id)
            matches = (await s.execute(select(Player).where(or_(*conditions)))).scalars().all()

            # A roster row loaded without a Discord account is claimed by the first /join
            if (
                discord_id is not None
                and len(matches) == 1
                and matches[0].email == email
                and matches[0].discord_id is None
            ):
                roster_player = matches[0]
                roster_player.discord_id = discord_id
                await s.flush()
                logger.info(f"Linked Discord account {discord_id} to roster Player {roster_player.id}")
                return roster_player

            if matches:
                existing = matches[0]
                raise DuplicatePlayerError(email if existing.email == email else existing.name)

            player = Player(
                name=name.strip(),
                email=email,
                discord_id=discord_id,
                remote=remote,
                is_admin=is_admin
            )
            s.add(player)
            try:
                await s.flush()
            except IntegrityError as e:
                raise DuplicatePlayerError(email) from e

            logger.info(f"Registered Player {player.id} ({player.name}, remote={remote})")
            return player

    async def get_player_by_discord_id(self, discord_id: int, session: Optional[AsyncSession] = None) -> Player:
        """
        Raises:
            PlayerNotFoundError: If no player is linked to the Discord account
        """
        async with self._get_session_context(session) as s:
            return await self._require_player_by_discord_id(s, discord_id)

    async def update_player(
        self,
        player_id: int,
        name: Optional[str] = None,
        remote: Optional[bool] = None,
        is_admin: Optional[bool] = None,
        session: Optional[AsyncSession] = None
    ) -> Player:
        """Admin edit of a player's name and flags; None leaves a field unchanged."""
        async with self._get_session_context(session) as s:
            player = await self._require_player(s, player_id)

            if name is not None:
                if not name.strip():
                    raise RecordValidationError('name', "Player name cannot be empty.")
                player.name = name.strip()
            if remote is not None:
                player.remote = remote
            if is_admin is not None:
                player.is_admin = is_admin

            await s.flush()
            logger.info(
                f"Updated Player {player.id}: name='{player.name}', remote={player.remote}, "
                f"is_admin={player.is_admin}"
            )
            return player

    async def is_admin(self, discord_id: int) -> bool:
        """Whether the Discord account belongs to an admin player"""
        async with self.db.get_session() as s:
            result = await s.execute(select(Player.is_admin).where(Player.discord_id == discord_id))
            return bool(result.scalar_one_or_none())
