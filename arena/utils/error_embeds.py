"""
Centralized error embeds for consistent error handling across the arena bot.
"""

import discord

from arena.utils.arena_exceptions import ArenaException


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    @staticmethod
    def from_exception(error: ArenaException) -> discord.Embed:
        """Embed carrying a domain exception's user-facing message."""
        return discord.Embed(
            title="Can't Do That",
            description=error.user_message,
            color=discord.Color.red()
        )

    @staticmethod
    def not_registered() -> discord.Embed:
        return discord.Embed(
            title="Not Registered",
            description="You haven't joined the arena yet!\n\nUse `/join` with your work email to register.",
            color=discord.Color.red()
        )

    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return discord.Embed(
            title="Command Error",
            description=f"An error occurred: {error}\n\nPlease try again or contact an administrator.",
            color=discord.Color.red()
        )

    @staticmethod
    def invalid_input(message: str) -> discord.Embed:
        return discord.Embed(
            title="Invalid Input",
            description=message,
            color=discord.Color.red()
        )

    @staticmethod
    def permission_denied() -> discord.Embed:
        """Create embed for permission errors."""
        return discord.Embed(
            title="Permission Denied",
            description="Only arena admins can use this command.",
            color=discord.Color.red()
        )

    @staticmethod
    def no_active_cycle() -> discord.Embed:
        return discord.Embed(
            title="No Active Cycle",
            description="There is no active competition cycle yet. An admin can start one with `/admin-cycle-start`.",
            color=discord.Color.orange()
        )
