import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from arena.config import Config
from arena.database.database import Database
from arena.operations import AdminOperations, CycleOperations, PlayerOperations, SubmissionOperations
from arena.services.bonus_service import BonusService
from arena.services.leaderboard import LeaderboardService
from arena.services.rate_limiter import SimpleRateLimiter
from arena.utils.arena_exceptions import ArenaException
from arena.utils.error_embeds import ErrorEmbeds
from arena.utils.logger import setup_logger

class ArenaBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )

        # Attach app command error handler
        self.tree.on_error = self.on_app_command_error

        self.db: Optional[Database] = None
        self.rate_limiter = SimpleRateLimiter()
        self.leaderboard_service: Optional[LeaderboardService] = None
        self.bonus_service: Optional[BonusService] = None
        self.player_ops: Optional[PlayerOperations] = None
        self.cycle_ops: Optional[CycleOperations] = None
        self.submission_ops: Optional[SubmissionOperations] = None
        self.admin_ops: Optional[AdminOperations] = None
        self.logger = setup_logger(__name__)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up Arena Bot...")

        self.db = Database()
        await self.db.initialize()

        # Services and operations are shared so every cog sees one leaderboard cache
        self.leaderboard_service = LeaderboardService(self.db)
        self.bonus_service = BonusService(self.db)
        self.player_ops = PlayerOperations(self.db)
        self.cycle_ops = CycleOperations(self.db)
        self.submission_ops = SubmissionOperations(self.db)
        self.admin_ops = AdminOperations(self.db)

        await self.load_cogs()
        await self._sync_commands()

        self.logger.info("Arena Bot setup complete!")

    async def load_cogs(self):
        """Load all cogs"""
        cogs_to_load = [
            'arena.cogs.leaderboard',
            'arena.cogs.checkin',
            'arena.cogs.submissions',
            'arena.cogs.admin',
        ]

        for cog in cogs_to_load:
            try:
                await self.load_extension(cog)
                self.logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                self.logger.error(f"Failed to load cog {cog}: {e}", exc_info=True)

    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        if not self.tree.get_commands():
            self.logger.warning("No application commands found to sync. Check for cog loading errors.")
            return

        try:
            guild_ids = Config.get_guild_ids()

            if guild_ids:
                # Guild-specific sync (instant updates, works in specified servers)
                self.logger.info(f"Attempting to sync commands to {len(guild_ids)} guild(s): {guild_ids}...")

                total_synced = 0
                for guild_id in guild_ids:
                    try:
                        guild = discord.Object(id=guild_id)
                        self.tree.copy_global_to(guild=guild)
                        synced = await self.tree.sync(guild=guild)
                        self.logger.info(f"Synced {len(synced)} command(s) to guild {guild_id}")
                        total_synced += len(synced)
                    except discord.errors.Forbidden:
                        self.logger.error(
                            f"Permission error syncing to guild {guild_id}. Ensure the bot has the "
                            f"'application.commands' scope and is in the guild.", exc_info=True
                        )
                    except discord.errors.HTTPException as e:
                        self.logger.error(f"HTTP error syncing to guild {guild_id}. Status: {e.status}, Response: {e.text}", exc_info=True)

                self.logger.info(f"Multi-guild sync complete: {total_synced} total command instances deployed")
            else:
                # Global sync (can take up to 1 hour, works everywhere)
                self.logger.info("Attempting to sync commands globally... (Note: This can take up to an hour to propagate)")
                synced = await self.tree.sync()
                self.logger.info(f"Synced {len(synced)} command(s) globally")
        except Exception as e:
            self.logger.error(f"Failed to sync commands: {e}", exc_info=True)

    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'{self.user} has connected to Discord!')
        self.logger.info(f'Bot is in {len(self.guilds)} guilds')

        await self.change_presence(
            activity=discord.Game(name="Arena | /leaderboard")
        )

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for slash commands"""
        command_name = interaction.command.name if interaction.command else 'Unknown'
        original = getattr(error, 'original', error)

        if isinstance(original, ArenaException):
            self.logger.info(f"Command '{command_name}' by {interaction.user} rejected: {original}")
            error_embed = ErrorEmbeds.from_exception(original)
        elif isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{command_name}' by user {interaction.user}")
            error_embed = ErrorEmbeds.permission_denied()
        elif isinstance(error, app_commands.CommandOnCooldown):
            error_embed = ErrorEmbeds.invalid_input(f"Command is on cooldown. Try again in {error.retry_after:.0f} seconds.")
        else:
            self.logger.error(f"Error in app command '{command_name}': {error}", exc_info=True)
            error_embed = ErrorEmbeds.command_error("An unexpected error occurred while processing your command.")

        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=error_embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=error_embed, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send error response: {e}")

    async def on_command_error(self, ctx: commands.Context, error: Exception):
        """Global error handler for prefix commands"""
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{ctx.command.name if ctx.command else 'Unknown'}' by user {ctx.author}")
            await ctx.send(embed=ErrorEmbeds.permission_denied())
            return

        self.logger.error(f"Unexpected error in command {ctx.command}: {error}")
        self.logger.error(''.join(traceback.format_exception(type(error), error, error.__traceback__)))
        await ctx.send(embed=ErrorEmbeds.command_error("An unexpected error occurred while processing your command."))

    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down Arena Bot...")

        if self.db:
            await self.db.close()

        await super().close()

async def main():
    """Main entry point"""
    Config.validate()

    bot = ArenaBot()

    try:
        await bot.start(Config.DISCORD_TOKEN)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
    finally:
        await bot.close()

def run():
    """Console script entry point"""
    asyncio.run(main())

if __name__ == "__main__":
    run()
