import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional
import logging

from arena.constants import PaginationConstants
from arena.services.rate_limiter import rate_limit
from arena.utils.arena_exceptions import ArenaException, PlayerNotFoundError
from arena.utils.embeds import build_achievements_embed, build_leaderboard_embed, build_rules_embed
from arena.utils.error_embeds import ErrorEmbeds
from arena.views.leaderboard import LeaderboardView

logger = logging.getLogger(__name__)

class LeaderboardCog(commands.Cog):
    """Leaderboard, personal breakdown and scoring rules"""

    def __init__(self, bot):
        self.bot = bot
        self.leaderboard_service = bot.leaderboard_service

    @app_commands.command(name="leaderboard", description="View the arena leaderboard for the current cycle")
    @rate_limit("leaderboard", limit=5, window=60)
    async def leaderboard(self, interaction: discord.Interaction):
        """Display the first page of the leaderboard with pagination."""
        await interaction.response.defer()

        try:
            page_data = await self.leaderboard_service.get_page(
                page=1,
                page_size=PaginationConstants.DEFAULT_PAGE_SIZE
            )
            embed = build_leaderboard_embed(page_data)
            view = LeaderboardView(
                leaderboard_service=self.leaderboard_service,
                current_page=1,
                total_pages=page_data.total_pages
            )
            await interaction.followup.send(embed=embed, view=view)

        except ValueError as e:
            await interaction.followup.send(embed=ErrorEmbeds.invalid_input(str(e)))
        except Exception as e:
            logger.error(f"Error in leaderboard command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while fetching leaderboard data. Please try again later."))

    @app_commands.command(name="achievements", description="See a per-category points breakdown")
    @app_commands.describe(member="The player to look up (defaults to you)")
    @rate_limit("achievements", limit=5, window=60)
    async def achievements(self, interaction: discord.Interaction, member: Optional[discord.Member] = None):
        await interaction.response.defer(ephemeral=member is None)
        target = member or interaction.user

        try:
            player = await self.bot.player_ops.get_player_by_discord_id(target.id)
            cycle_name, entries = await self.leaderboard_service.get_standings()
            entry = next((e for e in entries if e.player_id == player.id), None)
            if entry is None:
                await interaction.followup.send(embed=ErrorEmbeds.no_active_cycle(), ephemeral=True)
                return

            embed = build_achievements_embed(entry, len(entries), cycle_name, target)
            await interaction.followup.send(embed=embed)

        except PlayerNotFoundError:
            if member is None:
                await interaction.followup.send(embed=ErrorEmbeds.not_registered(), ephemeral=True)
            else:
                await interaction.followup.send(
                    embed=ErrorEmbeds.invalid_input(f"{member.mention} hasn't joined the arena yet."),
                    ephemeral=True
                )
        except ArenaException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
        except Exception as e:
            logger.error(f"Error in achievements command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("Could not load achievements."), ephemeral=True)

    @app_commands.command(name="rules", description="How arena points are earned")
    async def rules(self, interaction: discord.Interaction):
        await interaction.response.send_message(embed=build_rules_embed(), ephemeral=True)


async def setup(bot):
    await bot.add_cog(LeaderboardCog(bot))
