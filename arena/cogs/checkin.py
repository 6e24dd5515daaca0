import discord
from discord import app_commands
from discord.ext import commands
import logging
from typing import Optional

from arena.services.rate_limiter import rate_limit
from arena.utils.arena_exceptions import ArenaException, PlayerNotFoundError
from arena.utils.error_embeds import ErrorEmbeds

logger = logging.getLogger(__name__)

class CheckInCog(commands.Cog):
    """Registration and weekly check-in"""

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="join", description="Join the arena with your work email")
    @app_commands.describe(
        email="Your work email address",
        name="Display name on the leaderboard (defaults to your server name)",
        remote="Are you a remote team member?"
    )
    @rate_limit("join", limit=3, window=60)
    async def join(self, interaction: discord.Interaction, email: str, name: Optional[str] = None, remote: bool = False):
        await interaction.response.defer(ephemeral=True)

        try:
            player = await self.bot.player_ops.register_player(
                name=name or interaction.user.display_name,
                email=email,
                discord_id=interaction.user.id,
                remote=remote
            )
            await self.bot.leaderboard_service.clear_cache()

            embed = discord.Embed(
                title="🎉 Welcome to the Arena!",
                description=(
                    f"You're registered as **{player.name}**.\n"
                    f"Use `/checkin` every week and `/rules` to see how to earn points."
                ),
                color=discord.Color.green()
            )
            await interaction.followup.send(embed=embed, ephemeral=True)

        except ArenaException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
        except Exception as e:
            logger.error(f"Error in join command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("Registration failed."), ephemeral=True)

    @app_commands.command(name="checkin", description="Check in for this week's meeting")
    @rate_limit("checkin", limit=3, window=60)
    async def checkin(self, interaction: discord.Interaction):
        """Record attendance for the most recent meeting day."""
        await interaction.response.defer(ephemeral=True)

        try:
            player = await self.bot.player_ops.get_player_by_discord_id(interaction.user.id)
            attendance = await self.bot.submission_ops.check_in(player.id)
            await self.bot.leaderboard_service.clear_cache()

            description = f"Checked in for **{attendance.check_in_date:%A, %d %b %Y}**."
            if attendance.is_early_bird:
                description += "\n🐦 Early bird bonus earned!"
            if player.remote:
                description += "\n🏠 Remote attendance counts double."

            await interaction.followup.send(
                embed=discord.Embed(title="✅ Checked In", description=description, color=discord.Color.green()),
                ephemeral=True
            )

        except PlayerNotFoundError:
            await interaction.followup.send(embed=ErrorEmbeds.not_registered(), ephemeral=True)
        except ArenaException as e:
            await interaction.followup.send(embed=ErrorEmbeds.from_exception(e), ephemeral=True)
        except Exception as e:
            logger.error(f"Error in checkin command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("Check-in failed."), ephemeral=True)


async def setup(bot):
    await bot.add_cog(CheckInCog(bot))
