import re
import discord
from discord.ext import commands
from discord import app_commands
from typing import List, Optional

from arena.config import Config
from arena.constants import CategoryConstants, PointConstants
from arena.utils.arena_exceptions import ArenaException, PlayerNotFoundError
from arena.utils.check_in import local_now, parse_date
from arena.utils.embeds import build_bonuses_embed
from arena.utils.error_embeds import ErrorEmbeds
from arena.utils.logger import setup_logger

logger = setup_logger(__name__)

MENTION_PATTERN = re.compile(r'<@!?(\d+)>')


async def is_arena_admin(interaction: discord.Interaction) -> bool:
    """Bot owner or a player flagged as admin"""
    if Config.OWNER_DISCORD_ID and interaction.user.id == Config.OWNER_DISCORD_ID:
        return True
    return await interaction.client.player_ops.is_admin(interaction.user.id)


ACTIVITY_CHOICES = [
    app_commands.Choice(name=label, value=key) for key, label in CategoryConstants.ACTIVITY_TYPES.items()
]
PENALTY_CHOICES = [
    app_commands.Choice(name=reason.replace('_', ' ').title(), value=reason)
    for reason in CategoryConstants.PENALTY_REASONS
]
AWARD_CHOICES = [
    app_commands.Choice(name=kind.replace('_', ' ').title(), value=kind) for kind in CategoryConstants.AWARD_KINDS
]
BOOK_CATEGORY_CHOICES = [
    app_commands.Choice(name=category.replace('_', ' ').title(), value=category)
    for category in CategoryConstants.BOOK_CATEGORIES
]


class AdminCog(commands.Cog):
    """Admin-only data entry, verification and bonus commands"""

    def __init__(self, bot):
        self.bot = bot
        self.admin_ops = bot.admin_ops
        self.logger = logger

    def cog_check(self, ctx):
        """Prefix commands are owner only"""
        return ctx.author.id == Config.OWNER_DISCORD_ID

    @commands.command(name='reload')
    async def reload_cog(self, ctx, cog_name: str):
        """Reload a specific cog (Owner only)"""
        try:
            await self.bot.reload_extension(f'arena.cogs.{cog_name}')
            await ctx.send(f"✅ Reloaded `{cog_name}` cog successfully.")
        except commands.ExtensionError as e:
            await ctx.send(f"❌ Failed to reload `{cog_name}`: {e}")

    async def _player_id(self, member: discord.abc.User) -> int:
        player = await self.bot.player_ops.get_player_by_discord_id(member.id)
        return player.id

    async def _player_ids_from_mentions(self, mentions: str) -> List[int]:
        """Resolve a string of @mentions to player ids, keeping order."""
        player_ids = []
        for discord_id in dict.fromkeys(MENTION_PATTERN.findall(mentions or '')):
            player = await self.bot.player_ops.get_player_by_discord_id(int(discord_id))
            player_ids.append(player.id)
        return player_ids

    async def _done(self, interaction: discord.Interaction, title: str, description: str):
        await self.bot.leaderboard_service.clear_cache()
        await interaction.followup.send(
            embed=discord.Embed(title=f"✅ {title}", description=description, color=discord.Color.green()),
            ephemeral=True
        )

    async def _fail(self, interaction: discord.Interaction, command: str, error: Exception):
        if isinstance(error, PlayerNotFoundError):
            embed = ErrorEmbeds.invalid_input("One of the selected members hasn't joined the arena yet.")
        elif isinstance(error, ArenaException):
            embed = ErrorEmbeds.from_exception(error)
        elif isinstance(error, ValueError):
            embed = ErrorEmbeds.invalid_input(str(error))
        else:
            self.logger.error(f"Error in {command}: {error}", exc_info=True)
            embed = ErrorEmbeds.command_error(f"/{command} failed.")
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="admin-cycle-start", description="Start a new competition cycle")
    @app_commands.describe(
        name="Cycle name, e.g. 'January - June 2026'",
        start_date="First day (YYYY-MM-DD)",
        end_date="Last day (YYYY-MM-DD); defaults to six months"
    )
    @app_commands.check(is_arena_admin)
    async def cycle_start(self, interaction: discord.Interaction, name: str, start_date: str, end_date: Optional[str] = None):
        await interaction.response.defer(ephemeral=True)
        try:
            cycle = await self.bot.cycle_ops.start_cycle(
                name, parse_date(start_date), parse_date(end_date) if end_date else None
            )
            self.logger.info(f"{interaction.user} started cycle {cycle.id}")
            await self._done(
                interaction, "Cycle Started",
                f"**{cycle.name}** runs {cycle.start_date} to {cycle.end_date}. Every other cycle is now closed."
            )
        except Exception as e:
            await self._fail(interaction, "admin-cycle-start", e)

    @app_commands.command(name="admin-player-edit", description="Edit a player's name, remote or admin flag")
    @app_commands.check(is_arena_admin)
    async def player_edit(
        self,
        interaction: discord.Interaction,
        member: discord.Member,
        name: Optional[str] = None,
        remote: Optional[bool] = None,
        is_admin: Optional[bool] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.player_ops.update_player(
                await self._player_id(member), name=name, remote=remote, is_admin=is_admin
            )
            await self._done(
                interaction, "Player Updated",
                f"**{player.name}**: remote={player.remote}, admin={player.is_admin}"
            )
        except Exception as e:
            await self._fail(interaction, "admin-player-edit", e)

    @app_commands.command(name="admin-attendance", description="Record attendance for several players")
    @app_commands.describe(
        players="@mention everyone who attended",
        early_birds="@mention the early birds among them",
        date="Meeting date (YYYY-MM-DD); defaults to today"
    )
    @app_commands.check(is_arena_admin)
    async def attendance(
        self,
        interaction: discord.Interaction,
        players: str,
        early_birds: Optional[str] = None,
        date: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            check_in_date = parse_date(date) if date else local_now().date()
            result = await self.admin_ops.record_attendance(
                await self._player_ids_from_mentions(players),
                check_in_date,
                early_bird_ids=await self._player_ids_from_mentions(early_birds),
                recorded_by=str(interaction.user)
            )
            description = f"{len(result.created)} recorded for {check_in_date}."
            if result.skipped:
                description += f"\n{len(result.skipped)} were already checked in and were skipped."
            await self._done(interaction, "Attendance Recorded", description)
        except Exception as e:
            await self._fail(interaction, "admin-attendance", e)

    @app_commands.command(name="admin-presentation", description="Log a presentation")
    @app_commands.describe(
        topic="Presentation topic",
        presenter="Lead presenter",
        second_presenter="Second presenter for a pair presentation",
        date="Presentation date (YYYY-MM-DD); defaults to today"
    )
    @app_commands.check(is_arena_admin)
    async def presentation(
        self,
        interaction: discord.Interaction,
        topic: str,
        presenter: discord.Member,
        second_presenter: Optional[discord.Member] = None,
        date: Optional[str] = None,
        slides_url: Optional[str] = None,
        recording_url: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            created = await self.admin_ops.log_presentation(
                topic,
                parse_date(date) if date else local_now().date(),
                await self._player_id(presenter),
                await self._player_id(second_presenter) if second_presenter else None,
                slides_url=slides_url,
                recording_url=recording_url
            )
            members = [presenter, second_presenter]
            lines = [f"{member.mention}: +{record.points}" for member, record in zip(members, created)]
            await self._done(interaction, "Presentation Logged", f"**{topic}**\n" + "\n".join(lines))
        except Exception as e:
            await self._fail(interaction, "admin-presentation", e)

    @app_commands.command(name="admin-activity", description="Log an activity and its attendees")
    @app_commands.describe(
        activity_type="Kind of activity",
        attendees="@mention everyone who took part",
        top_performer="Winner / top performer",
        double_points="Attendee using their once-per-cycle double points",
        date="Activity date (YYYY-MM-DD); defaults to today",
        name="Custom name, e.g. 'Padel Tournament #3'"
    )
    @app_commands.choices(activity_type=ACTIVITY_CHOICES)
    @app_commands.check(is_arena_admin)
    async def activity(
        self,
        interaction: discord.Interaction,
        activity_type: str,
        attendees: str,
        top_performer: Optional[discord.Member] = None,
        double_points: Optional[discord.Member] = None,
        date: Optional[str] = None,
        name: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            activity = await self.admin_ops.log_activity(
                activity_type,
                await self._player_ids_from_mentions(attendees),
                top_performer_id=await self._player_id(top_performer) if top_performer else None,
                double_points_player_id=await self._player_id(double_points) if double_points else None,
                activity_date=parse_date(date) if date else local_now().date(),
                name=name
            )
            description = f"**{activity.name}** (#{activity.id}) with {len(activity.participations)} attendees."
            if top_performer:
                description += f"\n🏆 Top performer: {top_performer.mention}"
            if double_points:
                description += f"\n✨ Double points: {double_points.mention}"
            await self._done(interaction, "Activity Logged", description)
        except Exception as e:
            await self._fail(interaction, "admin-activity", e)

    @app_commands.command(name="admin-double-points", description="Apply double points to an existing participation")
    @app_commands.describe(participation_id="Participation record number")
    @app_commands.check(is_arena_admin)
    async def double_points(self, interaction: discord.Interaction, participation_id: int):
        await interaction.response.defer(ephemeral=True)
        try:
            participation = await self.admin_ops.apply_double_points(participation_id)
            await self._done(
                interaction, "Double Points Applied",
                f"Participation #{participation.id} now counts double. That's this player's one use this cycle."
            )
        except Exception as e:
            await self._fail(interaction, "admin-double-points", e)

    @app_commands.command(name="admin-penalty", description="Deduct points from a player")
    @app_commands.choices(reason=PENALTY_CHOICES)
    @app_commands.check(is_arena_admin)
    async def penalty(
        self,
        interaction: discord.Interaction,
        member: discord.Member,
        points: int,
        reason: str = 'other',
        description: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            penalty = await self.admin_ops.add_penalty(await self._player_id(member), points, reason, description)
            await self._done(interaction, "Penalty Recorded", f"{member.mention}: {penalty.points} ({reason})")
        except Exception as e:
            await self._fail(interaction, "admin-penalty", e)

    @app_commands.command(name="admin-verify", description="Verify a submitted course, book or idea")
    @app_commands.describe(
        record_type="What to verify",
        record_id="Record number",
        points=f"Vote result for ideas ({PointConstants.IDEA_MIN}-{PointConstants.IDEA_MAX})"
    )
    @app_commands.choices(record_type=[
        app_commands.Choice(name="Course", value="course"),
        app_commands.Choice(name="Book", value="book"),
        app_commands.Choice(name="Idea", value="idea"),
    ])
    @app_commands.check(is_arena_admin)
    async def verify(self, interaction: discord.Interaction, record_type: str, record_id: int, points: Optional[int] = None):
        await interaction.response.defer(ephemeral=True)
        try:
            if record_type == 'course':
                await self.admin_ops.verify_course(record_id)
            elif record_type == 'book':
                await self.admin_ops.verify_book(record_id)
            else:
                await self.admin_ops.verify_idea(record_id, points)
            await self._done(interaction, "Verified", f"{record_type.title()} #{record_id} now counts.")
        except Exception as e:
            await self._fail(interaction, "admin-verify", e)

    @app_commands.command(name="admin-award", description="Award bonus points to a player")
    @app_commands.choices(kind=AWARD_CHOICES)
    @app_commands.check(is_arena_admin)
    async def award(
        self,
        interaction: discord.Interaction,
        member: discord.Member,
        points: int,
        kind: str = 'top_performer',
        reason: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            award = await self.admin_ops.award_bonus(
                await self._player_id(member), points, kind, reason, awarded_by=str(interaction.user)
            )
            await self._done(interaction, "Bonus Awarded", f"{member.mention}: +{award.points} ({kind})")
        except Exception as e:
            await self._fail(interaction, "admin-award", e)

    @app_commands.command(name="admin-book-catalog-add", description="Add a book to the arena library")
    @app_commands.choices(category=BOOK_CATEGORY_CHOICES)
    @app_commands.check(is_arena_admin)
    async def book_catalog_add(
        self,
        interaction: discord.Interaction,
        name: str,
        author: Optional[str] = None,
        category: Optional[str] = None,
        points_per_10_pages: int = PointConstants.DEFAULT_POINTS_PER_10_PAGES
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            entry = await self.admin_ops.add_catalog_book(name, author, category, points_per_10_pages)
            await self._done(
                interaction, "Book Added",
                f"**{entry.name}** (#{entry.id}) earns {entry.points_per_10_pages} per 10 pages."
            )
        except Exception as e:
            await self._fail(interaction, "admin-book-catalog-add", e)

    @app_commands.command(name="admin-bonuses", description="Preview streak and attendance champion bonuses")
    @app_commands.check(is_arena_admin)
    async def bonuses(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)
        try:
            streaks = await self.bot.bonus_service.suggest_streaks()
            champion = await self.bot.bonus_service.suggest_champion()
            names = {player.id: player.name for player in await self.bot.db.get_all_players()}
            await interaction.followup.send(embed=build_bonuses_embed(streaks, champion, names), ephemeral=True)
        except Exception as e:
            await self._fail(interaction, "admin-bonuses", e)

    @app_commands.command(name="admin-apply-streaks", description="Award the current streak bonuses")
    @app_commands.check(is_arena_admin)
    async def apply_streaks(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)
        try:
            applied = await self.bot.bonus_service.apply_streak_bonuses(awarded_by=str(interaction.user))
            total = sum(s.bonus_points for s in applied)
            await self._done(
                interaction, "Streak Bonuses Applied",
                f"{len(applied)} players, {total} points in total. Earlier streak awards were replaced."
            )
        except Exception as e:
            await self._fail(interaction, "admin-apply-streaks", e)

    @app_commands.command(name="admin-apply-champion", description="Award the attendance champion bonus")
    @app_commands.describe(member="Pick among tied players; defaults to the suggested champion")
    @app_commands.check(is_arena_admin)
    async def apply_champion(self, interaction: discord.Interaction, member: Optional[discord.Member] = None):
        await interaction.response.defer(ephemeral=True)
        try:
            champion = await self.bot.bonus_service.apply_champion_bonus(
                player_id=await self._player_id(member) if member else None,
                awarded_by=str(interaction.user)
            )
            if champion is None:
                await interaction.followup.send(
                    embed=ErrorEmbeds.invalid_input("Nobody has checked in this cycle yet."), ephemeral=True
                )
                return
            await self._done(
                interaction, "Champion Bonus Applied",
                f"Player #{champion.player_id} earns +{champion.bonus_points} for {champion.attendance_count} check-ins."
            )
        except Exception as e:
            await self._fail(interaction, "admin-apply-champion", e)


async def setup(bot):
    await bot.add_cog(AdminCog(bot))
