import discord
from discord import app_commands
from discord.ext import commands
from typing import List, Optional
import logging

from arena.constants import PointConstants
from arena.services.rate_limiter import rate_limit
from arena.utils.arena_exceptions import ArenaException, PlayerNotFoundError
from arena.utils.error_embeds import ErrorEmbeds
from arena.utils.points import PointCalculator

logger = logging.getLogger(__name__)

class SubmissionsCog(commands.Cog):
    """Blogs, courses, books and ideas submitted by players"""

    def __init__(self, bot):
        self.bot = bot

    async def _reply(self, interaction: discord.Interaction, title: str, description: str):
        await self.bot.leaderboard_service.clear_cache()
        await interaction.followup.send(
            embed=discord.Embed(title=title, description=description, color=discord.Color.green()),
            ephemeral=True
        )

    async def _handle_error(self, interaction: discord.Interaction, command: str, error: Exception):
        if isinstance(error, PlayerNotFoundError):
            embed = ErrorEmbeds.not_registered()
        elif isinstance(error, ArenaException):
            embed = ErrorEmbeds.from_exception(error)
        else:
            logger.error(f"Error in {command} command: {error}", exc_info=True)
            embed = ErrorEmbeds.command_error(f"Could not complete /{command}.")
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="blog-add", description="Submit a blog post you wrote")
    @app_commands.describe(title="Blog post title", url="Link to the published post")
    @rate_limit("blog-add", limit=3, window=60)
    async def blog_add(self, interaction: discord.Interaction, title: str, url: str):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.player_ops.get_player_by_discord_id(interaction.user.id)
            blog = await self.bot.submission_ops.add_blog(player.id, title, url)
            points = PointCalculator.blog_points(blog.is_first)
            note = " Congrats on your first blog!" if blog.is_first else ""
            await self._reply(interaction, "📝 Blog Added", f"**{blog.title}** earns you **{points}** points.{note}")
        except Exception as e:
            await self._handle_error(interaction, "blog-add", e)

    @app_commands.command(name="course-add", description="Submit a course for verification")
    @app_commands.describe(
        name="Course name",
        hours="Total course length in hours",
        completion="How much of the course you completed (0-100%)",
        course_url="Link to the course",
        notes_link="Link to your notes"
    )
    @rate_limit("course-add", limit=3, window=60)
    async def course_add(
        self,
        interaction: discord.Interaction,
        name: str,
        hours: app_commands.Range[float, 0.01, 999.99],
        completion: app_commands.Range[int, 0, 100],
        course_url: Optional[str] = None,
        notes_link: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.player_ops.get_player_by_discord_id(interaction.user.id)
            course = await self.bot.submission_ops.add_course(
                player.id, name, hours, completion, course_url=course_url, notes_link=notes_link
            )
            points = PointCalculator.course_points(course.total_hours, course.completion_percent)
            if completion < PointConstants.COURSE_MIN_COMPLETION:
                detail = f"Courses count from {PointConstants.COURSE_MIN_COMPLETION}% completion; update it when you get there."
            else:
                detail = f"Worth **{points}** points once an admin verifies it."
            await self._reply(interaction, "🎓 Course Submitted", f"**{course.name}** (#{course.id}). {detail}")
        except Exception as e:
            await self._handle_error(interaction, "course-add", e)

    @app_commands.command(name="book-add", description="Log reading progress on a library book")
    @app_commands.describe(book="Book from the arena library", pages_read="Pages you have read", notes_link="Link to your notes")
    @rate_limit("book-add", limit=3, window=60)
    async def book_add(
        self,
        interaction: discord.Interaction,
        book: int,
        pages_read: app_commands.Range[int, 0, 100000],
        notes_link: Optional[str] = None
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.player_ops.get_player_by_discord_id(interaction.user.id)
            record = await self.bot.submission_ops.add_book(player.id, book, pages_read, notes_link=notes_link)
            points = PointCalculator.book_points(record.pages_read, record.points_per_10_pages)
            await self._reply(
                interaction, "📚 Book Logged",
                f"**{record.title}** (#{record.id}), {pages_read} pages. Worth **{points}** points once verified."
            )
        except Exception as e:
            await self._handle_error(interaction, "book-add", e)

    @book_add.autocomplete('book')
    async def book_autocomplete(self, interaction: discord.Interaction, current: str) -> List[app_commands.Choice[int]]:
        catalog = await self.bot.db.get_book_catalog()
        current = current.lower()
        return [
            app_commands.Choice(name=entry.name[:100], value=entry.id)
            for entry in catalog
            if current in entry.name.lower()
        ][:25]

    @app_commands.command(name="book-update", description="Update pages read on a book you logged")
    @app_commands.describe(book_id="Your book record number", pages_read="Total pages read so far")
    @rate_limit("book-update", limit=3, window=60)
    async def book_update(
        self,
        interaction: discord.Interaction,
        book_id: int,
        pages_read: app_commands.Range[int, 0, 100000]
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.player_ops.get_player_by_discord_id(interaction.user.id)
            record = await self.bot.submission_ops.update_book_pages(player.id, book_id, pages_read)
            await self._reply(
                interaction, "📚 Progress Updated",
                f"**{record.title}** is now at {record.pages_read} pages and waiting for verification again."
            )
        except Exception as e:
            await self._handle_error(interaction, "book-update", e)

    @app_commands.command(name="idea-submit", description="Submit an idea or tool for the team to vote on")
    @app_commands.describe(title="Short title", description="What it is and why it helps", kind="Idea or tool")
    @app_commands.choices(kind=[
        app_commands.Choice(name="Idea", value="idea"),
        app_commands.Choice(name="Tool", value="tool"),
    ])
    @rate_limit("idea-submit", limit=3, window=60)
    async def idea_submit(
        self,
        interaction: discord.Interaction,
        title: str,
        description: Optional[str] = None,
        kind: str = "idea"
    ):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.player_ops.get_player_by_discord_id(interaction.user.id)
            idea = await self.bot.submission_ops.submit_idea(player.id, title, description, idea_type=kind)
            await self._reply(
                interaction, "💡 Submitted",
                f"**{idea.title}** (#{idea.id}) is waiting for the vote. "
                f"Ideas earn {PointConstants.IDEA_MIN}-{PointConstants.IDEA_MAX} points."
            )
        except Exception as e:
            await self._handle_error(interaction, "idea-submit", e)


async def setup(bot):
    await bot.add_cog(SubmissionsCog(bot))
