"""
Shared embed utilities for the engagement arena bot.

Provides reusable embed building functions so cogs and views render
leaderboards, achievements and bonus suggestions the same way.
"""

import discord
from typing import Dict, List, Optional
from arena.constants import CategoryConstants, PointConstants, UIConstants
from arena.data_models.leaderboard import ChampionBonus, LeaderboardEntry, LeaderboardPage, StreakBonus


def _display_name(entry: LeaderboardEntry, width: int) -> str:
    name = entry.player_name[:width]
    if entry.is_last_place:
        name = f"{name[:width - 2]} {UIConstants.LAST_PLACE_EMOJI}"
    return name


def build_leaderboard_embed(page_data: LeaderboardPage) -> discord.Embed:
    """
    Build the paginated leaderboard table.

    Discord renders monospace only inside code blocks, so the table is one
    code block sized to fit the embed description.
    """
    title = f"{UIConstants.TROPHY_EMOJI} Arena Leaderboard"
    if page_data.cycle_name:
        title += f" - {page_data.cycle_name}"

    embed = discord.Embed(title=title, color=UIConstants.GOLD_RANK_COLOR)

    if not page_data.entries:
        embed.description = "No points yet. Use `/checkin` and the submission commands to get on the board!"
        return embed

    lines = ["```"]
    lines.append(f"{'#':<4} {'Player':<18} {'Total':>6} {'Att':>4} {'Act':>4} {'Crs':>4} {'Pres':>5}")
    lines.append("-" * 51)
    for entry in page_data.entries:
        lines.append(
            f"{entry.rank:<4} {_display_name(entry, 18):<18} {entry.total_points:>6} "
            f"{entry.attendance_points:>4} {entry.activity_points:>4} "
            f"{entry.course_points:>4} {entry.presentation_points:>5}"
        )
    lines.append("```")
    embed.description = "\n".join(lines)

    embed.set_footer(
        text=f"Page {page_data.current_page}/{page_data.total_pages} | Total Players: {page_data.total_players}"
             f" | /achievements for your breakdown"
    )
    return embed


def build_achievements_embed(
    entry: LeaderboardEntry,
    total_players: int,
    cycle_name: Optional[str] = None,
    member: Optional[discord.abc.User] = None
) -> discord.Embed:
    """Per-category breakdown for one player."""
    embed = discord.Embed(
        title=f"{UIConstants.FIRE_EMOJI} Achievements: {entry.player_name}",
        description=(
            f"**Rank:** #{entry.rank} / {total_players}\n"
            f"**Total Points:** {entry.total_points:,}"
        ),
        color=discord.Color.gold() if entry.rank == 1 else discord.Color.blue()
    )
    if member:
        embed.set_thumbnail(url=member.display_avatar.url)

    for category, points in entry.category_points().items():
        embed.add_field(name=CategoryConstants.LABELS[category], value=f"{points:,}", inline=True)

    if entry.is_last_place:
        embed.add_field(
            name=f"{UIConstants.LAST_PLACE_EMOJI} El Kooz",
            value="Currently holding the spoon. Time to climb!",
            inline=False
        )
    if cycle_name:
        embed.set_footer(text=f"Cycle: {cycle_name}")
    return embed


def build_bonuses_embed(
    streaks: List[StreakBonus],
    champion: Optional[ChampionBonus],
    names: Dict[int, str]
) -> discord.Embed:
    """Admin preview of streak and champion suggestions."""
    embed = discord.Embed(
        title=f"{UIConstants.CROWN_EMOJI} Attendance Bonus Suggestions",
        color=discord.Color.blue()
    )

    if champion:
        value = (
            f"**{names.get(champion.player_id, champion.player_id)}** with "
            f"{champion.attendance_count} check-ins (+{champion.bonus_points})"
        )
        if champion.is_tied:
            tied = ", ".join(str(names.get(pid, pid)) for pid in champion.tied_player_ids)
            value += f"\n⚠️ Tied: {tied}"
        embed.add_field(name="Attendance Champion", value=value, inline=False)
    else:
        embed.add_field(name="Attendance Champion", value="Nobody has checked in yet.", inline=False)

    if streaks:
        value = "\n".join(
            f"{names.get(s.player_id, s.player_id)}: {s.consecutive_weeks} weeks → +{s.bonus_points}"
            for s in streaks[:20]
        )
        if len(streaks) > 20:
            value += f"\n... and {len(streaks) - 20} more"
    else:
        value = "No streaks of two or more weeks yet."
    embed.add_field(name="Weekly Streaks", value=value, inline=False)

    embed.set_footer(text="Use /admin-apply-streaks and /admin-apply-champion to award these")
    return embed


def build_rules_embed() -> discord.Embed:
    """How points are earned."""
    p = PointConstants
    pres = p.PRESENTATION_POINTS
    embed = discord.Embed(
        title="📜 How to Earn Points",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    embed.add_field(
        name="Attendance",
        value=(
            f"+{p.ATTENDANCE} per weekly check-in, +{p.EARLY_BIRD} early bird\n"
            f"Remote players earn x{p.REMOTE_MULTIPLIER}\n"
            f"+{p.STREAK_BONUS} per 2 consecutive weeks, +{p.ATTENDANCE_CHAMPION} attendance champion"
        ),
        inline=False
    )
    embed.add_field(
        name="Presentations",
        value=(
            f"Solo: {pres[(True, 1)]} first, {pres[(True, 2)]} after\n"
            f"Pair: {pres[(False, 1)]} lead, {pres[(False, 2)]} second presenter"
        ),
        inline=False
    )
    embed.add_field(
        name="Activities",
        value=(
            f"+{p.ACTIVITY_ATTENDANCE} for attending, +{p.ACTIVITY_TOP_PERFORMER} top performer\n"
            f"Double points once per cycle"
        ),
        inline=False
    )
    embed.add_field(
        name="Learning",
        value=(
            f"Courses: hours x completion x {p.COURSE_POINTS_PER_HOUR} (from {p.COURSE_MIN_COMPLETION}% completion)\n"
            f"Books: points per {p.PAGES_PER_BOOK_UNIT} pages read\n"
            f"Blogs: {p.FIRST_BLOG} for your first, {p.SUBSEQUENT_BLOG} after\n"
            f"Ideas & tools: {p.IDEA_MIN}-{p.IDEA_MAX} by vote"
        ),
        inline=False
    )
    embed.set_footer(text="Courses, books and ideas count once an admin verifies them")
    return embed
