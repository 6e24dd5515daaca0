"""
Check-in date utilities for weekly attendance.

Handles the "which meeting day does this check-in belong to" question and the
early bird cutoff, both in the arena's configured timezone.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from arena.config import Config


def local_now(timezone_name: Optional[str] = None) -> datetime:
    """Current time in the arena timezone."""
    tz = pytz.timezone(timezone_name or Config.TIMEZONE)
    return datetime.now(tz)


def last_check_in_day(today: date, weekday: Optional[int] = None) -> date:
    """
    Most recent meeting day on or before ``today``.

    Args:
        today: Reference date
        weekday: Meeting weekday (Monday=0); defaults to Config.CHECK_IN_WEEKDAY

    Returns:
        ``today`` if it is the meeting day, otherwise the previous one
    """
    if weekday is None:
        weekday = Config.CHECK_IN_WEEKDAY
    if not 0 <= weekday <= 6:
        raise ValueError(f"Weekday must be between 0 and 6, got {weekday}")

    days_ago = (today.weekday() - weekday) % 7
    return today - timedelta(days=days_ago)


def is_early_bird(checked_in_at: datetime, cutoff: Optional[time] = None) -> bool:
    """
    Whether a check-in made at ``checked_in_at`` beats the cutoff.

    Only a check-in on the meeting day itself can be early; late self check-ins
    for a past meeting day never earn the bonus.
    """
    if cutoff is None:
        cutoff = Config.get_early_bird_cutoff()
    meeting_day = last_check_in_day(checked_in_at.date())
    return checked_in_at.date() == meeting_day and checked_in_at.time() < cutoff


def parse_date(date_str: str) -> date:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        ValueError: If the format is invalid
    """
    try:
        return datetime.strptime(date_str.strip(), '%Y-%m-%d').date()
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid date '{date_str}'. Use YYYY-MM-DD") from e
