import math
from decimal import Decimal

from arena.constants import PointConstants


class PointCalculator:
    """Per-record point rules for every achievement category"""

    @staticmethod
    def attendance_points(is_early_bird: bool, remote: bool) -> int:
        """
        Points for a single check-in

        Args:
            is_early_bird: Whether the player arrived before the cutoff
            remote: Whether the player has the remote flag

        Returns:
            (1 + early bird bonus), doubled for remote players
        """
        points = PointConstants.ATTENDANCE
        if is_early_bird:
            points += PointConstants.EARLY_BIRD
        if remote:
            points *= PointConstants.REMOTE_MULTIPLIER
        return points

    @staticmethod
    def activity_points(is_top_performer: bool, double_points_used: bool) -> int:
        """Base attendance plus top performer bonus, doubled when double points is used"""
        points = PointConstants.ACTIVITY_ATTENDANCE
        if is_top_performer:
            points += PointConstants.ACTIVITY_TOP_PERFORMER
        if double_points_used:
            points *= PointConstants.DOUBLE_POINTS_MULTIPLIER
        return points

    @staticmethod
    def course_points(hours, completion_percent: int) -> int:
        """
        Points for a course

        Below the completion threshold a course is worth nothing, regardless
        of hours. Decimal arithmetic keeps floor() exact for values like 2.55h.

        Args:
            hours: Course length in hours (float, int or Decimal)
            completion_percent: Completion between 0 and 100

        Returns:
            floor(hours * completion / 100 * 4), or 0 below 60% completion
        """
        if completion_percent < PointConstants.COURSE_MIN_COMPLETION:
            return 0
        scaled = Decimal(str(hours)) * completion_percent * PointConstants.COURSE_POINTS_PER_HOUR / 100
        return math.floor(scaled)

    @staticmethod
    def book_points(pages_read: int, points_per_10_pages: int = PointConstants.DEFAULT_POINTS_PER_10_PAGES) -> int:
        """floor(pages_read / 10) * points_per_10_pages"""
        return (pages_read // PointConstants.PAGES_PER_BOOK_UNIT) * points_per_10_pages

    @staticmethod
    def blog_points(is_first: bool) -> int:
        return PointConstants.FIRST_BLOG if is_first else PointConstants.SUBSEQUENT_BLOG

    @staticmethod
    def presentation_points(is_solo: bool, presentation_order: int) -> int:
        """
        Tabulated presentation points

        Raises:
            ValueError: If presentation_order is not 1 or 2
        """
        try:
            return PointConstants.PRESENTATION_POINTS[(bool(is_solo), presentation_order)]
        except KeyError:
            raise ValueError(f"Presentation order must be 1 or 2, got {presentation_order}")
