"""
Per-record point rules.
"""

from decimal import Decimal

import pytest

from arena.utils.points import PointCalculator


def test_attendance_points():
    assert PointCalculator.attendance_points(is_early_bird=False, remote=False) == 1
    assert PointCalculator.attendance_points(is_early_bird=True, remote=False) == 2
    assert PointCalculator.attendance_points(is_early_bird=False, remote=True) == 2
    assert PointCalculator.attendance_points(is_early_bird=True, remote=True) == 4


def test_activity_points_top_performer_with_double_points():
    assert PointCalculator.activity_points(False, False) == 10
    assert PointCalculator.activity_points(True, False) == 30
    assert PointCalculator.activity_points(False, True) == 20
    assert PointCalculator.activity_points(True, True) == 60


def test_course_points_below_threshold_is_zero():
    assert PointCalculator.course_points(100, 59) == 0
    assert PointCalculator.course_points(0.5, 0) == 0


def test_course_points_floor():
    # 10h * 60% * 4 = 24
    assert PointCalculator.course_points(10, 60) == 24
    # 2.55h * 100% * 4 = 10.2
    assert PointCalculator.course_points(2.55, 100) == 10
    # 3.3h * 75% * 4 = 9.9
    assert PointCalculator.course_points(Decimal('3.30'), 75) == 9


def test_book_points():
    assert PointCalculator.book_points(9) == 0
    assert PointCalculator.book_points(10) == 1
    assert PointCalculator.book_points(125, points_per_10_pages=3) == 36
    assert PointCalculator.book_points(0, points_per_10_pages=5) == 0


def test_blog_points():
    assert PointCalculator.blog_points(True) == 30
    assert PointCalculator.blog_points(False) == 20


def test_presentation_points_table():
    assert PointCalculator.presentation_points(True, 1) == 30
    assert PointCalculator.presentation_points(True, 2) == 20
    assert PointCalculator.presentation_points(False, 1) == 20
    assert PointCalculator.presentation_points(False, 2) == 15


def test_presentation_points_rejects_unknown_order():
    with pytest.raises(ValueError):
        PointCalculator.presentation_points(True, 3)
