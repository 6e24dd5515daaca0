"""
Meeting day and early bird helpers.
"""

from datetime import date, datetime, time

import pytest
import pytz

from arena.utils.check_in import is_early_bird, last_check_in_day, local_now, parse_date


def test_last_check_in_day_on_meeting_day():
    # 2026-01-07 is a Wednesday
    assert last_check_in_day(date(2026, 1, 7), weekday=2) == date(2026, 1, 7)


def test_last_check_in_day_goes_back_to_previous_meeting():
    assert last_check_in_day(date(2026, 1, 9), weekday=2) == date(2026, 1, 7)
    assert last_check_in_day(date(2026, 1, 6), weekday=2) == date(2025, 12, 31)


def test_last_check_in_day_rejects_bad_weekday():
    with pytest.raises(ValueError):
        last_check_in_day(date(2026, 1, 7), weekday=7)


def test_early_bird_only_on_meeting_day_before_cutoff(monkeypatch):
    monkeypatch.setattr('arena.config.Config.CHECK_IN_WEEKDAY', 2)
    cutoff = time(11, 30)
    assert is_early_bird(datetime(2026, 1, 7, 9, 0), cutoff)
    assert not is_early_bird(datetime(2026, 1, 7, 11, 30), cutoff)
    assert not is_early_bird(datetime(2026, 1, 8, 9, 0), cutoff)


def test_local_now_is_timezone_aware():
    now = local_now('Africa/Cairo')
    assert now.tzinfo is not None
    assert now.tzinfo.zone == pytz.timezone('Africa/Cairo').zone


def test_parse_date():
    assert parse_date(' 2026-02-01 ') == date(2026, 2, 1)
    with pytest.raises(ValueError):
        parse_date('01/02/2026')
