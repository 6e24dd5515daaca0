"""
Streak and attendance champion calculators.
"""

from datetime import date, timedelta

from arena.utils.bonuses import compute_champion, compute_streaks, longest_weekly_run


def _wednesdays(start: date, count: int):
    return [start + timedelta(weeks=i) for i in range(count)]


def test_three_consecutive_weeks_earn_one_point():
    streaks = compute_streaks({1: [date(2026, 1, 7), date(2026, 1, 14), date(2026, 1, 21)]})
    assert len(streaks) == 1
    assert streaks[0].player_id == 1
    assert streaks[0].consecutive_weeks == 3
    assert streaks[0].bonus_points == 1


def test_gap_breaks_streak_and_excludes_player():
    assert longest_weekly_run([date(2026, 1, 7), date(2026, 1, 28)]) == 1
    assert compute_streaks({1: [date(2026, 1, 7), date(2026, 1, 28)]}) == []


def test_longest_run_wins_and_input_order_does_not_matter():
    dates = _wednesdays(date(2026, 1, 7), 2) + _wednesdays(date(2026, 3, 4), 5)
    dates.reverse()
    assert longest_weekly_run(dates) == 5
    assert compute_streaks({7: dates})[0].bonus_points == 2


def test_repeated_date_resets_run():
    dates = [date(2026, 1, 7), date(2026, 1, 14), date(2026, 1, 14), date(2026, 1, 21)]
    assert longest_weekly_run(dates) == 2


def test_no_dates():
    assert longest_weekly_run([]) == 0
    assert compute_streaks({1: []}) == []


def test_streaks_sorted_by_bonus():
    streaks = compute_streaks({
        1: _wednesdays(date(2026, 1, 7), 2),
        2: _wednesdays(date(2026, 1, 7), 6),
        3: _wednesdays(date(2026, 1, 7), 4),
    })
    assert [(s.player_id, s.bonus_points) for s in streaks] == [(2, 3), (3, 2), (1, 1)]


def test_champion_highest_count():
    champion = compute_champion({1: 5, 2: 8, 3: 3})
    assert champion.player_id == 2
    assert champion.attendance_count == 8
    assert champion.bonus_points == 10
    assert not champion.is_tied


def test_champion_empty_or_zero():
    assert compute_champion({}) is None
    assert compute_champion({1: 0, 2: 0}) is None


def test_champion_tie_goes_to_lowest_id():
    champion = compute_champion({4: 6, 2: 6, 9: 1})
    assert champion.player_id == 2
    assert champion.tied_player_ids == (2, 4)
    assert champion.is_tied
