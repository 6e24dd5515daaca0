"""
Leaderboard aggregation over a single cycle's records.
"""

from datetime import date

from arena.data_models.records import (
    ActivityParticipation, AttendanceRecord, BlogRecord, BonusAward, BookRecord, CourseRecord,
    CycleRecords, IdeaRecord, PenaltyRecord, PlayerInfo, PresentationRecord
)
from arena.utils.aggregation import compute_leaderboard

WED = date(2026, 1, 7)


def _players():
    return [
        PlayerInfo(1, "Nour"),
        PlayerInfo(2, "Ahmed", remote=True),
        PlayerInfo(3, "mona"),
    ]


def _records():
    return CycleRecords(
        attendance=[
            AttendanceRecord(1, WED, is_early_bird=True),
            AttendanceRecord(2, WED, is_early_bird=True),
            AttendanceRecord(3, WED),
        ],
        courses=[
            CourseRecord(1, 10, 80, verified=True),    # 32
            CourseRecord(1, 50, 100, verified=False),  # unverified, ignored
            CourseRecord(3, 20, 50, verified=True),    # below 60%
        ],
        books=[BookRecord(2, 45, 2, verified=True)],  # 8
        blogs=[BlogRecord(3, "https://a", is_first=True), BlogRecord(3, "https://b")],
        presentations=[PresentationRecord(1, False, 1, 20, co_presenter_id=2), PresentationRecord(2, False, 2, 15, co_presenter_id=1)],
        activities=[ActivityParticipation(2, 1, is_top_performer=True, double_points_used=True)],
        ideas=[IdeaRecord(1, 15, verified=True), IdeaRecord(3, 30, verified=False)],
        penalties=[PenaltyRecord(2, -5, 'absences')],
        bonuses=[BonusAward(1, 10, 'champion')],
    )


def test_category_subtotals_sum_to_total():
    for entry in compute_leaderboard(_players(), _records()):
        assert sum(entry.category_points().values()) == entry.total_points


def test_category_subtotals():
    entries = {e.player_id: e for e in compute_leaderboard(_players(), _records())}

    nour = entries[1]
    assert nour.attendance_points == 2
    assert nour.course_points == 32
    assert nour.presentation_points == 20
    assert nour.idea_points == 15
    assert nour.bonus_points == 10
    assert nour.total_points == 79

    ahmed = entries[2]
    assert ahmed.attendance_points == 4
    assert ahmed.activity_points == 60
    assert ahmed.book_points == 8
    assert ahmed.presentation_points == 15
    assert ahmed.penalty_points == -5
    assert ahmed.total_points == 82

    mona = entries[3]
    assert mona.attendance_points == 1
    assert mona.course_points == 0
    assert mona.blog_points == 50
    assert mona.idea_points == 0
    assert mona.total_points == 51


def test_ranking_and_last_place():
    entries = compute_leaderboard(_players(), _records())
    assert [e.player_id for e in entries] == [2, 1, 3]
    assert [e.rank for e in entries] == [1, 2, 3]
    assert [e.is_last_place for e in entries] == [False, False, True]


def test_ties_break_by_name_then_id():
    players = [PlayerInfo(5, "zed"), PlayerInfo(4, "Amy"), PlayerInfo(2, "amy"), PlayerInfo(9, "Bob")]
    entries = compute_leaderboard(players, CycleRecords())
    assert [e.player_id for e in entries] == [2, 4, 9, 5]
    assert [e.rank for e in entries] == [1, 2, 3, 4]


def test_players_without_records_appear_with_zero():
    entries = compute_leaderboard([PlayerInfo(1, "Solo"), PlayerInfo(2, "Other")], CycleRecords())
    assert all(e.total_points == 0 for e in entries)
    assert len(entries) == 2


def test_single_player_is_never_last_place():
    entries = compute_leaderboard([PlayerInfo(1, "Solo")], _records())
    assert len(entries) == 1
    assert entries[0].is_last_place is False


def test_empty_inputs():
    assert compute_leaderboard([], CycleRecords()) == []


def test_records_of_unknown_players_are_ignored():
    records = CycleRecords(
        attendance=[AttendanceRecord(99, WED)],
        blogs=[BlogRecord(99, "https://ghost", is_first=True)],
    )
    entries = compute_leaderboard([PlayerInfo(1, "Known")], records)
    assert [e.player_id for e in entries] == [1]
    assert entries[0].total_points == 0


def test_exactly_one_last_place_with_two_or_more_players():
    entries = compute_leaderboard(_players(), CycleRecords())
    assert sum(e.is_last_place for e in entries) == 1


def test_idempotent():
    first = compute_leaderboard(_players(), _records())
    second = compute_leaderboard(_players(), _records())
    assert first == second
