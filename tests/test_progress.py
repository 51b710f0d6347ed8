from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from tutorbook.models.student import Weekday
from tutorbook.services.progress import (
    FixedThresholdPolicy,
    PaceRelativePolicy,
    ProgressPolicy,
    ProgressStatus,
    aggregate_monthly_counts,
    classify_status,
    completion_percentage,
    day_window,
    elapsed_fraction,
    index_by_student,
    month_window,
    parse_month,
    policy_for,
    resolve_display_time,
    sort_by_preference_then_name,
    summarize,
)


def _student(sid, name, days=()):
    return SimpleNamespace(id=sid, name=name, preferred_days=list(days))


def _record(student_id, day=1, rid=None):
    return SimpleNamespace(id=rid, student_id=student_id, date=datetime(2024, 3, day, 18, 30), time="18:30")


def test_aggregate_counts_per_student():
    students = [_student("a", "Amy"), _student("b", "Bob"), _student("c", "Cal")]
    records = [_record("a", 1), _record("a", 2), _record("b", 3)]

    counts = aggregate_monthly_counts(students, records)

    assert counts == {"a": 2, "b": 1}
    assert "c" not in counts


def test_aggregate_keeps_orphans_under_their_own_key():
    students = [_student("a", "Amy")]
    records = [_record("a"), _record("gone"), _record("gone", 2)]

    counts = aggregate_monthly_counts(students, records)

    assert sum(counts.values()) == len(records)
    assert counts["gone"] == 2
    # only the active student's key is ever read back
    assert sum(counts.get(s.id, 0) for s in students) == 1


def test_aggregate_empty_and_idempotent():
    assert aggregate_monthly_counts([], []) == {}
    students = [_student("a", "Amy")]
    records = [_record("a"), _record("a", 2)]
    assert aggregate_monthly_counts(students, records) == aggregate_monthly_counts(students, records)


@pytest.mark.parametrize("policy", list(ProgressPolicy))
@pytest.mark.parametrize("fraction", [0.0, 0.5, 1.0])
@pytest.mark.parametrize("count", [12, 15])
def test_target_reached_is_completed_under_both_policies(policy, fraction, count):
    assert classify_status(count, 12, fraction, policy) == ProgressStatus.COMPLETED


@pytest.mark.parametrize(
    "count,expected",
    [
        (8, ProgressStatus.ON_TRACK),
        (7, ProgressStatus.NEEDS_ATTENTION),
        (5, ProgressStatus.NEEDS_ATTENTION),
        (4, ProgressStatus.CRITICAL),
        (0, ProgressStatus.CRITICAL),
    ],
)
def test_fixed_threshold_policy(count, expected):
    assert classify_status(count, 12) == expected
    assert FixedThresholdPolicy().classify(count, 12, None) == expected


@pytest.mark.parametrize(
    "count,expected",
    [
        (6, ProgressStatus.ON_TRACK),
        (5, ProgressStatus.ON_TRACK),
        (3, ProgressStatus.NEEDS_ATTENTION),
        (2, ProgressStatus.CRITICAL),
    ],
)
def test_pace_policy_halfway_through_thirty_day_month(count, expected):
    fraction = 15 / 30  # expected = 6
    assert classify_status(count, 12, fraction, ProgressPolicy.PACE) == expected


def test_pace_policy_early_in_month_is_lenient():
    assert classify_status(0, 12, 1 / 30, "pace") == ProgressStatus.ON_TRACK


def test_policy_lookup_accepts_strings():
    assert isinstance(policy_for("fixed"), FixedThresholdPolicy)
    assert isinstance(policy_for(ProgressPolicy.PACE), PaceRelativePolicy)
    with pytest.raises(ValueError):
        policy_for("weekly")


def test_summarize_empty_roster_has_zero_average():
    summary = summarize([], {}, 12)
    assert (summary.total, summary.completed, summary.needing_attention, summary.total_classes, summary.average) == (
        0,
        0,
        0,
        0,
        0,
    )


def test_summarize_counts():
    students = [_student("a", "Amy"), _student("b", "Bob"), _student("c", "Cal"), _student("d", "Dee")]
    counts = {"a": 12, "b": 9, "c": 3, "orphan": 40}

    summary = summarize(students, counts, 12)

    assert summary.total == 4
    assert summary.completed == 1
    # Bob (9) is behind target but above the fixed threshold of 8
    assert summary.needing_attention == 2
    assert summary.total_classes == 24
    assert summary.average == 6


def test_completion_percentage_caps_at_hundred():
    assert completion_percentage(6, 12) == 50
    assert completion_percentage(15, 12) == 100


def test_sort_preferred_first_then_name():
    students = [
        _student("z", "Zed"),
        _student("a", "Amy", [Weekday.MONDAY]),
        _student("b", "Bob"),
    ]
    ordered = sort_by_preference_then_name(students, Weekday.MONDAY)
    assert [s.name for s in ordered] == ["Amy", "Bob", "Zed"]


def test_sort_ignores_case_and_is_stable():
    first = _student("1", "sam")
    second = _student("2", "Sam")
    students = [_student("b", "bob"), first, second, _student("a", "Al", ["TUESDAY"])]
    ordered = sort_by_preference_then_name(students, "TUESDAY")
    assert [s.id for s in ordered] == ["a", "b", "1", "2"]


def test_resolve_display_time():
    assert resolve_display_time("18:30", None) == "18:30"
    assert resolve_display_time(None, None) == "18:30"
    assert resolve_display_time("17:00", "19:15") == "19:15"
    assert resolve_display_time("17:00") == "17:00"


def test_index_by_student_last_duplicate_wins():
    first = _record("a", rid="r1")
    second = _record("a", rid="r2")
    assert index_by_student([first, second])["a"].id == "r2"


def test_month_window_bounds():
    assert month_window(2024, 2) == (datetime(2024, 2, 1), datetime(2024, 2, 29, 23, 59, 59))
    assert month_window(2023, 12) == (datetime(2023, 12, 1), datetime(2023, 12, 31, 23, 59, 59))


def test_day_window_covers_whole_day():
    start, end = day_window(date(2024, 3, 4))
    assert start == datetime(2024, 3, 4)
    assert end.date() == date(2024, 3, 4)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


@pytest.mark.parametrize("value", ["2024-13", "2024", "march", "2024-00", "", "10000-01", "0-05"])
def test_parse_month_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_month(value)


def test_parse_month():
    assert parse_month("2024-03") == (2024, 3)


def test_elapsed_fraction():
    assert elapsed_fraction(2024, 4, date(2024, 4, 15)) == 0.5
    assert elapsed_fraction(2024, 3, date(2024, 4, 15)) == 1.0
    assert elapsed_fraction(2024, 5, date(2024, 4, 15)) == 0.0


def test_weekday_for_date():
    assert Weekday.for_date(date(2026, 10, 19)) == Weekday.MONDAY
    assert Weekday.for_date(date(2026, 10, 18)) == Weekday.SUNDAY
    assert Weekday.for_date(date(2026, 10, 24)) == Weekday.SATURDAY


def test_day_window_on_last_representable_day():
    start, end = day_window(date(9999, 12, 31))
    assert start == datetime(9999, 12, 31)
    assert end == datetime(9999, 12, 31, 23, 59, 59, 999999)
