"""Monthly attendance aggregation and progress classification.

Pure functions over already-fetched students and attendance records. Nothing
here touches the database; the API layer fetches through the repository and
hands the snapshots in.
"""
from __future__ import annotations

import calendar
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable, Optional, Sequence

from tutorbook.models.student import Weekday

TARGET_CLASSES = 12
ON_TRACK_THRESHOLD = 8
DEFAULT_PREFERRED_TIME = "18:30"


class ProgressStatus(str, Enum):
    COMPLETED = "Completed"
    ON_TRACK = "OnTrack"
    NEEDS_ATTENTION = "NeedsAttention"
    CRITICAL = "Critical"


class ProgressPolicy(str, Enum):
    FIXED = "fixed"
    PACE = "pace"


class StatusPolicy(ABC):
    """How a monthly class count maps to a progress status."""

    @abstractmethod
    def classify(self, count: int, target_classes: int, elapsed_fraction: Optional[float]) -> ProgressStatus:
        raise NotImplementedError


class FixedThresholdPolicy(StatusPolicy):
    """Absolute buckets: target / 8 / 5."""

    def classify(self, count: int, target_classes: int, elapsed_fraction: Optional[float]) -> ProgressStatus:
        if count >= target_classes:
            return ProgressStatus.COMPLETED
        if count >= ON_TRACK_THRESHOLD:
            return ProgressStatus.ON_TRACK
        if count >= 5:
            return ProgressStatus.NEEDS_ATTENTION
        return ProgressStatus.CRITICAL


class PaceRelativePolicy(StatusPolicy):
    """Compare the count with where the student should be by now in the month."""

    def classify(self, count: int, target_classes: int, elapsed_fraction: Optional[float]) -> ProgressStatus:
        if count >= target_classes:
            return ProgressStatus.COMPLETED
        expected = (elapsed_fraction or 0.0) * target_classes
        diff = count - expected
        if diff >= -1:
            return ProgressStatus.ON_TRACK
        if diff >= -3:
            return ProgressStatus.NEEDS_ATTENTION
        return ProgressStatus.CRITICAL


_POLICIES: dict[ProgressPolicy, StatusPolicy] = {
    ProgressPolicy.FIXED: FixedThresholdPolicy(),
    ProgressPolicy.PACE: PaceRelativePolicy(),
}


def policy_for(policy: ProgressPolicy | str) -> StatusPolicy:
    return _POLICIES[ProgressPolicy(policy)]


@dataclass(frozen=True)
class ProgressSummary:
    total: int
    completed: int
    needing_attention: int
    total_classes: int
    average: float


def aggregate_monthly_counts(active_students: Iterable, records: Iterable) -> dict[str, int]:
    """Count records per student id.

    Students with no records get no key. Records are not checked against
    `active_students`: an orphaned record is counted under its own id and is
    simply never looked up by any student row.
    """
    return dict(Counter(str(r.student_id) for r in records))


def classify_status(
    count: int,
    target_classes: int = TARGET_CLASSES,
    elapsed_fraction: Optional[float] = None,
    policy: ProgressPolicy | str = ProgressPolicy.FIXED,
) -> ProgressStatus:
    return policy_for(policy).classify(count, target_classes, elapsed_fraction)


def summarize(
    students: Sequence,
    counts: dict[str, int],
    target_classes: int = TARGET_CLASSES,
    on_track_threshold: int = ON_TRACK_THRESHOLD,
) -> ProgressSummary:
    per_student = [counts.get(str(s.id), 0) for s in students]
    total = len(per_student)
    total_classes = sum(per_student)
    return ProgressSummary(
        total=total,
        completed=sum(1 for c in per_student if c >= target_classes),
        # fixed threshold whichever status policy the caller uses
        needing_attention=sum(1 for c in per_student if c < target_classes and c < on_track_threshold),
        total_classes=total_classes,
        average=total_classes / total if total else 0,
    )


def completion_percentage(count: int, target_classes: int = TARGET_CLASSES) -> float:
    """Progress bar width, capped at 100."""
    return min(count / target_classes * 100, 100)


def sort_by_preference_then_name(students: Iterable, weekday: Weekday | str) -> list:
    weekday = Weekday(weekday)
    # sorted() is stable, so equal names keep their input order
    return sorted(
        students,
        key=lambda s: (weekday not in (s.preferred_days or ()), s.name.casefold()),
    )


def resolve_display_time(preferred_time: Optional[str], attendance_time: Optional[str] = None) -> str:
    if attendance_time is not None:
        return attendance_time
    return preferred_time or DEFAULT_PREFERRED_TIME


def index_by_student(records: Iterable) -> dict:
    """Map student id to its record for a single day. A later duplicate wins."""
    return {str(r.student_id): r for r in records}


# --- windows -----------------------------------------------------------------


def parse_month(value: str) -> tuple[int, int]:
    """Parse "YYYY-MM" into (year, month)."""
    try:
        year_str, month_str = value.split("-")
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    return year, month


def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    """First day 00:00:00 through last day 23:59:59, inclusive."""
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59)


def day_window(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def elapsed_fraction(year: int, month: int, today: date) -> float:
    """Share of the month gone by on `today`, counting today as elapsed."""
    if (today.year, today.month) > (year, month):
        return 1.0
    if (today.year, today.month) < (year, month):
        return 0.0
    return today.day / calendar.monthrange(year, month)[1]
