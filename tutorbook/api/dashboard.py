from dataclasses import asdict
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from tutorbook.api.deps import CurrentUser, Repo
from tutorbook.config import settings
from tutorbook.services.progress import (
    ProgressPolicy,
    aggregate_monthly_counts,
    classify_status,
    completion_percentage,
    elapsed_fraction,
    month_window,
    parse_month,
    summarize,
)

router = APIRouter()


def resolve_month(month: Optional[str]) -> tuple[int, int]:
    if not month:
        today = date.today()
        return today.year, today.month
    try:
        return parse_month(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/progress")
async def get_progress(
    user: CurrentUser,
    repo: Repo,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    policy: Optional[ProgressPolicy] = Query(None, description="Status policy, defaults to settings"),
) -> Dict[str, Any]:
    """Monthly progress of every active student against the class target."""
    year, mon = resolve_month(month)
    policy = policy or ProgressPolicy(settings.progress_policy)
    target = settings.target_classes

    students = await repo.list_active_students()
    start, end = month_window(year, mon)
    counts = aggregate_monthly_counts(students, await repo.list_attendance_in_window(start, end))
    fraction = elapsed_fraction(year, mon, date.today())

    rows = []
    for s in sorted(students, key=lambda s: s.name.casefold()):
        count = counts.get(str(s.id), 0)
        rows.append(
            {
                "student_id": str(s.id),
                "name": s.name,
                "grade": s.grade,
                "count": count,
                "target": target,
                "status": classify_status(count, target, fraction, policy).value,
                "percentage": completion_percentage(count, target),
            }
        )

    summary = summarize(students, counts, target, settings.on_track_threshold)
    return {
        "month": f"{year:04d}-{mon:02d}",
        "policy": policy.value,
        "elapsed_fraction": fraction,
        "summary": asdict(summary),
        "students": rows,
    }
