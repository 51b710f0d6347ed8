"""Daily attendance sheet: mark present, edit time, remove."""
import logging
from datetime import date, datetime, time

from fastapi import APIRouter, HTTPException

from tutorbook.api.deps import CurrentUser, Repo
from tutorbook.config import settings
from tutorbook.models.attendance import AttendanceCreate, AttendanceTimeUpdate
from tutorbook.models.student import Weekday
from tutorbook.services.progress import (
    day_window,
    index_by_student,
    resolve_display_time,
    sort_by_preference_then_name,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_day(date_str: str) -> date:
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format (YYYY-MM-DD)")


@router.get("/day/{date_str}")
async def get_day_sheet(date_str: str, user: CurrentUser, repo: Repo):
    """Active students for a date, those who prefer that weekday first."""
    d = _parse_day(date_str)
    weekday = Weekday.for_date(d)

    students = await repo.list_active_students()
    start, end = day_window(d)
    by_student = index_by_student(await repo.list_attendance_in_window(start, end))

    rows = []
    for s in sort_by_preference_then_name(students, weekday):
        record = by_student.get(str(s.id))
        rows.append(
            {
                "student_id": str(s.id),
                "name": s.name,
                "grade": s.grade,
                "preferred_days": [day.value for day in s.preferred_days],
                "is_preferred_day": weekday in s.preferred_days,
                "is_present": record is not None,
                "record_id": str(record.id) if record else None,
                "time": resolve_display_time(
                    s.preferred_time or settings.default_preferred_time,
                    record.time if record else None,
                ),
            }
        )
    return {"date": d.isoformat(), "weekday": weekday.value, "students": rows}


@router.post("/", status_code=201)
async def mark_present(data: AttendanceCreate, user: CurrentUser, repo: Repo):
    student = await repo.get_student(data.student_id)
    if not student or not student.is_active:
        raise HTTPException(status_code=404, detail="Student not found")
    # store the canonical id so lookups by str(student.id) match
    sid = str(student.id)

    start, end = day_window(data.date)
    existing = index_by_student(await repo.list_attendance_in_window(start, end))
    if sid in existing:
        raise HTTPException(status_code=409, detail="Attendance already marked for this date")

    time_str = data.time or student.preferred_time or settings.default_preferred_time
    hours, minutes = (int(part) for part in time_str.split(":"))
    class_at = datetime.combine(data.date, time(hours, minutes))

    record = await repo.create_attendance(sid, class_at, time_str)
    return {
        "id": str(record.id),
        "student_id": record.student_id,
        "date": data.date.isoformat(),
        "time": record.time,
    }


@router.patch("/{record_id}")
async def update_time(record_id: str, data: AttendanceTimeUpdate, user: CurrentUser, repo: Repo):
    if not await repo.update_attendance_time(record_id, data.time):
        raise HTTPException(status_code=404, detail="Attendance record not found")
    logger.info("Attendance %s time changed to %s", record_id, data.time)
    return {"id": record_id, "time": data.time}


@router.delete("/{record_id}", status_code=204)
async def remove_attendance(record_id: str, user: CurrentUser, repo: Repo):
    """Hard delete; unlike students, attendance rows are really removed."""
    if not await repo.delete_attendance(record_id):
        raise HTTPException(status_code=404, detail="Attendance record not found")
