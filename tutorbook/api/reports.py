"""Monthly attendance reports."""
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from tutorbook.api.dashboard import resolve_month
from tutorbook.api.deps import CurrentUser, Repo
from tutorbook.config import settings
from tutorbook.services.progress import month_window
from tutorbook.services.reports import build_monthly_report, to_csv, to_excel

router = APIRouter()


async def _load_report(repo, month: Optional[str]) -> tuple[str, list[dict]]:
    year, mon = resolve_month(month)
    students = await repo.list_active_students()
    start, end = month_window(year, mon)
    records = await repo.list_attendance_in_window(start, end)
    return f"{year:04d}-{mon:02d}", build_monthly_report(students, records, settings.target_classes)


@router.get("/monthly")
async def monthly_report(
    user: CurrentUser,
    repo: Repo,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
):
    label, report = await _load_report(repo, month)
    return {"month": label, "students": report}


@router.get("/monthly/export")
async def export_monthly_report(
    user: CurrentUser,
    repo: Repo,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    format: Literal["csv", "excel"] = Query("csv"),
):
    """Download the month's attendance as CSV or Excel."""
    label, report = await _load_report(repo, month)
    if not any(entry["history"] for entry in report):
        raise HTTPException(status_code=404, detail="No attendance recorded for this month")

    if format == "csv":
        return StreamingResponse(
            iter([to_csv(report)]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=attendance_{label}.csv"},
        )
    return StreamingResponse(
        to_excel(report),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=attendance_{label}.xlsx"},
    )
