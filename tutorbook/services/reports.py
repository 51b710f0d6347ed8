"""Monthly per-student attendance reports and their CSV/Excel export."""
from __future__ import annotations

import io
from collections import defaultdict
from typing import Iterable

import pandas as pd

from tutorbook.services.progress import ProgressPolicy, classify_status

EXPORT_COLUMNS = ["Student", "Grade", "Class #", "Date", "Day", "Time"]


def build_monthly_report(students: Iterable, records: Iterable, target_classes: int) -> list[dict]:
    """One entry per student with their attendance history for the month, newest first."""
    by_student: dict[str, list] = defaultdict(list)
    for r in records:
        by_student[str(r.student_id)].append(r)

    report = []
    for s in sorted(students, key=lambda s: s.name.casefold()):
        history = sorted(by_student.get(str(s.id), []), key=lambda r: r.date, reverse=True)
        attended = len(history)
        report.append(
            {
                "student_id": str(s.id),
                "name": s.name,
                "grade": s.grade,
                "attended": attended,
                "target": target_classes,
                "remaining": max(target_classes - attended, 0),
                "percentage": round(attended / target_classes * 100),
                "status": classify_status(attended, target_classes, policy=ProgressPolicy.FIXED).value,
                "history": [
                    {
                        "id": str(r.id),
                        "class_number": attended - i,
                        "date": r.date.date().isoformat(),
                        "weekday": r.date.strftime("%a"),
                        "time": r.time,
                    }
                    for i, r in enumerate(history)
                ],
            }
        )
    return report


def report_dataframe(report: list[dict]) -> pd.DataFrame:
    rows = []
    for entry in report:
        for item in reversed(entry["history"]):
            rows.append(
                {
                    "Student": entry["name"],
                    "Grade": entry["grade"] or "",
                    "Class #": item["class_number"],
                    "Date": item["date"],
                    "Day": item["weekday"],
                    "Time": item["time"],
                }
            )
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def summary_dataframe(report: list[dict]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Student": e["name"],
                "Grade": e["grade"] or "",
                "Attended": e["attended"],
                "Target": e["target"],
                "Remaining": e["remaining"],
                "Percentage": e["percentage"],
                "Status": e["status"],
            }
            for e in report
        ],
        columns=["Student", "Grade", "Attended", "Target", "Remaining", "Percentage", "Status"],
    )


def to_csv(report: list[dict]) -> str:
    stream = io.StringIO()
    report_dataframe(report).to_csv(stream, index=False)
    return stream.getvalue()


def to_excel(report: list[dict]) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary_dataframe(report).to_excel(writer, index=False, sheet_name="Summary")
        report_dataframe(report).to_excel(writer, index=False, sheet_name="Attendance")
    output.seek(0)
    return output
