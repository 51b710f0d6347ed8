"""Turn the tutor's student spreadsheet into roster entries.

Sheet layout: NAME, GRADE, MOBILE NO, TUTION PERFERED DAY followed by two
unnamed columns holding further days, and TUTION PERFERED TIME as an Excel
date-time serial.
"""
from __future__ import annotations

import logging
import math
import numbers
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import pandas as pd

from tutorbook.models.student import Weekday

logger = logging.getLogger(__name__)

NAME_COLUMN = "NAME"
GRADE_COLUMN = "GRADE"
MOBILE_COLUMN = "MOBILE NO"
DAY_COLUMN = "TUTION PERFERED DAY"
TIME_COLUMN = "TUTION PERFERED TIME"
EXTRA_DAY_COLUMNS = 2

# serial 25569 is 1970-01-01 in the 1900 date system
_UNIX_EPOCH_SERIAL = 25569
_LOOSE_HHMM = re.compile(r"^(\d{1,2}):(\d{2})")


def excel_serial_to_datetime(serial: Any) -> Optional[datetime]:
    if isinstance(serial, bool) or not isinstance(serial, numbers.Real) or math.isnan(serial):
        return None
    utc_days = math.floor(serial - _UNIX_EPOCH_SERIAL)
    day = date(1970, 1, 1) + timedelta(days=utc_days)
    fractional_day = serial - math.floor(serial) + 0.0000001
    total_seconds = math.floor(86400 * fractional_day)
    seconds = total_seconds % 60
    total_seconds -= seconds
    hours = total_seconds // 3600
    minutes = (total_seconds // 60) % 60
    return datetime(day.year, day.month, day.day) + timedelta(hours=hours, minutes=minutes, seconds=seconds)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return bool(pd.isna(value))


def _text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_time_cell(value: Any) -> Optional[str]:
    """HH:MM from a serial, a parsed time/datetime or loose "H:MM" text."""
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.strftime("%H:%M")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, str):
        m = _LOOSE_HHMM.match(value.strip())
        if m and int(m.group(1)) < 24 and int(m.group(2)) < 60:
            return f"{int(m.group(1)):02d}:{m.group(2)}"
        return None
    dt = excel_serial_to_datetime(value)
    return dt.strftime("%H:%M") if dt else None


def parse_day_cells(values: list[Any]) -> list[Weekday]:
    days: list[Weekday] = []
    for value in values:
        if _is_blank(value):
            continue
        try:
            day = Weekday(str(value).strip().upper())
        except ValueError:
            logger.warning("Ignoring unknown preferred day %r", value)
            continue
        if day not in days:
            days.append(day)
    return days


def _day_columns(columns: list[str]) -> list[str]:
    if DAY_COLUMN not in columns:
        return []
    idx = columns.index(DAY_COLUMN)
    extra = [
        c for c in columns[idx + 1: idx + 1 + EXTRA_DAY_COLUMNS]
        if str(c).startswith("Unnamed")
    ]
    return [DAY_COLUMN, *extra]


def rows_to_students(df: pd.DataFrame) -> list[dict]:
    """Student fields for every row that has a name."""
    columns = [str(c) for c in df.columns]
    df = df.set_axis(columns, axis=1)
    day_columns = _day_columns(columns)

    students = []
    for record in df.to_dict(orient="records"):
        name = _text(record.get(NAME_COLUMN))
        if not name:
            continue
        raw_time = record.get(TIME_COLUMN)
        preferred_time = parse_time_cell(raw_time)
        if preferred_time is None and not _is_blank(raw_time):
            logger.warning("Could not read preferred time %r for %s", raw_time, name)
        students.append(
            {
                "name": name,
                "grade": _text(record.get(GRADE_COLUMN)),
                "phone_number": _text(record.get(MOBILE_COLUMN)),
                "preferred_days": parse_day_cells([record.get(c) for c in day_columns]),
                "preferred_time": preferred_time,
            }
        )
    return students


def read_student_sheet(path: str) -> list[dict]:
    df = pd.read_excel(path, sheet_name=0, engine="openpyxl")
    return rows_to_students(df)
