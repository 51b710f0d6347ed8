"""Beanie document models and Pydantic schemas."""
from tutorbook.models.user import User, UserRole
from tutorbook.models.student import Student, StudentCreate, StudentUpdate, Weekday
from tutorbook.models.attendance import AttendanceRecord, AttendanceCreate, AttendanceTimeUpdate

__all__ = [
    "User",
    "UserRole",
    "Student",
    "StudentCreate",
    "StudentUpdate",
    "Weekday",
    "AttendanceRecord",
    "AttendanceCreate",
    "AttendanceTimeUpdate",
]
