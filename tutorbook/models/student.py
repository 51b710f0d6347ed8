"""Student roster: contact info and scheduling preferences."""
import re
from datetime import date, datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field, field_validator

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Weekday(str, Enum):
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"

    @classmethod
    def for_date(cls, d: date) -> "Weekday":
        # date.weekday() is Monday=0
        return list(cls)[(d.weekday() + 1) % 7]


def validate_hhmm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not HHMM_PATTERN.match(value):
        raise ValueError("Time must be HH:MM (24-hour)")
    return value


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name must not be empty")
    return value


class Student(Document):
    """Student document. Never deleted, only deactivated."""

    name: Indexed(str)
    grade: Optional[str] = None
    phone_number: Optional[str] = None
    preferred_days: list[Weekday] = Field(default_factory=list)
    preferred_time: Optional[str] = None  # HH:MM; settings.default_preferred_time when unset

    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "students"
        use_state_management = True


class StudentCreate(BaseModel):
    name: str
    grade: Optional[str] = None
    phone_number: Optional[str] = None
    preferred_days: list[Weekday] = Field(default_factory=list)
    preferred_time: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("preferred_time")
    @classmethod
    def check_time(cls, value: Optional[str]) -> Optional[str]:
        return validate_hhmm(value)

    @field_validator("preferred_days")
    @classmethod
    def dedupe_days(cls, value: list[Weekday]) -> list[Weekday]:
        return list(dict.fromkeys(value))


class StudentUpdate(BaseModel):
    """All fields optional for PATCH."""
    name: Optional[str] = None
    grade: Optional[str] = None
    phone_number: Optional[str] = None
    preferred_days: Optional[list[Weekday]] = None
    preferred_time: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _clean_name(value)

    @field_validator("preferred_time")
    @classmethod
    def check_time(cls, value: Optional[str]) -> Optional[str]:
        return validate_hhmm(value)

    @field_validator("preferred_days")
    @classmethod
    def dedupe_days(cls, value: Optional[list[Weekday]]) -> Optional[list[Weekday]]:
        if value is None:
            return value
        return list(dict.fromkeys(value))
