from datetime import date, datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field, field_validator

from tutorbook.models.student import validate_hhmm


class AttendanceRecord(Document):
    """One class attended by one student.

    `date` is the class day with the time applied when it was marked; only its
    calendar day is meaningful. `time` is what the tutor sees and edits.
    """
    student_id: Indexed(str)
    date: Indexed(datetime)
    time: str
    marked_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance"
        use_state_management = True


class AttendanceCreate(BaseModel):
    student_id: str
    date: date
    time: Optional[str] = None  # defaults to the student's preferred time

    @field_validator("time")
    @classmethod
    def check_time(cls, value: Optional[str]) -> Optional[str]:
        return validate_hhmm(value)


class AttendanceTimeUpdate(BaseModel):
    time: str

    @field_validator("time")
    @classmethod
    def check_time(cls, value: str) -> str:
        return validate_hhmm(value)
