"""Storage collaborator: students and attendance over MongoDB."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId

from tutorbook.models.attendance import AttendanceRecord
from tutorbook.models.student import Student

logger = logging.getLogger(__name__)


class TutoringRepository(ABC):
    """What the API layer needs from storage. Not-found is None/False, never an exception."""

    @abstractmethod
    async def list_active_students(self) -> list[Student]: ...

    @abstractmethod
    async def get_student(self, student_id: str) -> Optional[Student]: ...

    @abstractmethod
    async def create_or_update_student(self, fields: dict[str, Any], student_id: Optional[str] = None) -> Optional[Student]: ...

    @abstractmethod
    async def deactivate_student(self, student_id: str) -> bool: ...

    @abstractmethod
    async def list_attendance_in_window(self, start: datetime, end: datetime) -> list[AttendanceRecord]: ...

    @abstractmethod
    async def get_attendance(self, record_id: str) -> Optional[AttendanceRecord]: ...

    @abstractmethod
    async def create_attendance(self, student_id: str, date: datetime, time: str) -> AttendanceRecord: ...

    @abstractmethod
    async def update_attendance_time(self, record_id: str, new_time: str) -> bool: ...

    @abstractmethod
    async def delete_attendance(self, record_id: str) -> bool: ...


def _object_id(value: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        return None


class BeanieRepository(TutoringRepository):
    async def list_active_students(self) -> list[Student]:
        return await Student.find(Student.is_active == True).to_list()  # noqa: E712

    async def get_student(self, student_id: str) -> Optional[Student]:
        oid = _object_id(student_id)
        if oid is None:
            return None
        return await Student.get(oid)

    async def create_or_update_student(self, fields: dict[str, Any], student_id: Optional[str] = None) -> Optional[Student]:
        if student_id is None:
            s = Student(**fields, is_active=True)
            await s.insert()
            logger.info("Created student %s (%s)", s.id, s.name)
            return s
        s = await self.get_student(student_id)
        if not s:
            return None
        for key, value in fields.items():
            setattr(s, key, value)
        s.updated_at = datetime.utcnow()
        await s.save()
        logger.info("Updated student %s", s.id)
        return s

    async def deactivate_student(self, student_id: str) -> bool:
        s = await self.get_student(student_id)
        if not s:
            return False
        s.is_active = False
        s.updated_at = datetime.utcnow()
        await s.save()
        logger.info("Deactivated student %s", s.id)
        return True

    async def list_attendance_in_window(self, start: datetime, end: datetime) -> list[AttendanceRecord]:
        return (
            await AttendanceRecord.find(
                {"date": {"$gte": start, "$lte": end}}
            )
            .sort("-date")
            .to_list()
        )

    async def get_attendance(self, record_id: str) -> Optional[AttendanceRecord]:
        oid = _object_id(record_id)
        if oid is None:
            return None
        return await AttendanceRecord.get(oid)

    async def create_attendance(self, student_id: str, date: datetime, time: str) -> AttendanceRecord:
        record = AttendanceRecord(student_id=student_id, date=date, time=time)
        await record.insert()
        logger.info("Marked student %s present on %s at %s", student_id, date.date().isoformat(), time)
        return record

    async def update_attendance_time(self, record_id: str, new_time: str) -> bool:
        record = await self.get_attendance(record_id)
        if not record:
            return False
        record.time = new_time
        await record.save()
        return True

    async def delete_attendance(self, record_id: str) -> bool:
        record = await self.get_attendance(record_id)
        if not record:
            return False
        await record.delete()
        logger.info("Removed attendance %s for student %s", record_id, record.student_id)
        return True
