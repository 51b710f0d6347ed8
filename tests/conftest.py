from __future__ import annotations

import os

# Settings are read at import time; tests run with a throwaway secret.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from tutorbook.api.deps import get_current_user, get_repository
from tutorbook.main import app
from tutorbook.models.student import Weekday
from tutorbook.services.repository import TutoringRepository


@dataclass
class FakeStudent:
    id: str
    name: str
    grade: Optional[str] = None
    phone_number: Optional[str] = None
    preferred_days: list[Weekday] = field(default_factory=list)
    preferred_time: Optional[str] = None
    is_active: bool = True


@dataclass
class FakeRecord:
    id: str
    student_id: str
    date: datetime
    time: str


@dataclass
class FakeUser:
    id: str = "u1"
    email: str = "tutor@example.com"
    full_name: str = "Tutor"
    is_active: bool = True


class InMemoryRepository(TutoringRepository):
    def __init__(self):
        self.students: dict[str, FakeStudent] = {}
        self.records: dict[str, FakeRecord] = {}
        self._next_id = 0

    def _id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}{self._next_id}"

    def add_student(self, name: str, **fields: Any) -> FakeStudent:
        s = FakeStudent(id=self._id("s"), name=name, **fields)
        self.students[s.id] = s
        return s

    def add_record(self, student_id: str, when: datetime, time: str = "18:30") -> FakeRecord:
        r = FakeRecord(id=self._id("a"), student_id=student_id, date=when, time=time)
        self.records[r.id] = r
        return r

    async def list_active_students(self):
        return [s for s in self.students.values() if s.is_active]

    async def get_student(self, student_id):
        return self.students.get(student_id)

    async def create_or_update_student(self, fields, student_id=None):
        if student_id is None:
            return self.add_student(**fields)
        s = self.students.get(student_id)
        if not s:
            return None
        for key, value in fields.items():
            setattr(s, key, value)
        return s

    async def deactivate_student(self, student_id):
        s = self.students.get(student_id)
        if not s:
            return False
        s.is_active = False
        return True

    async def list_attendance_in_window(self, start, end):
        items = [r for r in self.records.values() if start <= r.date <= end]
        items.sort(key=lambda r: r.date, reverse=True)
        return items

    async def get_attendance(self, record_id):
        return self.records.get(record_id)

    async def create_attendance(self, student_id, date, time):
        return self.add_record(student_id, date, time)

    async def update_attendance_time(self, record_id, new_time):
        r = self.records.get(record_id)
        if not r:
            return False
        r.time = new_time
        return True

    async def delete_attendance(self, record_id):
        return self.records.pop(record_id, None) is not None


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_current_user] = lambda: FakeUser()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
