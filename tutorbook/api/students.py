"""Student roster CRUD."""
from fastapi import APIRouter, HTTPException

from tutorbook.api.deps import CurrentUser, Repo
from tutorbook.config import settings
from tutorbook.models.student import Student, StudentCreate, StudentUpdate

router = APIRouter()


def student_out(s: Student) -> dict:
    return {
        "id": str(s.id),
        "name": s.name,
        "grade": s.grade,
        "phone_number": s.phone_number,
        "preferred_days": [d.value for d in s.preferred_days],
        "preferred_time": s.preferred_time or settings.default_preferred_time,
        "is_active": s.is_active,
    }


@router.get("/")
async def list_students(user: CurrentUser, repo: Repo):
    students = await repo.list_active_students()
    students.sort(key=lambda s: s.name.casefold())
    return [student_out(s) for s in students]


@router.post("/", status_code=201)
async def create_student(data: StudentCreate, user: CurrentUser, repo: Repo):
    fields = data.model_dump()
    if not fields["preferred_time"]:
        fields["preferred_time"] = settings.default_preferred_time
    s = await repo.create_or_update_student(fields)
    return student_out(s)


@router.get("/{student_id}")
async def get_student(student_id: str, user: CurrentUser, repo: Repo):
    s = await repo.get_student(student_id)
    if not s:
        raise HTTPException(status_code=404, detail="Student not found")
    return student_out(s)


@router.patch("/{student_id}")
async def update_student(student_id: str, data: StudentUpdate, user: CurrentUser, repo: Repo):
    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise HTTPException(status_code=400, detail="Name cannot be cleared")
    if "preferred_days" in update_data and update_data["preferred_days"] is None:
        update_data["preferred_days"] = []
    s = await repo.create_or_update_student(update_data, student_id=student_id)
    if not s:
        raise HTTPException(status_code=404, detail="Student not found")
    return student_out(s)


@router.delete("/{student_id}", status_code=204)
async def archive_student(student_id: str, user: CurrentUser, repo: Repo):
    """Archive student (soft delete: set is_active=False). Attendance history is kept."""
    if not await repo.deactivate_student(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
