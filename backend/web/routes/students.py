"""
Student directory, assignment and balance endpoints.

All handlers resolve the caller to a policy Actor first; role and ownership
rules live in `backend.scheduling.policy`, so a denied call surfaces as
`403 {"error": "forbidden", "detail": ...}` through the app's error handler.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import field_validator

from ..auth_utils import current_actor, services_of
from ..responses import json_private

students_router = APIRouter(tags=["Students"])


def _strip_or_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class AssignPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: Any = None
    teacher_id: str | None = Field(default=None, alias="teacherId")

    @field_validator("teacher_id", mode="before")
    @classmethod
    def _normalize_teacher_id(cls, v):
        return _strip_or_none(v)


class ChangeTeacherPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: Any = None
    teacher_id: Any = Field(default=None, alias="teacherId")


class BalancePayload(BaseModel):
    # Validated by the balance service so bools and floats map to invalid_amount.
    amount: Any = None
    operation: Any = None


@students_router.get("/students")
async def list_students(request: Request):
    """
    List students for the caller.

    Behavior:
        - 200 `{students, newStudents}`; entries carry `teacherName`
        - admins see every student, teachers the ones assigned to them
        - `newStudents` holds students without a teacher

    Permissions:
        Teacher or admin.
    """
    actor, _ = current_actor(request)
    return json_private(services_of(request).profiles.list_students(actor))


@students_router.post("/students/{student_id}/assign")
async def assign_student(request: Request, student_id: str, payload: AssignPayload):
    """
    Bind a student to a teacher and subject.

    Behavior:
        - 200 `{success: true, student}`
        - 400 `invalid_subject` for subjects outside the catalogue
        - 403 when a teacher targets another teacher's student
        - 404 for unknown students or (admin) unknown teachers

    Permissions:
        Teachers assign to themselves; admins may pass `teacherId`.
    """
    actor, _ = current_actor(request)
    student = services_of(request).assignments.assign_student(
        actor, student_id, subject=payload.subject, teacher_id=payload.teacher_id
    )
    return json_private({"success": True, "student": student.to_record()})


@students_router.post("/students/{student_id}/change-teacher")
async def change_teacher(request: Request, student_id: str, payload: ChangeTeacherPayload):
    """Reassign a student to another teacher (admin only)."""
    actor, _ = current_actor(request)
    student = services_of(request).assignments.change_teacher(
        actor, student_id, teacher_id=payload.teacher_id, subject=payload.subject
    )
    return json_private({"success": True, "student": student.to_record()})


@students_router.get("/teachers")
async def list_teachers(request: Request):
    actor, _ = current_actor(request)
    return json_private({"teachers": services_of(request).profiles.list_teachers(actor)})


@students_router.post("/students/{student_id}/balance")
async def update_balance(request: Request, student_id: str, payload: BalancePayload):
    """
    Change a student's lesson credits.

    Behavior:
        - 200 `{balance}` with the new value
        - `operation=add` adds `amount`, `operation=set` replaces the balance
        - 400 `invalid_operation`/`invalid_amount`

    Permissions:
        Admins for any student; teachers for their own students.
    """
    actor, _ = current_actor(request)
    entry = services_of(request).balance.update_balance(
        actor, student_id, amount=payload.amount, operation=payload.operation
    )
    return json_private({"balance": entry.new_balance})
