"""
Lesson endpoints.

Why:
    Lessons are the calendar entries shown in the weekly view. Listing is open
    to every authenticated role (students see their own lessons, teachers the
    ones they teach); mutations are reserved for teachers and admins.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from ..auth_utils import current_actor, services_of
from ..responses import json_private

lessons_router = APIRouter(tags=["Lessons"])


class LessonPayload(BaseModel):
    # Values are validated by the lessons service to return specific 400 codes.
    model_config = ConfigDict(populate_by_name=True)

    title: Any = None
    date: Any = None
    time: Any = None
    student_id: Any = Field(default=None, alias="studentId")
    teacher_id: Any = Field(default=None, alias="teacherId")
    description: Any = None
    status: Any = None


_UPDATABLE = ("title", "date", "time", "student_id", "teacher_id", "description", "status")


@lessons_router.get("/lessons")
async def list_lessons(request: Request, weekOf: str | None = None):
    """
    List lessons visible to the caller, ordered by date and time.

    Query:
        weekOf: optional `YYYY-MM-DD`; narrows the list to its Monday-Sunday week.
    """
    actor, _ = current_actor(request)
    lessons = services_of(request).lessons.list_lessons(actor, week_of=weekOf)
    return json_private({"lessons": [lesson.to_record() for lesson in lessons]})


@lessons_router.post("/lessons")
async def create_lesson(request: Request, payload: LessonPayload):
    """
    Create a lesson taught by the caller.

    Behavior:
        - 200 `{lesson}` with `status: "scheduled"` and `teacherId` = caller
        - 400 `invalid_title`/`invalid_date`/`invalid_time`
        - 403 for students, or when a teacher names another `teacherId`

    Permissions:
        Teacher or admin.
    """
    actor, _ = current_actor(request)
    lesson = services_of(request).lessons.create_lesson(
        actor,
        title=payload.title,
        date=payload.date,
        time=payload.time,
        student_id=payload.student_id,
        description=payload.description,
        teacher_id=payload.teacher_id,
    )
    return json_private({"lesson": lesson.to_record()})


@lessons_router.put("/lessons/{lesson_id}")
async def update_lesson(request: Request, lesson_id: str, payload: LessonPayload):
    """
    Update a lesson; omitted or empty fields keep their value.

    Changing `studentId` moves the lesson to the new student's key.
    """
    actor, _ = current_actor(request)
    fields = {name: getattr(payload, name) for name in _UPDATABLE if name in payload.model_fields_set}
    lesson = services_of(request).lessons.update_lesson(actor, lesson_id, **fields)
    return json_private({"lesson": lesson.to_record()})


@lessons_router.delete("/lessons/{lesson_id}")
async def delete_lesson(request: Request, lesson_id: str):
    actor, _ = current_actor(request)
    services_of(request).lessons.delete_lesson(actor, lesson_id)
    return json_private({"success": True})
