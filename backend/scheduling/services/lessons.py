"""Lesson use cases (list/create/update/delete) over the lesson store.

Why:
    Lessons are keyed by owning student, so the store can answer "lessons of
    student X" with a prefix scan but has no index by lesson id. Lookups by id
    are therefore an explicit O(n) scan over every lesson (`find_lesson`).

Status:
    Any status may follow any other; values outside LESSON_STATUSES are
    rejected.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import List, Optional

from ..domain import (
    DEFAULT_LESSON_STATUS,
    Lesson,
    normalize_lesson_date,
    normalize_lesson_time,
    normalize_status,
    normalize_title,
    parse_lesson_date,
    utc_now_iso,
)
from ..errors import InvalidArgument, NotFound
from ..policy import Action, Actor, allows, require
from ..stores import LessonStore

logger = logging.getLogger("tutorbook.scheduling")

_UNSET = object()


def _normalize_id(value: object, code: str) -> str:
    if not isinstance(value, str):
        raise InvalidArgument(code)
    trimmed = value.strip()
    if not trimmed or ":" in trimmed:
        raise InvalidArgument(code)
    return trimmed


def _normalize_description(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument("invalid_description")
    return value


def _provided(value: object) -> bool:
    # Empty values keep the current field on update.
    return value is not _UNSET and value is not None and value != ""


def _sort_key(lesson: Lesson) -> tuple:
    return (lesson.date, lesson.time, lesson.id)


@dataclass
class LessonsService:
    lessons: LessonStore

    def list_lessons(self, actor: Actor, *, week_of: object = None) -> List[Lesson]:
        """Return the lessons visible to the actor, ordered by date and time.

        Admins scan everything, teachers scan everything and keep their own,
        students scan only their key prefix. `week_of` (ISO date) narrows the
        result to the Monday-to-Sunday week containing that day.
        """
        require(actor, Action.VIEW_LESSON)
        if actor.is_admin or actor.is_teacher:
            candidates = self.lessons.list_all()
        else:
            candidates = self.lessons.list_for_student(actor.id)
        items = [lesson for lesson in candidates if allows(actor, Action.VIEW_LESSON, lesson)]

        if week_of is not None and week_of != "":
            day = parse_lesson_date(week_of)
            monday = day - timedelta(days=day.weekday())
            sunday = monday + timedelta(days=6)
            in_week = []
            for lesson in items:
                try:
                    lesson_day = parse_lesson_date(lesson.date)
                except InvalidArgument:
                    continue
                if monday <= lesson_day <= sunday:
                    in_week.append(lesson)
            items = in_week
        items.sort(key=_sort_key)
        return items

    def create_lesson(
        self,
        actor: Actor,
        *,
        title: object,
        date: object,
        time: object,
        student_id: object = None,
        description: object = None,
        teacher_id: object = None,
    ) -> Lesson:
        """Create a scheduled lesson taught by the actor.

        `student_id` defaults to the actor (self-booking). Only admins may set
        a different `teacher_id`.
        """
        require(actor, Action.CREATE_LESSON)
        student = _normalize_id(student_id, "invalid_student_id") if _provided(student_id) else actor.id
        teacher = _normalize_id(teacher_id, "invalid_teacher_id") if _provided(teacher_id) else actor.id
        now = utc_now_iso()
        lesson = Lesson(
            id=str(uuid.uuid4()),
            title=normalize_title(title),
            date=normalize_lesson_date(date),
            time=normalize_lesson_time(time),
            student_id=student,
            teacher_id=teacher,
            description=_normalize_description(description),
            status=DEFAULT_LESSON_STATUS,
            created_at=now,
        )
        require(actor, Action.CREATE_LESSON, lesson, detail="cannot_reassign_teacher")
        self.lessons.put(lesson)
        logger.info("lesson created id=%s student=%s teacher=%s", lesson.id[-6:], student[-6:], teacher[-6:])
        return lesson

    def find_lesson(self, lesson_id: str) -> Lesson:
        """Locate a lesson by id with a full scan (O(n) in the number of lessons)."""
        for lesson in self.lessons.list_all():
            if lesson.id == lesson_id:
                return lesson
        raise NotFound("lesson_not_found")

    def update_lesson(
        self,
        actor: Actor,
        lesson_id: str,
        *,
        title: object = _UNSET,
        date: object = _UNSET,
        time: object = _UNSET,
        student_id: object = _UNSET,
        description: object = _UNSET,
        status: object = _UNSET,
        teacher_id: object = _UNSET,
    ) -> Lesson:
        """Apply a partial edit; empty fields keep their current value.

        `description` is the exception: when passed it is stored as given, so
        it can be cleared. Changing `student_id` moves the record to the new
        student's key: the new key is written before the old one is deleted.
        """
        require(actor, Action.UPDATE_LESSON)
        current = self.find_lesson(lesson_id)
        require(actor, Action.UPDATE_LESSON, current, detail="not_your_lesson")

        changes = {}
        if _provided(title):
            changes["title"] = normalize_title(title)
        if _provided(date):
            changes["date"] = normalize_lesson_date(date)
        if _provided(time):
            changes["time"] = normalize_lesson_time(time)
        if _provided(student_id):
            changes["student_id"] = _normalize_id(student_id, "invalid_student_id")
        if _provided(status):
            changes["status"] = normalize_status(status)
        if _provided(teacher_id):
            changes["teacher_id"] = _normalize_id(teacher_id, "invalid_teacher_id")
        if description is not _UNSET:
            changes["description"] = _normalize_description(description)

        updated = replace(current, updated_at=utc_now_iso(), **changes)
        if updated.teacher_id != current.teacher_id:
            require(actor, Action.UPDATE_LESSON, updated, detail="cannot_reassign_teacher")

        self.lessons.put(updated)
        if updated.student_id != current.student_id:
            self.lessons.delete(current.student_id, current.id)
            logger.info(
                "lesson re-keyed id=%s student %s -> %s",
                current.id[-6:],
                current.student_id[-6:],
                updated.student_id[-6:],
            )
        logger.info("lesson updated id=%s status=%s", updated.id[-6:], updated.status)
        return updated

    def delete_lesson(self, actor: Actor, lesson_id: str) -> None:
        require(actor, Action.DELETE_LESSON)
        lesson = self.find_lesson(lesson_id)
        require(actor, Action.DELETE_LESSON, lesson, detail="not_your_lesson")
        self.lessons.delete(lesson.student_id, lesson.id)
        logger.info("lesson deleted id=%s", lesson.id[-6:])


__all__ = ["LessonsService"]
