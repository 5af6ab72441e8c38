"""Assignment use cases: bind a student to a (teacher, subject) pair."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from backend.identity_access.domain import Role

from ..domain import Profile, normalize_subject
from ..errors import InvalidArgument, NotFound
from ..policy import Action, Actor, require
from ..stores import ProfileStore

logger = logging.getLogger("tutorbook.scheduling")


@dataclass
class AssignmentService:
    profiles: ProfileStore

    def _load_student(self, student_id: str) -> Profile:
        try:
            student = self.profiles.get(student_id)
        except ValueError as exc:
            raise NotFound("student_not_found") from exc
        if student is None or not student.is_student:
            raise NotFound("student_not_found")
        return student

    def _require_staff(self, teacher_id: str) -> None:
        try:
            teacher = self.profiles.get(teacher_id)
        except ValueError as exc:
            raise NotFound("teacher_not_found") from exc
        if teacher is None or Role.parse(teacher.role) not in (Role.TEACHER, Role.ADMIN):
            raise NotFound("teacher_not_found")

    def assign_student(self, actor: Actor, student_id: str, *, subject: object, teacher_id: Optional[str] = None) -> Profile:
        """Assign a student to a teacher for a subject.

        Teachers always assign to themselves and may only pick up unassigned
        students or their own. Admins may name any teacher; without one they
        assign to themselves. The profile is overwritten in one write, so
        concurrent assignments race and the last writer wins.
        """
        require(actor, Action.ASSIGN_STUDENT)
        subject_value = normalize_subject(subject)
        student = self._load_student(student_id)
        require(actor, Action.ASSIGN_STUDENT, student, detail="not_your_student")
        if actor.is_teacher:
            effective = actor.id
        else:
            effective = (teacher_id or "").strip() or actor.id
            if effective != actor.id:
                self._require_staff(effective)
        updated = replace(student, teacher=effective, subject=subject_value)
        self.profiles.put(updated)
        logger.info("student assigned id=%s teacher=%s subject=%s", student_id[-6:], effective[-6:], subject_value)
        return updated

    def change_teacher(self, actor: Actor, student_id: str, *, teacher_id: object, subject: object) -> Profile:
        """Admin-only reassignment; no ownership check on the current teacher."""
        require(actor, Action.CHANGE_TEACHER)
        subject_value = normalize_subject(subject)
        if not isinstance(teacher_id, str) or not teacher_id.strip():
            raise InvalidArgument("invalid_teacher_id")
        student = self._load_student(student_id)
        require(actor, Action.CHANGE_TEACHER, student)
        self._require_staff(teacher_id.strip())
        updated = replace(student, teacher=teacher_id.strip(), subject=subject_value)
        self.profiles.put(updated)
        logger.info("teacher changed id=%s teacher=%s", student_id[-6:], teacher_id.strip()[-6:])
        return updated


__all__ = ["AssignmentService"]
