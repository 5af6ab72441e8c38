"""
Seed helpers for scheduling tests.

Profiles are written straight into the key-value store with fixed ids so
assertions can name them (`t1`, `s1`, ...). `login` creates a matching
identity-provider account and returns a bearer token for API tests.
"""
from __future__ import annotations

from typing import Optional

from backend.identity_access.domain import Role
from backend.identity_access.provider import IdentityError
from backend.scheduling.domain import Lesson, Profile
from backend.scheduling.policy import Actor
from backend.web.wiring import Services, build_in_memory_services


def services() -> Services:
    return build_in_memory_services()


def add_profile(
    svc: Services,
    user_id: str,
    role: str,
    *,
    name: Optional[str] = None,
    balance: Optional[int] = None,
    teacher: Optional[str] = None,
    subject: Optional[str] = None,
) -> Profile:
    profile = Profile(
        id=user_id,
        email=f"{user_id}@example.com",
        name=name or user_id.upper(),
        role=role,
        balance=balance if balance is not None else (0 if role == "student" else None),
        teacher=teacher,
        subject=subject,
        created_at="2025-01-01T00:00:00+00:00",
    )
    svc.profiles.profiles.put(profile)
    return profile


def add_lesson(
    svc: Services,
    lesson_id: str,
    *,
    student_id: str,
    teacher_id: str,
    date: str = "2025-01-10",
    time: str = "10:00",
    title: str = "Lesson",
    status: str = "scheduled",
) -> Lesson:
    lesson = Lesson(
        id=lesson_id,
        title=title,
        date=date,
        time=time,
        student_id=student_id,
        teacher_id=teacher_id,
        description=None,
        status=status,
        created_at="2025-01-01T00:00:00+00:00",
    )
    svc.lessons.lessons.put(lesson)
    return lesson


def actor(user_id: str, role: str) -> Actor:
    return Actor(id=user_id, role=Role.parse(role))


def login(svc: Services, user_id: str) -> str:
    """Create an identity for `user_id` (if needed) and return a bearer token."""
    identity = svc.identity
    try:
        return identity.issue_token(user_id)
    except IdentityError:
        identity.create_user(
            email=f"{user_id}@example.com", password="secret-pw", metadata={}, user_id=user_id
        )
        return identity.issue_token(user_id)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
