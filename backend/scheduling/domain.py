"""
Scheduling records and value validation.

Records are stored and served as JSON objects with camelCase keys. The
dataclasses keep Python code in snake_case; `to_record`/`from_record` are the
only places that know about the stored shape.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from .errors import InvalidArgument

SUBJECTS = frozenset({"frontend", "python", "3d_modeling"})
LESSON_STATUSES = frozenset({"scheduled", "completed", "cancelled", "rescheduled"})
BALANCE_OPERATIONS = frozenset({"add", "set"})
DEFAULT_LESSON_STATUS = "scheduled"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_subject(value: object) -> str:
    if not isinstance(value, str) or value not in SUBJECTS:
        raise InvalidArgument("invalid_subject")
    return value


def normalize_status(value: object) -> str:
    if not isinstance(value, str) or value not in LESSON_STATUSES:
        raise InvalidArgument("invalid_status")
    return value


def normalize_operation(value: object) -> str:
    if not isinstance(value, str) or value not in BALANCE_OPERATIONS:
        raise InvalidArgument("invalid_operation")
    return value


def parse_lesson_date(value: object) -> date:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidArgument("invalid_date")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidArgument("invalid_date") from exc


def normalize_lesson_date(value: object) -> str:
    return parse_lesson_date(value).isoformat()


def normalize_lesson_time(value: object) -> str:
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise InvalidArgument("invalid_time")
    return value


def normalize_title(value: object) -> str:
    if not isinstance(value, str):
        raise InvalidArgument("invalid_title")
    trimmed = value.strip()
    if not trimmed or len(trimmed) > 200:
        raise InvalidArgument("invalid_title")
    return trimmed


@dataclass
class Profile:
    id: str
    email: str
    name: str
    role: str
    balance: Optional[int] = None
    teacher: Optional[str] = None
    subject: Optional[str] = None
    created_at: str = ""

    @property
    def is_student(self) -> bool:
        return self.role == "student"

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "balance": self.balance,
            "teacher": self.teacher,
            "subject": self.subject,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(data.get("id") or ""),
            email=str(data.get("email") or ""),
            name=str(data.get("name") or ""),
            role=str(data.get("role") or ""),
            balance=data.get("balance"),
            teacher=data.get("teacher") or None,
            subject=data.get("subject") or None,
            created_at=str(data.get("createdAt") or ""),
        )


@dataclass
class Lesson:
    id: str
    title: str
    date: str
    time: str
    student_id: str
    teacher_id: str
    description: Optional[str]
    status: str
    created_at: str
    updated_at: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "studentId": self.student_id,
            "teacherId": self.teacher_id,
            "description": self.description,
            "status": self.status,
            "createdAt": self.created_at,
        }
        if self.updated_at is not None:
            record["updatedAt"] = self.updated_at
        return record

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Lesson":
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            date=str(data.get("date") or ""),
            time=str(data.get("time") or ""),
            student_id=str(data.get("studentId") or ""),
            teacher_id=str(data.get("teacherId") or ""),
            description=data.get("description"),
            status=str(data.get("status") or DEFAULT_LESSON_STATUS),
            created_at=str(data.get("createdAt") or ""),
            updated_at=data.get("updatedAt"),
        )


@dataclass(frozen=True)
class BalanceLogEntry:
    student_id: str
    operation: str
    amount: int
    previous_balance: int
    new_balance: int
    timestamp: str
    admin_id: str

    def to_record(self) -> Dict[str, Any]:
        return {
            "studentId": self.student_id,
            "operation": self.operation,
            "amount": self.amount,
            "previousBalance": self.previous_balance,
            "newBalance": self.new_balance,
            "timestamp": self.timestamp,
            "adminId": self.admin_id,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "BalanceLogEntry":
        return cls(
            student_id=str(data.get("studentId") or ""),
            operation=str(data.get("operation") or ""),
            amount=int(data.get("amount") or 0),
            previous_balance=int(data.get("previousBalance") or 0),
            new_balance=int(data.get("newBalance") or 0),
            timestamp=str(data.get("timestamp") or ""),
            admin_id=str(data.get("adminId") or ""),
        )
