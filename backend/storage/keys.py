"""
Helpers to generate standardized keys for the key-value store.

Why:
    Every record lives in one flat key space and the store's only query
    primitive is a prefix scan. Keeping the key shapes in one module keeps the
    scans and the writes in sync.

Conventions:
    - Profiles: user:{user_id}
    - Lessons: lesson:{student_id}:{lesson_id}
    - Balance log: balance_log:{student_id}:{epoch_ms}-{uuid}

Security:
    Segments must be non-empty and must not contain the ":" separator, otherwise
    a crafted id could widen a prefix scan into another owner's key range.
"""
from __future__ import annotations

USER_PREFIX = "user:"
LESSON_PREFIX = "lesson:"
BALANCE_LOG_PREFIX = "balance_log:"


def _segment(value: str) -> str:
    value = str(value or "").strip()
    if not value or ":" in value:
        raise ValueError("invalid_key_segment")
    return value


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{_segment(user_id)}"


def lesson_key(student_id: str, lesson_id: str) -> str:
    """Build a lesson key. Returns: lesson:{student}:{lesson}"""
    return f"{LESSON_PREFIX}{_segment(student_id)}:{_segment(lesson_id)}"


def lesson_prefix_for_student(student_id: str) -> str:
    """Prefix covering every lesson owned by one student (trailing colon included)."""
    return f"{LESSON_PREFIX}{_segment(student_id)}:"


def balance_log_key(*, student_id: str, epoch_ms: int, uuid_hex: str) -> str:
    """Build a balance log key.

    Returns: balance_log:{student}:{epoch_ms}-{uuid}

    The uuid suffix keeps two writes in the same millisecond apart.
    """
    hexpart = (uuid_hex or "").strip() or "entry"
    return f"{BALANCE_LOG_PREFIX}{_segment(student_id)}:{int(epoch_ms)}-{hexpart}"


__all__ = [
    "USER_PREFIX",
    "LESSON_PREFIX",
    "BALANCE_LOG_PREFIX",
    "user_key",
    "lesson_key",
    "lesson_prefix_for_student",
    "balance_log_key",
]
