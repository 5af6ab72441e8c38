"""
Profile, lesson and balance-log stores on top of the key-value substrate.

The stores only translate between records and keys; they do not check
permissions. Every method is a single store round trip except where noted.
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import List, Optional

from backend.storage import keys
from backend.storage.kv import KVStoreProtocol

from .domain import BalanceLogEntry, Lesson, Profile


@dataclass
class ProfileStore:
    kv: KVStoreProtocol

    def get(self, user_id: str) -> Optional[Profile]:
        data = self.kv.get(keys.user_key(user_id))
        return Profile.from_record(data) if data else None

    def put(self, profile: Profile) -> None:
        self.kv.set(keys.user_key(profile.id), profile.to_record())

    def list_all(self) -> List[Profile]:
        return [Profile.from_record(d) for d in self.kv.get_by_prefix(keys.USER_PREFIX) if d]


@dataclass
class LessonStore:
    kv: KVStoreProtocol

    def put(self, lesson: Lesson) -> None:
        self.kv.set(keys.lesson_key(lesson.student_id, lesson.id), lesson.to_record())

    def delete(self, student_id: str, lesson_id: str) -> None:
        self.kv.delete(keys.lesson_key(student_id, lesson_id))

    def list_all(self) -> List[Lesson]:
        return [Lesson.from_record(d) for d in self.kv.get_by_prefix(keys.LESSON_PREFIX) if d]

    def list_for_student(self, student_id: str) -> List[Lesson]:
        prefix = keys.lesson_prefix_for_student(student_id)
        return [Lesson.from_record(d) for d in self.kv.get_by_prefix(prefix) if d]


@dataclass
class BalanceLogStore:
    kv: KVStoreProtocol

    def append(self, entry: BalanceLogEntry) -> str:
        """Write one log entry under a fresh key and return that key."""
        key = keys.balance_log_key(
            student_id=entry.student_id,
            epoch_ms=int(time.time() * 1000),
            uuid_hex=uuid.uuid4().hex,
        )
        self.kv.set(key, entry.to_record())
        return key


__all__ = ["ProfileStore", "LessonStore", "BalanceLogStore"]
