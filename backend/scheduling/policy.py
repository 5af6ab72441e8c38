"""
Role policy: who may see or change which scheduling records.

Why:
    Every use case asks the same question, "may this actor perform this action
    on this record?". Answering it from one permission matrix keeps the rules in
    a single reviewable table instead of role comparisons spread over handlers.

Model:
    PERMISSIONS maps a role to the scope it holds for each action. A scope is
    evaluated against the target record:

    - SELF: the record belongs to the actor (profile id / lesson student).
    - OWNED: the record is bound to the actor as teacher.
    - OWNED_OR_NEW: OWNED, or a student profile with no teacher yet.
    - ALL: any record.

    Missing entries mean no access. Actors without a known role hold nothing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from backend.identity_access.domain import Role

from .domain import Lesson, Profile
from .errors import Forbidden

logger = logging.getLogger("tutorbook.scheduling")


class Action(str, Enum):
    VIEW_OWN_PROFILE = "view_own_profile"
    VIEW_PROFILE = "view_profile"
    LIST_STUDENTS = "list_students"
    ASSIGN_STUDENT = "assign_student"
    CHANGE_TEACHER = "change_teacher"
    LIST_TEACHERS = "list_teachers"
    UPDATE_BALANCE = "update_balance"
    VIEW_LESSON = "view_lesson"
    CREATE_LESSON = "create_lesson"
    UPDATE_LESSON = "update_lesson"
    DELETE_LESSON = "delete_lesson"


class Scope(str, Enum):
    SELF = "self"
    OWNED = "owned"
    OWNED_OR_NEW = "owned_or_new"
    ALL = "all"


PERMISSIONS: Mapping[Role, Mapping[Action, Scope]] = MappingProxyType(
    {
        Role.STUDENT: MappingProxyType(
            {
                Action.VIEW_OWN_PROFILE: Scope.SELF,
                Action.VIEW_PROFILE: Scope.SELF,
                Action.VIEW_LESSON: Scope.SELF,
            }
        ),
        Role.TEACHER: MappingProxyType(
            {
                Action.VIEW_OWN_PROFILE: Scope.SELF,
                Action.VIEW_PROFILE: Scope.OWNED_OR_NEW,
                Action.LIST_STUDENTS: Scope.OWNED_OR_NEW,
                Action.ASSIGN_STUDENT: Scope.OWNED_OR_NEW,
                Action.UPDATE_BALANCE: Scope.OWNED,
                Action.VIEW_LESSON: Scope.OWNED,
                Action.CREATE_LESSON: Scope.OWNED,
                Action.UPDATE_LESSON: Scope.OWNED,
                Action.DELETE_LESSON: Scope.OWNED,
            }
        ),
        Role.ADMIN: MappingProxyType({action: Scope.ALL for action in Action}),
    }
)

Target = Union[Profile, Lesson, None]


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as seen by the policy."""

    id: str
    role: Optional[Role]

    @classmethod
    def from_profile(cls, user_id: str, profile: Optional[Profile]) -> "Actor":
        return cls(id=user_id, role=Role.parse(profile.role) if profile else None)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role is Role.TEACHER


def scope_for(actor: Actor, action: Action) -> Optional[Scope]:
    if actor.role is None:
        return None
    return PERMISSIONS.get(actor.role, {}).get(action)


def _owner_of(target: Target) -> Optional[str]:
    if isinstance(target, Lesson):
        return target.teacher_id or None
    if isinstance(target, Profile):
        return target.teacher
    return None


def _subject_of(target: Target) -> Optional[str]:
    if isinstance(target, Lesson):
        return target.student_id
    if isinstance(target, Profile):
        return target.id
    return None


def _in_scope(scope: Scope, actor: Actor, target: Target) -> bool:
    if scope is Scope.ALL or target is None:
        return True
    if scope is Scope.SELF:
        return _subject_of(target) == actor.id
    owner = _owner_of(target)
    if scope is Scope.OWNED:
        return owner == actor.id
    if scope is Scope.OWNED_OR_NEW:
        if owner == actor.id:
            return True
        return isinstance(target, Profile) and target.is_student and owner is None
    return False


def allows(actor: Actor, action: Action, target: Target = None) -> bool:
    """Return True when the actor's role grants `action` on `target`.

    With `target=None` only the role-level grant is checked; callers use that
    before loading records and for list endpoints.
    """
    scope = scope_for(actor, action)
    if scope is None:
        return False
    return _in_scope(scope, actor, target)


def require(actor: Actor, action: Action, target: Target = None, *, detail: str | None = None) -> None:
    """Raise Forbidden unless `allows(actor, action, target)`."""
    if allows(actor, action, target):
        return
    logger.warning(
        "denied action=%s role=%s actor=%s",
        action.value,
        actor.role.value if actor.role else None,
        actor.id[-6:],
    )
    raise Forbidden(detail or action.value)


__all__ = ["Action", "Actor", "PERMISSIONS", "Scope", "allows", "require", "scope_for"]
