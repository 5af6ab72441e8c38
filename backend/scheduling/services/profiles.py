"""Profile use cases: signup, own profile, student and teacher directories.

Why:
    Keeps profile rules framework-free. The web adapter resolves the bearer
    token to an Identity and hands it here; everything role-related is decided
    through the policy module.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from backend.identity_access.domain import STAFF_ROLES, Identity, Role
from backend.identity_access.provider import IdentityProviderProtocol

from ..domain import Profile, utc_now_iso
from ..errors import InvalidArgument
from ..policy import Action, Actor, allows, require
from ..stores import ProfileStore

logger = logging.getLogger("tutorbook.scheduling")


def _normalize_name(value: object) -> str:
    if not isinstance(value, str):
        raise InvalidArgument("invalid_name")
    trimmed = value.strip()
    if not trimmed or len(trimmed) > 200:
        raise InvalidArgument("invalid_name")
    return trimmed


@dataclass
class ProfilesService:
    profiles: ProfileStore
    identity: IdentityProviderProtocol

    def resolve_actor(self, identity: Identity) -> Tuple[Actor, Optional[Profile]]:
        profile = self.profiles.get(identity.id)
        return Actor.from_profile(identity.id, profile), profile

    def get_profile(self, identity: Identity) -> Dict[str, Any]:
        """Return the caller's stored profile, or the bare identity without one."""
        actor, profile = self.resolve_actor(identity)
        if profile is None:
            return {"id": identity.id, "email": identity.email}
        require(actor, Action.VIEW_OWN_PROFILE, profile)
        return profile.to_record()

    def register(self, *, email: object, password: object, name: object) -> Identity:
        """Create an account and its student profile.

        The role is always `student`; staff accounts are provisioned out of band.
        """
        display_name = _normalize_name(name)
        if not isinstance(email, str) or not email.strip():
            raise InvalidArgument("invalid_email")
        if not isinstance(password, str) or not password:
            raise InvalidArgument("invalid_password")
        role = Role.STUDENT.value
        created = self.identity.create_user(
            email=email.strip(),
            password=password,
            metadata={"name": display_name, "role": role},
        )
        self.profiles.put(
            Profile(
                id=created.id,
                email=created.email or email.strip(),
                name=display_name,
                role=role,
                balance=0,
                teacher=None,
                subject=None,
                created_at=utc_now_iso(),
            )
        )
        logger.info("student registered id=%s", created.id[-6:])
        return created

    def provision(self, *, email: str, password: str, name: str, role: Role) -> Profile:
        """Create a staff account (teacher/admin) with its profile."""
        if role is Role.STUDENT:
            raise InvalidArgument("invalid_role")
        display_name = _normalize_name(name)
        created = self.identity.create_user(
            email=email.strip(),
            password=password,
            metadata={"name": display_name, "role": role.value},
        )
        profile = Profile(
            id=created.id,
            email=created.email or email.strip(),
            name=display_name,
            role=role.value,
            balance=None,
            teacher=None,
            subject=None,
            created_at=utc_now_iso(),
        )
        self.profiles.put(profile)
        logger.info("staff provisioned id=%s role=%s", created.id[-6:], role.value)
        return profile

    def list_students(self, actor: Actor) -> Dict[str, List[Dict[str, Any]]]:
        """Return `{students, newStudents}` visible to a teacher or admin.

        Admins see every student; teachers see the students assigned to them.
        `newStudents` lists unassigned students for both roles. Each entry
        carries `teacherName` resolved from the staff profiles.
        """
        require(actor, Action.LIST_STUDENTS)
        everyone = self.profiles.list_all()
        staff_names = {p.id: p.name for p in everyone if p.role in STAFF_ROLES}

        def _entry(p: Profile) -> Dict[str, Any]:
            record = p.to_record()
            record["teacherName"] = staff_names.get(p.teacher) if p.teacher else None
            return record

        visible = [p for p in everyone if p.is_student and allows(actor, Action.VIEW_PROFILE, p)]
        if actor.is_admin:
            students = visible
        else:
            students = [p for p in visible if p.teacher == actor.id]
        new_students = [p for p in visible if p.teacher is None]
        return {
            "students": [_entry(p) for p in students],
            "newStudents": [_entry(p) for p in new_students],
        }

    def list_teachers(self, actor: Actor) -> List[Dict[str, Any]]:
        require(actor, Action.LIST_TEACHERS)
        return [p.to_record() for p in self.profiles.list_all() if p.role in STAFF_ROLES]


__all__ = ["ProfilesService"]
