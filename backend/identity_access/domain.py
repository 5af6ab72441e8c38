"""
Identity domain constants and simple helpers.

Why:
- Centralize allowed roles to avoid drift between the CLI, the policy and the
  web layer.
- Keep the identity record small: the identity provider owns credentials,
  the profile store owns everything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        """Return the matching role or None for unknown/missing values."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


# Roles provisioned out of band; signup never yields one of these.
STAFF_ROLES = (Role.TEACHER.value, Role.ADMIN.value)


@dataclass(frozen=True)
class Identity:
    """Opaque user identity as returned by the identity provider."""

    id: str
    email: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "user_metadata": dict(self.metadata)}


__all__ = ["STAFF_ROLES", "Identity", "Role"]
