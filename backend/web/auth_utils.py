"""
Shared authentication utilities for the API routes.

Why:
    Every protected route needs the same two steps: read the identity the auth
    middleware attached to the request, then load the caller's profile to get
    a policy Actor. Keeping both here avoids re-implementing them per router.
"""

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import Request

from backend.identity_access.domain import Identity
from backend.scheduling.domain import Profile
from backend.scheduling.errors import Unauthorized
from backend.scheduling.policy import Actor


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def services_of(request: Request):
    return request.app.state.services


def current_identity(request: Request) -> Identity:
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise Unauthorized()
    return identity


def current_actor(request: Request) -> Tuple[Actor, Optional[Profile]]:
    identity = current_identity(request)
    return services_of(request).profiles.resolve_actor(identity)
