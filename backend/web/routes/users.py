"""Profile endpoint for the authenticated caller."""

from __future__ import annotations

from fastapi import APIRouter, Request

from ..auth_utils import current_identity, services_of
from ..responses import json_private

users_router = APIRouter(tags=["Users"])


@users_router.get("/user/profile")
async def get_profile(request: Request):
    """
    Return the caller's profile as `{user}`.

    Without a stored profile the bare identity (`id`, `email`) is returned.
    """
    identity = current_identity(request)
    return json_private({"user": services_of(request).profiles.get_profile(identity)})
