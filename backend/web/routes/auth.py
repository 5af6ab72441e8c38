"""Account endpoints: student self-signup and password sign-in."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from backend.identity_access.provider import IdentityError

from ..auth_utils import services_of
from ..responses import json_private, private_error

auth_router = APIRouter(tags=["Auth"])
logger = logging.getLogger("tutorbook.web")


class SignupPayload(BaseModel):
    # Raw values; the profiles service returns a specific 400 per field.
    email: str | None = None
    password: str | None = None
    name: str | None = None


class SigninPayload(BaseModel):
    email: str | None = None
    password: str | None = None


@auth_router.post("/auth/signup")
async def signup(request: Request, payload: SignupPayload):
    """
    Create a student account and its profile.

    Behavior:
        - 200 `{user}` with the created identity (`id`, `email`, `user_metadata`)
        - 400 `invalid_name`/`invalid_email`/`invalid_password` on bad input
        - 400 `signup_failed` when the identity provider rejects the account

    Permissions:
        Public. The role is always `student`.
    """
    try:
        identity = services_of(request).profiles.register(
            email=payload.email, password=payload.password, name=payload.name
        )
    except IdentityError as exc:
        logger.warning("Signup rejected: %s", exc.code)
        return private_error({"error": "signup_failed", "detail": exc.message}, status_code=400)
    return json_private({"user": identity.to_dict()})


@auth_router.post("/auth/signin")
async def signin(request: Request, payload: SigninPayload):
    """
    Exchange email and password for a session.

    Behavior:
        - 200 `{user, session}`; `session.access_token` is the bearer token
        - 400 `signin_failed` on wrong credentials or missing fields
    """
    if not payload.email or not payload.password:
        return private_error({"error": "signin_failed", "detail": "missing_credentials"}, status_code=400)
    try:
        result = services_of(request).identity.sign_in(email=payload.email.strip(), password=payload.password)
    except IdentityError as exc:
        return private_error({"error": "signin_failed", "detail": exc.message}, status_code=400)
    return json_private(result)
