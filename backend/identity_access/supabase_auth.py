"""
Supabase Auth adapter for the identity provider protocol.

The adapter is duck-typed against the `auth` namespace of a Supabase client
created with the Service Role key:

- auth.get_user(jwt) -> response with `.user`
- auth.admin.create_user({...}) -> response with `.user`
- auth.sign_in_with_password({...}) -> response with `.user` and `.session`

Any client error is mapped to IdentityError so the web layer never sees
gotrue exception types. Token values are never logged.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .domain import Identity
from .provider import IdentityError, IdentityProviderProtocol

logger = logging.getLogger("tutorbook.identity_access")


def _as_dict(obj: Any) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    dump = getattr(obj, "model_dump", None)
    if callable(dump):
        return dump(mode="json")
    if isinstance(obj, dict):
        return dict(obj)
    return dict(vars(obj))


def _identity_from_user(user: Any) -> Identity:
    data = _as_dict(user) or {}
    uid = str(data.get("id") or "")
    if not uid:
        raise IdentityError("invalid_token")
    return Identity(
        id=uid,
        email=str(data.get("email") or ""),
        metadata=dict(data.get("user_metadata") or {}),
    )


def _error_message(exc: Exception) -> str:
    return str(getattr(exc, "message", None) or exc)


class SupabaseIdentityProvider(IdentityProviderProtocol):
    def __init__(self, client: Any):
        self._client = client

    def get_user(self, access_token: str) -> Identity:
        if not access_token:
            raise IdentityError("invalid_token")
        try:
            res = self._client.auth.get_user(access_token)
        except Exception as exc:
            logger.warning("Token verification failed: %s", exc.__class__.__name__)
            raise IdentityError("invalid_token") from exc
        user = getattr(res, "user", None)
        if user is None:
            raise IdentityError("invalid_token")
        return _identity_from_user(user)

    def create_user(self, *, email: str, password: str, metadata: Dict[str, Any]) -> Identity:
        try:
            res = self._client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "user_metadata": dict(metadata or {}),
                    "email_confirm": True,
                }
            )
        except Exception as exc:
            logger.warning("Account creation rejected: %s", exc.__class__.__name__)
            raise IdentityError("signup_failed", _error_message(exc)) from exc
        user = getattr(res, "user", None)
        if user is None:
            raise IdentityError("signup_failed")
        return _identity_from_user(user)

    def sign_in(self, *, email: str, password: str) -> Dict[str, Any]:
        try:
            res = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            logger.warning("Sign-in rejected: %s", exc.__class__.__name__)
            raise IdentityError("signin_failed", _error_message(exc)) from exc
        return {
            "user": _as_dict(getattr(res, "user", None)),
            "session": _as_dict(getattr(res, "session", None)),
        }


__all__ = ["SupabaseIdentityProvider"]
