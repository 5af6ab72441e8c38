"""
Identity provider interface and an in-memory provider for development.

Why: The web adapter only needs three things from the identity provider:
resolve a bearer token to an identity, create an account, and sign a user in.
Keeping that behind a protocol lets tests and offline development run without
Supabase. For production, the Supabase adapter in `supabase_auth` is wired.

Security: The in-memory provider stores salted PBKDF2 hashes and opaque random
tokens. Tokens never expire; it is not meant for deployment.
"""
from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from .domain import Identity


class IdentityError(Exception):
    """Raised when the identity provider rejects a request."""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class IdentityProviderProtocol(Protocol):
    def get_user(self, access_token: str) -> Identity: ...

    def create_user(self, *, email: str, password: str, metadata: Dict[str, Any]) -> Identity: ...

    def sign_in(self, *, email: str, password: str) -> Dict[str, Any]: ...


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)


@dataclass
class _Account:
    identity: Identity
    salt: bytes
    password_hash: bytes


class InMemoryIdentityProvider:
    def __init__(self) -> None:
        self._accounts: Dict[str, _Account] = {}
        self._ids_by_email: Dict[str, str] = {}
        self._tokens: Dict[str, str] = {}

    def create_user(self, *, email: str, password: str, metadata: Dict[str, Any], user_id: Optional[str] = None) -> Identity:
        normalized = (email or "").strip().lower()
        if not normalized or "@" not in normalized:
            raise IdentityError("signup_failed", "Unable to validate email address: invalid format")
        if not password:
            raise IdentityError("signup_failed", "Password should be at least 6 characters")
        if normalized in self._ids_by_email:
            raise IdentityError("signup_failed", "A user with this email address has already been registered")
        uid = user_id or str(uuid.uuid4())
        salt = secrets.token_bytes(16)
        identity = Identity(id=uid, email=normalized, metadata=dict(metadata or {}))
        self._accounts[uid] = _Account(identity=identity, salt=salt, password_hash=_hash_password(password, salt))
        self._ids_by_email[normalized] = uid
        return identity

    def issue_token(self, user_id: str) -> str:
        """Mint an access token for an existing account."""
        if user_id not in self._accounts:
            raise IdentityError("user_not_found")
        token = secrets.token_urlsafe(24)
        self._tokens[token] = user_id
        return token

    def get_user(self, access_token: str) -> Identity:
        uid = self._tokens.get(access_token or "")
        account = self._accounts.get(uid or "")
        if not account:
            raise IdentityError("invalid_token")
        return account.identity

    def sign_in(self, *, email: str, password: str) -> Dict[str, Any]:
        uid = self._ids_by_email.get((email or "").strip().lower())
        account = self._accounts.get(uid or "")
        if not account or not secrets.compare_digest(
            account.password_hash, _hash_password(password or "", account.salt)
        ):
            raise IdentityError("signin_failed", "Invalid login credentials")
        token = self.issue_token(account.identity.id)
        return {
            "user": account.identity.to_dict(),
            "session": {"access_token": token, "token_type": "bearer"},
        }


__all__ = ["IdentityError", "IdentityProviderProtocol", "InMemoryIdentityProvider"]
