"""
Service wiring: build the store and identity clients the API handlers use.

Why:
    Handlers must not reach for module-level client globals. `create_app()`
    builds one `Services` bundle per application instance and stores it on
    `app.state.services`; tests pass their own bundle.

Behavior:
    - With SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY set, a Supabase client
      backs both the key-value store and the identity provider.
    - Without them (local development, tests), in-memory implementations are
      used and a warning is logged.

Security:
    The Supabase client is created with the Service Role key; it never leaves
    the server process.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from backend.identity_access.provider import IdentityProviderProtocol, InMemoryIdentityProvider
from backend.scheduling.services.assignments import AssignmentService
from backend.scheduling.services.balance import BalanceService
from backend.scheduling.services.lessons import LessonsService
from backend.scheduling.services.profiles import ProfilesService
from backend.scheduling.stores import BalanceLogStore, LessonStore, ProfileStore
from backend.storage.kv import InMemoryKVStore, KVStoreProtocol

from .config import Settings, load_settings

logger = logging.getLogger("tutorbook.web")

ClientFactory = Callable[[str, str], Any]


@dataclass
class Services:
    kv: KVStoreProtocol
    identity: IdentityProviderProtocol
    profiles: ProfilesService
    assignments: AssignmentService
    balance: BalanceService
    lessons: LessonsService


def build_services(kv: KVStoreProtocol, identity: IdentityProviderProtocol) -> Services:
    profile_store = ProfileStore(kv)
    return Services(
        kv=kv,
        identity=identity,
        profiles=ProfilesService(profiles=profile_store, identity=identity),
        assignments=AssignmentService(profiles=profile_store),
        balance=BalanceService(profiles=profile_store, log=BalanceLogStore(kv)),
        lessons=LessonsService(lessons=LessonStore(kv)),
    )


def build_in_memory_services() -> Services:
    return build_services(InMemoryKVStore(), InMemoryIdentityProvider())


def _default_client_factory(url: str, key: str) -> Any:
    from supabase import create_client

    return create_client(url, key)


def build_supabase_services(settings: Settings, client_factory: Optional[ClientFactory] = None) -> Services:
    from backend.identity_access.supabase_auth import SupabaseIdentityProvider
    from backend.storage.kv_supabase import SupabaseKVStore

    factory = client_factory or _default_client_factory
    client = factory(settings.supabase_url, settings.supabase_service_role_key)
    return build_services(
        SupabaseKVStore(client, table=settings.kv_table),
        SupabaseIdentityProvider(client),
    )


def build_services_from_env(
    settings: Settings | None = None,
    client_factory: Optional[ClientFactory] = None,
) -> Services:
    """Wire Supabase-backed services when configured, in-memory ones otherwise.

    In production-like environments a failing Supabase client is fatal; in
    development the in-memory fallback keeps the API usable offline.
    """
    settings = settings or load_settings()
    if not settings.supabase_configured:
        logger.warning("Supabase not configured; using in-memory stores")
        return build_in_memory_services()
    try:
        services = build_supabase_services(settings, client_factory)
    except Exception as exc:
        logger.warning("Supabase client unavailable: %s: %s", exc.__class__.__name__, str(exc))
        if settings.is_prod_like:
            raise
        return build_in_memory_services()
    logger.info("Services wired: Supabase (table=%s)", settings.kv_table)
    return services


__all__ = [
    "Services",
    "build_in_memory_services",
    "build_services",
    "build_services_from_env",
    "build_supabase_services",
]
