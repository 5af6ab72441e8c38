"""
Configuration and startup security checks for Tutorbook.

Why: Keep every environment variable the API reads in one place, and refuse
to start a production deployment with obviously unsafe settings while local
development stays permissive (no Supabase needed, in-memory stores).

Permissions: The caller needs no special privileges. The functions read
environment variables; the guard raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import List

LOGGER_NAMESPACE = "tutorbook"


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def _under_pytest() -> bool:
    return "pytest" in sys.modules or bool(os.getenv("PYTEST_CURRENT_TEST"))


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via TUTORBOOK_ENABLE_DOTENV (default true).
    """
    if _under_pytest():
        return False
    flag = (os.getenv("TUTORBOOK_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


def load_dotenv_if_enabled() -> bool:
    if not _should_load_dotenv():
        return False
    from dotenv import load_dotenv

    return load_dotenv()


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    kv_table: str = "kv_store"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def is_prod_like(self) -> bool:
        return _is_prod_like(self.environment)


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def load_settings() -> Settings:
    return Settings(
        environment=(os.getenv("TUTORBOOK_ENV", "dev") or "dev").strip().lower(),
        supabase_url=(os.getenv("SUPABASE_URL") or "").strip(),
        supabase_service_role_key=(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip(),
        kv_table=(os.getenv("KV_TABLE") or "kv_store").strip(),
        cors_allow_origins=_split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*")) or ["*"],
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )


def configure_logging(settings: Settings) -> None:
    """Apply the configured level to the `tutorbook.*` logger tree.

    Handlers are left to the process runner (uvicorn, pytest).
    """
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)


def ensure_secure_config_on_startup(settings: Settings | None = None) -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/staging only):
    - Supabase URL and Service Role key must be set and not placeholders.
    - SUPABASE_URL must use https.
    - CORS must name explicit origins instead of "*".
    """
    settings = settings or load_settings()
    if not settings.is_prod_like:
        return  # dev/test remain permissive

    key = settings.supabase_service_role_key
    if not key or key.upper() in {"DUMMY_DO_NOT_USE", "CHANGE_ME"}:
        raise SystemExit(
            "Refusing to start: SUPABASE_SERVICE_ROLE_KEY is unset or a dummy placeholder in production."
        )

    url = settings.supabase_url
    if not url:
        raise SystemExit("Refusing to start: SUPABASE_URL is unset in production.")
    if not url.lower().startswith("https://"):
        raise SystemExit("Refusing to start: SUPABASE_URL must use https in production.")

    if "*" in settings.cors_allow_origins:
        raise SystemExit(
            "Refusing to start: CORS_ALLOW_ORIGINS must list explicit origins in production (got '*')."
        )


__all__ = [
    "Settings",
    "configure_logging",
    "ensure_secure_config_on_startup",
    "load_dotenv_if_enabled",
    "load_settings",
]
