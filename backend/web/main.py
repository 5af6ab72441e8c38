"""
Tutorbook API application.

`create_app()` builds one FastAPI instance with its service bundle on
`app.state.services`. Authentication is enforced in a middleware: every path
outside the public set needs `Authorization: Bearer <token>`, which is resolved
through the identity provider and exposed as `request.state.identity`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from backend.identity_access.provider import IdentityError
from backend.scheduling.errors import SchedulingError

from .auth_utils import bearer_token
from .config import (
    Settings,
    configure_logging,
    ensure_secure_config_on_startup,
    load_dotenv_if_enabled,
    load_settings,
)
from .responses import error_response, private_error
from .routes.auth import auth_router
from .routes.lessons import lessons_router
from .routes.operations import operations_router
from .routes.students import students_router
from .routes.users import users_router
from .wiring import Services, build_services_from_env

logger = logging.getLogger("tutorbook.web")

_PUBLIC_PREFIXES = ("/auth/",)
_PUBLIC_PATHS = ("/health", "/docs", "/docs/oauth2-redirect", "/redoc", "/openapi.json")


def _is_public_path(path: str) -> bool:
    return path.startswith(_PUBLIC_PREFIXES) or path in _PUBLIC_PATHS


def create_app(services: Services | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the API application.

    Tests pass an in-memory `services` bundle; without one the bundle is wired
    from the environment (Supabase when configured, in-memory otherwise).
    """
    load_dotenv_if_enabled()
    settings = settings or load_settings()
    configure_logging(settings)
    ensure_secure_config_on_startup(settings)

    app = FastAPI(title="Tutorbook", description="Tutoring school scheduling API", version="0.1.0")
    app.state.settings = settings
    app.state.services = services or build_services_from_env(settings)

    @app.exception_handler(SchedulingError)
    async def _scheduling_error(request: Request, exc: SchedulingError):
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return private_error({"error": "bad_request", "detail": "invalid_input"}, status_code=400)

    @app.middleware("http")
    async def auth_enforcement(request: Request, call_next):
        if request.method == "OPTIONS" or _is_public_path(request.url.path):
            return await call_next(request)

        token = bearer_token(request.headers.get("authorization"))
        if not token:
            return private_error({"error": "unauthenticated"}, status_code=401)
        try:
            identity = request.app.state.services.identity.get_user(token)
        except IdentityError as exc:
            logger.warning("Token rejected: %s", exc.code)
            return private_error({"error": "unauthenticated"}, status_code=401)

        request.state.identity = identity
        return await call_next(request)

    @app.middleware("http")
    async def error_boundary(request: Request, call_next):
        # Registered after auth_enforcement, so it wraps it.
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return private_error({"error": "internal_error"}, status_code=500)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["authorization", "content-type", "x-client-info", "apikey"],
        max_age=600,
    )

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(students_router)
    app.include_router(lessons_router)
    app.include_router(operations_router)
    return app


app = create_app()
