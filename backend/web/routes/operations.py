"""Operations endpoints (liveness for load balancers and deploy checks)."""

from __future__ import annotations

from fastapi import APIRouter, Request

from ..responses import json_private

operations_router = APIRouter(tags=["Operations"])


@operations_router.get("/health")
async def health(request: Request):
    """
    Report liveness and which store backend is wired.

    Permissions:
        Public; exposes no user data.
    """
    kv = request.app.state.services.kv
    return json_private({"status": "ok", "store": kv.__class__.__name__})
