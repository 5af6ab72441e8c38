"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend, and keep every test on in-memory stores:
no Supabase project or network is needed.
"""
import os
import sys
from pathlib import Path

import pytest

_ENV_VARS = (
    "TUTORBOOK_ENV",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "KV_TABLE",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
)

# `backend.web.main` builds an app at import time; it must wire in-memory stores.
for _var in _ENV_VARS:
    os.environ.pop(_var, None)

REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_tutorbook_env(monkeypatch: pytest.MonkeyPatch):
    """Drop configuration leaked by a previous test so each starts in dev."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield
