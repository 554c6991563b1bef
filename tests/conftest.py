"""
tests/conftest.py - Shared Test Fixtures
========================================
"""

from __future__ import annotations

import asyncio
import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of homeintel.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite renders PG JSONB as TEXT; SQLAlchemy's JSON handling does the rest.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from homeintel.database.models import Base  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent).

    Also maps BigInteger → INTEGER so autoincrement works on SQLite.
    """
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy import BigInteger
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    @compiles(BigInteger, "sqlite")
    def _compile_bigint_as_integer(type_, compiler, **kw):
        return "INTEGER"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


def run_async(coro):
    """Run an async coroutine in a new event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with every HomeIntel table.

    Uses StaticPool so all threads share the same in-memory database
    (``run_db`` executes queries on worker threads).
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def fanout_engine(tmp_path) -> Engine:
    """File-backed SQLite engine with a connection per thread.

    For tests that drive the concurrent signal fan-out, where several
    worker threads query at once.
    """
    from sqlalchemy.pool import NullPool

    engine = create_engine(
        f"sqlite:///{tmp_path / 'homeintel.db'}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 5},
        poolclass=NullPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session for seeding rows; tests commit explicitly."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


def make_resident_token(sub: str = "user-1", **claims) -> str:
    """Create a resident JWT.  Usable as a plain factory in tests."""
    import jwt

    from homeintel.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode({"sub": sub, **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def resident_token():
    return make_resident_token()


@pytest.fixture
def client():
    """Create a FastAPI TestClient with raise_server_exceptions=False."""
    from fastapi.testclient import TestClient

    from homeintel.api.main import app

    return TestClient(app, raise_server_exceptions=False)
