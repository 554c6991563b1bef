"""
homeintel.database.engine - Database Connection & Async Helper
==============================================================

The API runs on an ``asyncio`` event loop, but SQLAlchemy + psycopg2 is
synchronous.  Every query is therefore written as a plain sync function
and shipped to a worker thread with :func:`run_db`:

    1. A request arrives (async world).
    2. The service calls ``await run_db(some_function, arg1, arg2)``.
    3. ``run_db`` hands the sync function to ``asyncio.to_thread()``.
    4. The query runs on a background thread; the event loop stays free.
    5. The result is awaited back in the service.

The signal aggregator relies on this to fan out its six source queries
concurrently without an async driver.

Usage::

    from homeintel.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    rows = await run_db(fetch_something, engine, building_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from homeintel.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine() -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    The pool is sized for the brief fan-out: one dashboard load can hold
    up to six connections at once (one per signal source).

    * ``pool_size=10`` - persistent connections.
    * ``max_overflow=20`` - extra connections under load.
    * ``pool_timeout=10`` - fail after 10 s if no connection is available.
    * ``pool_recycle=3600`` - recycle connections after 1 hour.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    engine = create_engine(
        url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_timeout=10,
        pool_recycle=3600,
    )
    logger.info("Database engine created → %s", engine.url.host)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`homeintel.database.models`.

    Safe to call on every startup.

    .. note::

        In production the schema is managed by Alembic (``alembic upgrade
        head``).  ``create_all`` is retained for dev/test environments
        where Alembic may not have run.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.add(EngagementEvent(...))
            # commit happens automatically on block exit
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Under the hood this calls :func:`asyncio.to_thread`, which schedules
    *func* on the default ``ThreadPoolExecutor`` so the event loop is
    never blocked.  If the awaiting task is cancelled the thread still
    runs to completion, but its result is discarded.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
