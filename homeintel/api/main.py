"""
homeintel.api.main - FastAPI application entry point
====================================================

Run with::

    uvicorn homeintel.api.main:app --reload --port 8000

or ``python -m homeintel`` to use the port from ``config.yaml``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from homeintel.api.deps import get_engine  # noqa: E402
from homeintel.api.routes.home import router as home_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: warm the DB engine."""
    engine = get_engine()
    logger.info("HomeIntel API started - engine ready (%s)", engine.url.database)
    yield
    logger.info("HomeIntel API shutting down")


app = FastAPI(
    title="HomeIntel API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(home_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
