"""
homeintel.__main__ - Entry point for ``python -m homeintel``
============================================================

Wiring:
1. Load .env (secrets, DATABASE_URL).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Serve the FastAPI app with uvicorn (blocking).

Run with::

    uv run python -m homeintel
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from homeintel.config import load_config
from homeintel.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("homeintel")


def main() -> None:
    """Bootstrap and run the HomeIntel API."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    try:
        cfg = load_config()
    except FileNotFoundError as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    logger.info(
        "Config loaded - %s (brief max age %s min, day boundary %s)",
        cfg.service_name, cfg.brief_max_age_minutes, cfg.day_boundary_tz,
    )

    # 3. Database.
    try:
        engine = create_db_engine()
    except RuntimeError as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    init_db(engine)

    # 4. HTTP server (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting %s on port %d", cfg.service_name, cfg.api_port)
    uvicorn.run("homeintel.api.main:app", host="0.0.0.0", port=cfg.api_port)


if __name__ == "__main__":
    main()
