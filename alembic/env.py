"""Alembic environment, wired to HomeIntel models and DATABASE_URL.

Only the tables this service writes (``engagement_events`` and
``home_briefs``) are migrated from here.  The signal-source tables are
owned by the CRUD side of the platform and are skipped by autogenerate.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

from alembic import context

load_dotenv()

config = context.config

database_url = os.getenv("DATABASE_URL")
if database_url:
    config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from homeintel.database.models import Base  # noqa: E402

target_metadata = Base.metadata

OWNED_TABLES = frozenset({"engagement_events", "home_briefs"})


def include_object(obj, name, type_, reflected, compare_to) -> bool:
    """Restrict autogenerate to the tables this service owns."""
    if type_ == "table":
        return name in OWNED_TABLES
    table = getattr(obj, "table", None)
    if table is not None:
        return table.name in OWNED_TABLES
    return True


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
