"""Add engagement_events and home_briefs tables

Revision ID: 5c2e7a1f9b30
Revises:
Create Date: 2026-10-19 09:12:41.118204

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '5c2e7a1f9b30'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the engagement log and the per-user brief cache."""

    # --- engagement_events ---
    op.create_table(
        "engagement_events",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("building_id", sa.String(36), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(30), nullable=True),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("topic", sa.String(100), nullable=True),
        sa.Column("metadata", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_engagement_events_user_building_ts", "engagement_events",
        ["user_id", "building_id", sa.text("created_at DESC")],
    )
    op.create_index(
        "ix_engagement_events_type_ts", "engagement_events",
        ["event_type", sa.text("created_at DESC")],
    )

    # --- home_briefs ---
    op.create_table(
        "home_briefs",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("building_id", sa.String(36), primary_key=True),
        sa.Column("brief_json", sa.Text, nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("home_briefs")
    op.drop_index("ix_engagement_events_type_ts", table_name="engagement_events")
    op.drop_index("ix_engagement_events_user_building_ts", table_name="engagement_events")
    op.drop_table("engagement_events")
