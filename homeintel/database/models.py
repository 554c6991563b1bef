"""
homeintel.database.models - SQLAlchemy 2.0 Data Models
======================================================

Tables:
- packages            - Parcels logged by building staff (read-only here)
- events              - Building calendar events (read-only here)
- community_posts     - Resident community feed posts (read-only here)
- bulletin_listings   - Bulletin board listings (read-only here)
- building_residents  - Membership rows; only ever read via COUNT aggregates
- engagement_events   - Append-only resident interaction log
- home_briefs         - Last generated brief per (user, building)

The first five tables are owned by the CRUD side of the platform.  The
engine reads them to build signals and never writes to them.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all HomeIntel ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class EngagementEventType(enum.StrEnum):
    """Engagement event types the ranking engine knows how to interpret.

    The ``event_type`` column is a plain string: values outside this enum
    are stored verbatim so new UI surfaces can log before the engine
    learns about them.
    """
    HOME_VIEW = "home_view"
    PACKAGE_OPEN = "package_open"
    EVENT_RSVP = "event_rsvp"
    POST_OPEN = "post_open"
    BULLETIN_OPEN = "bulletin_open"


class PackageStatus(enum.StrEnum):
    PENDING = "pending"
    PICKED_UP = "picked_up"


# ---------------------------------------------------------------------------
# Package - parcels awaiting pickup
# ---------------------------------------------------------------------------
class Package(Base):
    __tablename__ = "packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    building_id: Mapped[str] = mapped_column(String(36), nullable=False)
    carrier: Mapped[str | None] = mapped_column(String(100), default=None)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PackageStatus.PENDING.value,
    )
    arrival_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_packages_building_status", "building_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Package id={self.id} building={self.building_id} status={self.status!r}>"


# ---------------------------------------------------------------------------
# Event - building calendar
# ---------------------------------------------------------------------------
class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    building_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), default=None)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_events_building_start", "building_id", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<Event id={self.id} title={self.title!r} start={self.start_time}>"


# ---------------------------------------------------------------------------
# CommunityPost - resident feed
# ---------------------------------------------------------------------------
class CommunityPost(Base):
    __tablename__ = "community_posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    building_id: Mapped[str] = mapped_column(String(36), nullable=False)
    author_id: Mapped[str | None] = mapped_column(String(36), default=None)
    post_type: Mapped[str | None] = mapped_column(String(30), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_community_posts_building_created", "building_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CommunityPost id={self.id} building={self.building_id}>"


# ---------------------------------------------------------------------------
# BulletinListing - bulletin board items (for sale, lost & found, ...)
# ---------------------------------------------------------------------------
class BulletinListing(Base):
    __tablename__ = "bulletin_listings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    building_id: Mapped[str] = mapped_column(String(36), nullable=False)
    category: Mapped[str | None] = mapped_column(String(50), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_bulletin_listings_building_created", "building_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<BulletinListing id={self.id} building={self.building_id}>"


# ---------------------------------------------------------------------------
# BuildingResident - membership, aggregate reads only
# ---------------------------------------------------------------------------
class BuildingResident(Base):
    """Which user lives in which building, and since when.

    The brief path only ever issues ``COUNT`` queries against this table;
    individual resident identities never leave the database.
    """
    __tablename__ = "building_residents"

    building_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_building_residents_joined", "building_id", "joined_at"),
    )

    def __repr__(self) -> str:
        return f"<BuildingResident building={self.building_id} user={self.user_id}>"


# ---------------------------------------------------------------------------
# EngagementEvent - append-only interaction log
# ---------------------------------------------------------------------------
class EngagementEvent(Base):
    """One row per resident action worth learning from.

    Rows are immutable once written.  Retention/purging is handled outside
    this service.
    """
    __tablename__ = "engagement_events"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    building_id: Mapped[str] = mapped_column(String(36), nullable=False)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    topic: Mapped[str | None] = mapped_column(String(100), nullable=True)
    metadata_: Mapped[dict] = mapped_column(
        "metadata", JSONB, nullable=False, server_default="{}",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False,
    )

    __table_args__ = (
        Index(
            "ix_engagement_events_user_building_ts",
            "user_id", "building_id", created_at.desc(),
        ),
        Index("ix_engagement_events_type_ts", "event_type", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<EngagementEvent id={self.id} user={self.user_id} "
            f"type={self.event_type!r} ts={self.created_at}>"
        )


# ---------------------------------------------------------------------------
# CachedBrief - last generated brief per (user, building)
# ---------------------------------------------------------------------------
class CachedBrief(Base):
    """Persisted :class:`~homeintel.engine.brief.HomeBrief`.

    One row per key, overwritten on every write.  Freshness is decided by
    the caller from ``generated_at``; this table has no TTL of its own.
    """
    __tablename__ = "home_briefs"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    building_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    brief_json: Mapped[str] = mapped_column(Text, nullable=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<CachedBrief user={self.user_id} building={self.building_id} "
            f"generated_at={self.generated_at}>"
        )
