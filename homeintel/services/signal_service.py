"""
homeintel.services.signal_service - Signal Aggregator
=====================================================

Pulls building-wide counts and the requesting resident's recent
engagement for one brief.

Six independent source queries run concurrently:

    packages · events · posts · bulletin · joiner aggregate · engagement

Each query is a plain sync function (own session, read-only) shipped to a
worker thread through :func:`~homeintel.database.engine.run_db` and
bounded by a per-fetch timeout.  A failing or slow source degrades to its
zero value; partial data is better than no brief.

Joiner counts come from a single ``COUNT`` aggregate so no resident
identity is ever loaded on this path.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Any, TypeVar

from sqlalchemy import Engine, case, func, select
from sqlalchemy.orm import Session

from homeintel.config import MAX_ENGAGEMENT_FETCH_LIMIT
from homeintel.database.engine import run_db
from homeintel.database.models import (
    BuildingResident,
    BulletinListing,
    CommunityPost,
    EngagementEvent,
    Event,
    Package,
    PackageStatus,
)
from homeintel.engine.signals import (
    ActivitySignals,
    ActivityWindows,
    EngagementRecord,
    compute_windows,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FETCH_TIMEOUT = 5.0


class AggregationError(RuntimeError):
    """The request itself is unusable (e.g. missing user or building id)."""


@dataclass(frozen=True, slots=True)
class JoinerCounts:
    last_24h: int = 0
    last_7d: int = 0


@dataclass(frozen=True, slots=True)
class AggregatedSignals:
    """Aggregator output: building counts plus the user's recent engagement."""

    signals: ActivitySignals
    engagement: tuple[EngagementRecord, ...] = ()


# ---------------------------------------------------------------------------
# Source queries (sync, one session each so they can run in parallel)
# ---------------------------------------------------------------------------
def _sum_where(condition) -> Any:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def count_pending_packages(engine: Engine, building_id: str) -> int:
    """Packages still waiting for pickup.  No time window."""
    with Session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(Package).where(
                Package.building_id == building_id,
                Package.status == PackageStatus.PENDING.value,
            )
        ) or 0


def count_events(
    engine: Engine, building_id: str, windows: ActivityWindows,
) -> tuple[int, int]:
    """Return ``(events_today, events_this_week)``.

    Both counts come from one scan of ``[day_start, now + 30d]``.  The
    "this week" figure is that whole upcoming window, today included.
    """
    with Session(engine) as session:
        row = session.execute(
            select(
                _sum_where(Event.start_time < windows.day_end).label("today"),
                func.count().label("upcoming"),
            ).where(
                Event.building_id == building_id,
                Event.start_time >= windows.day_start,
                Event.start_time <= windows.next_30d_end,
            )
        ).one()
    return int(row.today or 0), int(row.upcoming or 0)


def count_recent_posts(engine: Engine, building_id: str, windows: ActivityWindows) -> int:
    with Session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(CommunityPost).where(
                CommunityPost.building_id == building_id,
                CommunityPost.created_at >= windows.last_24h_start,
                CommunityPost.created_at <= windows.now,
            )
        ) or 0


def count_recent_listings(engine: Engine, building_id: str, windows: ActivityWindows) -> int:
    with Session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(BulletinListing).where(
                BulletinListing.building_id == building_id,
                BulletinListing.created_at >= windows.last_7d_start,
                BulletinListing.created_at <= windows.now,
            )
        ) or 0


def count_recent_joiners(
    engine: Engine, building_id: str, windows: ActivityWindows,
) -> JoinerCounts:
    """Aggregate-only joiner counts for the last 24 hours and 7 days."""
    with Session(engine) as session:
        row = session.execute(
            select(
                _sum_where(BuildingResident.joined_at >= windows.last_24h_start).label("d1"),
                func.count().label("d7"),
            ).where(
                BuildingResident.building_id == building_id,
                BuildingResident.joined_at >= windows.last_7d_start,
                BuildingResident.joined_at <= windows.now,
            )
        ).one()
    return JoinerCounts(last_24h=int(row.d1 or 0), last_7d=int(row.d7 or 0))


def fetch_recent_engagement(
    engine: Engine,
    user_id: str,
    building_id: str,
    windows: ActivityWindows,
    limit: int = MAX_ENGAGEMENT_FETCH_LIMIT,
) -> list[EngagementRecord]:
    """The user's own engagement in the last 7 days, newest first.

    Capped at *limit* rows; the cap bounds cost and is an accepted
    approximation for users with very heavy activity.
    """
    limit = max(0, min(limit, MAX_ENGAGEMENT_FETCH_LIMIT))
    if limit == 0:
        return []
    with Session(engine) as session:
        rows = session.execute(
            select(
                EngagementEvent.event_type,
                EngagementEvent.entity_type,
                EngagementEvent.topic,
                EngagementEvent.created_at,
            )
            .where(
                EngagementEvent.user_id == user_id,
                EngagementEvent.building_id == building_id,
                EngagementEvent.created_at >= windows.last_7d_start,
                EngagementEvent.created_at <= windows.now,
            )
            .order_by(EngagementEvent.created_at.desc(), EngagementEvent.id.desc())
            .limit(limit)
        ).all()
    return [
        EngagementRecord(
            event_type=row.event_type,
            entity_type=row.entity_type,
            topic=row.topic,
            created_at=row.created_at,
        )
        for row in rows
    ]


# ---------------------------------------------------------------------------
# SignalAggregator
# ---------------------------------------------------------------------------
class SignalAggregator:
    """Concurrent fan-out over the six signal sources.

    Usage::

        aggregator = SignalAggregator(engine, timeout=5.0)
        result = await aggregator.aggregate(building_id, user_id, now)
        result.signals.packages_pending
    """

    def __init__(
        self,
        engine: Engine,
        *,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        engagement_limit: int = MAX_ENGAGEMENT_FETCH_LIMIT,
        tz: tzinfo = UTC,
    ) -> None:
        self.engine = engine
        self.timeout = timeout
        self.engagement_limit = engagement_limit
        self.tz = tz

    async def _guarded(
        self,
        source: str,
        default: T,
        func: Callable[..., T],
        *args: Any,
    ) -> T:
        """Run one source query; on error or timeout log and return *default*."""
        try:
            return await asyncio.wait_for(run_db(func, *args), timeout=self.timeout)
        except TimeoutError:
            logger.warning("Signal source %s timed out after %.1fs", source, self.timeout)
        except Exception:
            logger.warning("Signal source %s failed; defaulting", source, exc_info=True)
        return default

    async def aggregate(
        self, building_id: str, user_id: str, now: datetime,
    ) -> AggregatedSignals:
        """Collect all signals for *building_id* as seen by *user_id* at *now*.

        Raises
        ------
        AggregationError
            If either id is missing.  Individual source failures never
            raise; they zero out their own signal.
        """
        if not building_id or not user_id:
            raise AggregationError(
                f"Cannot aggregate without ids (user={user_id!r}, building={building_id!r})"
            )

        windows = compute_windows(now, self.tz)
        engine = self.engine

        (
            packages,
            (events_today, events_upcoming),
            posts,
            listings,
            joiners,
            engagement,
        ) = await asyncio.gather(
            self._guarded("packages", 0, count_pending_packages, engine, building_id),
            self._guarded("events", (0, 0), count_events, engine, building_id, windows),
            self._guarded("posts", 0, count_recent_posts, engine, building_id, windows),
            self._guarded("bulletin", 0, count_recent_listings, engine, building_id, windows),
            self._guarded(
                "joiners", JoinerCounts(), count_recent_joiners, engine, building_id, windows,
            ),
            self._guarded(
                "engagement", [], fetch_recent_engagement,
                engine, user_id, building_id, windows, self.engagement_limit,
            ),
        )

        signals = ActivitySignals(
            packages_pending=packages,
            events_today=events_today,
            events_this_week=events_upcoming,
            posts_last_24h=posts,
            bulletin_items_last_7d=listings,
            joiners_last_24h=min(joiners.last_24h, joiners.last_7d),
            joiners_last_7d=joiners.last_7d,
        )
        logger.debug(
            "Signals for building=%s user=%s: %s (%d engagement rows)",
            building_id, user_id, signals, len(engagement),
        )
        return AggregatedSignals(signals=signals, engagement=tuple(engagement))
