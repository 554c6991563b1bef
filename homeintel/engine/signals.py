"""
homeintel.engine.signals - Activity Signals & Time Windows
==========================================================

The value types shared by the aggregator, narrator and scorer, plus the
window arithmetic that every count is measured against.

All window boundaries are derived from a single injected ``now`` so one
aggregation call is internally consistent and tests never need to patch
the wall clock.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import UTC, datetime, time, timedelta, tzinfo

__all__ = [
    "ActivitySignals",
    "ActivityWindows",
    "EngagementRecord",
    "as_utc",
    "compute_windows",
]


def as_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime.

    Naive datetimes are assumed to already be UTC (SQLite hands back
    naive values for ``DateTime(timezone=True)`` columns).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ---------------------------------------------------------------------------
# ActivitySignals - building-wide counts for one request
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ActivitySignals:
    """Numeric building activity used by both the narrator and the scorer.

    Missing data is always ``0``.  ``events_this_week`` counts events from
    the start of today through the next 30 days, so it is a broader
    upcoming window rather than a calendar week.
    """

    packages_pending: int = 0
    events_today: int = 0
    events_this_week: int = 0
    posts_last_24h: int = 0
    bulletin_items_last_7d: int = 0
    joiners_last_24h: int = 0
    joiners_last_7d: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{f.name} must be an int (got {value!r})")
            if value < 0:
                raise ValueError(f"{f.name} must be >= 0 (got {value})")
        if self.joiners_last_24h > self.joiners_last_7d:
            raise ValueError(
                "joiners_last_24h cannot exceed joiners_last_7d "
                f"({self.joiners_last_24h} > {self.joiners_last_7d})"
            )


# ---------------------------------------------------------------------------
# EngagementRecord - read-side view of one engagement_events row
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EngagementRecord:
    event_type: str
    entity_type: str | None = None
    topic: str | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ActivityWindows:
    """Every boundary one aggregation needs, all in UTC."""

    now: datetime
    day_start: datetime
    day_end: datetime
    last_24h_start: datetime
    last_7d_start: datetime
    next_30d_end: datetime


def compute_windows(now: datetime, tz: tzinfo = UTC) -> ActivityWindows:
    """Derive the signal windows from *now*.

    ``today`` is the calendar day containing *now* in *tz*; the other
    windows are fixed-length offsets from *now*.  Returned boundaries are
    converted to UTC so they compare cleanly against stored timestamps.
    """
    now_utc = as_utc(now)
    local_now = now_utc.astimezone(tz)
    local_midnight = datetime.combine(local_now.date(), time.min, tzinfo=tz)
    next_midnight = datetime.combine(
        local_now.date() + timedelta(days=1), time.min, tzinfo=tz,
    )

    return ActivityWindows(
        now=now_utc,
        day_start=local_midnight.astimezone(UTC),
        day_end=next_midnight.astimezone(UTC),
        last_24h_start=now_utc - timedelta(hours=24),
        last_7d_start=now_utc - timedelta(days=7),
        next_30d_end=now_utc + timedelta(days=30),
    )
