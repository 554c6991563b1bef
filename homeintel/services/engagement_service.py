"""
homeintel.services.engagement_service - Engagement Event Logger
===============================================================

Central write path for ``engagement_events``.

UI surfaces call this when a resident opens a package, RSVPs to an event,
opens a post, and so on.  The log feeds the card ranking boost on later
brief generations.

**Best-effort by contract:** logging must never break the action it is
attached to.  :meth:`EngagementLogger.record` never raises; it returns an
:class:`EngagementResult` the caller is free to ignore.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine

from homeintel.database.engine import get_session, run_db
from homeintel.database.models import EngagementEvent, EngagementEventType
from homeintel.engine.signals import as_utc

logger = logging.getLogger(__name__)

_KNOWN_EVENT_TYPES: frozenset[str] = frozenset(t.value for t in EngagementEventType)


@dataclass(frozen=True, slots=True)
class EngagementResult:
    """Outcome of one logging attempt."""

    ok: bool
    event_id: int | None = None
    error: str | None = None


class EngagementLogger:
    """Append-only writer for resident engagement events.

    :meth:`record` is synchronous; :meth:`log` runs it on a worker thread
    for async callers.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def record(
        self,
        user_id: str,
        building_id: str,
        event_type: str,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        topic: str | None = None,
        metadata: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> EngagementResult:
        """Insert one engagement row.

        Unknown ``event_type`` values are stored verbatim.  Missing
        required fields and DB errors are logged and reported through the
        result instead of raised.
        """
        if not user_id or not building_id or not event_type:
            logger.warning(
                "Engagement event missing required fields: user=%r building=%r type=%r",
                user_id, building_id, event_type,
            )
            return EngagementResult(ok=False, error="missing_required_fields")

        if event_type not in _KNOWN_EVENT_TYPES:
            logger.debug("Storing unrecognised engagement type verbatim: %s", event_type)

        created_at = as_utc(now) if now is not None else datetime.now(UTC)
        event = EngagementEvent(
            user_id=user_id,
            building_id=building_id,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            topic=topic,
            metadata_=metadata or {},
            created_at=created_at,
        )

        try:
            with get_session(self.engine) as session:
                session.add(event)
                session.flush()
                event_id = event.id
        except Exception as exc:
            logger.warning(
                "Failed to log engagement: type=%s user=%s building=%s (%s)",
                event_type, user_id, building_id, exc,
            )
            return EngagementResult(ok=False, error=type(exc).__name__)

        logger.debug("Engagement logged: type=%s user=%s id=%s", event_type, user_id, event_id)
        return EngagementResult(ok=True, event_id=event_id)

    async def log(
        self,
        user_id: str,
        building_id: str,
        event_type: str,
        **kwargs: Any,
    ) -> EngagementResult:
        """Async wrapper around :meth:`record`.  Never raises."""
        try:
            return await run_db(self.record, user_id, building_id, event_type, **kwargs)
        except Exception as exc:
            # record() already swallows DB errors; this covers executor failures.
            logger.warning("Engagement logging dispatch failed: %s", exc)
            return EngagementResult(ok=False, error=type(exc).__name__)
