"""
homeintel.services.brief_cache - Persisted Brief Cache
======================================================

Stores the last generated :class:`~homeintel.engine.brief.HomeBrief` per
``(user_id, building_id)`` in the ``home_briefs`` table.

The cache only stores and returns; it never decides whether an entry is
fresh.  The brief service compares ``generated_at`` with its own clock
and freshness window.  Writes are whole-row overwrites, so concurrent
writers for the same key resolve as last-write-wins.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from homeintel.database.engine import get_session, run_db
from homeintel.database.models import CachedBrief
from homeintel.engine.brief import HomeBrief
from homeintel.engine.signals import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    brief: HomeBrief
    generated_at: datetime


class BriefCache:
    """Read/write access to ``home_briefs``.

    :meth:`get` and :meth:`put` are synchronous and may raise on DB
    errors; the brief service decides how to degrade.  :meth:`aget` and
    :meth:`aput` are the thread-offloaded variants.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def get(self, user_id: str, building_id: str) -> CacheEntry | None:
        """Return the stored brief, or ``None`` on a miss.

        A row whose JSON no longer decodes into a valid brief is treated
        as a miss.
        """
        with Session(self.engine) as session:
            row = session.get(CachedBrief, (user_id, building_id))
            if row is None:
                return None
            raw, stored_at = row.brief_json, row.generated_at

        try:
            brief = HomeBrief.from_dict(json.loads(raw))
        except (json.JSONDecodeError, AttributeError, TypeError, KeyError, ValueError):
            logger.warning(
                "Discarding undecodable cached brief: user=%s building=%s",
                user_id, building_id,
            )
            return None

        return CacheEntry(brief=brief, generated_at=as_utc(stored_at))

    def put(self, user_id: str, building_id: str, brief: HomeBrief) -> bool:
        """Insert or overwrite the brief for this key."""
        payload = json.dumps(brief.to_dict())
        try:
            self._write(user_id, building_id, payload, brief.generated_at)
        except IntegrityError:
            # A concurrent writer inserted the row first; overwrite it.
            logger.debug("Brief insert raced for user=%s building=%s; retrying", user_id, building_id)
            self._write(user_id, building_id, payload, brief.generated_at)
        return True

    def _write(
        self, user_id: str, building_id: str, payload: str, generated_at: datetime,
    ) -> None:
        with get_session(self.engine) as session:
            row = session.get(CachedBrief, (user_id, building_id))
            if row is None:
                session.add(CachedBrief(
                    user_id=user_id,
                    building_id=building_id,
                    brief_json=payload,
                    generated_at=generated_at,
                ))
            else:
                row.brief_json = payload
                row.generated_at = generated_at

    async def aget(self, user_id: str, building_id: str) -> CacheEntry | None:
        return await run_db(self.get, user_id, building_id)

    async def aput(self, user_id: str, building_id: str, brief: HomeBrief) -> bool:
        return await run_db(self.put, user_id, building_id, brief)
