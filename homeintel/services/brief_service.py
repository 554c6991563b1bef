"""
homeintel.services.brief_service - Home Brief Orchestration
===========================================================

Entry point for everything the dashboard asks of the engine.

    cache read ──hit & fresh──▶ return (from_cache=True)
        │ miss / stale / forced
        ▼
    SignalAggregator ─▶ narrate() + rank_cards() ─▶ HomeBrief
        │
        ▼
    cache write (best-effort) ─▶ return (from_cache=False)

No failure in here reaches the caller.  An unreadable cache is a miss,
an unwritable cache is ignored, and a failed aggregation yields
:meth:`HomeBrief.unavailable` so the dashboard still renders with the
default card order.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import Engine

from homeintel.config import HomeIntelConfig
from homeintel.engine.brief import HomeBrief, Momentum
from homeintel.engine.narrator import momentum_line, narrate
from homeintel.engine.ranking import rank_cards
from homeintel.engine.signals import as_utc
from homeintel.services.brief_cache import BriefCache, CacheEntry
from homeintel.services.signal_service import AggregationError, SignalAggregator

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(minutes=60)


@dataclass(frozen=True, slots=True)
class BriefResult:
    brief: HomeBrief
    from_cache: bool
    degraded: bool = False


class BriefService:
    """Builds, caches, and serves home briefs.

    Usage::

        service = BriefService(engine, cfg)
        result = await service.get_brief(user_id, building_id)
        result.brief.home_context.line1
    """

    def __init__(
        self,
        engine: Engine,
        config: HomeIntelConfig | None = None,
        *,
        aggregator: SignalAggregator | None = None,
        cache: BriefCache | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if aggregator is None:
            if config is not None:
                aggregator = SignalAggregator(
                    engine,
                    timeout=config.signal_fetch_timeout_seconds,
                    engagement_limit=config.engagement_fetch_limit,
                    tz=config.tzinfo,
                )
            else:
                aggregator = SignalAggregator(engine)
        self.aggregator = aggregator
        self.cache = cache or BriefCache(engine)
        self.max_age = config.brief_max_age if config is not None else DEFAULT_MAX_AGE
        self.rng = rng

    # -------------------------------------------------------------------
    # Cache access (never raises)
    # -------------------------------------------------------------------
    async def _read_cache(self, user_id: str, building_id: str) -> CacheEntry | None:
        try:
            return await self.cache.aget(user_id, building_id)
        except Exception:
            logger.warning(
                "Brief cache read failed for user=%s building=%s; treating as miss",
                user_id, building_id, exc_info=True,
            )
            return None

    async def _write_cache(self, user_id: str, building_id: str, brief: HomeBrief) -> None:
        try:
            await self.cache.aput(user_id, building_id, brief)
        except Exception:
            # Serving the freshly generated brief matters more than caching it.
            logger.warning(
                "Brief cache write failed for user=%s building=%s",
                user_id, building_id, exc_info=True,
            )

    # -------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------
    async def generate(self, user_id: str, building_id: str, now: datetime) -> HomeBrief:
        """Compute a brief from live signals.  Does not touch the cache.

        Raises
        ------
        AggregationError
            If the request cannot be aggregated at all.
        """
        aggregated = await self.aggregator.aggregate(building_id, user_id, now)
        signals = aggregated.signals

        context = narrate(signals, self.rng)
        ranking = rank_cards(signals, aggregated.engagement)

        return HomeBrief(
            home_context=context,
            momentum=Momentum(
                joiners_last_7d=signals.joiners_last_7d,
                line=momentum_line(signals.joiners_last_7d),
            ),
            card_ranking=ranking,
            generated_at=now,
        )

    async def get_brief(
        self,
        user_id: str,
        building_id: str,
        now: datetime | None = None,
        max_age: timedelta | None = None,
        *,
        force_refresh: bool = False,
    ) -> BriefResult:
        """Return a brief for the pair, from cache when fresh enough.

        Parameters
        ----------
        now:
            Reference time for windows and freshness.  Defaults to the
            current UTC time.
        max_age:
            Oldest cached brief still served.  Defaults to the configured
            freshness window.
        force_refresh:
            Skip the cache read and always regenerate.
        """
        now = as_utc(now) if now is not None else datetime.now(UTC)
        max_age = max_age if max_age is not None else self.max_age

        if not force_refresh:
            cached = await self._read_cache(user_id, building_id)
            if cached is not None and now - cached.generated_at <= max_age:
                logger.debug(
                    "Brief cache hit: user=%s building=%s age=%s",
                    user_id, building_id, now - cached.generated_at,
                )
                return BriefResult(brief=cached.brief, from_cache=True)
            logger.debug(
                "Brief cache %s: user=%s building=%s",
                "miss" if cached is None else "stale", user_id, building_id,
            )

        try:
            brief = await self.generate(user_id, building_id, now)
        except AggregationError as exc:
            logger.warning("Brief unavailable: %s", exc)
            return BriefResult(brief=HomeBrief.unavailable(now), from_cache=False, degraded=True)
        except Exception:
            logger.exception(
                "Brief generation failed for user=%s building=%s", user_id, building_id,
            )
            return BriefResult(brief=HomeBrief.unavailable(now), from_cache=False, degraded=True)

        await self._write_cache(user_id, building_id, brief)
        logger.info(
            "Generated home brief: user=%s building=%s ranking=%s",
            user_id, building_id, ",".join(brief.card_ranking),
        )
        return BriefResult(brief=brief, from_cache=False)

    async def get_home_brief(
        self,
        user_id: str,
        building_id: str,
        building_name: str | None = None,
        *,
        now: datetime | None = None,
        force_refresh: bool = False,
    ) -> dict[str, Any]:
        """Dashboard payload: context lines and ``from_cache`` up front,
        with momentum and card ranking folded in.
        """
        result = await self.get_brief(
            user_id, building_id, now, force_refresh=force_refresh,
        )
        data = result.brief.to_dict()
        return {
            "context_line1": data["home_context"]["line1"],
            "context_line2": data["home_context"]["line2"],
            "from_cache": result.from_cache,
            "momentum": data["momentum"],
            "card_ranking": data["card_ranking"],
            "generated_at": data["generated_at"],
            "building_name": building_name,
        }
