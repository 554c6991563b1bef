"""
tests/test_brief_service.py - Brief orchestration
=================================================

End-to-end against the file-backed SQLite engine (real aggregator, real
cache), plus mocked collaborators for the failure paths.
"""

from __future__ import annotations

import random
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import run_async
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from homeintel.config import HomeIntelConfig
from homeintel.constants import DEFAULT_CARD_ORDER, QUIET_DAY_LINES, CardCategory
from homeintel.database.models import (
    BuildingResident,
    CachedBrief,
    EngagementEvent,
    Event,
    Package,
    PackageStatus,
)
from homeintel.engine.signals import ActivitySignals
from homeintel.services.brief_cache import BriefCache
from homeintel.services.brief_service import BriefService
from homeintel.services.signal_service import (
    AggregatedSignals,
    AggregationError,
    SignalAggregator,
)

NOW = datetime(2026, 3, 10, 15, 0, tzinfo=UTC)
BLDG = "bldg-1"
USER = "user-1"


def _seed(engine, *rows) -> None:
    with Session(engine) as session:
        session.add_all(rows)
        session.commit()


def _pending_package() -> Package:
    return Package(id=str(uuid.uuid4()), building_id=BLDG, status=PackageStatus.PENDING.value)


def _cached_rows(engine) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(CachedBrief))


@pytest.fixture
def service(fanout_engine):
    return BriefService(fanout_engine, rng=random.Random(3))


def _stub_aggregator(signals: ActivitySignals | None = None, engagement=()):
    aggregator = MagicMock(spec=SignalAggregator)
    aggregator.aggregate = AsyncMock(
        return_value=AggregatedSignals(signals=signals or ActivitySignals(), engagement=engagement),
    )
    return aggregator


# ===========================================================================
# Generation
# ===========================================================================
class TestGenerate:
    def test_packages_and_event_today(self, fanout_engine, service):
        _seed(
            fanout_engine,
            _pending_package(),
            _pending_package(),
            Event(id="ev-1", building_id=BLDG, title="Mixer", start_time=NOW + timedelta(hours=2)),
        )
        result = run_async(service.get_brief(USER, BLDG, NOW))

        assert result.from_cache is False
        assert result.degraded is False
        assert result.brief.home_context.line1 == "1 event today · 2 packages waiting"
        assert result.brief.home_context.line2 is None
        # packages 20 vs events 8 + 2
        assert result.brief.card_ranking == DEFAULT_CARD_ORDER
        assert result.brief.generated_at == NOW

    def test_quiet_building(self, service):
        result = run_async(service.get_brief(USER, BLDG, NOW))
        assert result.brief.home_context.line1 in QUIET_DAY_LINES
        assert result.brief.momentum.joiners_last_7d == 0
        assert result.brief.momentum.line is None
        assert result.brief.card_ranking == DEFAULT_CARD_ORDER

    def test_momentum_from_joiners(self, fanout_engine, service):
        _seed(
            fanout_engine,
            BuildingResident(building_id=BLDG, user_id="n1", joined_at=NOW - timedelta(days=1)),
            BuildingResident(building_id=BLDG, user_id="n2", joined_at=NOW - timedelta(days=4)),
        )
        brief = run_async(service.get_brief(USER, BLDG, NOW)).brief
        assert brief.momentum.joiners_last_7d == 2
        assert brief.momentum.line == "2 new residents joined this week."
        assert brief.home_context.line2 == brief.momentum.line

    def test_engagement_reorders_cards(self, fanout_engine, service):
        _seed(
            fanout_engine,
            *[
                EngagementEvent(
                    user_id=USER, building_id=BLDG, event_type="bulletin_open",
                    entity_type="bulletin", metadata_={}, created_at=NOW - timedelta(hours=h),
                )
                for h in (1, 2, 3)
            ],
        )
        brief = run_async(service.get_brief(USER, BLDG, NOW)).brief
        assert brief.card_ranking[0] is CardCategory.BULLETIN


# ===========================================================================
# Caching
# ===========================================================================
class TestCaching:
    def test_second_call_within_window_is_cached(self, fanout_engine, service):
        _seed(fanout_engine, _pending_package())
        first = run_async(service.get_brief(USER, BLDG, NOW))
        second = run_async(service.get_brief(USER, BLDG, NOW + timedelta(minutes=10)))

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.brief == first.brief
        assert second.brief.generated_at == NOW
        assert _cached_rows(fanout_engine) == 1

    def test_cached_brief_ignores_new_activity(self, fanout_engine, service):
        run_async(service.get_brief(USER, BLDG, NOW))
        _seed(fanout_engine, _pending_package())
        cached = run_async(service.get_brief(USER, BLDG, NOW + timedelta(minutes=5)))
        assert cached.from_cache is True
        assert cached.brief.home_context.line1 in QUIET_DAY_LINES

    def test_stale_entry_regenerates(self, fanout_engine, service):
        run_async(service.get_brief(USER, BLDG, NOW))
        _seed(fanout_engine, _pending_package())
        later = NOW + timedelta(minutes=61)
        result = run_async(service.get_brief(USER, BLDG, later))

        assert result.from_cache is False
        assert result.brief.generated_at == later
        assert result.brief.home_context.line1 == "1 package waiting."
        assert _cached_rows(fanout_engine) == 1

    def test_explicit_max_age(self, service):
        run_async(service.get_brief(USER, BLDG, NOW))
        result = run_async(service.get_brief(
            USER, BLDG, NOW + timedelta(minutes=2), max_age=timedelta(minutes=1),
        ))
        assert result.from_cache is False

    def test_zero_max_age_from_config_disables_hits(self, fanout_engine):
        cfg = HomeIntelConfig(service_name="t", api_port=1, brief_max_age_minutes=0)
        service = BriefService(fanout_engine, cfg)
        run_async(service.get_brief(USER, BLDG, NOW))
        assert run_async(service.get_brief(USER, BLDG, NOW + timedelta(seconds=1))).from_cache is False

    def test_force_refresh_skips_cache(self, fanout_engine, service):
        run_async(service.get_brief(USER, BLDG, NOW))
        _seed(fanout_engine, _pending_package())
        result = run_async(service.get_brief(
            USER, BLDG, NOW + timedelta(minutes=1), force_refresh=True,
        ))
        assert result.from_cache is False
        assert result.brief.home_context.line1 == "1 package waiting."


# ===========================================================================
# Degradation
# ===========================================================================
class TestDegradation:
    def test_cache_read_failure_is_a_miss(self, fanout_engine):
        cache = MagicMock(spec=BriefCache)
        cache.aget = AsyncMock(side_effect=RuntimeError("cache down"))
        cache.aput = AsyncMock(return_value=True)
        service = BriefService(
            fanout_engine,
            aggregator=_stub_aggregator(ActivitySignals(packages_pending=1)),
            cache=cache,
        )
        result = run_async(service.get_brief(USER, BLDG, NOW))
        assert result.from_cache is False
        assert result.brief.home_context.line1 == "1 package waiting."
        cache.aput.assert_awaited_once()

    def test_cache_write_failure_still_returns_brief(self, fanout_engine):
        cache = MagicMock(spec=BriefCache)
        cache.aget = AsyncMock(return_value=None)
        cache.aput = AsyncMock(side_effect=RuntimeError("disk full"))
        service = BriefService(
            fanout_engine,
            aggregator=_stub_aggregator(ActivitySignals(events_today=1)),
            cache=cache,
        )
        result = run_async(service.get_brief(USER, BLDG, NOW))
        assert result.degraded is False
        assert result.brief.home_context.line1 == "1 event today."

    def test_aggregation_error_returns_unavailable_uncached(self, fanout_engine):
        aggregator = MagicMock(spec=SignalAggregator)
        aggregator.aggregate = AsyncMock(side_effect=AggregationError("no ids"))
        service = BriefService(fanout_engine, aggregator=aggregator)

        result = run_async(service.get_brief(USER, BLDG, NOW))
        assert result.degraded is True
        assert result.from_cache is False
        assert result.brief.home_context.line1 is None
        assert result.brief.card_ranking == DEFAULT_CARD_ORDER
        assert _cached_rows(fanout_engine) == 0

    def test_unexpected_error_returns_unavailable(self, fanout_engine):
        aggregator = MagicMock(spec=SignalAggregator)
        aggregator.aggregate = AsyncMock(side_effect=ZeroDivisionError())
        service = BriefService(fanout_engine, aggregator=aggregator)
        result = run_async(service.get_brief(USER, BLDG, NOW))
        assert result.degraded is True

    def test_blank_ids_degrade(self, service):
        result = run_async(service.get_brief("", BLDG, NOW))
        assert result.degraded is True
        assert result.brief.card_ranking == DEFAULT_CARD_ORDER


# ===========================================================================
# Dashboard payload
# ===========================================================================
class TestGetHomeBrief:
    def test_payload_shape(self, fanout_engine, service):
        _seed(
            fanout_engine,
            _pending_package(),
            BuildingResident(building_id=BLDG, user_id="n1", joined_at=NOW - timedelta(hours=3)),
        )
        payload = run_async(service.get_home_brief(USER, BLDG, "Maple Court", now=NOW))
        assert payload == {
            "context_line1": "1 package waiting.",
            "context_line2": "1 new resident joined this week.",
            "from_cache": False,
            "momentum": {"joiners_7d": 1, "line": "1 new resident joined this week."},
            "card_ranking": ["packages", "events", "community", "bulletin"],
            "generated_at": NOW.isoformat(),
            "building_name": "Maple Court",
        }

    def test_second_payload_from_cache(self, service):
        run_async(service.get_home_brief(USER, BLDG, now=NOW))
        payload = run_async(service.get_home_brief(USER, BLDG, now=NOW + timedelta(minutes=1)))
        assert payload["from_cache"] is True
        assert payload["generated_at"] == NOW.isoformat()
