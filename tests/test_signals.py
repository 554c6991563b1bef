"""
tests/test_signals.py - ActivitySignals validation and window arithmetic
========================================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from homeintel.engine.signals import ActivitySignals, as_utc, compute_windows


class TestActivitySignals:
    def test_defaults_are_zero(self):
        s = ActivitySignals()
        assert s.packages_pending == 0
        assert s.joiners_last_7d == 0

    @pytest.mark.parametrize("field", [
        "packages_pending",
        "events_today",
        "events_this_week",
        "posts_last_24h",
        "bulletin_items_last_7d",
    ])
    def test_negative_rejected(self, field):
        with pytest.raises(ValueError, match=field):
            ActivitySignals(**{field: -1})

    def test_joiners_24h_cannot_exceed_7d(self):
        with pytest.raises(ValueError, match="joiners_last_24h"):
            ActivitySignals(joiners_last_24h=3, joiners_last_7d=2)

    def test_joiners_equal_is_fine(self):
        s = ActivitySignals(joiners_last_24h=2, joiners_last_7d=2)
        assert s.joiners_last_24h == 2

    @pytest.mark.parametrize("value", [1.5, "3", True, None])
    def test_non_int_rejected(self, value):
        with pytest.raises(ValueError):
            ActivitySignals(packages_pending=value)

    def test_frozen(self):
        s = ActivitySignals()
        with pytest.raises(AttributeError):
            s.packages_pending = 4  # type: ignore[misc]


class TestAsUtc:
    def test_naive_assumed_utc(self):
        naive = datetime(2026, 3, 1, 9, 0)
        assert as_utc(naive) == datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def test_aware_converted(self):
        plus2 = datetime(2026, 3, 1, 11, 0, tzinfo=timezone(timedelta(hours=2)))
        result = as_utc(plus2)
        assert result.tzinfo is UTC
        assert result.hour == 9


class TestComputeWindows:
    NOW = datetime(2026, 3, 10, 15, 30, tzinfo=UTC)

    def test_utc_day_bounds(self):
        w = compute_windows(self.NOW)
        assert w.day_start == datetime(2026, 3, 10, tzinfo=UTC)
        assert w.day_end == datetime(2026, 3, 11, tzinfo=UTC)

    def test_rolling_offsets(self):
        w = compute_windows(self.NOW)
        assert w.now == self.NOW
        assert w.last_24h_start == self.NOW - timedelta(hours=24)
        assert w.last_7d_start == self.NOW - timedelta(days=7)
        assert w.next_30d_end == self.NOW + timedelta(days=30)

    def test_local_day_boundary(self):
        # 15:30 UTC is 11:30 EDT (UTC-4; DST began Mar 8) on the same date.
        w = compute_windows(self.NOW, ZoneInfo("America/New_York"))
        assert w.day_start == datetime(2026, 3, 10, 4, 0, tzinfo=UTC)
        assert w.day_end == datetime(2026, 3, 11, 4, 0, tzinfo=UTC)

    def test_day_shortened_by_dst_switch(self):
        # Mar 8 2026 in New York has only 23 hours.
        now = datetime(2026, 3, 8, 18, 0, tzinfo=UTC)
        w = compute_windows(now, ZoneInfo("America/New_York"))
        assert w.day_end - w.day_start == timedelta(hours=23)

    def test_local_date_differs_from_utc_date(self):
        # 02:00 UTC on the 10th is still the 9th in Los Angeles.
        now = datetime(2026, 3, 10, 2, 0, tzinfo=UTC)
        w = compute_windows(now, ZoneInfo("America/Los_Angeles"))
        assert w.day_start == datetime(2026, 3, 9, 7, 0, tzinfo=UTC)
        assert w.day_start <= now < w.day_end

    def test_naive_now_treated_as_utc(self):
        w = compute_windows(datetime(2026, 3, 10, 15, 30))
        assert w.now == self.NOW
