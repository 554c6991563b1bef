"""
homeintel.engine.ranking - Card Ranking Scorer
==============================================

Pure scoring pipeline.  No DB I/O, no randomness.

Pipeline stages:
  ActivitySignals → Base Scores → Engagement Boost → Stable Sort → Ranking

Base weights put actionable signals (packages waiting, events today)
ahead of passive browsing signals (bulletin listings).  Each recent
engagement event nudges its category by a fixed boost, so a resident who
keeps opening the bulletin board sees it move up.  Equal scores keep
:data:`~homeintel.constants.DEFAULT_CARD_ORDER`.
"""

from __future__ import annotations

from collections.abc import Iterable

from homeintel.constants import DEFAULT_CARD_ORDER, CardCategory
from homeintel.database.models import EngagementEventType
from homeintel.engine.signals import ActivitySignals, EngagementRecord

__all__ = [
    "ENGAGEMENT_BOOST",
    "ENTITY_TYPE_CATEGORY",
    "EVENT_TYPE_CATEGORY",
    "rank_cards",
    "score_cards",
]

# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------
PACKAGE_WEIGHT = 10
EVENT_TODAY_WEIGHT = 8
EVENT_UPCOMING_WEIGHT = 2
POST_WEIGHT = 5
BULLETIN_WEIGHT = 3

ENGAGEMENT_BOOST = 2

ENTITY_TYPE_CATEGORY: dict[str, CardCategory] = {
    "package": CardCategory.PACKAGES,
    "event": CardCategory.EVENTS,
    "post": CardCategory.COMMUNITY,
    "bulletin": CardCategory.BULLETIN,
}

EVENT_TYPE_CATEGORY: dict[str, CardCategory] = {
    EngagementEventType.PACKAGE_OPEN: CardCategory.PACKAGES,
    EngagementEventType.EVENT_RSVP: CardCategory.EVENTS,
    EngagementEventType.POST_OPEN: CardCategory.COMMUNITY,
    EngagementEventType.BULLETIN_OPEN: CardCategory.BULLETIN,
}


# ---------------------------------------------------------------------------
# Stage 1: base scores from building activity
# ---------------------------------------------------------------------------
def _base_scores(signals: ActivitySignals) -> dict[CardCategory, int]:
    return {
        CardCategory.PACKAGES: signals.packages_pending * PACKAGE_WEIGHT,
        CardCategory.EVENTS: (
            signals.events_today * EVENT_TODAY_WEIGHT
            + signals.events_this_week * EVENT_UPCOMING_WEIGHT
        ),
        CardCategory.COMMUNITY: signals.posts_last_24h * POST_WEIGHT,
        CardCategory.BULLETIN: signals.bulletin_items_last_7d * BULLETIN_WEIGHT,
    }


# ---------------------------------------------------------------------------
# Stage 2: engagement boost
# ---------------------------------------------------------------------------
def _matched_categories(event: EngagementRecord) -> set[CardCategory]:
    """Categories an engagement event counts toward (possibly none).

    An event matching the same category by both entity type and event
    type is counted once.
    """
    matched: set[CardCategory] = set()
    by_entity = ENTITY_TYPE_CATEGORY.get(event.entity_type or "")
    if by_entity is not None:
        matched.add(by_entity)
    by_type = EVENT_TYPE_CATEGORY.get(event.event_type or "")
    if by_type is not None:
        matched.add(by_type)
    return matched


def score_cards(
    signals: ActivitySignals,
    engagement: Iterable[EngagementRecord] = (),
) -> dict[CardCategory, int]:
    """Total score per card category (activity + engagement boost)."""
    scores = _base_scores(signals)
    for event in engagement:
        for category in _matched_categories(event):
            scores[category] += ENGAGEMENT_BOOST
    return scores


# ---------------------------------------------------------------------------
# Stage 3: order
# ---------------------------------------------------------------------------
def rank_cards(
    signals: ActivitySignals,
    engagement: Iterable[EngagementRecord] = (),
) -> tuple[CardCategory, ...]:
    """Return all four categories, highest score first.

    :func:`sorted` is stable, so equal scores keep their
    ``DEFAULT_CARD_ORDER`` positions on every call.
    """
    scores = score_cards(signals, engagement)
    return tuple(sorted(DEFAULT_CARD_ORDER, key=lambda c: -scores[c]))
