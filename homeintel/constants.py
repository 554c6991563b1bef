"""
homeintel.constants - Shared Constants
======================================

Single source of truth for the dashboard card taxonomy and the copy used
when a building has nothing to report.  Import from here instead of
duplicating in the engine, services, and API.
"""

from __future__ import annotations

import enum


# ---------------------------------------------------------------------------
# Card categories: the closed set of dashboard sections we reorder
# ---------------------------------------------------------------------------
class CardCategory(enum.StrEnum):
    """Dashboard card sections whose relative order is personalised."""
    PACKAGES = "packages"
    EVENTS = "events"
    COMMUNITY = "community"
    BULLETIN = "bulletin"


DEFAULT_CARD_ORDER: tuple[CardCategory, ...] = (
    CardCategory.PACKAGES,
    CardCategory.EVENTS,
    CardCategory.COMMUNITY,
    CardCategory.BULLETIN,
)
"""Fallback order, and the tie-break order for equal scores."""


# ---------------------------------------------------------------------------
# Context line copy
# ---------------------------------------------------------------------------
QUIET_DAY_LINES: tuple[str, ...] = (
    "A peaceful day in the building.",
    "Nothing urgent today. Enjoy the calm.",
    "All quiet on the home front.",
)

CONTEXT_SEPARATOR = " · "

# At most this many activity phrases make it into line 1.
MAX_CONTEXT_PARTS = 2
