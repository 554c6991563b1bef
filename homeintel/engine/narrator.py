"""
homeintel.engine.narrator - Context Narrator
============================================

Pure rule engine that turns :class:`ActivitySignals` into the one or two
short sentences shown at the top of the resident home screen.

Line 1 lists at most two activity phrases in fixed priority order
(events today, packages, posts, bulletin).  When nothing qualifies a
"quiet day" sentence is picked at random on every call so repeat visits
on an empty day don't read the same.  Line 2 is the new-resident
momentum line.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from homeintel.constants import CONTEXT_SEPARATOR, MAX_CONTEXT_PARTS, QUIET_DAY_LINES
from homeintel.engine.signals import ActivitySignals

__all__ = ["HomeContext", "momentum_line", "narrate", "pluralize"]


@dataclass(frozen=True, slots=True)
class HomeContext:
    line1: str | None
    line2: str | None = None


def pluralize(count: int, noun: str) -> str:
    """``1 package`` / ``0 packages`` / ``3 packages``."""
    return noun if count == 1 else f"{noun}s"


def _phrase(count: int, template: str, noun: str) -> str:
    return template.format(n=count, noun=pluralize(count, noun))


def _activity_phrases(signals: ActivitySignals) -> list[str]:
    """Candidate phrases in priority order, zero counts skipped."""
    candidates = (
        (signals.events_today, "{n} {noun} today", "event"),
        (signals.packages_pending, "{n} {noun} waiting", "package"),
        (signals.posts_last_24h, "{n} new {noun} from neighbors", "post"),
        (signals.bulletin_items_last_7d, "{n} new {noun} this week", "listing"),
    )
    return [
        _phrase(count, template, noun)
        for count, template, noun in candidates
        if count > 0
    ]


def momentum_line(joiners_last_7d: int) -> str | None:
    """New-resident line, or ``None`` when nobody joined this week."""
    if joiners_last_7d <= 0:
        return None
    return (
        f"{joiners_last_7d} new {pluralize(joiners_last_7d, 'resident')} "
        "joined this week."
    )


def narrate(signals: ActivitySignals, rng: random.Random | None = None) -> HomeContext:
    """Build the home context lines for *signals*.

    Parameters
    ----------
    signals:
        Aggregated building activity.
    rng:
        Optional random source for the quiet-day pick.  Defaults to the
        module-level :mod:`random`, which is never reseeded here.
    """
    parts = _activity_phrases(signals)[:MAX_CONTEXT_PARTS]

    if not parts:
        line1 = (rng or random).choice(QUIET_DAY_LINES)
    elif len(parts) == 1:
        line1 = parts[0] + "."
    else:
        line1 = CONTEXT_SEPARATOR.join(parts)

    return HomeContext(line1=line1, line2=momentum_line(signals.joiners_last_7d))
