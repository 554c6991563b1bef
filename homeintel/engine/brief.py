"""
homeintel.engine.brief - HomeBrief Artifact
===========================================

The engine's output and the unit stored in the brief cache.  The wire
shape produced by :meth:`HomeBrief.to_dict` is what the dashboard reads::

    {
      "home_context": {"line1": "...", "line2": "..." | null},
      "momentum": {"joiners_7d": 2, "line": "..." | null},
      "card_ranking": ["packages", "events", "community", "bulletin"],
      "generated_at": "2026-03-01T09:00:00+00:00"
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from homeintel.constants import DEFAULT_CARD_ORDER, CardCategory
from homeintel.engine.narrator import HomeContext
from homeintel.engine.signals import as_utc

__all__ = ["HomeBrief", "Momentum", "validate_ranking"]


@dataclass(frozen=True, slots=True)
class Momentum:
    joiners_last_7d: int = 0
    line: str | None = None


def validate_ranking(values: Any) -> tuple[CardCategory, ...]:
    """Coerce *values* into a full card ranking.

    Raises
    ------
    ValueError
        If *values* is not exactly a permutation of the four categories
        (missing, duplicated, or unknown entries).
    """
    try:
        ranking = tuple(CardCategory(v) for v in values)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid card ranking: {values!r}") from exc
    if len(ranking) != len(DEFAULT_CARD_ORDER) or set(ranking) != set(DEFAULT_CARD_ORDER):
        raise ValueError(f"Card ranking must be a permutation of {list(DEFAULT_CARD_ORDER)}")
    return ranking


@dataclass(frozen=True, slots=True)
class HomeBrief:
    """Context lines, momentum, and card order for one (user, building).

    ``home_context.line1`` is only ``None`` on the
    :meth:`unavailable` brief served when generation failed outright.
    """

    home_context: HomeContext
    momentum: Momentum
    card_ranking: tuple[CardCategory, ...]
    generated_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "card_ranking", validate_ranking(self.card_ranking))
        object.__setattr__(self, "generated_at", as_utc(self.generated_at))

    @classmethod
    def unavailable(cls, now: datetime) -> HomeBrief:
        """The "no intelligence" brief: no lines, default card order."""
        return cls(
            home_context=HomeContext(line1=None, line2=None),
            momentum=Momentum(),
            card_ranking=DEFAULT_CARD_ORDER,
            generated_at=now,
        )

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return {
            "home_context": {
                "line1": self.home_context.line1,
                "line2": self.home_context.line2,
            },
            "momentum": {
                "joiners_7d": self.momentum.joiners_last_7d,
                "line": self.momentum.line,
            },
            "card_ranking": [c.value for c in self.card_ranking],
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HomeBrief:
        """Rebuild a brief from :meth:`to_dict` output.

        Raises ``KeyError`` / ``ValueError`` on malformed input.
        """
        context = data["home_context"]
        momentum = data.get("momentum") or {}
        return cls(
            home_context=HomeContext(
                line1=context.get("line1"),
                line2=context.get("line2"),
            ),
            momentum=Momentum(
                joiners_last_7d=int(momentum.get("joiners_7d") or 0),
                line=momentum.get("line"),
            ),
            card_ranking=validate_ranking(data["card_ranking"]),
            generated_at=datetime.fromisoformat(data["generated_at"]),
        )
