"""
homeintel.config - YAML Configuration Loader
============================================

Reads ``config.yaml`` for service identity and brief tuning (freshness
window, per-fetch timeout, engagement read bound, day boundary).  Secrets
and the database URL stay in the environment (``.env``).

Usage::

    from homeintel.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.brief_max_age)         # datetime.timedelta(seconds=3600)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

# Upper bound on engagement rows read per brief; larger values are clamped.
MAX_ENGAGEMENT_FETCH_LIMIT = 100


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class HomeIntelConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    service_name: str

    # HTTP
    api_port: int

    # Brief tuning
    brief_max_age_minutes: int = 60
    signal_fetch_timeout_seconds: float = 5.0
    engagement_fetch_limit: int = MAX_ENGAGEMENT_FETCH_LIMIT
    day_boundary_tz: str = "UTC"  # IANA zone used for the "today" window

    @property
    def brief_max_age(self) -> timedelta:
        return timedelta(minutes=self.brief_max_age_minutes)

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.day_boundary_tz)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> HomeIntelConfig:
    """Read *path* and return a :class:`HomeIntelConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If a tuning value is out of range or the timezone is unknown.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    max_age = int(raw.get("brief_max_age_minutes", 60))
    if max_age < 0:
        raise ValueError(f"brief_max_age_minutes must be >= 0 (got {max_age})")

    timeout = float(raw.get("signal_fetch_timeout_seconds", 5.0))
    if timeout <= 0:
        raise ValueError(f"signal_fetch_timeout_seconds must be > 0 (got {timeout})")

    limit = int(raw.get("engagement_fetch_limit", MAX_ENGAGEMENT_FETCH_LIMIT))
    limit = max(0, min(limit, MAX_ENGAGEMENT_FETCH_LIMIT))

    tz_name = str(raw.get("day_boundary_tz") or "UTC")
    try:
        ZoneInfo(tz_name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown day_boundary_tz: {tz_name!r}") from exc

    return HomeIntelConfig(
        service_name=raw["service_name"],
        api_port=int(raw["api_port"]),
        brief_max_age_minutes=max_age,
        signal_fetch_timeout_seconds=timeout,
        engagement_fetch_limit=limit,
        day_boundary_tz=tz_name,
    )
