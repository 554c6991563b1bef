"""
HomeIntel - Home Intelligence Engine for Building Dashboards
============================================================
Turns building activity (packages, events, posts, bulletin listings, new
residents) into a short personalised "home brief": one or two status lines
plus an ordering of the dashboard cards, biased toward what each resident
actually opens.  Briefs are cached per (user, building) so repeated
dashboard loads stay cheap.

Package layout::

    homeintel/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Card categories, quiet-day lines
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # Signal sources, engagement log, brief cache
    ├── engine/
    │   ├── signals.py     # ActivitySignals + time windows
    │   ├── narrator.py    # Signals → context lines
    │   ├── ranking.py     # Signals + engagement → card order
    │   └── brief.py       # HomeBrief artifact
    ├── services/
    │   ├── engagement_service.py  # Fire-and-forget engagement logging
    │   ├── signal_service.py      # Concurrent signal aggregation
    │   ├── brief_cache.py         # Persisted briefs keyed by (user, building)
    │   └── brief_service.py       # Orchestration entry point
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT + engine/service dependencies
        └── routes/        # /home/brief, /home/engagement
"""

__version__ = "0.1.0"
