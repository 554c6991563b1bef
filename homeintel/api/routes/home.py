"""
homeintel.api.routes.home - Resident home screen endpoints
==========================================================

- ``POST /home/brief``       - personalised context lines + card order
- ``POST /home/engagement``  - fire-and-forget interaction logging
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from homeintel.api.deps import (
    get_brief_service,
    get_current_user_id,
    get_engagement_logger,
)
from homeintel.services.brief_service import BriefService
from homeintel.services.engagement_service import EngagementLogger

router = APIRouter(prefix="/home", tags=["home"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class BriefRequest(BaseModel):
    building_id: str = Field(min_length=1)
    building_name: str | None = None
    force_refresh: bool = False


class MomentumOut(BaseModel):
    joiners_7d: int
    line: str | None


class BriefResponse(BaseModel):
    context_line1: str | None
    context_line2: str | None
    from_cache: bool
    momentum: MomentumOut
    card_ranking: list[str]
    generated_at: str
    building_name: str | None = None


class EngagementRequest(BaseModel):
    building_id: str
    event_type: str
    entity_type: str | None = None
    entity_id: str | None = None
    topic: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class EngagementResponse(BaseModel):
    logged: bool


# ---------------------------------------------------------------------------
# POST /home/brief
# ---------------------------------------------------------------------------
@router.post("/brief", response_model=BriefResponse)
async def get_home_brief(
    body: BriefRequest,
    user_id: str = Depends(get_current_user_id),
    service: BriefService = Depends(get_brief_service),
):
    """Brief for the caller in ``building_id``.  Always 200 once authenticated."""
    return await service.get_home_brief(
        user_id,
        body.building_id,
        body.building_name,
        force_refresh=body.force_refresh,
    )


# ---------------------------------------------------------------------------
# POST /home/engagement
# ---------------------------------------------------------------------------
@router.post(
    "/engagement",
    response_model=EngagementResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def log_engagement(
    body: EngagementRequest,
    user_id: str = Depends(get_current_user_id),
    engagement: EngagementLogger = Depends(get_engagement_logger),
):
    """Record an interaction.  Failures are reported as ``logged: false``,
    never as an error status, so the UI action it rides on is unaffected.
    """
    result = await engagement.log(
        user_id,
        body.building_id,
        body.event_type,
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        topic=body.topic,
        metadata=body.metadata,
    )
    return {"logged": result.ok}
