from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.database import get_db
from rosterdesk.models import Season, Team
from rosterdesk.schemas.team import SeasonOut, TeamOut
from rosterdesk.services.context import Capability, RequestContext, require

router = APIRouter(tags=["teams"])


@router.get("/teams", response_model=list[TeamOut])
async def list_teams(
    q: str | None = Query(default=None, description="Search by team name/city/short name"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Team]:
    stmt = select(Team).where(Team.organization_id == ctx.organization_id).order_by(Team.name).limit(limit).offset(offset)
    if q:
        like = f"%{q}%"
        stmt = stmt.where(
            (Team.name.ilike(like)) | (Team.city.ilike(like)) | (Team.short_name.ilike(like))
        )
    return (await db.execute(stmt)).scalars().all()


@router.get("/seasons", response_model=list[SeasonOut])
async def list_seasons(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Season]:
    stmt = select(Season).where(Season.organization_id == ctx.organization_id).order_by(Season.season_start.desc())
    return (await db.execute(stmt)).scalars().all()
