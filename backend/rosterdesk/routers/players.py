from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.database import get_db
from rosterdesk.models import Player
from rosterdesk.schemas.contract import ContractDetailOut
from rosterdesk.schemas.player import PlayerDetailOut, PlayerOut, TimelineEntryOut
from rosterdesk.services import players as player_service
from rosterdesk.services.context import Capability, RequestContext, require

router = APIRouter(prefix="/players", tags=["players"])


@router.get("", response_model=list[PlayerOut])
async def list_players(
    q: str | None = Query(default=None, description="Search by first or last name"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Player]:
    stmt = select(Player).where(Player.organization_id == ctx.organization_id)
    if q:
        like = f"%{q}%"
        stmt = stmt.where((Player.first_name.ilike(like)) | (Player.last_name.ilike(like)))
    stmt = stmt.order_by(Player.last_name, Player.first_name, Player.id).limit(limit).offset(offset)
    return (await db.execute(stmt)).scalars().all()


@router.get("/{player_id}", response_model=PlayerDetailOut)
async def get_player(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> PlayerDetailOut:
    detail = await player_service.get_player_detail(db, org_id=ctx.organization_id, player_id=player_id)
    out = PlayerDetailOut.model_validate(detail.player)
    out.age = detail.age
    if detail.current_contract is not None:
        out.current_contract = ContractDetailOut.model_validate(detail.current_contract)
    return out


@router.get("/{player_id}/timeline", response_model=list[TimelineEntryOut])
async def player_timeline(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[TimelineEntryOut]:
    entries = await player_service.player_timeline(db, org_id=ctx.organization_id, player_id=player_id)
    return [
        TimelineEntryOut(event_type=e.event_type.value, contract=ContractDetailOut.model_validate(e.contract))
        for e in entries
    ]


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_PLAYERS)),
) -> Response:
    await player_service.delete_player(db, org_id=ctx.organization_id, player_id=player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
