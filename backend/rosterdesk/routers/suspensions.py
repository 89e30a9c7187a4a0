from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.database import get_db
from rosterdesk.models import Suspension
from rosterdesk.schemas.suspension import SuspensionCreate, SuspensionOut, SuspensionUpdate
from rosterdesk.services import suspensions as suspension_service
from rosterdesk.services.common import UNSET
from rosterdesk.services.context import Capability, RequestContext, require

router = APIRouter(prefix="/suspensions", tags=["suspensions"])


@router.post("", response_model=SuspensionOut, status_code=201)
async def issue_suspension(
    payload: SuspensionCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_SUSPENSIONS)),
) -> Suspension:
    return await suspension_service.issue_suspension(
        db,
        org_id=ctx.organization_id,
        player_id=payload.player_id,
        team_id=payload.team_id,
        suspension_type=payload.suspension_type,
        suspended_games=payload.suspended_games,
        reason=payload.reason,
        game_id=payload.game_id,
        game_event_id=payload.game_event_id,
    )


@router.get("/active", response_model=list[SuspensionOut])
async def active_for_player(
    player_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Suspension]:
    return await suspension_service.list_active_for_player(db, org_id=ctx.organization_id, player_id=player_id)


@router.get("/{suspension_id}", response_model=SuspensionOut)
async def get_suspension(
    suspension_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> Suspension:
    return await suspension_service.get_suspension(db, org_id=ctx.organization_id, suspension_id=suspension_id)


@router.patch("/{suspension_id}", response_model=SuspensionOut)
async def update_suspension(
    suspension_id: int,
    payload: SuspensionUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_SUSPENSIONS)),
) -> Suspension:
    return await suspension_service.update_suspension(
        db,
        org_id=ctx.organization_id,
        suspension_id=suspension_id,
        suspension_type=payload.suspension_type,
        suspended_games=payload.suspended_games,
        reason=payload.reason if "reason" in payload.model_fields_set else UNSET,
    )


@router.delete("/{suspension_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_suspension(
    suspension_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_SUSPENSIONS)),
) -> Response:
    await suspension_service.delete_suspension(db, org_id=ctx.organization_id, suspension_id=suspension_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
