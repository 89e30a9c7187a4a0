from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.database import get_db
from rosterdesk.models import Contract
from rosterdesk.schemas.contract import (
    ContractDetailOut,
    ContractOut,
    ContractUpdate,
    ReleaseIn,
    RosterEntryOut,
    SignPlayerIn,
    TransferIn,
)
from rosterdesk.services import contracts as contract_service
from rosterdesk.services.common import UNSET
from rosterdesk.services.context import Capability, RequestContext, require

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("/roster", response_model=list[RosterEntryOut])
async def team_roster(
    team_id: int = Query(...),
    season_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Contract]:
    return await contract_service.roster_for_season(
        db, org_id=ctx.organization_id, team_id=team_id, season_id=season_id
    )


@router.get("/player/{player_id}", response_model=list[ContractDetailOut])
async def player_contracts(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Contract]:
    return await contract_service.get_by_player(db, org_id=ctx.organization_id, player_id=player_id)


@router.post("", response_model=ContractOut, status_code=201)
async def sign_player(
    payload: SignPlayerIn,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_CONTRACTS)),
) -> Contract:
    return await contract_service.sign_player(
        db,
        org_id=ctx.organization_id,
        player_id=payload.player_id,
        team_id=payload.team_id,
        season_id=payload.season_id,
        position=payload.position,
        jersey_number=payload.jersey_number,
    )


@router.post("/{contract_id}/transfer", response_model=ContractOut, status_code=201)
async def transfer_player(
    contract_id: int,
    payload: TransferIn,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_CONTRACTS)),
) -> Contract:
    return await contract_service.transfer(
        db,
        org_id=ctx.organization_id,
        contract_id=contract_id,
        new_team_id=payload.new_team_id,
        effective_season_id=payload.effective_season_id,
        position=payload.position,
        jersey_number=payload.jersey_number,
    )


@router.post("/{contract_id}/release", response_model=ContractOut)
async def release_player(
    contract_id: int,
    payload: ReleaseIn,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_CONTRACTS)),
) -> Contract:
    return await contract_service.release(
        db,
        org_id=ctx.organization_id,
        contract_id=contract_id,
        effective_season_id=payload.effective_season_id,
    )


@router.patch("/{contract_id}", response_model=ContractOut)
async def update_contract(
    contract_id: int,
    payload: ContractUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.MANAGE_CONTRACTS)),
) -> Contract:
    return await contract_service.update_contract(
        db,
        org_id=ctx.organization_id,
        contract_id=contract_id,
        position=payload.position,
        jersey_number=payload.jersey_number if "jersey_number" in payload.model_fields_set else UNSET,
    )
