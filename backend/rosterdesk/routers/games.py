from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.database import get_db
from rosterdesk.models import Suspension
from rosterdesk.schemas.game import (
    AccrualOut,
    EligibilityOut,
    GameCompletedIn,
    GameEventOut,
    LineupCheckIn,
    PenaltyCreate,
    PenaltyOut,
)
from rosterdesk.schemas.suspension import CarriedSuspensionOut, SuspensionOut
from rosterdesk.services import accrual, eligibility, penalties
from rosterdesk.services import suspensions as suspension_service
from rosterdesk.services.common import get_game
from rosterdesk.services.context import Capability, RequestContext, require

router = APIRouter(prefix="/games", tags=["games"])


def _eligibility_out(game_id: int, player_id: int, team_id: int, result: eligibility.EligibilityResult) -> EligibilityOut:
    return EligibilityOut(
        player_id=player_id,
        team_id=team_id,
        game_id=game_id,
        eligible=result.eligible,
        reason=result.reason.value if result.reason else None,
        remaining_games=result.remaining_games,
        suspension_ids=list(result.suspension_ids),
    )


@router.get("/{game_id}/suspensions", response_model=list[SuspensionOut])
async def game_suspensions(
    game_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Suspension]:
    return await suspension_service.list_by_game(db, org_id=ctx.organization_id, game_id=game_id)


@router.get("/{game_id}/active-suspensions", response_model=list[CarriedSuspensionOut])
async def carried_suspensions(
    game_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> list[Suspension]:
    """Suspensions players of either team carry into this game (lineup-entry warnings)."""
    game = await get_game(db, org_id=ctx.organization_id, game_id=game_id)
    return await suspension_service.list_active_for_teams(
        db, org_id=ctx.organization_id, team_ids=game.team_ids, exclude_game_id=game.id
    )


@router.get("/{game_id}/eligibility", response_model=EligibilityOut)
async def player_eligibility(
    game_id: int,
    player_id: int = Query(...),
    team_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.VIEW_ROSTER)),
) -> EligibilityOut:
    result = await eligibility.is_eligible(
        db, org_id=ctx.organization_id, player_id=player_id, team_id=team_id, game_id=game_id
    )
    return _eligibility_out(game_id, player_id, team_id, result)


@router.post("/{game_id}/lineup-check", response_model=list[EligibilityOut])
async def lineup_check(
    game_id: int,
    payload: LineupCheckIn,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.REPORT_GAMES)),
) -> list[EligibilityOut]:
    rows = await eligibility.check_lineup(
        db,
        org_id=ctx.organization_id,
        game_id=game_id,
        entries=[(e.player_id, e.team_id) for e in payload.entries],
    )
    return [_eligibility_out(game_id, player_id, team_id, result) for player_id, team_id, result in rows]


@router.post("/{game_id}/complete", response_model=list[AccrualOut])
async def complete_game(
    game_id: int,
    payload: GameCompletedIn,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.REPORT_GAMES)),
) -> list[AccrualOut]:
    results = await accrual.record_game_completed(
        db,
        org_id=ctx.organization_id,
        game_id=game_id,
        home_team_id=payload.home_team_id,
        away_team_id=payload.away_team_id,
        home_score=payload.home_score,
        away_score=payload.away_score,
    )
    return [AccrualOut.model_validate(r) for r in results]


@router.post("/{game_id}/penalties", response_model=PenaltyOut, status_code=201)
async def record_penalty(
    game_id: int,
    payload: PenaltyCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.REPORT_GAMES)),
) -> PenaltyOut:
    terms = None
    if payload.suspension is not None:
        if not ctx.can(Capability.MANAGE_SUSPENSIONS):
            # Reporters may record the penalty but not the suspension it triggers.
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
        terms = penalties.SuspensionTerms(
            suspension_type=payload.suspension.suspension_type,
            suspended_games=payload.suspension.suspended_games,
            reason=payload.suspension.reason,
        )
    event, suspension = await penalties.record_penalty(
        db,
        org_id=ctx.organization_id,
        game_id=game_id,
        team_id=payload.team_id,
        player_id=payload.player_id,
        period=payload.period,
        time_minutes=payload.time_minutes,
        time_seconds=payload.time_seconds,
        penalty_minutes=payload.penalty_minutes,
        description=payload.description,
        suspension=terms,
    )
    return PenaltyOut(
        event=GameEventOut.model_validate(event),
        suspension=SuspensionOut.model_validate(suspension) if suspension is not None else None,
    )


@router.delete("/{game_id}/penalties/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_penalty(
    game_id: int,
    event_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require(Capability.REPORT_GAMES)),
) -> Response:
    await penalties.delete_penalty(db, org_id=ctx.organization_id, game_id=game_id, event_id=event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
