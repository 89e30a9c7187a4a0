from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.errors import InvalidStateError, ValidationError
from rosterdesk.models import Game, Suspension, SuspensionAccrual
from rosterdesk.services.common import as_utc, get_game, utcnow

logger = logging.getLogger(__name__)


@dataclass
class AccrualResult:
    game_id: int
    team_id: int
    credited: list[int] = field(default_factory=list)
    closed: list[int] = field(default_factory=list)
    # Suspensions already credited for this game (replayed completion event).
    already_applied: list[int] = field(default_factory=list)
    replayed: bool = False


def _cutoff(game: Game) -> datetime:
    # When the game was played; reporting may happen much later.
    if game.scheduled_at is not None:
        return as_utc(game.scheduled_at)
    return as_utc(game.completed_at or utcnow())


def _mark_completed(game: Game) -> None:
    if game.status == "cancelled":
        raise InvalidStateError("Cancelled games do not count", {"game_id": game.id})
    if game.status != "completed":
        game.status = "completed"
        game.completed_at = utcnow()


async def _accrue(
    db: AsyncSession,
    *,
    org_id: str,
    game: Game,
    team_id: int,
) -> AccrualResult:
    result = AccrualResult(game_id=game.id, team_id=team_id)
    cutoff = _cutoff(game)

    applied_stmt = select(SuspensionAccrual.suspension_id).where(
        SuspensionAccrual.organization_id == org_id,
        SuspensionAccrual.game_id == game.id,
    )
    applied = {int(sid) for sid in (await db.execute(applied_stmt)).scalars().all()}

    stmt = (
        select(Suspension)
        .where(
            Suspension.organization_id == org_id,
            Suspension.team_id == team_id,
            Suspension.served_games < Suspension.suspended_games,
            # Never credit the game the suspension was issued in.
            or_(Suspension.game_id.is_(None), Suspension.game_id != game.id),
        )
        .order_by(Suspension.id.asc())
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    for suspension in (await db.execute(stmt)).scalars().all():
        if suspension.id in applied:
            result.already_applied.append(suspension.id)
            continue
        if as_utc(suspension.created_at) >= cutoff:
            continue
        suspension.served_games = min(suspension.served_games + 1, suspension.suspended_games)
        db.add(SuspensionAccrual(organization_id=org_id, suspension_id=suspension.id, game_id=game.id))
        result.credited.append(suspension.id)
        if suspension.served_games >= suspension.suspended_games:
            result.closed.append(suspension.id)
    return result


async def _commit_accrual(db: AsyncSession, results: list[AccrualResult]) -> list[AccrualResult]:
    try:
        await db.commit()
    except IntegrityError:
        # Another delivery of the same completion event won the race; it credited
        # everything we were about to credit.
        await db.rollback()
        logger.info("ACCRUAL_REPLAY_DETECTED game_id=%s", results[0].game_id if results else None)
        return [
            AccrualResult(game_id=r.game_id, team_id=r.team_id, already_applied=r.credited + r.already_applied,
                          replayed=True)
            for r in results
        ]
    for r in results:
        logger.info(
            "ACCRUAL_APPLIED game_id=%s team_id=%s credited=%s closed=%s already_applied=%s",
            r.game_id, r.team_id, r.credited, r.closed, r.already_applied,
        )
    return results


async def apply_game_completion(
    db: AsyncSession,
    *,
    org_id: str,
    game_id: int,
    team_id: int,
) -> AccrualResult:
    """
    Credit one served game to every active suspension of `team_id`.

    Only suspensions created before the game was played count: the cutoff is
    the game's scheduled time, or its completion time when it has none. The
    game is marked completed; a cancelled game raises InvalidStateError.

    Idempotent per (suspension, game): replaying the same completion is a no-op.
    All increments for the call commit in one transaction.
    """
    game = await get_game(db, org_id=org_id, game_id=game_id)
    if team_id not in game.team_ids:
        raise ValidationError("Team did not play this game", {"game_id": game_id, "team_id": team_id})
    _mark_completed(game)
    result = await _accrue(db, org_id=org_id, game=game, team_id=team_id)
    return (await _commit_accrual(db, [result]))[0]


async def record_game_completed(
    db: AsyncSession,
    *,
    org_id: str,
    game_id: int,
    home_team_id: int,
    away_team_id: int,
    home_score: int | None = None,
    away_score: int | None = None,
) -> list[AccrualResult]:
    """
    Handle the game-reporting "game completed" event: mark the game completed
    and credit both teams' suspensions in a single transaction.
    """
    game = await get_game(db, org_id=org_id, game_id=game_id)
    if {home_team_id, away_team_id} != set(game.team_ids):
        raise ValidationError(
            "Teams do not match the game",
            {"game_id": game_id, "home_team_id": home_team_id, "away_team_id": away_team_id},
        )
    _mark_completed(game)
    if home_score is not None:
        game.home_score = home_score
    if away_score is not None:
        game.away_score = away_score

    results = []
    for team_id in (home_team_id, away_team_id):
        results.append(await _accrue(db, org_id=org_id, game=game, team_id=team_id))
    return await _commit_accrual(db, results)
