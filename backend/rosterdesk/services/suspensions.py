from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rosterdesk.config import settings
from rosterdesk.errors import InvalidStateError, NotFoundError, ValidationError
from rosterdesk.models import GameEvent, Suspension
from rosterdesk.services.common import UNSET, get_game, get_game_event, get_player, get_team

logger = logging.getLogger(__name__)


def _validate_type(suspension_type: str) -> str:
    allowed = settings.suspension_type_set()
    if suspension_type not in allowed:
        raise ValidationError(f"Unknown suspension type: {suspension_type}", {"allowed": sorted(allowed)})
    return suspension_type


def _validate_games(suspended_games: int) -> int:
    if suspended_games < 1:
        raise ValidationError("A suspension must cover at least one game", {"suspended_games": suspended_games})
    return suspended_games


def _active_clause():
    return Suspension.served_games < Suspension.suspended_games


async def build_suspension(
    db: AsyncSession,
    *,
    org_id: str,
    player_id: int,
    team_id: int,
    suspension_type: str,
    suspended_games: int,
    reason: str | None = None,
    game_event_id: int | None = None,
    game_id: int | None = None,
) -> Suspension:
    """
    Validate and stage a new suspension in the session without committing, so
    callers can issue it together with other writes.
    """
    _validate_type(suspension_type)
    _validate_games(suspended_games)
    await get_player(db, org_id=org_id, player_id=player_id)
    await get_team(db, org_id=org_id, team_id=team_id)

    if game_event_id is not None:
        event = await get_game_event(db, org_id=org_id, event_id=game_event_id)
        if game_id is not None and game_id != event.game_id:
            raise ValidationError(
                "Game event belongs to a different game",
                {"game_event_id": game_event_id, "game_id": game_id},
            )
        game_id = event.game_id
    elif game_id is not None:
        await get_game(db, org_id=org_id, game_id=game_id)

    suspension = Suspension(
        organization_id=org_id,
        player_id=player_id,
        team_id=team_id,
        suspension_type=suspension_type,
        suspended_games=suspended_games,
        served_games=0,
        reason=reason,
        game_id=game_id,
        game_event_id=game_event_id,
    )
    db.add(suspension)
    return suspension


async def issue_suspension(
    db: AsyncSession,
    *,
    org_id: str,
    player_id: int,
    team_id: int,
    suspension_type: str,
    suspended_games: int,
    reason: str | None = None,
    game_event_id: int | None = None,
    game_id: int | None = None,
) -> Suspension:
    suspension = await build_suspension(
        db,
        org_id=org_id,
        player_id=player_id,
        team_id=team_id,
        suspension_type=suspension_type,
        suspended_games=suspended_games,
        reason=reason,
        game_event_id=game_event_id,
        game_id=game_id,
    )
    await db.commit()
    await db.refresh(suspension)
    logger.info(
        "SUSPENSION_ISSUED suspension_id=%s player_id=%s team_id=%s games=%s game_id=%s",
        suspension.id, player_id, team_id, suspended_games, suspension.game_id,
    )
    return suspension


async def get_suspension(db: AsyncSession, *, org_id: str, suspension_id: int) -> Suspension:
    suspension = (
        await db.execute(
            select(Suspension).where(Suspension.id == suspension_id, Suspension.organization_id == org_id)
        )
    ).scalar_one_or_none()
    if not suspension:
        raise NotFoundError("Suspension not found", {"suspension_id": suspension_id})
    return suspension


async def update_suspension(
    db: AsyncSession,
    *,
    org_id: str,
    suspension_id: int,
    suspension_type: str | None = None,
    suspended_games: int | None = None,
    reason: Any = UNSET,
) -> Suspension:
    """
    Edit an active suspension. Served history is immutable: a fully served
    suspension raises InvalidStateError.
    """
    suspension = await get_suspension(db, org_id=org_id, suspension_id=suspension_id)
    if not suspension.is_active:
        raise InvalidStateError("Suspension has already been served", {"suspension_id": suspension_id})

    if suspension_type is not None:
        suspension.suspension_type = _validate_type(suspension_type)
    if suspended_games is not None:
        _validate_games(suspended_games)
        if suspended_games < suspension.served_games:
            raise ValidationError(
                "Suspended games cannot be lower than games already served",
                {"suspended_games": suspended_games, "served_games": suspension.served_games},
            )
        suspension.suspended_games = suspended_games
    if reason is not UNSET:
        suspension.reason = reason

    await db.commit()
    await db.refresh(suspension)
    logger.info("SUSPENSION_UPDATED suspension_id=%s games=%s served=%s",
                suspension.id, suspension.suspended_games, suspension.served_games)
    return suspension


async def delete_suspension(db: AsyncSession, *, org_id: str, suspension_id: int) -> None:
    suspension = await get_suspension(db, org_id=org_id, suspension_id=suspension_id)
    await db.delete(suspension)
    await db.commit()
    logger.info("SUSPENSION_DELETED suspension_id=%s", suspension_id)


async def list_by_game(db: AsyncSession, *, org_id: str, game_id: int) -> list[Suspension]:
    """Suspensions that originate from `game_id`."""
    await get_game(db, org_id=org_id, game_id=game_id)
    events_in_game = select(GameEvent.id).where(GameEvent.organization_id == org_id, GameEvent.game_id == game_id)
    stmt = (
        select(Suspension)
        .where(
            Suspension.organization_id == org_id,
            or_(Suspension.game_id == game_id, Suspension.game_event_id.in_(events_in_game)),
        )
        .options(selectinload(Suspension.game_event))
        .order_by(Suspension.id.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_active_for_player(db: AsyncSession, *, org_id: str, player_id: int) -> list[Suspension]:
    stmt = (
        select(Suspension)
        .where(Suspension.organization_id == org_id, Suspension.player_id == player_id, _active_clause())
        .order_by(Suspension.created_at.asc(), Suspension.id.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_active_for_teams(
    db: AsyncSession,
    *,
    org_id: str,
    team_ids: Iterable[int],
    exclude_game_id: int | None = None,
) -> list[Suspension]:
    """
    Active suspensions carried by players of the given teams. Lineup entry uses
    this with `exclude_game_id` so suspensions issued in the game being
    reported do not show up as carried into it.
    """
    stmt = select(Suspension).where(
        Suspension.organization_id == org_id,
        Suspension.team_id.in_(list(team_ids)),
        _active_clause(),
    )
    if exclude_game_id is not None:
        stmt = stmt.where(or_(Suspension.game_id.is_(None), Suspension.game_id != exclude_game_id))
    stmt = stmt.options(selectinload(Suspension.player)).order_by(Suspension.team_id.asc(), Suspension.id.asc())
    return list((await db.execute(stmt)).scalars().all())
