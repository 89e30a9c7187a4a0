from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.errors import DomainError, InvalidStateError, NotFoundError, ValidationError
from rosterdesk.models import Game, GameEvent, Suspension
from rosterdesk.services.common import get_game, get_game_event, get_player
from rosterdesk.services.suspensions import build_suspension

logger = logging.getLogger(__name__)

# Regulation period length in minutes; overtime uses the same clock.
PERIOD_MINUTES = 20


@dataclass(frozen=True)
class SuspensionTerms:
    suspension_type: str
    suspended_games: int = 1
    reason: str | None = None


def _assert_game_editable(game: Game) -> None:
    if game.status in {"completed", "cancelled"}:
        raise InvalidStateError("Completed or cancelled games cannot be edited", {"game_id": game.id})


def _validate_clock(period: int, time_minutes: int, time_seconds: int) -> None:
    if period < 1:
        raise ValidationError("Period must be at least 1", {"period": period})
    if not 0 <= time_minutes <= PERIOD_MINUTES:
        raise ValidationError("Minutes out of range", {"time_minutes": time_minutes})
    if not 0 <= time_seconds <= 59:
        raise ValidationError("Seconds out of range", {"time_seconds": time_seconds})


async def record_penalty(
    db: AsyncSession,
    *,
    org_id: str,
    game_id: int,
    team_id: int,
    player_id: int,
    period: int,
    time_minutes: int,
    time_seconds: int,
    penalty_minutes: int | None = None,
    description: str | None = None,
    suspension: SuspensionTerms | None = None,
) -> tuple[GameEvent, Suspension | None]:
    """
    Record a penalty event. Qualifying penalties (match penalty, game
    misconduct) carry `suspension` terms and get their suspension issued in
    the same transaction, linked to the event.
    """
    game = await get_game(db, org_id=org_id, game_id=game_id)
    _assert_game_editable(game)
    if team_id not in game.team_ids:
        raise ValidationError("Team did not play this game", {"game_id": game_id, "team_id": team_id})
    _validate_clock(period, time_minutes, time_seconds)
    await get_player(db, org_id=org_id, player_id=player_id)

    event = GameEvent(
        organization_id=org_id,
        game_id=game_id,
        event_type="penalty",
        team_id=team_id,
        period=period,
        time_minutes=time_minutes,
        time_seconds=time_seconds,
        penalty_player_id=player_id,
        penalty_minutes=penalty_minutes,
        penalty_description=description,
    )
    db.add(event)
    await db.flush()

    issued: Suspension | None = None
    if suspension is not None:
        try:
            issued = await build_suspension(
                db,
                org_id=org_id,
                player_id=player_id,
                team_id=team_id,
                suspension_type=suspension.suspension_type,
                suspended_games=suspension.suspended_games,
                reason=suspension.reason,
                game_event_id=event.id,
                game_id=game_id,
            )
        except DomainError:
            # The event must not survive without its suspension.
            await db.rollback()
            raise

    await db.commit()
    await db.refresh(event)
    if issued is not None:
        await db.refresh(issued)
    logger.info(
        "PENALTY_RECORDED game_id=%s event_id=%s player_id=%s suspension_id=%s",
        game_id, event.id, player_id, issued.id if issued else None,
    )
    return event, issued


async def delete_penalty(db: AsyncSession, *, org_id: str, game_id: int, event_id: int) -> None:
    """Remove a penalty event together with the suspensions it triggered."""
    event = await get_game_event(db, org_id=org_id, event_id=event_id)
    if event.game_id != game_id or event.event_type != "penalty":
        raise NotFoundError("Penalty not found in this game", {"game_id": game_id, "game_event_id": event_id})
    game = await get_game(db, org_id=org_id, game_id=event.game_id)
    _assert_game_editable(game)

    await db.execute(
        delete(Suspension).where(Suspension.organization_id == org_id, Suspension.game_event_id == event_id)
    )
    await db.execute(delete(GameEvent).where(GameEvent.organization_id == org_id, GameEvent.id == event_id))
    await db.commit()
    logger.info("PENALTY_DELETED game_id=%s event_id=%s", game.id, event_id)
