from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.errors import NotFoundError
from rosterdesk.models import Game, GameEvent, Player, Season, Team


class _Unset:
    """Marker for "field not supplied" where None is a meaningful value."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def get_player(db: AsyncSession, *, org_id: str, player_id: int) -> Player:
    player = (
        await db.execute(select(Player).where(Player.id == player_id, Player.organization_id == org_id))
    ).scalar_one_or_none()
    if not player:
        raise NotFoundError("Player not found", {"player_id": player_id})
    return player


async def get_team(db: AsyncSession, *, org_id: str, team_id: int) -> Team:
    team = (
        await db.execute(select(Team).where(Team.id == team_id, Team.organization_id == org_id))
    ).scalar_one_or_none()
    if not team:
        raise NotFoundError("Team not found", {"team_id": team_id})
    return team


async def get_season(db: AsyncSession, *, org_id: str, season_id: int) -> Season:
    season = (
        await db.execute(select(Season).where(Season.id == season_id, Season.organization_id == org_id))
    ).scalar_one_or_none()
    if not season:
        raise NotFoundError("Season not found", {"season_id": season_id})
    return season


async def get_game(db: AsyncSession, *, org_id: str, game_id: int) -> Game:
    game = (
        await db.execute(select(Game).where(Game.id == game_id, Game.organization_id == org_id))
    ).scalar_one_or_none()
    if not game:
        raise NotFoundError("Game not found", {"game_id": game_id})
    return game


async def get_game_event(db: AsyncSession, *, org_id: str, event_id: int) -> GameEvent:
    event = (
        await db.execute(select(GameEvent).where(GameEvent.id == event_id, GameEvent.organization_id == org_id))
    ).scalar_one_or_none()
    if not event:
        raise NotFoundError("Game event not found", {"game_event_id": event_id})
    return event
