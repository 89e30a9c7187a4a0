from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.errors import ValidationError
from rosterdesk.models import Game
from rosterdesk.services.common import get_game, get_season
from rosterdesk.services.contracts import contract_covering
from rosterdesk.services.suspensions import list_active_for_player


class IneligibilityReason(str, Enum):
    NOT_ON_ROSTER = "NOT_ON_ROSTER"
    SUSPENDED = "SUSPENDED"


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason: IneligibilityReason | None = None
    # Sum of games still to miss across the blocking suspensions.
    remaining_games: int = 0
    suspension_ids: tuple[int, ...] = ()


async def _resolve(db: AsyncSession, *, org_id: str, player_id: int, team_id: int, game: Game) -> EligibilityResult:
    if team_id not in game.team_ids:
        raise ValidationError("Team does not play this game", {"game_id": game.id, "team_id": team_id})
    season = await get_season(db, org_id=org_id, season_id=game.season_id)
    contract = await contract_covering(db, org_id=org_id, player_id=player_id, team_id=team_id, season=season)
    if contract is None:
        return EligibilityResult(eligible=False, reason=IneligibilityReason.NOT_ON_ROSTER)

    blocking = [
        s for s in await list_active_for_player(db, org_id=org_id, player_id=player_id)
        if s.team_id == team_id and s.remaining_games >= 1
    ]
    if blocking:
        return EligibilityResult(
            eligible=False,
            reason=IneligibilityReason.SUSPENDED,
            remaining_games=sum(s.remaining_games for s in blocking),
            suspension_ids=tuple(s.id for s in blocking),
        )
    return EligibilityResult(eligible=True)


async def is_eligible(
    db: AsyncSession,
    *,
    org_id: str,
    player_id: int,
    team_id: int,
    game_id: int,
) -> EligibilityResult:
    """
    May `player_id` be fielded for `team_id` in `game_id`?

    Read-only: service is only ever credited by game completion.
    """
    game = await get_game(db, org_id=org_id, game_id=game_id)
    return await _resolve(db, org_id=org_id, player_id=player_id, team_id=team_id, game=game)


async def check_lineup(
    db: AsyncSession,
    *,
    org_id: str,
    game_id: int,
    entries: Iterable[tuple[int, int]],
) -> list[tuple[int, int, EligibilityResult]]:
    """Resolve eligibility for every (player_id, team_id) of a submitted lineup."""
    game = await get_game(db, org_id=org_id, game_id=game_id)
    out = []
    for player_id, team_id in entries:
        out.append((player_id, team_id, await _resolve(db, org_id=org_id, player_id=player_id, team_id=team_id, game=game)))
    return out
