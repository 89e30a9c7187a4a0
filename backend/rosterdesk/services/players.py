from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rosterdesk.errors import ConflictError
from rosterdesk.models import Contract, Player, Suspension
from rosterdesk.services.common import get_player
from rosterdesk.services.contracts import get_by_player
from rosterdesk.services.timeline import ClassifiedEntry, age, classify_contracts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerDetail:
    player: Player
    age: int | None
    current_contract: Contract | None


async def get_player_detail(
    db: AsyncSession, *, org_id: str, player_id: int, as_of: date | None = None
) -> PlayerDetail:
    player = await get_player(db, org_id=org_id, player_id=player_id)
    contracts = await get_by_player(db, org_id=org_id, player_id=player_id)
    current = next((c for c in contracts if c.end_season_id is None), None)
    return PlayerDetail(player=player, age=age(player.date_of_birth, as_of), current_contract=current)


async def player_timeline(db: AsyncSession, *, org_id: str, player_id: int) -> list[ClassifiedEntry]:
    return classify_contracts(await get_by_player(db, org_id=org_id, player_id=player_id))


async def delete_player(db: AsyncSession, *, org_id: str, player_id: int) -> None:
    """Delete a player unless an open contract or a suspension still references them."""
    player = await get_player(db, org_id=org_id, player_id=player_id)

    open_contracts = (
        await db.execute(
            select(func.count(Contract.id)).where(
                Contract.organization_id == org_id,
                Contract.player_id == player_id,
                Contract.end_season_id.is_(None),
            )
        )
    ).scalar_one()
    suspensions = (
        await db.execute(
            select(func.count(Suspension.id)).where(
                Suspension.organization_id == org_id,
                Suspension.player_id == player_id,
            )
        )
    ).scalar_one()
    if open_contracts or suspensions:
        raise ConflictError(
            "Player is still referenced by contracts or suspensions",
            {"open_contracts": int(open_contracts), "suspensions": int(suspensions)},
        )

    await db.execute(delete(Player).where(Player.id == player.id, Player.organization_id == org_id))
    await db.commit()
    logger.info("PLAYER_DELETED player_id=%s", player_id)
