from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload
from sqlalchemy.sql import Select

from rosterdesk.errors import ConflictError, NotFoundError, ValidationError
from rosterdesk.models import POSITIONS, Contract, Season
from rosterdesk.services.common import UNSET, get_player, get_season, get_team

logger = logging.getLogger(__name__)


def _validate_position(position: str) -> str:
    if position not in POSITIONS:
        raise ValidationError(f"Unknown position: {position}", {"allowed": list(POSITIONS)})
    return position


def _validate_jersey_number(jersey_number: int | None) -> int | None:
    if jersey_number is not None and jersey_number < 1:
        raise ValidationError("Jersey number must be positive", {"jersey_number": jersey_number})
    return jersey_number


def _covering(stmt: Select, target: Season) -> Select:
    """
    Restrict a Contract select to contracts whose season span includes `target`:
    start.season_start <= target.season_start <= end.season_start (open end = +inf).
    """
    start = aliased(Season)
    end = aliased(Season)
    return (
        stmt.join(start, Contract.start_season_id == start.id)
        .outerjoin(end, Contract.end_season_id == end.id)
        .where(
            start.season_start <= target.season_start,
            or_(Contract.end_season_id.is_(None), end.season_start >= target.season_start),
        )
    )


async def _previous_season(db: AsyncSession, *, org_id: str, season: Season) -> Season | None:
    stmt = (
        select(Season)
        .where(Season.organization_id == org_id, Season.season_start < season.season_start)
        .order_by(Season.season_start.desc())
        .limit(1)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def _closing_season(db: AsyncSession, *, org_id: str, start: Season, effective: Season) -> Season:
    """
    Season in which a contract ends when the player leaves as of `effective`.

    The contract covers up to the season before `effective`. When that season
    would precede the contract's own start (same-season move, or no earlier
    season exists) the contract ends in `effective` itself.
    """
    previous = await _previous_season(db, org_id=org_id, season=effective)
    if previous is not None and previous.season_start >= start.season_start:
        return previous
    return effective


async def _lock_open_contract(db: AsyncSession, *, org_id: str, contract_id: int) -> Contract:
    stmt = (
        select(Contract)
        .where(Contract.id == contract_id, Contract.organization_id == org_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    contract = (await db.execute(stmt)).scalar_one_or_none()
    if not contract:
        raise NotFoundError("Contract not found", {"contract_id": contract_id})
    if contract.end_season_id is not None:
        raise NotFoundError("Contract is not open", {"contract_id": contract_id})
    return contract


async def _open_contract_ids(db: AsyncSession, *, org_id: str, player_id: int) -> list[int]:
    stmt = select(Contract.id).where(
        Contract.organization_id == org_id,
        Contract.player_id == player_id,
        Contract.end_season_id.is_(None),
    )
    return [int(cid) for cid in (await db.execute(stmt)).scalars().all()]


async def _assert_still_open(db: AsyncSession, *, org_id: str, contract: Contract) -> None:
    # Re-read right before writing: a concurrent release/transfer must make us abort.
    current = await _open_contract_ids(db, org_id=org_id, player_id=contract.player_id)
    if current != [contract.id]:
        raise ConflictError(
            "Contract was changed by another request",
            {"contract_id": contract.id, "open_contract_ids": current},
        )


async def _commit(db: AsyncSession, *, action: str, **log_args: Any) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("CONTRACT_%s_CONFLICT %s", action.upper(), log_args)
        raise ConflictError("Player already has an open contract or a contract starting that season") from exc


async def open_contract_for_player(db: AsyncSession, *, org_id: str, player_id: int) -> Contract | None:
    stmt = select(Contract).where(
        Contract.organization_id == org_id,
        Contract.player_id == player_id,
        Contract.end_season_id.is_(None),
    )
    return (await db.execute(stmt)).scalars().first()


async def contract_covering(
    db: AsyncSession,
    *,
    org_id: str,
    player_id: int,
    team_id: int,
    season: Season,
) -> Contract | None:
    stmt = select(Contract).where(
        Contract.organization_id == org_id,
        Contract.player_id == player_id,
        Contract.team_id == team_id,
    )
    stmt = _covering(stmt, season).order_by(Contract.id.desc()).limit(1)
    return (await db.execute(stmt)).scalars().first()


async def sign_player(
    db: AsyncSession,
    *,
    org_id: str,
    player_id: int,
    team_id: int,
    season_id: int,
    position: str,
    jersey_number: int | None = None,
) -> Contract:
    """
    Open a new contract for a free agent starting at `season_id`.
    """
    _validate_position(position)
    _validate_jersey_number(jersey_number)
    await get_player(db, org_id=org_id, player_id=player_id)
    await get_team(db, org_id=org_id, team_id=team_id)
    season = await get_season(db, org_id=org_id, season_id=season_id)

    open_ids = await _open_contract_ids(db, org_id=org_id, player_id=player_id)
    if open_ids:
        raise ConflictError("Player already has an open contract", {"contract_id": open_ids[0]})

    overlapping = select(Contract.id).where(Contract.organization_id == org_id, Contract.player_id == player_id)
    overlapping_ids = (await db.execute(_covering(overlapping, season))).scalars().all()
    if overlapping_ids:
        raise ConflictError(
            "Player already has a contract covering this season",
            {"contract_ids": [int(cid) for cid in overlapping_ids], "season_id": season_id},
        )

    contract = Contract(
        organization_id=org_id,
        player_id=player_id,
        team_id=team_id,
        position=position,
        jersey_number=jersey_number,
        start_season_id=season_id,
    )
    db.add(contract)
    await _commit(db, action="sign", player_id=player_id, team_id=team_id)
    await db.refresh(contract)
    logger.info("CONTRACT_SIGNED contract_id=%s player_id=%s team_id=%s season_id=%s",
                contract.id, player_id, team_id, season_id)
    return contract


async def transfer(
    db: AsyncSession,
    *,
    org_id: str,
    contract_id: int,
    new_team_id: int,
    effective_season_id: int,
    position: str | None = None,
    jersey_number: int | None = None,
) -> Contract:
    """
    Close the player's open contract and open one with `new_team_id` as of
    `effective_season_id`. Both writes commit together or not at all.
    """
    if position is not None:
        _validate_position(position)
    _validate_jersey_number(jersey_number)

    current = await _lock_open_contract(db, org_id=org_id, contract_id=contract_id)
    await get_team(db, org_id=org_id, team_id=new_team_id)
    effective = await get_season(db, org_id=org_id, season_id=effective_season_id)
    start = await get_season(db, org_id=org_id, season_id=current.start_season_id)
    if effective.season_start < start.season_start:
        raise ConflictError(
            "Transfer season precedes the contract's start season",
            {"contract_id": contract_id, "effective_season_id": effective_season_id},
        )
    closing = await _closing_season(db, org_id=org_id, start=start, effective=effective)

    await _assert_still_open(db, org_id=org_id, contract=current)
    try:
        current.end_season_id = closing.id
        await db.flush()
        successor = Contract(
            organization_id=org_id,
            player_id=current.player_id,
            team_id=new_team_id,
            position=position or current.position,
            jersey_number=jersey_number,
            start_season_id=effective.id,
        )
        db.add(successor)
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("CONTRACT_TRANSFER_CONFLICT contract_id=%s new_team_id=%s", contract_id, new_team_id)
        raise ConflictError("Transfer conflicts with an existing contract", {"contract_id": contract_id}) from exc
    await _commit(db, action="transfer", contract_id=contract_id)
    await db.refresh(successor)
    logger.info(
        "CONTRACT_TRANSFERRED player_id=%s from_contract=%s to_contract=%s to_team=%s closed_season=%s",
        successor.player_id, contract_id, successor.id, new_team_id, closing.id,
    )
    return successor


async def release(
    db: AsyncSession,
    *,
    org_id: str,
    contract_id: int,
    effective_season_id: int,
) -> Contract:
    """
    Close the open contract without a successor; the player is a free agent from
    `effective_season_id` on.
    """
    current = await _lock_open_contract(db, org_id=org_id, contract_id=contract_id)
    effective = await get_season(db, org_id=org_id, season_id=effective_season_id)
    start = await get_season(db, org_id=org_id, season_id=current.start_season_id)
    if effective.season_start < start.season_start:
        raise ValidationError(
            "Release season precedes the contract's start season",
            {"contract_id": contract_id, "effective_season_id": effective_season_id},
        )
    closing = await _closing_season(db, org_id=org_id, start=start, effective=effective)

    await _assert_still_open(db, org_id=org_id, contract=current)
    current.end_season_id = closing.id
    await _commit(db, action="release", contract_id=contract_id)
    await db.refresh(current)
    logger.info("CONTRACT_RELEASED contract_id=%s player_id=%s closed_season=%s",
                contract_id, current.player_id, closing.id)
    return current


async def update_contract(
    db: AsyncSession,
    *,
    org_id: str,
    contract_id: int,
    position: str | None = None,
    jersey_number: Any = UNSET,
) -> Contract:
    """Edit position or jersey number in place (no timeline event)."""
    contract = (
        await db.execute(select(Contract).where(Contract.id == contract_id, Contract.organization_id == org_id))
    ).scalar_one_or_none()
    if not contract:
        raise NotFoundError("Contract not found", {"contract_id": contract_id})
    if position is not None:
        contract.position = _validate_position(position)
    if jersey_number is not UNSET:
        contract.jersey_number = _validate_jersey_number(jersey_number)
    await db.commit()
    await db.refresh(contract)
    return contract


async def roster_for_season(db: AsyncSession, *, org_id: str, team_id: int, season_id: int) -> list[Contract]:
    await get_team(db, org_id=org_id, team_id=team_id)
    season = await get_season(db, org_id=org_id, season_id=season_id)
    stmt = select(Contract).where(Contract.organization_id == org_id, Contract.team_id == team_id)
    stmt = (
        _covering(stmt, season)
        .options(selectinload(Contract.player))
        .order_by(Contract.jersey_number.asc().nulls_last(), Contract.id.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_by_player(db: AsyncSession, *, org_id: str, player_id: int) -> list[Contract]:
    """
    Full contract history of a player, with team and seasons loaded.
    Unordered; `classify_contracts` owns ordering.
    """
    await get_player(db, org_id=org_id, player_id=player_id)
    stmt = (
        select(Contract)
        .where(Contract.organization_id == org_id, Contract.player_id == player_id)
        .options(
            selectinload(Contract.team),
            selectinload(Contract.start_season),
            selectinload(Contract.end_season),
        )
    )
    return list((await db.execute(stmt)).scalars().all())
