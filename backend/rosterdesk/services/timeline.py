from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum

from rosterdesk.models import Contract
from rosterdesk.services.common import as_utc

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class EventType(str, Enum):
    SIGNED = "signed"
    TRANSFER = "transfer"
    POSITION_CHANGE = "position-change"
    ACTIVE = "active"


@dataclass(frozen=True)
class ClassifiedEntry:
    contract: Contract
    event_type: EventType


def _chronological_key(contract: Contract) -> tuple[date, datetime, int]:
    # Seasons define career order; created_at only breaks ties between contracts
    # starting in the same season (backfilled history).
    created_at = as_utc(contract.created_at) if contract.created_at is not None else _EPOCH
    return (contract.start_season.season_start, created_at, contract.id or 0)


def _event_type(contract: Contract, previous: Contract | None) -> EventType:
    if contract.end_season_id is None:
        # Current team wins over how the contract began.
        return EventType.ACTIVE
    if previous is None:
        return EventType.SIGNED
    if contract.team_id != previous.team_id:
        return EventType.TRANSFER
    if contract.position != previous.position:
        return EventType.POSITION_CHANGE
    return EventType.SIGNED


def classify_contracts(contracts: Iterable[Contract]) -> list[ClassifiedEntry]:
    """
    Turn a player's contract set into a chronological, labeled career timeline.

    Pure function of its input: the same contracts in any order yield the same
    entries. Every contract must have `start_season` loaded.
    """
    ordered = sorted(contracts, key=_chronological_key)
    entries: list[ClassifiedEntry] = []
    previous: Contract | None = None
    for contract in ordered:
        entries.append(ClassifiedEntry(contract=contract, event_type=_event_type(contract, previous)))
        previous = contract
    return entries


def age(date_of_birth: date | None, as_of: date | None = None) -> int | None:
    """Completed years between `date_of_birth` and `as_of` (today by default)."""
    if date_of_birth is None:
        return None
    as_of = as_of or date.today()
    years = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years
