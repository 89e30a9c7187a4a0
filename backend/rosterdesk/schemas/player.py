from __future__ import annotations

from datetime import date

from rosterdesk.schemas.base import ORMBaseModel
from rosterdesk.schemas.contract import ContractDetailOut


class PlayerOut(ORMBaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date | None = None
    nationality: str | None = None
    photo_url: str | None = None


class PlayerDetailOut(PlayerOut):
    # Completed years as of today; None when the birth date is unknown.
    age: int | None = None
    current_contract: ContractDetailOut | None = None


class TimelineEntryOut(ORMBaseModel):
    event_type: str
    contract: ContractDetailOut
