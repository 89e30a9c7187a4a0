from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from rosterdesk.schemas.base import ORMBaseModel
from rosterdesk.schemas.team import SeasonOut, TeamOut


class ContractOut(ORMBaseModel):
    id: int
    player_id: int
    team_id: int
    position: str
    jersey_number: int | None = None
    start_season_id: int
    end_season_id: int | None = None
    created_at: datetime
    updated_at: datetime


class ContractDetailOut(ContractOut):
    team: TeamOut
    start_season: SeasonOut
    end_season: SeasonOut | None = None


class RosterPlayerOut(ORMBaseModel):
    id: int
    first_name: str
    last_name: str
    photo_url: str | None = None


class RosterEntryOut(ContractOut):
    player: RosterPlayerOut


class SignPlayerIn(BaseModel):
    player_id: int
    team_id: int
    season_id: int
    position: str
    jersey_number: int | None = Field(default=None, ge=1)


class TransferIn(BaseModel):
    new_team_id: int
    effective_season_id: int
    # Defaults to the position of the contract being closed.
    position: str | None = None
    jersey_number: int | None = Field(default=None, ge=1)


class ReleaseIn(BaseModel):
    effective_season_id: int


class ContractUpdate(BaseModel):
    position: str | None = None
    # Explicit null clears the number; omit the field to leave it unchanged.
    jersey_number: int | None = Field(default=None, ge=1)
