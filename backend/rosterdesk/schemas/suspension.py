from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from rosterdesk.schemas.base import ORMBaseModel


class SuspensionCreate(BaseModel):
    player_id: int
    team_id: int
    suspension_type: str
    suspended_games: int = Field(default=1, ge=1)
    reason: str | None = None
    game_id: int | None = None
    game_event_id: int | None = None


class SuspensionUpdate(BaseModel):
    suspension_type: str | None = None
    suspended_games: int | None = Field(default=None, ge=1)
    # Use model_fields_set to tell "clear the reason" from "leave it alone".
    reason: str | None = None


class SuspensionOut(ORMBaseModel):
    id: int
    player_id: int
    team_id: int
    suspension_type: str
    suspended_games: int
    served_games: int
    remaining_games: int
    is_active: bool
    reason: str | None = None
    game_id: int | None = None
    game_event_id: int | None = None
    created_at: datetime


class SuspendedPlayerOut(ORMBaseModel):
    id: int
    first_name: str
    last_name: str


class CarriedSuspensionOut(SuspensionOut):
    player: SuspendedPlayerOut
