from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from rosterdesk.schemas.base import ORMBaseModel
from rosterdesk.schemas.suspension import SuspensionOut


class GameCompletedIn(BaseModel):
    home_team_id: int
    away_team_id: int
    home_score: int | None = Field(default=None, ge=0)
    away_score: int | None = Field(default=None, ge=0)


class AccrualOut(ORMBaseModel):
    game_id: int
    team_id: int
    credited: list[int] = Field(default_factory=list)
    closed: list[int] = Field(default_factory=list)
    already_applied: list[int] = Field(default_factory=list)
    replayed: bool = False


class EligibilityOut(BaseModel):
    player_id: int
    team_id: int
    game_id: int
    eligible: bool
    reason: str | None = None
    remaining_games: int = 0
    suspension_ids: list[int] = Field(default_factory=list)


class LineupEntryIn(BaseModel):
    player_id: int
    team_id: int


class LineupCheckIn(BaseModel):
    entries: list[LineupEntryIn] = Field(min_length=1)


class SuspensionTermsIn(BaseModel):
    suspension_type: str
    suspended_games: int = Field(default=1, ge=1)
    reason: str | None = None


class PenaltyCreate(BaseModel):
    team_id: int
    player_id: int
    period: int = Field(ge=1)
    time_minutes: int = Field(ge=0)
    time_seconds: int = Field(ge=0, le=59)
    penalty_minutes: int | None = Field(default=None, ge=0)
    description: str | None = None
    # Present for match penalties / game misconducts.
    suspension: SuspensionTermsIn | None = None


class GameEventOut(ORMBaseModel):
    id: int
    game_id: int
    event_type: str
    team_id: int
    period: int
    time_minutes: int
    time_seconds: int
    penalty_player_id: int | None = None
    penalty_minutes: int | None = None
    penalty_description: str | None = None
    created_at: datetime


class PenaltyOut(BaseModel):
    event: GameEventOut
    suspension: SuspensionOut | None = None
