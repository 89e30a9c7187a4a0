from __future__ import annotations

from datetime import date

from rosterdesk.schemas.base import ORMBaseModel


class TeamOut(ORMBaseModel):
    id: int
    name: str
    short_name: str
    city: str | None = None
    logo_url: str | None = None


class SeasonOut(ORMBaseModel):
    id: int
    name: str
    season_start: date
    season_end: date
