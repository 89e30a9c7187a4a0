from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import date, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rosterdesk.models import Base, Game, Player, Season, Team

ORG = "org-a"
OTHER_ORG = "org-b"


@dataclass
class League:
    """Seeded fixtures for one organization."""

    org_id: str
    seasons: dict[int, Season]
    team_a: Team
    team_b: Team
    player: Player


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def seed_league(db: AsyncSession, org_id: str = ORG, suffix: str = "") -> League:
    seasons = {
        year: Season(
            organization_id=org_id,
            name=f"{year}/{year + 1 - 2000:02d}",
            season_start=date(year, 9, 1),
            season_end=date(year + 1, 4, 30),
        )
        for year in (2021, 2022, 2023)
    }
    team_a = Team(organization_id=org_id, name=f"Northside Wolves{suffix}", short_name="NSW", city="Northside")
    team_b = Team(organization_id=org_id, name=f"Harbor Sharks{suffix}", short_name="HBS", city="Harbor")
    player = Player(
        organization_id=org_id, first_name="Jonas", last_name=f"Lindqvist{suffix}", date_of_birth=date(2001, 3, 14)
    )
    db.add_all([*seasons.values(), team_a, team_b, player])
    await db.commit()
    for obj in [*seasons.values(), team_a, team_b, player]:
        await db.refresh(obj)
    return League(org_id=org_id, seasons=seasons, team_a=team_a, team_b=team_b, player=player)


async def add_player(db: AsyncSession, org_id: str = ORG, first_name: str = "Mika", last_name: str = "Rautio") -> Player:
    player = Player(organization_id=org_id, first_name=first_name, last_name=last_name)
    db.add(player)
    await db.commit()
    await db.refresh(player)
    return player


async def add_game(
    db: AsyncSession,
    league: League,
    season_year: int = 2022,
    status: str = "scheduled",
    scheduled_at: datetime | None = None,
) -> Game:
    game = Game(
        organization_id=league.org_id,
        season_id=league.seasons[season_year].id,
        home_team_id=league.team_a.id,
        away_team_id=league.team_b.id,
        status=status,
        scheduled_at=scheduled_at,
    )
    db.add(game)
    await db.commit()
    await db.refresh(game)
    return game


@pytest.fixture
async def league(db) -> League:
    return await seed_league(db)
