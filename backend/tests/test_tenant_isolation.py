from __future__ import annotations

import pytest

from conftest import OTHER_ORG, add_game, seed_league
from rosterdesk.errors import NotFoundError
from rosterdesk.services import accrual, contracts, players, suspensions
from rosterdesk.services.eligibility import is_eligible


@pytest.fixture
async def other_league(db):
    return await seed_league(db, org_id=OTHER_ORG, suffix=" B")


async def test_rows_of_another_organization_are_invisible(db, league, other_league):
    with pytest.raises(NotFoundError):
        await players.get_player_detail(db, org_id=OTHER_ORG, player_id=league.player.id)
    with pytest.raises(NotFoundError):
        await contracts.get_by_player(db, org_id=OTHER_ORG, player_id=league.player.id)
    with pytest.raises(NotFoundError):
        await contracts.roster_for_season(
            db, org_id=OTHER_ORG, team_id=league.team_a.id, season_id=league.seasons[2021].id
        )


async def test_cannot_sign_with_foreign_team(db, league, other_league):
    with pytest.raises(NotFoundError):
        await contracts.sign_player(
            db,
            org_id=OTHER_ORG,
            player_id=other_league.player.id,
            team_id=league.team_a.id,
            season_id=other_league.seasons[2021].id,
            position="forward",
        )


async def test_cannot_touch_foreign_contract(db, league, other_league):
    contract = await contracts.sign_player(
        db, org_id=league.org_id, player_id=league.player.id, team_id=league.team_a.id,
        season_id=league.seasons[2021].id, position="forward",
    )
    with pytest.raises(NotFoundError):
        await contracts.release(
            db, org_id=OTHER_ORG, contract_id=contract.id, effective_season_id=other_league.seasons[2022].id
        )
    with pytest.raises(NotFoundError):
        await contracts.update_contract(db, org_id=OTHER_ORG, contract_id=contract.id, position="goalie")


async def test_suspensions_are_scoped(db, league, other_league):
    suspension = await suspensions.issue_suspension(
        db, org_id=league.org_id, player_id=league.player.id, team_id=league.team_a.id,
        suspension_type="match_penalty", suspended_games=2,
    )
    with pytest.raises(NotFoundError):
        await suspensions.get_suspension(db, org_id=OTHER_ORG, suspension_id=suspension.id)
    assert await suspensions.list_active_for_player(db, org_id=OTHER_ORG, player_id=league.player.id) == []

    # Completing the other organization's game never credits this one's suspension.
    other_game = await add_game(db, other_league)
    await accrual.record_game_completed(
        db,
        org_id=OTHER_ORG,
        game_id=other_game.id,
        home_team_id=other_league.team_a.id,
        away_team_id=other_league.team_b.id,
    )
    refreshed = await suspensions.get_suspension(db, org_id=league.org_id, suspension_id=suspension.id)
    assert refreshed.served_games == 0


async def test_eligibility_against_foreign_game_is_not_found(db, league, other_league):
    other_game = await add_game(db, other_league)
    with pytest.raises(NotFoundError):
        await is_eligible(
            db, org_id=league.org_id, player_id=league.player.id, team_id=league.team_a.id, game_id=other_game.id
        )
