from __future__ import annotations

import pytest

from conftest import add_game
from rosterdesk.errors import InvalidStateError, NotFoundError, ValidationError
from rosterdesk.services import accrual, penalties, suspensions


async def _issue(db, league, games=2, **kwargs):
    return await suspensions.issue_suspension(
        db,
        org_id=league.org_id,
        player_id=league.player.id,
        team_id=league.team_a.id,
        suspension_type="match_penalty",
        suspended_games=games,
        **kwargs,
    )


async def test_issue_suspension_starts_unserved(db, league):
    suspension = await _issue(db, league, games=3, reason="Check to the head")
    assert suspension.served_games == 0
    assert suspension.remaining_games == 3
    assert suspension.is_active
    assert suspension.created_at is not None


async def test_issue_rejects_unknown_type(db, league):
    with pytest.raises(ValidationError):
        await suspensions.issue_suspension(
            db, org_id=league.org_id, player_id=league.player.id, team_id=league.team_a.id,
            suspension_type="minor", suspended_games=1,
        )


async def test_issue_rejects_zero_games(db, league):
    with pytest.raises(ValidationError):
        await _issue(db, league, games=0)


async def test_issue_for_unknown_player_is_not_found(db, league):
    with pytest.raises(NotFoundError):
        await suspensions.issue_suspension(
            db, org_id=league.org_id, player_id=31337, team_id=league.team_a.id,
            suspension_type="game_misconduct", suspended_games=1,
        )


async def test_update_active_suspension(db, league):
    suspension = await _issue(db, league, games=2, reason="Fighting")
    updated = await suspensions.update_suspension(
        db, org_id=league.org_id, suspension_id=suspension.id, suspended_games=4, suspension_type="game_misconduct"
    )
    assert updated.suspended_games == 4
    assert updated.suspension_type == "game_misconduct"
    assert updated.reason == "Fighting"

    cleared = await suspensions.update_suspension(db, org_id=league.org_id, suspension_id=suspension.id, reason=None)
    assert cleared.reason is None


async def test_update_below_served_is_rejected(db, league):
    suspension = await _issue(db, league, games=3)
    game = await add_game(db, league)
    await accrual.apply_game_completion(db, org_id=league.org_id, game_id=game.id, team_id=league.team_a.id)
    await accrual.apply_game_completion(db, org_id=league.org_id, game_id=(await add_game(db, league)).id,
                                        team_id=league.team_a.id)

    with pytest.raises(ValidationError):
        await suspensions.update_suspension(db, org_id=league.org_id, suspension_id=suspension.id, suspended_games=1)


async def test_update_served_suspension_is_invalid_state(db, league):
    suspension = await _issue(db, league, games=1)
    game = await add_game(db, league)
    await accrual.apply_game_completion(db, org_id=league.org_id, game_id=game.id, team_id=league.team_a.id)

    served = await suspensions.get_suspension(db, org_id=league.org_id, suspension_id=suspension.id)
    assert served.served_games == 1
    assert not served.is_active
    with pytest.raises(InvalidStateError):
        await suspensions.update_suspension(db, org_id=league.org_id, suspension_id=suspension.id, suspended_games=5)


async def test_delete_suspension(db, league):
    suspension = await _issue(db, league)
    await suspensions.delete_suspension(db, org_id=league.org_id, suspension_id=suspension.id)
    with pytest.raises(NotFoundError):
        await suspensions.get_suspension(db, org_id=league.org_id, suspension_id=suspension.id)


async def test_list_active_for_player_skips_served(db, league):
    served = await _issue(db, league, games=1)
    game = await add_game(db, league)
    await accrual.apply_game_completion(db, org_id=league.org_id, game_id=game.id, team_id=league.team_a.id)
    active = await _issue(db, league, games=2)

    listed = await suspensions.list_active_for_player(db, org_id=league.org_id, player_id=league.player.id)
    assert [s.id for s in listed] == [active.id]
    assert served.id not in [s.id for s in listed]


async def test_list_by_game_includes_penalty_suspensions(db, league):
    game = await add_game(db, league)
    event, issued = await penalties.record_penalty(
        db,
        org_id=league.org_id,
        game_id=game.id,
        team_id=league.team_a.id,
        player_id=league.player.id,
        period=2,
        time_minutes=14,
        time_seconds=3,
        penalty_minutes=25,
        description="Match penalty - kneeing",
        suspension=penalties.SuspensionTerms(suspension_type="match_penalty", suspended_games=2),
    )
    direct = await _issue(db, league, games=1, game_id=game.id)
    other_game = await add_game(db, league)
    await _issue(db, league, games=1, game_id=other_game.id)

    listed = await suspensions.list_by_game(db, org_id=league.org_id, game_id=game.id)
    assert [s.id for s in listed] == [issued.id, direct.id]
    assert issued.game_event_id == event.id
    assert issued.game_id == game.id


async def test_list_by_unknown_game_is_not_found(db, league):
    with pytest.raises(NotFoundError):
        await suspensions.list_by_game(db, org_id=league.org_id, game_id=777)


async def test_event_from_other_game_is_rejected(db, league):
    game = await add_game(db, league)
    other = await add_game(db, league)
    event, _ = await penalties.record_penalty(
        db, org_id=league.org_id, game_id=game.id, team_id=league.team_a.id, player_id=league.player.id,
        period=1, time_minutes=3, time_seconds=0,
    )
    with pytest.raises(ValidationError):
        await _issue(db, league, games=1, game_event_id=event.id, game_id=other.id)


async def test_active_for_teams_excludes_suspensions_from_the_game(db, league):
    game = await add_game(db, league)
    carried = await _issue(db, league, games=2)
    await _issue(db, league, games=1, game_id=game.id)

    listed = await suspensions.list_active_for_teams(
        db, org_id=league.org_id, team_ids=[league.team_a.id, league.team_b.id], exclude_game_id=game.id
    )
    assert [s.id for s in listed] == [carried.id]
    assert listed[0].player.last_name == league.player.last_name
