from __future__ import annotations

import pytest
from sqlalchemy import func, select

from conftest import add_game
from rosterdesk.errors import InvalidStateError, NotFoundError, ValidationError
from rosterdesk.models import GameEvent, Suspension
from rosterdesk.services import penalties


async def _penalty(db, league, game, **kwargs):
    params = dict(
        org_id=league.org_id,
        game_id=game.id,
        team_id=league.team_a.id,
        player_id=league.player.id,
        period=3,
        time_minutes=18,
        time_seconds=45,
    )
    params.update(kwargs)
    return await penalties.record_penalty(db, **params)


async def _count(db, model) -> int:
    return (await db.execute(select(func.count(model.id)))).scalar_one()


async def test_plain_penalty_has_no_suspension(db, league):
    game = await add_game(db, league)
    event, suspension = await _penalty(db, league, game, penalty_minutes=2, description="Tripping")
    assert suspension is None
    assert event.event_type == "penalty"
    assert event.penalty_player_id == league.player.id


async def test_qualifying_penalty_issues_linked_suspension(db, league):
    game = await add_game(db, league)
    event, suspension = await _penalty(
        db, league, game,
        penalty_minutes=10,
        description="Game misconduct",
        suspension=penalties.SuspensionTerms(suspension_type="game_misconduct", suspended_games=1, reason="Abuse"),
    )
    assert suspension is not None
    assert suspension.game_event_id == event.id
    assert suspension.game_id == game.id
    assert suspension.reason == "Abuse"


async def test_invalid_terms_leave_no_event_behind(db, league):
    game = await add_game(db, league)
    with pytest.raises(ValidationError):
        await _penalty(db, league, game, suspension=penalties.SuspensionTerms(suspension_type="slashing"))
    # Rolled back together with the event.
    assert await _count(db, GameEvent) == 0
    assert await _count(db, Suspension) == 0


async def test_clock_is_validated(db, league):
    game = await add_game(db, league)
    with pytest.raises(ValidationError):
        await _penalty(db, league, game, time_minutes=21)


async def test_completed_game_is_read_only(db, league):
    game = await add_game(db, league, status="completed")
    with pytest.raises(InvalidStateError):
        await _penalty(db, league, game)


async def test_delete_penalty_removes_its_suspension(db, league):
    game = await add_game(db, league)
    event, _ = await _penalty(
        db, league, game, suspension=penalties.SuspensionTerms(suspension_type="match_penalty", suspended_games=2)
    )
    await penalties.delete_penalty(db, org_id=league.org_id, game_id=game.id, event_id=event.id)
    assert await _count(db, GameEvent) == 0
    assert await _count(db, Suspension) == 0


async def test_delete_penalty_from_other_game_is_not_found(db, league):
    game = await add_game(db, league)
    other = await add_game(db, league)
    event, _ = await _penalty(db, league, game)
    with pytest.raises(NotFoundError):
        await penalties.delete_penalty(db, org_id=league.org_id, game_id=other.id, event_id=event.id)
