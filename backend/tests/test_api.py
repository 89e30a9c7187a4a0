from __future__ import annotations

import httpx
import pytest

from conftest import add_game
from rosterdesk.database import get_db
from rosterdesk.main import app


def _headers(org_id: str = "org-a", role: str = "admin") -> dict[str, str]:
    return {"X-Organization-Id": org_id, "X-User-Id": "user_test", "X-Role": role}


@pytest.fixture
async def client(db, session_factory):
    # Seeded rows must be committed before requests open their own sessions.
    await db.commit()

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _sign(client, league, season_year=2021, role="admin") -> httpx.Response:
    return await client.post(
        "/api/contracts",
        json={
            "player_id": league.player.id,
            "team_id": league.team_a.id,
            "season_id": league.seasons[season_year].id,
            "position": "forward",
            "jersey_number": 91,
        },
        headers=_headers(role=role),
    )


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_missing_organization_is_rejected(league, client):
    resp = await client.get("/api/teams", headers={"X-Role": "admin"})
    assert resp.status_code == 400


async def test_teams_are_listed_per_organization(league, client):
    resp = await client.get("/api/teams", headers=_headers())
    assert resp.status_code == 200
    assert sorted(t["short_name"] for t in resp.json()) == ["HBS", "NSW"]

    resp = await client.get("/api/teams", headers=_headers(org_id="org-b"))
    assert resp.json() == []


async def test_sign_and_read_roster(league, client):
    resp = await _sign(client, league)
    assert resp.status_code == 201
    contract = resp.json()
    assert contract["end_season_id"] is None

    resp = await client.get(
        "/api/contracts/roster",
        params={"team_id": league.team_a.id, "season_id": league.seasons[2022].id},
        headers=_headers(role="editor"),
    )
    assert resp.status_code == 200
    roster = resp.json()
    assert [r["id"] for r in roster] == [contract["id"]]
    assert roster[0]["player"]["last_name"] == league.player.last_name


async def test_editor_cannot_sign(league, client):
    resp = await _sign(client, league, role="editor")
    assert resp.status_code == 403


async def test_domain_errors_map_to_status_codes(league, client):
    resp = await client.get("/api/players/424242", headers=_headers())
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"

    contract = (await _sign(client, league, season_year=2022)).json()
    resp = await client.post(
        f"/api/contracts/{contract['id']}/transfer",
        json={"new_team_id": league.team_b.id, "effective_season_id": league.seasons[2021].id},
        headers=_headers(role="team_manager"),
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"


async def test_transfer_then_timeline(league, client):
    contract = (await _sign(client, league)).json()
    resp = await client.post(
        f"/api/contracts/{contract['id']}/transfer",
        json={"new_team_id": league.team_b.id, "effective_season_id": league.seasons[2023].id},
        headers=_headers(role="team_manager"),
    )
    assert resp.status_code == 201

    resp = await client.get(f"/api/players/{league.player.id}/timeline", headers=_headers())
    assert resp.status_code == 200
    assert [(e["event_type"], e["contract"]["team"]["short_name"]) for e in resp.json()] == [
        ("signed", "NSW"),
        ("active", "HBS"),
    ]

    resp = await client.get(f"/api/players/{league.player.id}", headers=_headers())
    detail = resp.json()
    assert detail["current_contract"]["team_id"] == league.team_b.id
    assert detail["age"] is not None


async def test_suspension_lifecycle_over_http(db, league, client):
    await _sign(client, league)
    origin = await add_game(db, league)
    next_game = await add_game(db, league)
    upcoming = await add_game(db, league)

    resp = await client.post(
        "/api/suspensions",
        json={
            "player_id": league.player.id,
            "team_id": league.team_a.id,
            "suspension_type": "match_penalty",
            "suspended_games": 3,
            "reason": "Boarding",
            "game_id": origin.id,
        },
        headers=_headers(role="game_manager"),
    )
    assert resp.status_code == 201
    suspension = resp.json()
    assert suspension["remaining_games"] == 3

    for game in (origin, next_game):
        resp = await client.post(
            f"/api/games/{game.id}/complete",
            json={"home_team_id": league.team_a.id, "away_team_id": league.team_b.id},
            headers=_headers(role="game_reporter"),
        )
        assert resp.status_code == 200

    resp = await client.get(
        f"/api/games/{upcoming.id}/eligibility",
        params={"player_id": league.player.id, "team_id": league.team_a.id},
        headers=_headers(role="editor"),
    )
    assert resp.json()["eligible"] is False
    assert resp.json()["reason"] == "SUSPENDED"
    assert resp.json()["remaining_games"] == 2

    resp = await client.patch(
        f"/api/suspensions/{suspension['id']}", json={"reason": None}, headers=_headers(role="game_manager")
    )
    assert resp.status_code == 200
    assert resp.json()["reason"] is None
    assert resp.json()["served_games"] == 1

    resp = await client.get(f"/api/games/{upcoming.id}/active-suspensions", headers=_headers())
    assert [s["id"] for s in resp.json()] == [suspension["id"]]


async def test_reporter_needs_suspension_rights_for_qualifying_penalty(db, league, client):
    game = await add_game(db, league)
    body = {
        "team_id": league.team_a.id,
        "player_id": league.player.id,
        "period": 1,
        "time_minutes": 7,
        "time_seconds": 12,
        "penalty_minutes": 25,
        "suspension": {"suspension_type": "match_penalty", "suspended_games": 1},
    }
    resp = await client.post(f"/api/games/{game.id}/penalties", json=body, headers=_headers(role="game_reporter"))
    assert resp.status_code == 403

    resp = await client.post(f"/api/games/{game.id}/penalties", json=body, headers=_headers(role="game_manager"))
    assert resp.status_code == 201
    payload = resp.json()
    assert payload["suspension"]["game_event_id"] == payload["event"]["id"]

    resp = await client.get(f"/api/games/{game.id}/suspensions", headers=_headers())
    assert [s["id"] for s in resp.json()] == [payload["suspension"]["id"]]
