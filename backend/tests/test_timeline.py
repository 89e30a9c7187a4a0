from __future__ import annotations

import random
from datetime import date, datetime, timezone

from rosterdesk.models import Contract, Season
from rosterdesk.services.timeline import EventType, age, classify_contracts

SEASONS = {
    year: Season(id=year - 2000, name=str(year), season_start=date(year, 9, 1), season_end=date(year + 1, 4, 30))
    for year in range(2018, 2024)
}


def _contract(cid: int, team_id: int, position: str, start: int, end: int | None) -> Contract:
    return Contract(
        id=cid,
        player_id=1,
        team_id=team_id,
        position=position,
        start_season_id=SEASONS[start].id,
        start_season=SEASONS[start],
        end_season_id=SEASONS[end].id if end is not None else None,
        created_at=datetime(2024, 1, cid, tzinfo=timezone.utc),
    )


def _career() -> list[Contract]:
    return [
        _contract(1, team_id=10, position="forward", start=2018, end=2019),
        _contract(2, team_id=10, position="defense", start=2020, end=2020),
        _contract(3, team_id=20, position="defense", start=2021, end=2021),
        _contract(4, team_id=20, position="defense", start=2022, end=2022),
        # Current team: labeled active even though it is also a move to a new team.
        _contract(5, team_id=30, position="defense", start=2023, end=None),
    ]


def test_classify_labels_each_career_step():
    entries = classify_contracts(_career())
    assert [e.contract.id for e in entries] == [1, 2, 3, 4, 5]
    assert [e.event_type for e in entries] == [
        EventType.SIGNED,
        EventType.POSITION_CHANGE,
        EventType.TRANSFER,
        EventType.SIGNED,
        EventType.ACTIVE,
    ]


def test_classify_is_independent_of_input_order():
    expected = [(e.contract.id, e.event_type) for e in classify_contracts(_career())]
    rng = random.Random(7)
    for _ in range(20):
        shuffled = _career()
        rng.shuffle(shuffled)
        assert [(e.contract.id, e.event_type) for e in classify_contracts(shuffled)] == expected


def test_classify_breaks_same_season_ties_by_creation():
    early = _contract(1, team_id=10, position="forward", start=2021, end=2021)
    late = _contract(2, team_id=20, position="forward", start=2021, end=None)
    entries = classify_contracts([late, early])
    assert [(e.contract.id, e.event_type) for e in entries] == [(1, EventType.SIGNED), (2, EventType.ACTIVE)]


def test_classify_empty():
    assert classify_contracts([]) == []


def test_event_type_values():
    assert EventType.POSITION_CHANGE.value == "position-change"


def test_age_counts_completed_years():
    born = date(2000, 5, 10)
    assert age(born, as_of=date(2020, 5, 9)) == 19
    assert age(born, as_of=date(2020, 5, 10)) == 20
    assert age(None) is None


def test_age_leap_day_birthday():
    born = date(2004, 2, 29)
    assert age(born, as_of=date(2023, 2, 28)) == 18
    assert age(born, as_of=date(2023, 3, 1)) == 19
