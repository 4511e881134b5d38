import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.exceptions import RoomMissing
from core.score_ledger import ScoreLedger


def test_register_team_is_idempotent(store, room):
    ScoreLedger.register_team(store, room, "Red")
    ScoreLedger.change_score(store, room, "Red", 2)

    ScoreLedger.register_team(store, room, "Red")

    state = store.get(room)
    assert state["teams"] == ["Red"]
    assert state["scores"] == {"Red": 2}


def test_register_keeps_join_order(store, room):
    for team in ["Red", "Blue", "Green", "Blue"]:
        ScoreLedger.register_team(store, room, team)

    assert store.get(room)["teams"] == ["Red", "Blue", "Green"]


def test_register_team_twice_starts_at_zero(store, room):
    ScoreLedger.register_team(store, room, "Red")
    ScoreLedger.register_team(store, room, "Red")

    state = store.get(room)
    assert state["teams"].count("Red") == 1
    assert state["scores"]["Red"] == 0


def test_score_changes_add_up(store, room):
    ScoreLedger.register_team(store, room, "Red")
    ScoreLedger.change_score(store, room, "Red", 3)

    ScoreLedger.change_score(store, room, "Red", -1)
    score = ScoreLedger.change_score(store, room, "Red", 2)

    assert score == 4
    assert store.get(room)["scores"]["Red"] == 4


def test_change_score_for_unknown_team_registers_it(store, room):
    score = ScoreLedger.change_score(store, room, "Ghosts", -2)

    state = store.get(room)
    assert score == -2
    assert state["teams"] == ["Ghosts"]
    assert state["scores"] == {"Ghosts": -2}


def test_ledger_on_missing_room_raises(store):
    with pytest.raises(RoomMissing):
        ScoreLedger.register_team(store, "nope", "Red")
    with pytest.raises(RoomMissing):
        ScoreLedger.change_score(store, "nope", "Red", 1)


def test_concurrent_registrations_all_land(store, room):
    teams = [f"Team {i}" for i in range(6)]
    barrier = threading.Barrier(len(teams))

    def join(team):
        barrier.wait()
        ScoreLedger.register_team(store, room, team)

    with ThreadPoolExecutor(max_workers=len(teams)) as pool:
        list(pool.map(join, teams))

    state = store.get(room)
    assert sorted(state["teams"]) == sorted(teams)
    assert state["scores"] == {team: 0 for team in teams}


def test_concurrent_score_changes_are_not_lost(store, room):
    ScoreLedger.register_team(store, room, "Red")
    deltas = [1, 2, -1, 3, 1, -2]
    barrier = threading.Barrier(len(deltas))

    def score(delta):
        barrier.wait()
        ScoreLedger.change_score(store, room, "Red", delta)

    with ThreadPoolExecutor(max_workers=len(deltas)) as pool:
        list(pool.map(score, deltas))

    assert store.get(room)["scores"]["Red"] == sum(deltas)
