import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.buzzer import BuzzerArbiter
from core.exceptions import RoomMissing
from core.score_ledger import ScoreLedger
from services import clock_service


def test_first_buzz_locks(store, room, monkeypatch):
    monkeypatch.setattr(clock_service, "now_ms", lambda: 1_700_000_000_000)

    assert BuzzerArbiter.buzz(store, room, "Red") is True

    assert store.get(room)["buzz"] == {"lockedBy": "Red", "lockedAt": 1_700_000_000_000}


def test_losing_buzz_is_a_silent_noop(store, room):
    BuzzerArbiter.buzz(store, room, "Red")
    revision = store.revision(room)

    assert BuzzerArbiter.buzz(store, room, "Blue") is False

    assert store.get(room)["buzz"]["lockedBy"] == "Red"
    assert store.revision(room) == revision


def test_reset_buzz_unlocks(store, room):
    BuzzerArbiter.buzz(store, room, "Red")

    BuzzerArbiter.reset_buzz(store, room)

    assert store.get(room)["buzz"] == {"lockedBy": None, "lockedAt": None}
    assert BuzzerArbiter.buzz(store, room, "Blue") is True


def test_buzz_on_missing_room_raises(store):
    with pytest.raises(RoomMissing):
        BuzzerArbiter.buzz(store, "nope", "Red")


def test_concurrent_buzz_has_exactly_one_winner(store, room):
    teams = [f"Team {i}" for i in range(6)]
    for team in teams:
        ScoreLedger.register_team(store, room, team)
    revision = store.revision(room)
    barrier = threading.Barrier(len(teams))

    def press(team):
        barrier.wait()
        return BuzzerArbiter.buzz(store, room, team)

    with ThreadPoolExecutor(max_workers=len(teams)) as pool:
        results = list(pool.map(press, teams))

    assert results.count(True) == 1
    winner = teams[results.index(True)]
    assert store.get(room)["buzz"]["lockedBy"] == winner
    # 只有一次 commit
    assert store.revision(room) == revision + 1
