import pytest
import logging

from core.exceptions import RoomMissing, TransactionConflict
from core.room_store import apply_field_paths, array_union
from sqlalchemy.orm.exc import StaleDataError


def test_dotted_path_keeps_siblings():
    document = {"charades": {"running": True, "used": ["Einstein"]}}

    apply_field_paths(document, {"charades.running": False})

    assert document == {"charades": {"running": False, "used": ["Einstein"]}}


def test_dotted_path_creates_missing_parents():
    document = {}

    apply_field_paths(document, {"hum.song": "Yesterday"})

    assert document == {"hum": {"song": "Yesterday"}}


def test_array_union_appends_only_new_items():
    document = {"charades": {"used": ["Einstein"]}}

    apply_field_paths(document, {"charades.used": array_union("Einstein", "Curie")})

    assert document["charades"]["used"] == ["Einstein", "Curie"]


def test_create_is_insert_if_absent(store):
    assert store.create("R1", {"teams": ["Red"]}) is True
    assert store.create("R1", {"teams": []}) is False

    room = store.get("R1")
    assert room["teams"] == ["Red"]
    assert room["createdAt"]


def test_get_missing_room_returns_none(store):
    assert store.get("nope") is None
    assert store.revision("nope") == 0


def test_update_partial_on_missing_room_raises(store):
    with pytest.raises(RoomMissing):
        store.update_partial("nope", {"reveal": True})


def test_transact_without_writes_does_not_bump_revision(store):
    store.create("R1", {"reveal": False})
    before = store.revision("R1")

    assert not store.transact("R1", lambda current: None)

    assert store.revision("R1") == before


def test_set_replaces_document_but_keeps_created_at(store):
    store.create("R1", {"teams": ["Red"], "reveal": True})
    created_at = store.get("R1")["createdAt"]

    store.set("R1", {"teams": [], "createdAt": "ignored"})

    room = store.get("R1")
    assert room == {"teams": [], "createdAt": created_at}


def test_transact_gives_up_after_max_attempts(store, monkeypatch):
    store.create("R1", {})
    store.max_attempts = 3
    calls = []

    def always_stale(db, room_id, mutate, replace=False):
        calls.append(room_id)
        raise StaleDataError("version mismatch")

    monkeypatch.setattr("core.room_store._locked_write", always_stale)

    with pytest.raises(TransactionConflict):
        store.transact("R1", lambda current: {"reveal": True})
    assert len(calls) == 3


def test_subscribe_delivers_initial_state_then_changes(store):
    seen = []
    unsubscribe = store.subscribe("R1", seen.append)

    store.create("R1", {"reveal": False})
    store.update_partial("R1", {"reveal": True})
    unsubscribe()
    store.update_partial("R1", {"reveal": False})

    assert seen[0] is None
    assert [doc["reveal"] for doc in seen[1:]] == [False, True]


def test_subscriber_error_does_not_break_writer(store):
    store.create("R1", {"reveal": False})
    seen = []

    def broken(document):
        raise RuntimeError("render failed")

    store.subscribe("R1", broken)
    store.subscribe("R1", seen.append)
    store.update_partial("R1", {"reveal": True})

    assert store.get("R1")["reveal"] is True
    assert seen[-1]["reveal"] is True


def test_version_conflict_retries_with_warning_only(store, caplog):
    store.create("R1", {"reveal": False, "teams": []})
    calls = []

    def add_team(current):
        calls.append(current["reveal"])
        if len(calls) == 1:
            # 另一個寫入者在這次 transaction 讀取之後先 commit
            store.update_partial("R1", {"reveal": True})
        return {"teams": current["teams"] + ["Red"]}

    with caplog.at_level(logging.WARNING):
        store.transact("R1", add_team)

    assert calls == [False, True]
    room = store.get("R1")
    assert room["reveal"] is True
    assert room["teams"] == ["Red"]
    assert any("retrying" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


def test_missing_room_is_not_logged_as_error(store, caplog):
    with caplog.at_level(logging.WARNING):
        with pytest.raises(RoomMissing):
            store.transact("nope", lambda current: {"reveal": True})

    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
