import threading

import pytest

from shiritori.errors import CapacityViolation, InvalidRequest, NotFound
from shiritori.models.game import Phase


def test_create_and_lookup(standalone_registry):
    session = standalone_registry.create()
    assert standalone_registry.get(session.session_id) is session
    assert standalone_registry.get("nope") is None
    with pytest.raises(NotFound):
        standalone_registry.require("nope")


def test_ids_are_unique(standalone_registry):
    ids = {standalone_registry.create().session_id for _ in range(50)}
    assert len(ids) == 50


def test_listing_only_shows_waiting_sessions(standalone_registry):
    waiting = standalone_registry.create()
    running = standalone_registry.create()
    standalone_registry.join(running.session_id, "alice")
    standalone_registry.join(running.session_id, "bob")

    listed = standalone_registry.list()
    assert [s.session_id for s in listed] == [waiting.session_id]
    assert listed[0].player_count == 0
    assert listed[0].joinable

    everything = {s.session_id: s.phase for s in standalone_registry.list(include_all=True)}
    assert everything[running.session_id] == Phase.IN_PROGRESS


def test_join_unknown_and_full(standalone_registry):
    with pytest.raises(NotFound):
        standalone_registry.join("missing", "alice")

    session = standalone_registry.create()
    standalone_registry.join(session.session_id, "alice")
    standalone_registry.join(session.session_id, "bob")
    with pytest.raises(CapacityViolation):
        standalone_registry.join(session.session_id, "carol")


def test_remove_terminates_session(standalone_registry):
    session = standalone_registry.create()
    standalone_registry.join(session.session_id, "alice")
    standalone_registry.join(session.session_id, "bob")

    assert standalone_registry.remove(session.session_id)
    assert session.phase == Phase.FINISHED
    assert not session.clock.active
    assert standalone_registry.get(session.session_id) is None
    assert not standalone_registry.remove(session.session_id)


def test_last_player_leaving_waiting_session_discards_it(standalone_registry):
    session = standalone_registry.create()
    standalone_registry.join(session.session_id, "alice")
    standalone_registry.leave(session.session_id, "alice")
    assert standalone_registry.get(session.session_id) is None


def test_sessions_for_connection(standalone_registry):
    session = standalone_registry.create()
    standalone_registry.join(session.session_id, "alice")
    session.bind_connection("alice", "sid-a")
    bound = standalone_registry.sessions_for_connection("sid-a")
    assert [(s.session_id, name) for s, name in bound] == [(session.session_id, "alice")]
    assert standalone_registry.sessions_for_connection("sid-x") == []


def test_cleanup_expired(standalone_registry):
    finished = standalone_registry.create()
    standalone_registry.join(finished.session_id, "alice")
    standalone_registry.join(finished.session_id, "bob")
    finished.force_timeout()
    fresh = standalone_registry.create()

    assert standalone_registry.cleanup_expired(60, now=finished.finished_at + 10) == 0
    removed = standalone_registry.cleanup_expired(60, now=finished.finished_at + 61)
    assert removed == 2
    assert standalone_registry.get(finished.session_id) is None
    assert standalone_registry.get(fresh.session_id) is None


def test_concurrent_joins_never_overfill(standalone_registry):
    session = standalone_registry.create()
    outcomes = []
    barrier = threading.Barrier(8)

    def attempt(name):
        barrier.wait()
        try:
            standalone_registry.join(session.session_id, name)
            outcomes.append("ok")
        except CapacityViolation:
            outcomes.append("full")

    threads = [threading.Thread(target=attempt, args=(f"player{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 2
    assert len(session.players) == 2
    assert session.phase == Phase.IN_PROGRESS


def test_concurrent_submissions_accept_exactly_one(standalone_registry):
    session = standalone_registry.create()
    standalone_registry.join(session.session_id, "alice")
    standalone_registry.join(session.session_id, "bob")
    accepted = []
    barrier = threading.Barrier(6)

    def attempt(word):
        barrier.wait()
        try:
            session.submit_word("alice", word)
            accepted.append(word)
        except Exception:
            pass

    words = ["train", "plane", "crane", "drain", "grain", "brain"]
    threads = [threading.Thread(target=attempt, args=(w,)) for w in words]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(accepted) == 1
    assert session.words_used == accepted


def test_join_rejects_connection_that_is_not_open(standalone_registry):
    session = standalone_registry.create()
    with pytest.raises(InvalidRequest):
        standalone_registry.join(session.session_id, "alice", connection="sid-a")
    assert session.summary().player_count == 0


def test_join_binds_and_subscribes_open_connection(registry, connected_client):
    _, sid = connected_client()
    session = registry.create()

    registry.join(session.session_id, "alice", connection=sid)
    assert session.player_for_connection(sid) == "alice"
    assert registry.gateway.subscribers(session.session_id) == {sid}
