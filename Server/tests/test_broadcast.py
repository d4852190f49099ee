import pytest

from shiritori.services.broadcast_service import (
    LOBBY_ROOM, BroadcastGateway, get_broadcast_gateway, session_room
)


@pytest.fixture()
def gateway(app_bundle):
    return get_broadcast_gateway()


def names(test_client, name):
    return [m["args"][0] for m in test_client.get_received() if m["name"] == name]


def test_subscriptions_are_socketio_rooms(gateway, socketio, connected_client):
    _, sid = connected_client()
    gateway.subscribe("s1", sid)

    assert session_room("s1") == "game_s1"
    assert session_room("s1") in socketio.server.manager.get_rooms(sid, "/")
    assert gateway.subscribers("s1") == {sid}


def test_broadcast_reaches_every_subscriber(gateway, connected_client):
    (a, sid_a), (b, sid_b) = connected_client(), connected_client()
    gateway.subscribe("s1", sid_a)
    gateway.subscribe("s1", sid_b)

    assert gateway.broadcast("s1", "game-update", {"session": {"sessionId": "s1"}}) == 2
    assert names(a, "game-update") == [{"session": {"sessionId": "s1"}}]
    assert names(b, "game-update") == [{"session": {"sessionId": "s1"}}]


def test_emit_failure_is_isolated_per_recipient(gateway, socketio, connected_client, monkeypatch):
    clients = [connected_client() for _ in range(3)]
    for _, sid in clients:
        gateway.subscribe("s1", sid)
    failing = clients[1][1]

    original_emit = socketio.emit

    def flaky_emit(event, *args, **kwargs):
        if kwargs.get("to") == failing:
            raise ConnectionError("socket closed")
        return original_emit(event, *args, **kwargs)

    monkeypatch.setattr(socketio, "emit", flaky_emit)

    assert gateway.broadcast("s1", "game-update", {}) == 2
    assert len(names(clients[0][0], "game-update")) == 1
    assert names(clients[1][0], "game-update") == []
    assert len(names(clients[2][0], "game-update")) == 1


def test_addressed_delivers_to_one_handle(gateway, connected_client):
    (a, sid_a), (b, _) = connected_client(), connected_client()

    assert gateway.addressed(sid_a, "word-result", {"valid": False, "reason": "too short"})
    assert names(a, "word-result") == [{"valid": False, "reason": "too short"}]
    assert names(b, "word-result") == []


def test_unknown_handle_is_not_delivered(gateway):
    assert not gateway.is_connected("gone")
    assert not gateway.addressed("gone", "word-result", {})


def test_sessions_are_isolated_and_unsubscribe_works(gateway, connected_client):
    (a, sid_a), (b, sid_b) = connected_client(), connected_client()
    gateway.subscribe("s1", sid_a)
    gateway.subscribe("s2", sid_b)

    gateway.broadcast("s1", "game-update", {})
    assert len(names(a, "game-update")) == 1
    assert names(b, "game-update") == []

    assert gateway.unsubscribe("s1", sid_a)
    assert not gateway.unsubscribe("s1", sid_a)
    assert gateway.subscribers("s1") == set()


def test_disconnect_leaves_every_session_room(gateway, socketio, connected_client):
    _, sid = connected_client()
    gateway.subscribe("s1", sid)
    gateway.subscribe("s2", sid)
    gateway.join_lobby(sid)

    assert gateway.disconnect(sid) == {"s1", "s2"}
    assert gateway.subscribers("s1") == set()
    assert LOBBY_ROOM in socketio.server.manager.get_rooms(sid, "/")


def test_closed_socket_leaves_its_rooms(gateway, connected_client):
    test_client, sid = connected_client()
    gateway.subscribe("s1", sid)

    test_client.disconnect()
    assert gateway.subscribers("s1") == set()
    assert gateway.broadcast("s1", "game-update", {}) == 0


def test_drop_session_empties_the_room(gateway, connected_client):
    (_, sid_a), (_, sid_b) = connected_client(), connected_client()
    gateway.subscribe("s1", sid_a)
    gateway.subscribe("s1", sid_b)

    gateway.drop_session("s1")
    assert gateway.subscribers("s1") == set()


def test_lobby_broadcast_reaches_only_lobby_room(gateway, connected_client):
    (watcher, sid), (other, _) = connected_client(), connected_client()
    gateway.join_lobby(sid)

    gateway.broadcast_lobby("lobby-update", {"sessions": []})
    assert names(watcher, "lobby-update") == [{"sessions": []}]
    assert names(other, "lobby-update") == []

    gateway.leave_lobby(sid)
    gateway.broadcast_lobby("lobby-update", {"sessions": []})
    assert names(watcher, "lobby-update") == []


def test_no_server_bound_is_not_fatal():
    gateway = BroadcastGateway()
    assert gateway.subscribers("s1") == set()
    assert gateway.broadcast("s1", "game-update", {}) == 0
    assert not gateway.addressed("a", "word-result", {})
    gateway.broadcast_lobby("lobby-update", {})


def test_gateway_keeps_no_membership_of_its_own():
    gateway = BroadcastGateway()
    for attribute in ("bind", "connect", "_connected", "_subscribers"):
        assert not hasattr(gateway, attribute)
