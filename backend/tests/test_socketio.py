import pytest

from imposter.config import resolve_async_mode
from imposter.server import create_app


@pytest.fixture
def server(monkeypatch):
    monkeypatch.setenv("SOCKETIO_ASYNC_MODE", "threading")
    app, socketio = create_app({"TESTING": True, "ROOM_TASKS_ENABLED": False})
    return app, socketio


def _payloads(received, name):
    return [r["args"][0] for r in received if r["name"] == name]


def _create(server, name="Alice"):
    app, socketio = server
    client = socketio.test_client(app)
    ack = client.emit("create_room", {"playerName": name}, callback=True)
    assert ack == {"ok": True}
    code = _payloads(client.get_received(), "room_created")[0]["roomCode"]
    return client, code


def _join(server, code, name):
    app, socketio = server
    client = socketio.test_client(app)
    ack = client.emit("join_room", {"roomCode": code, "playerName": name}, callback=True)
    assert ack == {"ok": True}
    return client


def test_create_and_join_broadcast_snapshots(server):
    host, code = _create(server)
    guest = _join(server, code, "Bob")

    assert _payloads(guest.get_received(), "room_joined") == [{"roomCode": code}]
    snapshot = _payloads(host.get_received(), "room_update")[-1]
    assert [p["name"] for p in snapshot["players"]] == ["Alice", "Bob"]
    assert snapshot["roomCode"] == code
    assert snapshot["phase"] == "lobby"


def test_errors_go_only_to_sender(server):
    app, socketio = server
    host, code = _create(server)
    guest = socketio.test_client(app)

    ack = guest.emit("join_room", {"roomCode": "NOPE00", "playerName": "Bob"}, callback=True)
    assert ack == {"ok": False, "error": "Room not found"}
    assert _payloads(guest.get_received(), "error_message") == [{"message": "Room not found"}]
    assert _payloads(host.get_received(), "error_message") == []


def test_host_only_start(server):
    host, code = _create(server)
    bob = _join(server, code, "Bob")
    _join(server, code, "Carol")

    bob.emit("start_game", {})
    assert _payloads(bob.get_received(), "error_message") == [{"message": "Only host can start game"}]

    host.get_received()
    host.emit("start_game")
    received = host.get_received()
    assert _payloads(received, "phase_changed") == [{"phase": "reveal"}]
    roles = _payloads(received, "role_assigned")
    assert len(roles) == 1
    assert roles[0]["role"] in ("player", "imposter")


def test_reconnect_failure_uses_reconnect_failed(server):
    app, socketio = server
    client = socketio.test_client(app)
    client.emit("reconnect_to_room", {"roomCode": "ABCDEF", "playerName": "Alice"})
    assert _payloads(client.get_received(), "reconnect_failed") == [{"message": "Room no longer exists"}]


def test_disconnect_and_reconnect(server):
    app, socketio = server
    host, code = _create(server)
    bob = _join(server, code, "Bob")
    host.get_received()

    bob.disconnect()
    snapshot = _payloads(host.get_received(), "room_update")[-1]
    assert snapshot["players"][1]["connected"] is False

    bob_again = socketio.test_client(app)
    ack = bob_again.emit("reconnect_to_room", {"roomCode": code, "playerName": "bob"}, callback=True)
    assert ack == {"ok": True}
    assert _payloads(bob_again.get_received(), "reconnect_success") == [{"roomCode": code}]
    snapshot = _payloads(host.get_received(), "room_update")[-1]
    assert snapshot["players"][1]["connected"] is True


def test_http_routes(server):
    app, socketio = server
    _, code = _create(server)
    http = app.test_client()

    health = http.get("/api/health")
    assert health.status_code == 200
    assert health.get_json() == {"ok": True, "rooms": 1}

    categories = http.get("/api/categories").get_json()
    assert "Animals" in categories["categories"]
    assert categories["modes"] == ["different_word", "no_word"]

    room = http.get(f"/api/rooms/{code.lower()}")
    assert room.status_code == 200
    assert room.get_json()["roomCode"] == code

    missing = http.get("/api/rooms/ZZZZZZ")
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "room_not_found"}


def test_async_mode_env_override(monkeypatch, server):
    monkeypatch.setenv("SOCKETIO_ASYNC_MODE", " threading ")
    assert resolve_async_mode() == "threading"

    _, socketio = server
    assert socketio.async_mode == "threading"


def test_async_mode_default_avoids_eventlet_where_unsupported(monkeypatch):
    monkeypatch.delenv("SOCKETIO_ASYNC_MODE", raising=False)
    monkeypatch.setattr("imposter.config.sys.platform", "win32")
    assert resolve_async_mode() == "threading"
