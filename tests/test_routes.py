import asyncio

from fastapi.testclient import TestClient

from core import state
from core.config import settings
from main import app


class _Socket:
    async def accept(self):
        pass

    async def send_json(self, data):
        pass


def _join(room: str, username: str) -> str:
    cid = asyncio.run(state.connection_registry.connect(_Socket()))
    state.connection_registry.join(cid, room, username)
    return cid


def test_root_lists_events_and_endpoints():
    resp = TestClient(app).get("/")

    assert resp.status_code == 200
    body = resp.json()
    assert body["endpoints"]["websocket"] == "/ws"
    assert "join_room" in body["events"]["client"]
    assert "system_message" in body["events"]["server"]


def test_health_counts_connections_and_rooms():
    _join("lobby", "alice")
    asyncio.run(state.connection_registry.connect(_Socket()))

    resp = TestClient(app).get("/health")

    assert resp.json() == {"status": "healthy", "connections": 2, "active_rooms": 1}


def test_rooms_reflect_membership_immediately():
    client = TestClient(app)
    alice = _join("lobby", "alice")
    _join("lobby", "bob")
    _join("random", "carol")

    assert client.get("/rooms").json() == [
        {"room": "lobby", "member_count": 2, "members": ["alice", "bob"]},
        {"room": "random", "member_count": 1, "members": ["carol"]},
    ]

    state.connection_registry.disconnect(alice)
    assert client.get("/rooms/lobby").json() == {"room": "lobby", "member_count": 1, "members": ["bob"]}


def test_unknown_room_is_404():
    resp = TestClient(app).get("/rooms/nowhere")

    assert resp.status_code == 404
    assert resp.json() == {"detail": "Room not found"}


def test_metrics_report_relay_counters():
    state.event_relay.received_events = 10
    state.event_relay.relayed_events = 8
    state.event_relay.dropped_events = 2
    _join("lobby", "alice")

    body = TestClient(app).get("/metrics").json()

    assert body["received_events"] == 10
    assert body["relayed_events"] == 8
    assert body["dropped_events"] == 2
    assert body["concurrent_connections"] == 1
    assert body["active_rooms"] == 1
    assert body["rooms"] == {"lobby": 1}


def test_cors_preflight_allows_only_read_methods():
    client = TestClient(app)
    origin = settings.ALLOWED_ORIGINS[0]

    ok = client.options("/rooms", headers={"Origin": origin, "Access-Control-Request-Method": "GET"})
    denied = client.options("/rooms", headers={"Origin": origin, "Access-Control-Request-Method": "POST"})

    assert ok.status_code == 200
    assert ok.headers["access-control-allow-origin"] == origin
    assert denied.status_code == 400
