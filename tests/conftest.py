from __future__ import annotations

from typing import Any

import pytest

from core import state
from services.connection_registry import ConnectionRegistry
from services.event_relay import EventRelay
from services.room_index import RoomIndex


class DummyWebSocket:
    """Stands in for a FastAPI WebSocket: records every frame sent to it."""

    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.broken = broken
        self.sent: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: Any) -> None:
        if self.broken:
            raise RuntimeError("socket is closed")
        self.sent.append(data)

    def events(self, name: str) -> list[dict[str, Any]]:
        return [f["data"] for f in self.sent if f["event"] == name]


@pytest.fixture
def dummy_socket():
    return DummyWebSocket


@pytest.fixture
def room_index() -> RoomIndex:
    return RoomIndex()


@pytest.fixture
def registry(room_index: RoomIndex) -> ConnectionRegistry:
    return ConnectionRegistry(room_index=room_index)


@pytest.fixture
def relay(registry: ConnectionRegistry) -> EventRelay:
    return EventRelay(registry=registry)


@pytest.fixture(autouse=True)
def _fresh_app_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test its own relay so connections never leak between tests."""

    index = RoomIndex()
    registry = ConnectionRegistry(room_index=index)
    monkeypatch.setattr(state, "room_index", index)
    monkeypatch.setattr(state, "connection_registry", registry)
    monkeypatch.setattr(state, "event_relay", EventRelay(registry=registry))
    monkeypatch.setattr(state, "rejected_connections", 0)
