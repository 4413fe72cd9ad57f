# backend/core/state.py
from __future__ import annotations

from datetime import datetime, timezone

from services.room_index import RoomIndex
from services.connection_registry import ConnectionRegistry
from services.event_relay import EventRelay

# Global singletons for app state
room_index = RoomIndex()
connection_registry = ConnectionRegistry(room_index=room_index)
event_relay = EventRelay(registry=connection_registry)

# Metrics
app_start_time: datetime = datetime.now(timezone.utc)
rejected_connections: int = 0
