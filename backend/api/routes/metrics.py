# backend/api/routes/metrics.py
from fastapi import APIRouter
from datetime import datetime, timezone

from core import state

router = APIRouter()

@router.get("/metrics")
async def get_metrics():
    """
    Relay traffic and capacity metrics.

    Returns:
        dict: Uptime, event counters and current capacity

    Example Response:
        {
            "uptime_hours": 1.5,
            "received_events": 1200,
            "relayed_events": 1150,
            "dropped_events": 3,
            "events_per_second": 0.22,
            "rejected_connections": 0,
            "concurrent_connections": 12,
            "active_rooms": 3,
            "rooms": {"lobby": 8, "random": 4}
        }

    Dropped events are malformed frames the relay ignored without telling
    the client; a rising count usually means a broken frontend build.
    """
    uptime_seconds = (datetime.now(timezone.utc) - state.app_start_time).total_seconds()
    relay = state.event_relay

    if uptime_seconds > 0:
        events_per_second = relay.received_events / uptime_seconds
    else:
        events_per_second = 0

    return {
        # Statistics
        "uptime_hours": round(uptime_seconds / 3600, 2) if uptime_seconds > 0 else 0,
        "received_events": relay.received_events,
        "relayed_events": relay.relayed_events,
        "dropped_events": relay.dropped_events,
        "events_per_second": round(events_per_second, 2),
        "rejected_connections": state.rejected_connections,

        # Capacity
        "concurrent_connections": state.connection_registry.connection_count,
        "active_rooms": len(state.room_index),
        "rooms": state.room_index.rooms(),
    }
