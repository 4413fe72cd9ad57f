# backend/api/websocket.py

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from core import state
from core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for the room chat relay.

    Protocol:
    =========
    Every frame, in both directions, is a JSON object:
        {"event": "<name>", "data": {...}}

    Client -> Server Events:
    ------------------------
    Join Room:
        {"event": "join_room", "data": {"room": "lobby", "username": "alice"}}

    Send Message (any extra fields are relayed as-is):
        {"event": "send_message", "data": {"room": "lobby", "message": "hi", ...}}

    Typing:
        {"event": "typing", "data": {"room": "lobby", "username": "alice"}}
        {"event": "stop_typing", "data": {"room": "lobby", "username": "alice"}}

    Server -> Client Events:
    ------------------------
    Join/Leave Notice:
        {"event": "system_message", "data": {"id": "sys-...", "room": "lobby",
         "author": "System", "message": "alice joined the chat", "time": "...", "type": "system"}}

    Chat Message:
        {"event": "receive_message", "data": <send_message payload>}

    Typing Indicator:
        {"event": "user_typing", "data": {"username": "alice", "isTyping": true}}

    Lifecycle:
    ==========
    1. Origin is checked against the allow-list before the handshake completes
    2. Connection accepted with no room
    3. Client sends "join_room"; later events are relayed to the other room members
    4. On disconnect the room is told "<username> left the chat"

    Error Handling:
        Binary frames, invalid JSON and malformed events are dropped
        without a reply. Any other error runs the normal leave flow and
        closes the socket with 1011.
    """
    origin = websocket.headers.get("origin")
    if not settings.is_origin_allowed(origin):
        state.rejected_connections += 1
        logger.warning("Rejected WebSocket from origin %s", origin)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    connection_id = await state.connection_registry.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            data = message.get("text")
            if data is None:
                state.event_relay.drop(connection_id, None, "non-text frame")
                continue

            try:
                frame = json.loads(data)
            except json.JSONDecodeError:
                state.event_relay.drop(connection_id, None, "invalid JSON")
                continue

            await state.event_relay.dispatch(connection_id, frame)

    except WebSocketDisconnect:
        await state.event_relay.on_disconnect(connection_id)
    except Exception as e:
        logger.error("WebSocket error on %s: %s", connection_id, e)
        await state.event_relay.on_disconnect(connection_id)
        await _close_quietly(websocket, status.WS_1011_INTERNAL_ERROR)


async def _close_quietly(websocket: WebSocket, code: int) -> None:
    """Close the socket unless either side already did."""
    if (
        websocket.application_state == WebSocketState.DISCONNECTED
        or websocket.client_state == WebSocketState.DISCONNECTED
    ):
        return
    try:
        await websocket.close(code=code)
    except RuntimeError as e:
        logger.debug("Close after error skipped: %s", e)
