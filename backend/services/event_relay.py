# backend/services/event_relay.py

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from models.models import SystemMessage, TypingSignal
from services.connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)

# Inbound (client -> server)
JOIN_ROOM = "join_room"
SEND_MESSAGE = "send_message"
TYPING = "typing"
STOP_TYPING = "stop_typing"

# Outbound (server -> client)
SYSTEM_MESSAGE = "system_message"
RECEIVE_MESSAGE = "receive_message"
USER_TYPING = "user_typing"


def create_system_message(room: str, message: str) -> dict:
    return SystemMessage(room=room, message=message).model_dump()


def _text(payload: dict, key: str) -> Optional[str]:
    """Non-empty string field of a payload, or None."""
    value = payload.get(key)
    return value if isinstance(value, str) and value else None


# ============================================================================
# EVENT RELAY
# ============================================================================

class EventRelay:
    """
    Turns inbound client events into room broadcasts.

    Every handler checks the payload, updates the registry and emits one
    derived event to the other members of the room. Anything malformed is
    dropped: the client gets no error frame and keeps its connection. Drops
    are logged at DEBUG and counted so operators can still see them.

    Event contracts:
        join_room      {room, username}  -> system_message "<username> joined the chat"
        send_message   {room, message}   -> receive_message (payload unmodified)
        typing         {room, username}  -> user_typing {username, isTyping: true}
        stop_typing    {room, username}  -> user_typing {username, isTyping: false}
        (disconnect)                     -> system_message "<username> left the chat"

    The sender never receives its own event back.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry
        self.handlers: Dict[str, Callable[[str, dict], Awaitable[None]]] = {
            JOIN_ROOM: self.on_join_room,
            SEND_MESSAGE: self.on_send_message,
            TYPING: self.on_typing,
            STOP_TYPING: self.on_stop_typing,
        }

        # Metrics
        self.received_events: int = 0
        self.relayed_events: int = 0
        self.dropped_events: int = 0

    def drop(self, connection_id: str, event: Optional[str], reason: str) -> None:
        self.dropped_events += 1
        logger.debug("Dropped event %r from %s: %s", event, connection_id, reason)

    async def dispatch(self, connection_id: str, frame: Any) -> None:
        """
        Route one decoded frame ``{"event": ..., "data": {...}}`` to its handler.
        """
        self.received_events += 1

        if not isinstance(frame, dict):
            self.drop(connection_id, None, "frame is not an object")
            return

        event = frame.get("event")
        handler = self.handlers.get(event) if isinstance(event, str) else None
        if handler is None:
            self.drop(connection_id, event, "unknown event")
            return

        payload = frame.get("data")
        if not isinstance(payload, dict):
            self.drop(connection_id, event, "payload is not an object")
            return

        await handler(connection_id, payload)

    async def _broadcast(self, room: str, event: str, data: Any, sender: Optional[str]) -> None:
        await self.registry.broadcast(room, event, data, exclude=sender)
        self.relayed_events += 1

    # ------------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------------

    async def on_join_room(self, connection_id: str, payload: dict) -> None:
        room = _text(payload, "room")
        username = _text(payload, "username")
        if not room or not username:
            self.drop(connection_id, JOIN_ROOM, "room and username are required")
            return

        connection = self.registry.get(connection_id)
        if connection is None:
            return

        previous_username = connection.username
        previous_room = self.registry.join(connection_id, room, username)

        # Switching rooms counts as leaving the old one
        if previous_room is not None:
            await self._broadcast(
                previous_room,
                SYSTEM_MESSAGE,
                create_system_message(previous_room, f"{previous_username} left the chat"),
                sender=connection_id,
            )

        await self._broadcast(
            room,
            SYSTEM_MESSAGE,
            create_system_message(room, f"{username} joined the chat"),
            sender=connection_id,
        )

    async def on_send_message(self, connection_id: str, payload: dict) -> None:
        room = _text(payload, "room")
        if not room or not payload.get("message"):
            self.drop(connection_id, SEND_MESSAGE, "room and message are required")
            return

        await self._broadcast(room, RECEIVE_MESSAGE, payload, sender=connection_id)

    async def _on_typing_change(self, connection_id: str, payload: dict, is_typing: bool) -> None:
        room = _text(payload, "room")
        username = _text(payload, "username")
        if not room or not username:
            self.drop(connection_id, TYPING if is_typing else STOP_TYPING, "room and username are required")
            return

        signal = TypingSignal(username=username, isTyping=is_typing)
        await self._broadcast(room, USER_TYPING, signal.model_dump(), sender=connection_id)

    async def on_typing(self, connection_id: str, payload: dict) -> None:
        await self._on_typing_change(connection_id, payload, True)

    async def on_stop_typing(self, connection_id: str, payload: dict) -> None:
        await self._on_typing_change(connection_id, payload, False)

    async def on_disconnect(self, connection_id: str) -> None:
        """
        Release the connection and tell the rest of its room it left.

        Connections that never joined a room go away silently.
        """
        connection = self.registry.disconnect(connection_id)
        if connection is None or not connection.joined:
            return

        await self._broadcast(
            connection.room,
            SYSTEM_MESSAGE,
            create_system_message(connection.room, f"{connection.username} left the chat"),
            sender=connection_id,
        )
