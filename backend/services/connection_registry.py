# backend/services/connection_registry.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import uuid

from fastapi import WebSocket

from services.room_index import RoomIndex

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """One live client session. ``room`` and ``username`` are set together or not at all."""

    connection_id: str
    websocket: WebSocket
    room: Optional[str] = None
    username: Optional[str] = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def joined(self) -> bool:
        return self.room is not None and self.username is not None


# ============================================================================
# WEBSOCKET CONNECTION REGISTRY
# ============================================================================

class ConnectionRegistry:
    """
    Owns every live WebSocket and the room each one has joined.

    Handler code never touches the maps directly. Every method that changes
    state is synchronous, so a mutation always completes before the calling
    handler awaits anything and other handlers can never observe half of it.

    Data Structures:
        connections: Maps connection_id -> Connection
                     Example: {"3f2a...": Connection(room="lobby", username="alice")}

        room_index: RoomIndex with room -> Set of connection ids

    Delivery:
        emit/broadcast are fire-and-forget. The audience is resolved before
        the first send; a failed send is logged and skipped, the broken
        connection's own receive loop reports the disconnect.
    """

    def __init__(self, room_index: Optional[RoomIndex] = None) -> None:
        self.connections: Dict[str, Connection] = {}
        self.room_index = room_index if room_index is not None else RoomIndex()

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept a new WebSocket connection and give it an id.

        Note:
            The connection is not in any room yet. It must send a
            "join_room" event first.
        """
        await websocket.accept()

        connection_id = uuid.uuid4().hex
        self.connections[connection_id] = Connection(connection_id=connection_id, websocket=websocket)

        logger.info("🟢 Connection %s opened. Total: %d", connection_id, len(self.connections))
        return connection_id

    def get(self, connection_id: str) -> Optional[Connection]:
        return self.connections.get(connection_id)

    def join(self, connection_id: str, room: str, username: str) -> Optional[str]:
        """
        Record the room and display name of a connection and add it to the room group.

        Args:
            connection_id: Id returned by connect()
            room: Room name, non-empty
            username: Display name, non-empty

        Returns:
            The room the connection was in before when it switched rooms,
            otherwise None.

        Joining the room the connection is already in only refreshes the
        username; membership is never duplicated.
        """
        connection = self.connections.get(connection_id)
        if connection is None:
            return None  # Connection already closed

        previous_room = None
        if connection.room is not None and connection.room != room:
            previous_room = connection.room
            self.room_index.discard(previous_room, connection_id)

        connection.room = room
        connection.username = username
        member_count = self.room_index.add(room, connection_id)

        logger.info("➡️ %s joined room '%s' (%d members)", username, room, member_count)
        return previous_room

    def disconnect(self, connection_id: str) -> Optional[Connection]:
        """
        Forget a connection and remove it from its room.

        Returns:
            The released Connection, still carrying its room and username so
            the caller can announce the departure, or None if it was unknown.
        """
        connection = self.connections.pop(connection_id, None)
        if connection is None:
            return None

        if connection.room is not None:
            self.room_index.discard(connection.room, connection_id)

        logger.info("🔴 Connection %s closed. Total: %d", connection_id, len(self.connections))
        return connection

    def audience(self, room: str, exclude: Optional[str] = None) -> List[Connection]:
        """Live connections of a room, minus ``exclude``."""
        return [
            self.connections[cid]
            for cid in self.room_index.members(room, exclude=exclude)
            if cid in self.connections
        ]

    async def emit(self, connection: Connection, event: str, data: Any) -> bool:
        """Send one event frame to one connection. Returns False when the send failed."""
        try:
            await connection.websocket.send_json({"event": event, "data": data})
            return True
        except Exception as e:
            logger.warning("Send error to %s: %s", connection.connection_id, e)
            return False

    async def broadcast(self, room: str, event: str, data: Any, exclude: Optional[str] = None) -> int:
        """
        Send an event to every connection in a room.

        Args:
            room: Target room
            event: Outbound event name
            data: JSON-serializable payload
            exclude: Connection id that must not receive it (the sender)

        Returns:
            Number of connections the frame was handed to.
        """
        recipients = self.audience(room, exclude=exclude)
        if not recipients:
            logger.debug("[routing] Skipped %s: room=%s has no other members", event, room)
            return 0

        logger.debug("📨 %s to room %s: %d clients", event, room, len(recipients))

        delivered = 0
        for connection in recipients:
            if await self.emit(connection, event, data):
                delivered += 1
        return delivered

    def rooms_info(self) -> Dict[str, List[str]]:
        """
        Usernames per active room.

        Used by the /rooms and /health endpoints and for debugging.
        """
        result: Dict[str, List[str]] = {}
        for room in self.room_index.groups:
            result[room] = sorted(
                c.username for c in self.audience(room) if c.username is not None
            )
        return result
