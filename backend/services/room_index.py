# backend/services/room_index.py

from __future__ import annotations

from typing import Dict, Optional, Set
import logging

logger = logging.getLogger(__name__)

# ============================================================================
# ROOM INDEX
# ============================================================================

class RoomIndex:
    """
    In-memory broadcast groups: room name -> ids of the connections inside it.

    Rooms are not stored objects. A room exists while at least one
    connection is in it; removing the last member deletes the entry, so
    there is never an empty room left to clean up later.

    Data Structures:
        groups: Maps room -> Set of connection ids
                Example: {"lobby": {"3f2a...", "9be1..."}}

    Scaling:
        Single process only. All lookups and mutations are synchronous,
        which keeps them atomic on the asyncio event loop.
    """

    def __init__(self) -> None:
        self.groups: Dict[str, Set[str]] = {}

    def add(self, room: str, connection_id: str) -> int:
        """Put a connection in a room. Adding an existing member is a no-op. Returns the member count."""
        members = self.groups.setdefault(room, set())
        members.add(connection_id)
        return len(members)

    def discard(self, room: str, connection_id: str) -> int:
        """Take a connection out of a room, dropping the room once it is empty. Returns the member count."""
        members = self.groups.get(room)
        if members is None:
            return 0

        members.discard(connection_id)
        if not members:
            del self.groups[room]
            logger.debug("Room '%s' is empty and was released", room)
            return 0
        return len(members)

    def members(self, room: str, exclude: Optional[str] = None) -> Set[str]:
        """
        Resolve the audience of a broadcast.

        Returns a copy, so callers may await between resolving and sending
        without seeing later joins or leaves.
        """
        audience = set(self.groups.get(room, ()))
        if exclude is not None:
            audience.discard(exclude)
        return audience

    def rooms(self) -> Dict[str, int]:
        """Member count per active room."""
        return {room: len(members) for room, members in self.groups.items()}

    def __contains__(self, room: object) -> bool:
        return room in self.groups

    def __len__(self) -> int:
        return len(self.groups)
