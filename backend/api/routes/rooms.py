# backend/api/routes/rooms.py

from typing import List

from fastapi import APIRouter, HTTPException

from core import state
from models.models import RoomInfo

router = APIRouter()

# ============================================================================
# ACTIVE ROOM ENDPOINTS
# ============================================================================

@router.get("/rooms", response_model=List[RoomInfo])
async def list_rooms():
    """
    List rooms that currently have members.

    Rooms only exist while someone is in them, so this is a live view of
    the relay's membership, sorted by room name.

    Returns:
        List[RoomInfo]: Room name, member count and usernames
    """
    info = state.connection_registry.rooms_info()
    return [
        RoomInfo(room=room, member_count=len(members), members=members)
        for room, members in sorted(info.items())
    ]


@router.get("/rooms/{room}", response_model=RoomInfo)
async def get_room(room: str):
    """
    Get the current members of one room.

    Raises:
        HTTPException: 404 if nobody is in the room
    """
    members = state.connection_registry.rooms_info().get(room)
    if members is None:
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomInfo(room=room, member_count=len(members), members=members)
