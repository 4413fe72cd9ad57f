# backend/models/models.py
import time
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field

SYSTEM_AUTHOR = "System"


def _display_time() -> str:
    # Same shape browsers produce for toLocaleTimeString(), e.g. "1:05:09 PM"
    return datetime.now().strftime("%I:%M:%S %p").lstrip("0")


def _system_message_id() -> str:
    return f"sys-{int(time.time() * 1000)}"


class SystemMessage(BaseModel):
    """Server-generated join/leave notice, rendered differently from user chat."""

    id: str = Field(default_factory=_system_message_id)
    room: str
    author: str = SYSTEM_AUTHOR
    message: str
    time: str = Field(default_factory=_display_time)
    type: str = "system"


class TypingSignal(BaseModel):
    username: str
    isTyping: bool


class RoomInfo(BaseModel):
    room: str
    member_count: int = 0
    members: List[str] = []


class HealthStatus(BaseModel):
    status: str
    connections: int
    active_rooms: int


class ApiInfo(BaseModel):
    message: str
    version: str
    events: Dict[str, List[str]]
    endpoints: Dict[str, str]
