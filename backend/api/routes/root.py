# backend/api/routes/root.py

from fastapi import APIRouter

from models.models import ApiInfo

router = APIRouter()


@router.get("/", response_model=ApiInfo)
async def root():
    """
    Root endpoint - API information.

    Returns the WebSocket event names and the REST endpoints.
    """
    return {
        "message": "NextChat Relay",
        "version": "1.0",
        "events": {
            "client": ["join_room", "send_message", "typing", "stop_typing"],
            "server": ["system_message", "receive_message", "user_typing"],
        },
        "endpoints": {
            "websocket": "/ws",
            "rooms": "/rooms",
            "health": "/health",
            "metrics": "/metrics",
        },
    }
