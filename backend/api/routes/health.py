# backend/api/routes/health.py

from fastapi import APIRouter

from core import state
from models.models import HealthStatus

router = APIRouter()

@router.get("/health", response_model=HealthStatus)
async def health():
    """
    Health check endpoint.

    Returns current system status with connection and active room counts.
    Used by container health probes and monitoring.
    """
    return {
        "status": "healthy",
        "connections": state.connection_registry.connection_count,
        "active_rooms": len(state.room_index),
    }
