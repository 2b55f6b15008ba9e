"""
Health check endpoint.
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from ecogreen_chat.services.session_service import session_count

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
        "sessions": session_count(),
    }
