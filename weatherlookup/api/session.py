"""Session management endpoints"""

from fastapi import APIRouter, Request
from weatherlookup.core.session_manager import session_manager
from typing import Dict, Any

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/info")
async def get_session_info(request: Request) -> Dict[str, Any]:
    """Get current session information"""
    session_id = getattr(request.state, "session_id", None)
    session = await session_manager.get_session(session_id) if session_id else None

    if not session:
        return {"session_id": session_id, "error": "Session not found"}

    return {
        "session_id": session_id,
        "created_at": session.created_at.isoformat(),
        "age_minutes": round(session.age_minutes, 2),
        "idle_minutes": round(session.idle_minutes, 2),
        "units": session.units.value,
        "generation": session.tracker.generation,
        "state": session.tracker.state.value,
        "has_result": session.display is not None and session.display.show_result,
    }


@router.delete("/")
async def destroy_session(request: Request) -> Dict[str, Any]:
    """Destroy current session"""
    session_id = getattr(request.state, "session_id", None)
    await session_manager.destroy_session(session_id)
    return {"message": "Session destroyed", "session_id": session_id}
