"""
Widget session management service.

This module handles:
1. Creating a ChatWidget per browser and handing out a JWT cookie for it
2. Resolving the cookie back to the widget on each request
3. Sweeping idle sessions and stale error banners on a timer

Sessions are stored in-memory; a restart drops every transcript, which
matches a page reload in the browser.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from fastapi import Request, HTTPException

from ecogreen_chat.config import get_settings
from ecogreen_chat.services.chat_widget import ChatWidget
from ecogreen_chat.utils.logger import get_logger
from ecogreen_chat.utils.errors import SessionExpiredError

logger = get_logger(__name__)
settings = get_settings()

SESSION_COOKIE = "widget_session"

# In-memory session store
# Key: session_id (from JWT), Value: {"widget", "created_at", "last_seen"}
_sessions: dict[str, dict] = {}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _idle_limit() -> timedelta:
    return timedelta(hours=settings.session_expire_hours)


def create_session() -> Tuple[str, ChatWidget]:
    """
    Create a new widget and return its JWT session token.

    The JWT carries only the session ID; the widget stays server-side.

    Returns:
        (token to store in the cookie, the new widget)
    """
    session_id = uuid.uuid4().hex
    now = _now()
    widget = ChatWidget()

    _sessions[session_id] = {
        "widget": widget,
        "created_at": now,
        "last_seen": now,
    }

    jwt_payload = {
        "session_id": session_id,
        "iat": now,
    }
    token = jwt.encode(jwt_payload, settings.session_secret, algorithm="HS256")
    logger.info(f"Created widget session {session_id[:8]}")

    return token, widget


def get_session_id(session_token: str) -> Optional[str]:
    """Extract the session ID from a token, None if the token is invalid."""
    try:
        payload = jwt.decode(
            session_token,
            settings.session_secret,
            algorithms=["HS256"],
        )
        return payload.get("session_id")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid session JWT: {e}")
        return None


def get_session(session_token: str) -> Optional[ChatWidget]:
    """
    Resolve a session token to its widget and mark the session as used.

    Returns None when the token is invalid, unknown, or idle for too long.
    """
    session_id = get_session_id(session_token)
    if not session_id or session_id not in _sessions:
        return None

    session = _sessions[session_id]
    now = _now()

    if now - session["last_seen"] > _idle_limit():
        logger.info(f"Widget session {session_id[:8]} expired")
        del _sessions[session_id]
        return None

    session["last_seen"] = now
    return session["widget"]


def delete_session(session_token: str) -> bool:
    """Delete a session. Returns False if it did not exist."""
    session_id = get_session_id(session_token)
    if session_id and session_id in _sessions:
        del _sessions[session_id]
        logger.info(f"Deleted widget session {session_id[:8]}")
        return True
    return False


def session_count() -> int:
    return len(_sessions)


def sweep_expired(now: Optional[datetime] = None) -> int:
    """
    Drop sessions idle past session_expire_hours.

    Returns:
        Number of sessions removed
    """
    now = now or _now()
    limit = _idle_limit()
    expired = [sid for sid, s in _sessions.items() if now - s["last_seen"] > limit]

    for sid in expired:
        del _sessions[sid]

    if expired:
        logger.info(f"Swept {len(expired)} idle widget sessions")
    return len(expired)


def expire_banners(now: Optional[datetime] = None) -> int:
    """Auto-dismiss error banners that have been up long enough."""
    return sum(
        1 for s in list(_sessions.values())
        if s["widget"].expire_error(now)
    )


def housekeeping() -> None:
    """Tick callback: sessions first, then banners of the survivors."""
    sweep_expired()
    expire_banners()


# Dependency for widget routes
async def get_current_widget(request: Request) -> ChatWidget:
    """
    FastAPI dependency resolving the widget_session cookie.

        @router.get("/widget")
        async def state(widget: ChatWidget = Depends(get_current_widget)):
            ...

    Raises:
        HTTPException 401: No cookie, bad cookie, or expired session
    """
    session_cookie = request.cookies.get(SESSION_COOKIE)

    widget = get_session(session_cookie) if session_cookie else None
    if widget is None:
        error = SessionExpiredError()
        raise HTTPException(status_code=error.status_code, detail=error.to_dict())

    return widget
