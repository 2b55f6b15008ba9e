"""
Widget window endpoints.

The renderer forwards visibility toggles, viewport changes, settings and
pointer events here; every call answers with the full WidgetState so the
renderer can redraw from a single source of truth.

Drag protocol:
    POST /api/widget/drag/start {x, y}   pointer-down on the header
    POST /api/widget/drag/move  {x, y}   pointer-move while dragging
    POST /api/widget/drag/end   {x, y}   pointer-up (body optional)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Response

from ecogreen_chat.models.widget import (
    WidgetState, ViewportUpdate, PointerEvent, SettingsUpdate,
)
from ecogreen_chat.services.chat_widget import ChatWidget
from ecogreen_chat.services.session_service import (
    create_session, get_current_widget, SESSION_COOKIE,
)
from ecogreen_chat.config import get_settings
from ecogreen_chat.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)
settings = get_settings()


@router.post("/widget/session", response_model=WidgetState)
async def start_session(response: Response):
    """
    Create a widget for this browser and set the session cookie.
    """
    token, widget = create_session()

    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=not settings.debug,
        max_age=settings.session_expire_hours * 3600,
    )
    return widget.state()


@router.get("/widget", response_model=WidgetState)
async def get_state(widget: ChatWidget = Depends(get_current_widget)):
    """Current widget state, e.g. after a page refresh."""
    return widget.state()


@router.post("/widget/open", response_model=WidgetState)
async def open_widget(widget: ChatWidget = Depends(get_current_widget)):
    widget.open()
    return widget.state()


@router.post("/widget/close", response_model=WidgetState)
async def close_widget(widget: ChatWidget = Depends(get_current_widget)):
    """Hide the panel. The conversation is kept."""
    widget.close()
    return widget.state()


@router.post("/widget/minimize", response_model=WidgetState)
async def toggle_minimize(widget: ChatWidget = Depends(get_current_widget)):
    widget.toggle_minimize()
    return widget.state()


@router.post("/widget/fullscreen", response_model=WidgetState)
async def toggle_fullscreen(widget: ChatWidget = Depends(get_current_widget)):
    widget.toggle_fullscreen()
    return widget.state()


@router.put("/widget/viewport", response_model=WidgetState)
async def update_viewport(
    viewport: ViewportUpdate,
    widget: ChatWidget = Depends(get_current_widget)
):
    """Report a window resize; narrow viewports switch to fullscreen."""
    widget.resize_viewport(viewport.width, viewport.height)
    return widget.state()


@router.put("/widget/settings", response_model=WidgetState)
async def update_settings(
    update: SettingsUpdate,
    widget: ChatWidget = Depends(get_current_widget)
):
    """Size, corner, theme, sound and settings-panel visibility."""
    widget.update_settings(update)
    return widget.state()


@router.post("/widget/drag/start", response_model=WidgetState)
async def drag_start(
    pointer: PointerEvent,
    widget: ChatWidget = Depends(get_current_widget)
):
    widget.start_drag(pointer.x, pointer.y)
    return widget.state()


@router.post("/widget/drag/move", response_model=WidgetState)
async def drag_move(
    pointer: PointerEvent,
    widget: ChatWidget = Depends(get_current_widget)
):
    widget.move_drag(pointer.x, pointer.y)
    return widget.state()


@router.post("/widget/drag/end", response_model=WidgetState)
async def drag_end(
    pointer: Optional[PointerEvent] = None,
    widget: ChatWidget = Depends(get_current_widget)
):
    if pointer is None:
        widget.end_drag()
    else:
        widget.end_drag(pointer.x, pointer.y)
    return widget.state()


@router.delete("/widget/error", response_model=WidgetState)
async def dismiss_error(widget: ChatWidget = Depends(get_current_widget)):
    """Close the error banner."""
    widget.dismiss_error()
    return widget.state()
