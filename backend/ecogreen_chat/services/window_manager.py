"""
Window Manager - placement transitions for the floating chat panel.

Every function takes the current Placement and returns a new one; nothing
is mutated in place, so a sequence of pointer events can be replayed and
checked step by step.

State machine:
    closed -> open(normal) <-> open(minimized)
    open(normal) <-> open(fullscreen)   (automatic on narrow viewports)
    dragging is a transient sub-state of open(normal)
"""
from typing import Optional, Tuple

from ecogreen_chat.config import get_settings
from ecogreen_chat.models.window import (
    Placement, Frame, Point, Viewport, DragSession, SizePreset, Corner,
    SIZE_DIMENSIONS, MOBILE_MAX_WIDTH, MOBILE_MAX_HEIGHT,
)
from ecogreen_chat.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


def _with(placement: Placement, **updates) -> Placement:
    return placement.model_copy(update=updates)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]; low wins when the range is empty."""
    return max(low, min(value, high))


def clamp_position(point: Point, width: float, height: float, viewport: Viewport) -> Point:
    """Keep a panel of the given size inside the viewport minus the drag margin."""
    margin = settings.drag_margin
    return Point(
        x=clamp(point.x, margin, viewport.width - width - margin),
        y=clamp(point.y, margin, viewport.height - height - margin),
    )


# =============================================================================
# GEOMETRY
# =============================================================================

def panel_size(placement: Placement) -> Tuple[float, float]:
    """Width and height of the panel for the current mode."""
    viewport = placement.viewport

    if placement.is_fullscreen:
        width, height = viewport.width, viewport.height
    elif placement.is_mobile:
        width = min(viewport.width * 0.95, MOBILE_MAX_WIDTH)
        height = min(viewport.height * 0.8, MOBILE_MAX_HEIGHT)
    else:
        width, height = SIZE_DIMENSIONS[placement.size]

    if placement.is_minimized:
        height = settings.minimized_height

    return width, height


def frame(placement: Placement) -> Frame:
    """
    Compute the panel rectangle in viewport coordinates.

    Precedence: fullscreen, then a dragged custom position (desktop only),
    then the mobile bottom-center slot, then the preset corner.
    """
    viewport = placement.viewport
    width, height = panel_size(placement)

    if placement.is_fullscreen:
        return Frame(x=0, y=0, width=width, height=height)

    if placement.custom_position is not None and not placement.is_mobile:
        return Frame(
            x=placement.custom_position.x,
            y=placement.custom_position.y,
            width=width,
            height=height,
        )

    if placement.is_mobile:
        return Frame(
            x=(viewport.width - width) / 2,
            y=viewport.height - settings.mobile_margin - height,
            width=width,
            height=height,
        )

    margin = settings.corner_margin
    left = margin
    right = viewport.width - width - margin
    top = margin
    bottom = viewport.height - height - margin

    corners = {
        Corner.BOTTOM_RIGHT: (right, bottom),
        Corner.BOTTOM_LEFT: (left, bottom),
        Corner.TOP_RIGHT: (right, top),
        Corner.TOP_LEFT: (left, top),
        Corner.CENTER: ((viewport.width - width) / 2, (viewport.height - height) / 2),
    }
    x, y = corners[placement.corner]
    return Frame(x=x, y=y, width=width, height=height)


def drag_handle(placement: Placement) -> Frame:
    """Header strip of the panel that accepts drag starts."""
    panel = frame(placement)
    return Frame(
        x=panel.x,
        y=panel.y,
        width=panel.width,
        height=min(panel.height, settings.drag_handle_height),
    )


# =============================================================================
# VISIBILITY
# =============================================================================

def open_panel(placement: Placement) -> Placement:
    """Show the panel; narrow viewports open straight into fullscreen."""
    updates = {"is_open": True}
    if placement.viewport.width <= settings.fullscreen_breakpoint:
        updates["is_fullscreen"] = True
    return _with(placement, **updates)


def close_panel(placement: Placement) -> Placement:
    """Hide the panel. The transcript lives elsewhere and survives."""
    return _with(placement, is_open=False, drag=None)


def toggle_minimize(placement: Placement) -> Placement:
    """Collapse to the header bar or expand again (not offered on mobile)."""
    if not placement.is_open or placement.is_mobile:
        return placement
    return _with(placement, is_minimized=not placement.is_minimized, drag=None)


def toggle_fullscreen(placement: Placement) -> Placement:
    """Manual fullscreen toggle. Any drag in progress ends immediately."""
    if not placement.is_open:
        return placement
    return _with(placement, is_fullscreen=not placement.is_fullscreen, drag=None)


# =============================================================================
# PRESETS
# =============================================================================

def set_size(placement: Placement, size: SizePreset) -> Placement:
    """Change panel dimensions and fall back to the selected corner."""
    return _with(placement, size=size, custom_position=None, drag=None)


def set_corner(placement: Placement, corner: Corner) -> Placement:
    """Select a preset corner; drops the dragged position and fullscreen."""
    return _with(
        placement,
        corner=corner,
        custom_position=None,
        is_fullscreen=False,
        drag=None,
    )


def resize_viewport(placement: Placement, viewport: Viewport) -> Placement:
    """
    Apply a new viewport size.

    Narrow viewports switch to the mobile layout (no dragging) and, while
    the panel is open, to fullscreen. A dragged position is pulled back
    inside the new bounds, using the docked preset size so it still fits
    once the panel leaves fullscreen or is restored from minimized.
    """
    is_mobile = viewport.width <= settings.mobile_breakpoint
    updates = {"viewport": viewport, "is_mobile": is_mobile}

    if is_mobile:
        updates["drag"] = None

    if placement.is_open and viewport.width <= settings.fullscreen_breakpoint:
        if not placement.is_fullscreen:
            logger.debug(f"Viewport {viewport.width}px wide, switching to fullscreen")
        updates["is_fullscreen"] = True
        updates["drag"] = None

    resized = _with(placement, **updates)

    if resized.custom_position is not None and not is_mobile:
        width, height = SIZE_DIMENSIONS[resized.size]
        resized = _with(
            resized,
            custom_position=clamp_position(resized.custom_position, width, height, viewport),
        )

    return resized


# =============================================================================
# DRAGGING
# =============================================================================

def can_drag(placement: Placement) -> bool:
    """Dragging is only possible from open(normal) on a desktop viewport."""
    return (
        placement.is_open
        and not placement.is_minimized
        and not placement.is_fullscreen
        and not placement.is_mobile
    )


def start_drag(placement: Placement, pointer: Point) -> Placement:
    """
    Begin a drag if the pointer went down on the header.

    No-op when dragging is unavailable, when a drag is already active,
    or when the pointer is outside the drag handle.
    """
    if not can_drag(placement) or placement.is_dragging:
        return placement

    if not drag_handle(placement).contains(pointer):
        return placement

    panel = frame(placement)
    offset = Point(x=pointer.x - panel.x, y=pointer.y - panel.y)
    return _with(placement, drag=DragSession(offset=offset))


def move_drag(placement: Placement, pointer: Point) -> Placement:
    """Follow the pointer, keeping the panel inside the viewport."""
    if placement.drag is None:
        return placement

    width, height = panel_size(placement)
    proposed = Point(
        x=pointer.x - placement.drag.offset.x,
        y=pointer.y - placement.drag.offset.y,
    )
    return _with(
        placement,
        custom_position=clamp_position(proposed, width, height, placement.viewport),
    )


def end_drag(placement: Placement, pointer: Optional[Point] = None) -> Placement:
    """Commit the last clamped position and end the drag session."""
    if placement.drag is None:
        return placement

    if pointer is not None:
        placement = move_drag(placement, pointer)

    return _with(placement, drag=None)
