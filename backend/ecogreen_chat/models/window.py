"""
Window placement Pydantic models.

Every model here is frozen: the window manager returns a new Placement
for each pointer or viewport event instead of mutating the old one.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SizePreset(str, Enum):
    """Desktop panel sizes."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


# (width, height) in px
SIZE_DIMENSIONS = {
    SizePreset.SMALL: (320, 400),
    SizePreset.MEDIUM: (384, 500),
    SizePreset.LARGE: (448, 600),
}

# Mobile panel: 95vw capped at 384px wide, 80vh capped at 600px high
MOBILE_MAX_WIDTH = 384
MOBILE_MAX_HEIGHT = 600


class Corner(str, Enum):
    """Preset anchor for the panel."""
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM_LEFT = "bottom-left"
    TOP_RIGHT = "top-right"
    TOP_LEFT = "top-left"
    CENTER = "center"


class Point(BaseModel):
    """Position in viewport coordinates."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Viewport(BaseModel):
    """Browser viewport size."""
    model_config = ConfigDict(frozen=True)

    width: int = 1280
    height: int = 800


class Frame(BaseModel):
    """Rendered panel rectangle."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    def contains(self, point: Point) -> bool:
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )


class DragSession(BaseModel):
    """Active drag: pointer offset from the panel's top-left corner."""
    model_config = ConfigDict(frozen=True)

    offset: Point


class Placement(BaseModel):
    """Complete window placement state of the widget."""
    model_config = ConfigDict(frozen=True)

    is_open: bool = False
    is_minimized: bool = False
    is_fullscreen: bool = False
    is_mobile: bool = False
    size: SizePreset = SizePreset.MEDIUM
    corner: Corner = Corner.BOTTOM_RIGHT
    custom_position: Optional[Point] = None
    drag: Optional[DragSession] = None
    viewport: Viewport = Viewport()

    @property
    def is_dragging(self) -> bool:
        return self.drag is not None

    @property
    def mode(self) -> str:
        """closed, minimized, fullscreen or normal."""
        if not self.is_open:
            return "closed"
        if self.is_minimized:
            return "minimized"
        if self.is_fullscreen:
            return "fullscreen"
        return "normal"
