"""
Widget state and request Pydantic models.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field

from ecogreen_chat.models.chat import Message, EmailPreview
from ecogreen_chat.models.window import Placement, Frame, SizePreset, Corner


class Theme(str, Enum):
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"


class WidgetSettings(BaseModel):
    """User-adjustable widget preferences."""
    sound_enabled: bool = True
    theme: Theme = Theme.GREEN
    show_settings: bool = False


class ErrorBanner(BaseModel):
    """Dismissible error strip shown above the transcript."""
    message: str
    raised_at: datetime


class WidgetState(BaseModel):
    """Everything the renderer needs to draw the widget."""
    mode: str
    placement: Placement
    frame: Frame
    messages: List[Message]
    pending_email: Optional[EmailPreview] = None
    is_loading: bool = False
    input_placeholder: str
    error: Optional[ErrorBanner] = None
    unread_count: int = 0
    settings: WidgetSettings
    notify: bool = False  # play the notification sound for the last reply


class ViewportUpdate(BaseModel):
    """Viewport size reported by the renderer."""
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class PointerEvent(BaseModel):
    """Pointer coordinates in viewport space."""
    x: float
    y: float


class SettingsUpdate(BaseModel):
    """Partial update from the settings panel."""
    size: Optional[SizePreset] = None
    corner: Optional[Corner] = None
    theme: Optional[Theme] = None
    sound_enabled: Optional[bool] = None
    show_settings: Optional[bool] = None


class ChatStatus(BaseModel):
    """Lightweight summary for polling."""
    has_pending: bool
    pending_email: Optional[EmailPreview] = None
    is_loading: bool
    message_count: int
    unread_count: int
