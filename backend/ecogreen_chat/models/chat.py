"""
Chat-related Pydantic models.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Chat message request from the widget renderer."""
    content: str


class Author(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(str, Enum):
    """How the renderer should draw a message."""
    TEXT = "text"
    ERROR = "error"
    EMAIL_PREVIEW = "email_preview"
    EMAIL_RESULT = "email_result"


class EmailPreview(BaseModel):
    """Outgoing email proposed by the assistant."""
    model_config = ConfigDict(frozen=True)

    recipient: str
    subject: str
    content: str


class Message(BaseModel):
    """One transcript entry. Never changed once appended."""
    model_config = ConfigDict(frozen=True)

    id: int
    author: Author
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    kind: MessageKind = MessageKind.TEXT
    email_preview: Optional[EmailPreview] = None
    email_success: Optional[bool] = None

    @property
    def is_bot(self) -> bool:
        return self.author == Author.ASSISTANT


# =============================================================================
# REPLIES FROM THE CHAT ENDPOINT
# =============================================================================

class PlainReply(BaseModel):
    """Ordinary text reply (or the fallback when the shape was unknown)."""
    model_config = ConfigDict(frozen=True)

    text: str
    fallback: bool = False


class EmailProposal(BaseModel):
    """Reply tagged email_request: asks the user to confirm an email."""
    model_config = ConfigDict(frozen=True)

    preview: EmailPreview
    message: str


class EmailResult(BaseModel):
    """Reply tagged email_success or email_cancelled."""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str


ChatReply = Union[PlainReply, EmailProposal, EmailResult]
