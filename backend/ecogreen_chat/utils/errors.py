"""
Custom error classes for the widget service.
"""
from typing import Optional


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for response."""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class SessionExpiredError(AppError):
    """Widget session is missing, invalid or expired."""

    def __init__(self):
        super().__init__(
            "Your chat session has expired. Please reload the page.",
            "SESSION_EXPIRED",
            status_code=401
        )


class ChatTransportError(AppError):
    """The chat endpoint could not be reached or answered with garbage."""

    def __init__(self, message: str = "Couldn't reach the chat server."):
        super().__init__(message, "CHAT_UNAVAILABLE", status_code=503)


class ChatBusyError(AppError):
    """A message is already on its way."""

    def __init__(self):
        super().__init__(
            "Please wait for the current reply.",
            "CHAT_BUSY",
            status_code=409
        )


class ConfirmationRequiredError(AppError):
    """An email is awaiting SEND or CANCEL."""

    def __init__(self):
        super().__init__(
            "Type 'SEND' or 'CANCEL' to answer the email preview.",
            "CONFIRMATION_REQUIRED",
            status_code=409
        )


class InvalidRequestError(AppError):
    """Invalid request format."""

    def __init__(self, message: str = "Invalid request format."):
        super().__init__(message, "INVALID_REQUEST", status_code=400)
