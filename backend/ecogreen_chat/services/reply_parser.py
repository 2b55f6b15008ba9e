"""
Reply Parser - decoding chat endpoint replies and confirmation tokens.

This module provides:
1. decode_reply(): turns a raw JSON reply into one of
   PlainReply, EmailProposal or EmailResult
2. classify_confirmation(): recognizes the tokens accepted while an
   email preview is waiting for an answer

Reply shapes (POST /chatbot/chat):
- {"choices": [{"message": {"content": "..."}}]}  ordinary reply
- {"message": "..."}                              ordinary reply
- {"type": "email_request", "email_preview": {...}, "message": "..."}
- {"type": "email_success" | "email_cancelled", "message": "..."}
"""
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from ecogreen_chat.models.chat import (
    ChatReply, PlainReply, EmailProposal, EmailResult, EmailPreview,
)
from ecogreen_chat.utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_REPLY = "I'm not sure how to respond to that."

REPLY_EMAIL_REQUEST = "email_request"
REPLY_EMAIL_SUCCESS = "email_success"
REPLY_EMAIL_CANCELLED = "email_cancelled"


class Confirmation(Enum):
    """Answer to a pending email preview."""
    AFFIRMATIVE = "AFFIRMATIVE"
    NEGATIVE = "NEGATIVE"


# The remote service decides what each token does; these are only the
# words it has been seen to accept.
CONFIRMATION_TOKENS = {
    "send": Confirmation.AFFIRMATIVE,
    "submit": Confirmation.AFFIRMATIVE,
    "yes": Confirmation.AFFIRMATIVE,
    "cancel": Confirmation.NEGATIVE,
    "no": Confirmation.NEGATIVE,
}


def classify_confirmation(text: str) -> Optional[Confirmation]:
    """Return the confirmation a token stands for, or None."""
    return CONFIRMATION_TOKENS.get(text.strip().lower())


def is_confirmation_token(text: str) -> bool:
    return classify_confirmation(text) is not None


def _extract_text(payload: dict) -> Optional[str]:
    """Prefer choices[0].message.content, then message."""
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0]
        if isinstance(first, dict):
            message = first.get("message")
            if isinstance(message, dict):
                content = message.get("content")
                if isinstance(content, str) and content:
                    return content

    message = payload.get("message")
    if isinstance(message, str) and message:
        return message

    return None


def decode_reply(payload: Any) -> ChatReply:
    """
    Decode a chat endpoint reply.

    Unknown or malformed shapes never raise; they decode to a PlainReply
    carrying the fallback text.

    Args:
        payload: Parsed JSON body

    Returns:
        PlainReply, EmailProposal or EmailResult
    """
    if not isinstance(payload, dict):
        logger.warning(f"Unexpected reply payload type: {type(payload).__name__}")
        return PlainReply(text=FALLBACK_REPLY, fallback=True)

    reply_type = payload.get("type")
    text = _extract_text(payload)

    if reply_type == REPLY_EMAIL_REQUEST:
        try:
            preview = EmailPreview.model_validate(payload.get("email_preview"))
            return EmailProposal(preview=preview, message=text or "")
        except ValidationError as e:
            logger.warning(f"email_request without a usable preview: {e.error_count()} errors")

    elif reply_type in (REPLY_EMAIL_SUCCESS, REPLY_EMAIL_CANCELLED):
        return EmailResult(
            success=reply_type == REPLY_EMAIL_SUCCESS,
            message=text or FALLBACK_REPLY,
        )

    if text is None:
        logger.info("Reply had no displayable text, using fallback")
        return PlainReply(text=FALLBACK_REPLY, fallback=True)

    return PlainReply(text=text)
