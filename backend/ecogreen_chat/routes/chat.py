"""
Chat API endpoints for the widget conversation.

Endpoint: POST /api/chat
Request: { "content": "user's message" }
Response: WidgetState with the new user and assistant messages appended

The widget relays the content to the remote chat service
(POST {chatbot_api_url}/chatbot/chat) and decodes its reply:

1. Plain reply:
   Upstream: {"message": "Hi! How can I help?"}
   Appended: {"author": "assistant", "kind": "text", "text": "Hi! How can I help?"}

2. Email proposal:
   Upstream: {
     "type": "email_request",
     "email_preview": {"recipient": "a@b.com", "subject": "S", "content": "C"},
     "message": "Send this?"
   }
   Appended: {"kind": "email_preview", "text": "Send this?", "email_preview": {...}}
   State:    pending_email set, input_placeholder "Type 'SEND' or 'CANCEL'..."

3. Confirmation:
   Request:  {"content": "SEND"}
   Upstream: {"type": "email_success", "message": "Sent!"}
   Appended: {"kind": "email_result", "email_success": true, "text": "Sent!"}
   State:    pending_email cleared

4. Chat server unreachable:
   Appended: {"kind": "error", "text": "😔 Sorry, I couldn't connect to the server."}
   State:    error banner set; earlier messages untouched

Rejected input answers with an error body and does not touch the transcript:
- 400 INVALID_REQUEST: empty or too long
- 409 CHAT_BUSY: a reply is still pending
- 409 CONFIRMATION_REQUIRED: an email preview awaits SEND/CANCEL
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from ecogreen_chat.models.chat import ChatRequest
from ecogreen_chat.models.widget import WidgetState, ChatStatus
from ecogreen_chat.services.chat_widget import ChatWidget
from ecogreen_chat.services.session_service import get_current_widget
from ecogreen_chat.utils.logger import get_logger
from ecogreen_chat.utils.errors import AppError

router = APIRouter()
logger = get_logger(__name__)


@router.post("/chat", response_model=WidgetState)
async def chat(
    request: ChatRequest,
    widget: ChatWidget = Depends(get_current_widget)
):
    """
    Send a message from the widget input.

    Transport failures never surface as HTTP errors: they are recorded
    as an error bubble in the transcript and the call still succeeds.

    Args:
        request: ChatRequest with the user's input
        widget: Widget of the current session (injected)

    Returns:
        Updated WidgetState
    """
    logger.info(f"Chat request: {request.content[:50]}...")

    try:
        message = await widget.send_message(request.content)
        if message is not None:
            logger.info(f"Chat response kind: {message.kind.value}")
        return widget.state()

    except AppError as e:
        logger.warning(f"Chat input rejected [{e.code}]: {e.message}")
        raise HTTPException(
            status_code=e.status_code,
            detail=e.to_dict()
        )

    except Exception as e:
        logger.exception(f"Unexpected chat error: {e}")
        raise HTTPException(
            status_code=500,
            detail={
                "error": True,
                "code": "INTERNAL_ERROR",
                "message": "Something went wrong. Please try again."
            }
        )


@router.delete("/chat", response_model=WidgetState)
async def clear_chat(widget: ChatWidget = Depends(get_current_widget)):
    """
    Clear the conversation back to the welcome message.

    Also drops any pending email confirmation.
    """
    widget.clear_conversation()
    return widget.state()


@router.delete("/chat/pending", response_model=WidgetState)
async def clear_pending(widget: ChatWidget = Depends(get_current_widget)):
    """
    Forget the pending email preview without sending anything.
    """
    widget.cancel_pending()
    return widget.state()


@router.get("/chat/status", response_model=ChatStatus)
async def chat_status(widget: ChatWidget = Depends(get_current_widget)):
    """
    Lightweight conversation summary for polling renderers.
    """
    return ChatStatus(
        has_pending=widget.pending_email is not None,
        pending_email=widget.pending_email,
        is_loading=widget.is_loading,
        message_count=len(widget.transcript),
        unread_count=widget.unread_count,
    )


@router.get("/chat/export", response_class=PlainTextResponse)
async def export_chat(widget: ChatWidget = Depends(get_current_widget)):
    """
    Download the transcript as a text file.
    """
    filename, text = widget.export_transcript()
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
