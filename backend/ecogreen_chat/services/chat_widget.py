"""
Chat Widget - orchestrator for one floating chat panel.

This module ties together:
1. Window placement (window_manager)
2. Conversation transcript (transcript)
3. Reply decoding and email confirmation (reply_parser)
4. The remote chat endpoint (chatbot_client)

A send goes: validate input -> append user message -> one request ->
append exactly one assistant message (reply or error bubble).
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ecogreen_chat.config import get_settings
from ecogreen_chat.integrations.chatbot_client import ChatbotClient
from ecogreen_chat.models.chat import EmailPreview, EmailProposal, Message
from ecogreen_chat.models.widget import (
    WidgetState, WidgetSettings, ErrorBanner, SettingsUpdate,
)
from ecogreen_chat.models.window import Placement, Point, Viewport
from ecogreen_chat.services import window_manager
from ecogreen_chat.services.reply_parser import decode_reply, is_confirmation_token
from ecogreen_chat.services.transcript import Transcript
from ecogreen_chat.utils.logger import get_logger
from ecogreen_chat.utils.errors import (
    ChatTransportError, ChatBusyError, ConfirmationRequiredError, InvalidRequestError,
)

logger = get_logger(__name__)
settings = get_settings()

CONNECTION_ERROR_TEXT = "😔 Sorry, I couldn't connect to the server."
CONFIRMATION_ERROR_TEXT = "❌ Failed to process email confirmation."
UNEXPECTED_ERROR_BANNER = "Something went wrong talking to the chat server."

PLACEHOLDER_DEFAULT = "Ask about greenhouse setup..."
PLACEHOLDER_CONFIRM = "Type 'SEND' or 'CANCEL'..."


class ChatWidget:
    """
    State of one chat widget instance.

    Usage:
        widget = ChatWidget(ChatbotClient())
        widget.open()
        message = await widget.send_message("hello")
    """

    def __init__(self, client: Optional[ChatbotClient] = None):
        self.client = client or ChatbotClient()
        self.placement = Placement()
        self.transcript = Transcript()
        self.settings = WidgetSettings()
        self.pending_email: Optional[EmailPreview] = None
        self.is_loading = False
        self.error: Optional[ErrorBanner] = None
        self.unread_count = 0
        self.notify = False
        # bumped by clear_conversation; replies from an older one are dropped
        self._generation = 0

    # =========================================================================
    # CONVERSATION
    # =========================================================================

    async def send_message(self, text: str) -> Optional[Message]:
        """
        Send user input and append the assistant's answer.

        While an email preview is pending only confirmation tokens are
        accepted, and the pending slot is cleared once that exchange
        settles, whatever its outcome. Any failure of the request becomes
        an error bubble. A reply that arrives after the conversation was
        cleared is dropped.

        Args:
            text: Raw user input

        Returns:
            The assistant message appended for this exchange, or None when
            the conversation was cleared while the request was in flight

        Raises:
            InvalidRequestError: Empty or over-long input
            ChatBusyError: Another send is still in flight
            ConfirmationRequiredError: Pending preview and input is not a token
        """
        content = text.strip()

        if not content:
            raise InvalidRequestError("Message cannot be empty.")
        if len(content) > settings.max_message_length:
            raise InvalidRequestError(
                f"Message is too long (max {settings.max_message_length} characters)."
            )
        if self.is_loading:
            raise ChatBusyError()

        confirming = self.pending_email is not None
        if confirming and not is_confirmation_token(content):
            raise ConfirmationRequiredError()

        self.transcript.add_user(content)
        self.is_loading = True
        self.error = None
        self.notify = False

        logger.info(f"Sending{' confirmation' if confirming else ''}: {content[:50]}")
        generation = self._generation

        try:
            payload = await self.client.send(content)
        except ChatTransportError as e:
            return self._fail_send(generation, confirming, e.message)
        except Exception as e:
            logger.exception(f"Unexpected chat send failure: {e}")
            return self._fail_send(generation, confirming, UNEXPECTED_ERROR_BANNER)
        finally:
            self.is_loading = False

        if generation != self._generation:
            logger.info("Conversation cleared while waiting, dropping reply")
            return None

        if confirming:
            self.pending_email = None

        reply = decode_reply(payload)
        logger.info(f"Reply decoded as {type(reply).__name__}")

        if isinstance(reply, EmailProposal):
            if self.pending_email is not None:
                logger.info("Replacing pending email confirmation")
            self.pending_email = reply.preview

        message = self.transcript.add_reply(reply)
        self.notify = self.settings.sound_enabled
        if not self.placement.is_open:
            self.unread_count += 1

        return message

    def _fail_send(self, generation: int, confirming: bool, banner: str) -> Optional[Message]:
        """Record a failed exchange as an error bubble plus a banner."""
        if generation != self._generation:
            logger.info("Conversation cleared while waiting, dropping failure")
            return None

        if confirming:
            self.pending_email = None
        self._raise_banner(banner)
        return self.transcript.add_error(
            CONFIRMATION_ERROR_TEXT if confirming else CONNECTION_ERROR_TEXT
        )

    def clear_conversation(self) -> None:
        """Back to the welcome entry, with nothing pending."""
        self._generation += 1
        self.transcript.clear()
        self.pending_email = None
        self.error = None
        self.notify = False

    def cancel_pending(self) -> None:
        """Forget the pending email preview without asking the server."""
        self.pending_email = None

    def export_transcript(self) -> Tuple[str, str]:
        """Return (filename, text) for a transcript download."""
        return Transcript.export_filename(), self.transcript.export_text()

    @property
    def input_placeholder(self) -> str:
        return PLACEHOLDER_CONFIRM if self.pending_email else PLACEHOLDER_DEFAULT

    # =========================================================================
    # ERROR BANNER
    # =========================================================================

    def _raise_banner(self, message: str) -> None:
        self.error = ErrorBanner(message=message, raised_at=datetime.now())

    def dismiss_error(self) -> None:
        self.error = None

    def expire_error(self, now: Optional[datetime] = None) -> bool:
        """Dismiss the banner once it has been shown long enough."""
        if self.error is None:
            return False
        now = now or datetime.now()
        if now - self.error.raised_at < timedelta(seconds=settings.error_banner_seconds):
            return False
        self.error = None
        return True

    # =========================================================================
    # WINDOW
    # =========================================================================

    def open(self) -> None:
        self.placement = window_manager.open_panel(self.placement)
        if not self.placement.is_minimized:
            self.unread_count = 0

    def close(self) -> None:
        self.placement = window_manager.close_panel(self.placement)

    def toggle_minimize(self) -> None:
        self.placement = window_manager.toggle_minimize(self.placement)
        if self.placement.is_open and not self.placement.is_minimized:
            self.unread_count = 0

    def toggle_fullscreen(self) -> None:
        self.placement = window_manager.toggle_fullscreen(self.placement)

    def resize_viewport(self, width: int, height: int) -> None:
        self.placement = window_manager.resize_viewport(
            self.placement, Viewport(width=width, height=height)
        )

    def start_drag(self, x: float, y: float) -> None:
        self.placement = window_manager.start_drag(self.placement, Point(x=x, y=y))

    def move_drag(self, x: float, y: float) -> None:
        self.placement = window_manager.move_drag(self.placement, Point(x=x, y=y))

    def end_drag(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        pointer = Point(x=x, y=y) if x is not None and y is not None else None
        self.placement = window_manager.end_drag(self.placement, pointer)

    def update_settings(self, update: SettingsUpdate) -> None:
        """Apply a partial update from the settings panel."""
        if update.size is not None:
            self.placement = window_manager.set_size(self.placement, update.size)
        if update.corner is not None:
            self.placement = window_manager.set_corner(self.placement, update.corner)

        changes = update.model_dump(
            include={"theme", "sound_enabled", "show_settings"},
            exclude_none=True,
        )
        if changes:
            self.settings = self.settings.model_copy(update=changes)

    # =========================================================================
    # SNAPSHOT
    # =========================================================================

    def state(self) -> WidgetState:
        """Snapshot for the renderer."""
        return WidgetState(
            mode=self.placement.mode,
            placement=self.placement,
            frame=window_manager.frame(self.placement),
            messages=self.transcript.messages,
            pending_email=self.pending_email,
            is_loading=self.is_loading,
            input_placeholder=self.input_placeholder,
            error=self.error,
            unread_count=self.unread_count,
            settings=self.settings,
            notify=self.notify,
        )
