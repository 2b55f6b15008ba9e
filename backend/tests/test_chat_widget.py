"""
Unit tests for ChatWidget.

The chat endpoint is replaced by an AsyncMock so every exchange is
deterministic.
"""
import asyncio
from datetime import datetime, timedelta

import pytest

from ecogreen_chat.integrations.chatbot_client import ChatbotClient
from ecogreen_chat.models.chat import Author, MessageKind, EmailPreview
from ecogreen_chat.models.widget import SettingsUpdate, Theme
from ecogreen_chat.models.window import SizePreset, Corner
from ecogreen_chat.services.chat_widget import (
    ChatWidget,
    CONNECTION_ERROR_TEXT,
    CONFIRMATION_ERROR_TEXT,
    PLACEHOLDER_CONFIRM,
    PLACEHOLDER_DEFAULT,
)
from ecogreen_chat.services.transcript import WELCOME_TEXT
from ecogreen_chat.utils.errors import (
    ChatTransportError, ChatBusyError, ConfirmationRequiredError, InvalidRequestError,
)


def texts(widget):
    return [(m.author.value, m.text) for m in widget.transcript.messages[1:]]


class TestSendMessage:
    """Test the ordinary send path."""

    @pytest.mark.asyncio
    async def test_hello_example(self, widget, mock_client):
        await widget.send_message("hello")

        mock_client.send.assert_awaited_once_with("hello")
        assert texts(widget) == [
            ("user", "hello"),
            ("assistant", "Hi! How can I help?"),
        ]
        assert widget.is_loading is False

    @pytest.mark.asyncio
    async def test_input_is_trimmed(self, widget, mock_client):
        await widget.send_message("   hello  \n")
        mock_client.send.assert_awaited_once_with("hello")

    @pytest.mark.asyncio
    async def test_exactly_one_entry_each_way(self, widget, mock_client):
        mock_client.send.side_effect = [
            {"message": "one"},
            {"unexpected": True},
            ChatTransportError(),
        ]

        for text in ("a", "b", "c"):
            before = len(widget.transcript)
            await widget.send_message(text)
            added = widget.transcript.messages[before:]
            assert [m.author for m in added] == [Author.USER, Author.ASSISTANT]

    @pytest.mark.asyncio
    async def test_unknown_reply_shape_uses_fallback(self, widget, mock_client):
        mock_client.send.return_value = {"status": 200}
        message = await widget.send_message("hello")
        assert message.text == "I'm not sure how to respond to that."

    @pytest.mark.asyncio
    async def test_loading_while_in_flight(self, widget, mock_client):
        release = asyncio.Event()
        seen = {}

        async def slow_send(content):
            seen["loading"] = widget.is_loading
            await release.wait()
            return {"message": "done"}

        mock_client.send.side_effect = slow_send

        task = asyncio.create_task(widget.send_message("first"))
        await asyncio.sleep(0)

        assert widget.is_loading
        with pytest.raises(ChatBusyError):
            await widget.send_message("second")

        release.set()
        await task

        assert seen["loading"] is True
        assert not widget.is_loading
        assert texts(widget) == [("user", "first"), ("assistant", "done")]
        assert mock_client.send.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_input_rejected(self, widget, mock_client, text):
        with pytest.raises(InvalidRequestError):
            await widget.send_message(text)
        assert len(widget.transcript) == 1
        mock_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_long_input_rejected(self, widget, mock_client):
        with pytest.raises(InvalidRequestError):
            await widget.send_message("x" * 501)
        mock_client.send.assert_not_awaited()


class TestTransportFailure:
    """Test network failures becoming a chat bubble."""

    @pytest.mark.asyncio
    async def test_error_bubble_and_banner(self, widget, mock_client):
        await widget.send_message("hello")
        mock_client.send.side_effect = ChatTransportError()

        message = await widget.send_message("still there?")

        assert message.kind == MessageKind.ERROR
        assert message.text == CONNECTION_ERROR_TEXT
        assert widget.error is not None
        assert not widget.is_loading
        # earlier history intact
        assert texts(widget)[:2] == [("user", "hello"), ("assistant", "Hi! How can I help?")]

    @pytest.mark.asyncio
    async def test_next_send_clears_banner(self, widget, mock_client):
        mock_client.send.side_effect = [ChatTransportError(), {"message": "back"}]
        await widget.send_message("a")
        await widget.send_message("b")
        assert widget.error is None

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_an_error_bubble(self, widget, mock_client):
        mock_client.send.side_effect = RuntimeError("bug")
        before = len(widget.transcript)

        message = await widget.send_message("a")

        added = widget.transcript.messages[before:]
        assert [(m.author, m.kind) for m in added] == [
            (Author.USER, MessageKind.TEXT),
            (Author.ASSISTANT, MessageKind.ERROR),
        ]
        assert message.text == CONNECTION_ERROR_TEXT
        assert widget.error is not None
        assert not widget.is_loading

    @pytest.mark.asyncio
    async def test_misconfigured_endpoint_is_an_error_bubble(self):
        widget = ChatWidget(ChatbotClient(base_url="http://exa\x00mple.com"))

        message = await widget.send_message("hello")

        assert texts(widget)[-2:] == [("user", "hello"), ("assistant", CONNECTION_ERROR_TEXT)]
        assert message.kind == MessageKind.ERROR
        assert not widget.is_loading

    @pytest.mark.asyncio
    async def test_unexpected_exception_while_confirming_clears_pending(
        self, widget, mock_client, email_request_reply
    ):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")

        mock_client.send.side_effect = KeyError("content")
        message = await widget.send_message("SEND")

        assert message.text == CONFIRMATION_ERROR_TEXT
        assert widget.pending_email is None


class TestEmailConfirmation:
    """Test the email confirmation sub-protocol."""

    @pytest.mark.asyncio
    async def test_send_flow(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        card = await widget.send_message("email the report to a@b.com")

        assert card.kind == MessageKind.EMAIL_PREVIEW
        assert widget.pending_email == EmailPreview(recipient="a@b.com", subject="S", content="C")
        assert widget.input_placeholder == PLACEHOLDER_CONFIRM

        mock_client.send.return_value = {"type": "email_success", "message": "Sent!"}
        result = await widget.send_message("SEND")

        mock_client.send.assert_awaited_with("SEND")
        assert result.kind == MessageKind.EMAIL_RESULT
        assert result.email_success is True
        assert result.text == "Sent!"
        assert widget.pending_email is None
        assert widget.input_placeholder == PLACEHOLDER_DEFAULT

    @pytest.mark.asyncio
    async def test_cancel_flow(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")

        mock_client.send.return_value = {"type": "email_cancelled", "message": "Cancelled."}
        result = await widget.send_message("no")

        assert result.email_success is False
        assert widget.pending_email is None

    @pytest.mark.asyncio
    async def test_non_token_rejected_while_pending(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")
        count = len(widget.transcript)

        with pytest.raises(ConfirmationRequiredError):
            await widget.send_message("what's the weather?")

        assert len(widget.transcript) == count
        assert widget.pending_email is not None
        assert mock_client.send.await_count == 1

    @pytest.mark.asyncio
    async def test_pending_cleared_on_transport_failure(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")

        mock_client.send.side_effect = ChatTransportError()
        message = await widget.send_message("SEND")

        assert message.text == CONFIRMATION_ERROR_TEXT
        assert widget.pending_email is None

    @pytest.mark.asyncio
    async def test_pending_cleared_on_odd_reply(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")

        mock_client.send.return_value = {"message": "Hmm?"}
        await widget.send_message("yes")

        assert widget.pending_email is None

    @pytest.mark.asyncio
    async def test_new_request_replaces_pending(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")

        second = {
            "type": "email_request",
            "email_preview": {"recipient": "c@d.com", "subject": "T", "content": "D"},
            "message": "And this one?",
        }
        mock_client.send.return_value = second
        await widget.send_message("yes")

        assert widget.pending_email.recipient == "c@d.com"


class TestConversationControls:
    """Test clear, export, banner and unread bookkeeping."""

    @pytest.mark.asyncio
    async def test_clear_resets_to_welcome(self, widget, mock_client, email_request_reply):
        mock_client.send.return_value = email_request_reply
        await widget.send_message("email it")

        widget.clear_conversation()

        assert len(widget.transcript) == 1
        assert widget.transcript.last.text == WELCOME_TEXT
        assert widget.pending_email is None

    @pytest.mark.asyncio
    async def test_reply_after_clear_is_dropped(self, widget, mock_client, email_request_reply):
        release = asyncio.Event()

        async def slow_send(content):
            await release.wait()
            return email_request_reply

        mock_client.send.side_effect = slow_send

        task = asyncio.create_task(widget.send_message("email it"))
        await asyncio.sleep(0)
        widget.clear_conversation()

        release.set()
        message = await task

        assert message is None
        assert len(widget.transcript) == 1
        assert widget.transcript.last.text == WELCOME_TEXT
        assert widget.pending_email is None
        assert not widget.is_loading

    @pytest.mark.asyncio
    async def test_failure_after_clear_is_dropped(self, widget, mock_client):
        release = asyncio.Event()

        async def slow_send(content):
            await release.wait()
            raise ChatTransportError()

        mock_client.send.side_effect = slow_send

        task = asyncio.create_task(widget.send_message("hello"))
        await asyncio.sleep(0)
        widget.clear_conversation()

        release.set()
        assert await task is None

        assert len(widget.transcript) == 1
        assert widget.error is None

        mock_client.send.side_effect = None
        await widget.send_message("again")
        assert texts(widget) == [("user", "again"), ("assistant", "Hi! How can I help?")]

    def test_cancel_pending(self, widget):
        widget.pending_email = EmailPreview(recipient="a@b.com", subject="S", content="C")
        widget.cancel_pending()
        assert widget.pending_email is None

    @pytest.mark.asyncio
    async def test_reply_while_closed_counts_unread(self, widget):
        widget.close()
        await widget.send_message("ping")
        await widget.send_message("ping again")
        assert widget.unread_count == 2

        widget.open()
        assert widget.unread_count == 0

    @pytest.mark.asyncio
    async def test_notify_follows_sound_setting(self, widget):
        await widget.send_message("hi")
        assert widget.state().notify is True

        widget.update_settings(SettingsUpdate(sound_enabled=False))
        await widget.send_message("hi")
        assert widget.state().notify is False

    @pytest.mark.asyncio
    async def test_banner_expires(self, widget, mock_client):
        mock_client.send.side_effect = ChatTransportError()
        await widget.send_message("a")
        raised = widget.error.raised_at

        assert widget.expire_error(raised + timedelta(seconds=1)) is False
        assert widget.expire_error(raised + timedelta(seconds=30)) is True
        assert widget.error is None

    def test_dismiss_error(self, widget):
        widget._raise_banner("oops")
        widget.dismiss_error()
        assert widget.error is None

    @pytest.mark.asyncio
    async def test_export(self, widget):
        await widget.send_message("hello")
        filename, text = widget.export_transcript()
        assert filename == f"ecogreen360-chat-{datetime.now():%Y-%m-%d}.txt"
        assert "You: hello" in text
        assert "Bot: Hi! How can I help?" in text


class TestWindowDelegation:
    """Test that window calls replace the placement wholesale."""

    def test_drag_replaces_placement(self, widget):
        before = widget.placement
        widget.start_drag(900, 300)
        assert widget.placement is not before
        assert widget.placement.is_dragging

        widget.move_drag(128, 124)
        widget.end_drag()
        assert widget.state().frame.x == 100
        assert widget.state().frame.y == 100

    def test_fullscreen_while_dragging_ends_drag(self, widget):
        widget.start_drag(900, 300)
        widget.toggle_fullscreen()
        assert not widget.placement.is_dragging
        assert widget.state().mode == "fullscreen"

    def test_settings_update(self, widget):
        widget.update_settings(SettingsUpdate(
            size=SizePreset.SMALL,
            corner=Corner.TOP_LEFT,
            theme=Theme.PURPLE,
            show_settings=True,
        ))
        state = widget.state()
        assert (state.frame.width, state.frame.height) == (320, 400)
        assert (state.frame.x, state.frame.y) == (24, 24)
        assert state.settings.theme == Theme.PURPLE
        assert state.settings.show_settings is True
        assert state.settings.sound_enabled is True

    def test_close_keeps_transcript(self, widget):
        widget.transcript.add_user("remember me")
        widget.close()
        widget.open()
        assert widget.transcript.last.text == "remember me"

    def test_new_widget_defaults(self):
        state = ChatWidget().state()
        assert state.mode == "closed"
        assert len(state.messages) == 1
        assert state.input_placeholder == PLACEHOLDER_DEFAULT
