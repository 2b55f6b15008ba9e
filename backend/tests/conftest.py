"""
Pytest fixtures for the chat widget service tests.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from ecogreen_chat.integrations.chatbot_client import ChatbotClient
from ecogreen_chat.models.window import Placement, Viewport
from ecogreen_chat.services import session_service
from ecogreen_chat.services.chat_widget import ChatWidget


@pytest.fixture(autouse=True)
def clear_sessions():
    """Every test starts with an empty session store."""
    session_service._sessions.clear()
    yield
    session_service._sessions.clear()


@pytest.fixture
def mock_client():
    """ChatbotClient whose send() is an AsyncMock."""
    client = MagicMock(spec=ChatbotClient)
    client.send = AsyncMock(return_value={"message": "Hi! How can I help?"})
    return client


@pytest.fixture
def widget(mock_client):
    """An open desktop widget backed by the mock client."""
    w = ChatWidget(mock_client)
    w.resize_viewport(1280, 800)
    w.open()
    return w


@pytest.fixture
def desktop():
    """Open, normal-mode placement on a 1280x800 viewport."""
    return Placement(is_open=True, viewport=Viewport(width=1280, height=800))


@pytest.fixture
def email_request_reply():
    """Upstream reply proposing an email."""
    return {
        "type": "email_request",
        "email_preview": {
            "recipient": "a@b.com",
            "subject": "S",
            "content": "C",
        },
        "message": "Send this?",
    }


@pytest.fixture
def openai_style_reply():
    """Upstream reply in chat-completions shape."""
    return {
        "choices": [
            {"message": {"role": "assistant", "content": "Use shade cloth above 30°C."}}
        ],
        "message": "ignored when choices are present",
    }
