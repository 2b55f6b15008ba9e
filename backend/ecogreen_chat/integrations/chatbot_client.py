"""
Chat endpoint client integration.

This module handles direct communication with the remote chat service:
1. POST /chatbot/chat with {"content": "..."}
2. Turning network failures and non-JSON bodies into ChatTransportError

No retries: a failed send is reported once and the user resends.
"""
import json
from typing import Any, Optional

import httpx

from ecogreen_chat.config import get_settings
from ecogreen_chat.utils.logger import get_logger
from ecogreen_chat.utils.errors import ChatTransportError

logger = get_logger(__name__)

CHAT_ENDPOINT = "/chatbot/chat"


class ChatbotClient:
    """
    Client for the remote chat service.

    Usage:
        client = ChatbotClient()
        payload = await client.send("hello")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Chat service root, defaults to settings.chatbot_api_url
            timeout: Seconds before giving up; None waits indefinitely
            transport: Optional httpx transport (tests use MockTransport)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.chatbot_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.chatbot_timeout_seconds
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}

    async def send(self, content: str) -> Any:
        """
        Send one user message and return the parsed JSON reply.

        Non-2xx responses that still carry JSON are returned as-is; the
        reply decoder deals with whatever shape they have.

        Args:
            content: Trimmed user input

        Returns:
            Parsed JSON body

        Raises:
            ChatTransportError: Network failure, an unusable URL or a body
                that is not JSON
        """
        url = f"{self.base_url}{CHAT_ENDPOINT}"

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json={"content": content},
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error(f"Chat request failed: {e!r}")
                raise ChatTransportError()

        if response.status_code >= 400:
            logger.warning(f"Chat endpoint answered {response.status_code}")

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Chat endpoint returned non-JSON body: {e}")
            raise ChatTransportError("The chat server sent an unreadable reply.")
