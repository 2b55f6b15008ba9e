"""
In-memory conversation transcript.
"""
import itertools
from datetime import datetime
from typing import List, Optional

from ecogreen_chat.models.chat import (
    Message, Author, MessageKind, ChatReply,
    PlainReply, EmailProposal, EmailResult,
)

WELCOME_TEXT = (
    "🌱 Welcome to EcoGreen360! I'm your AI greenhouse specialist.\n\n"
    "I can help you with:\n"
    "• Greenhouse design and setup\n"
    "• IoT monitoring systems\n"
    "• Plant cultivation advice\n"
    "• Cost estimates and ROI\n"
    "• Sustainable farming practices\n"
    "• Email information to colleagues\n\n"
    "How can I assist with your greenhouse project today?"
)


class Transcript:
    """
    Ordered list of messages with monotonically increasing ids.

    Ids keep increasing across clear() so the renderer never sees a
    reused key.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._messages: List[Message] = []
        self.clear()

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def clear(self) -> None:
        """Drop everything and start over from the welcome entry."""
        self._messages = [
            Message(id=next(self._ids), author=Author.ASSISTANT, text=WELCOME_TEXT)
        ]

    def add_user(self, text: str) -> Message:
        return self._append(Message(id=next(self._ids), author=Author.USER, text=text))

    def add_error(self, text: str) -> Message:
        return self._append(Message(
            id=next(self._ids),
            author=Author.ASSISTANT,
            text=text,
            kind=MessageKind.ERROR,
        ))

    def add_reply(self, reply: ChatReply) -> Message:
        """Append the assistant message for a decoded reply."""
        msg_id = next(self._ids)

        if isinstance(reply, EmailProposal):
            message = Message(
                id=msg_id,
                author=Author.ASSISTANT,
                text=reply.message,
                kind=MessageKind.EMAIL_PREVIEW,
                email_preview=reply.preview,
            )
        elif isinstance(reply, EmailResult):
            message = Message(
                id=msg_id,
                author=Author.ASSISTANT,
                text=reply.message,
                kind=MessageKind.EMAIL_RESULT,
                email_success=reply.success,
            )
        elif isinstance(reply, PlainReply):
            message = Message(id=msg_id, author=Author.ASSISTANT, text=reply.text)
        else:
            raise TypeError(f"Unhandled reply type: {type(reply).__name__}")

        return self._append(message)

    def export_text(self) -> str:
        """Plain-text dump: one '[HH:MM] Bot|You: text' line per message."""
        return "\n".join(
            f"[{m.timestamp.strftime('%H:%M')}] {'Bot' if m.is_bot else 'You'}: {m.text}"
            for m in self._messages
        )

    @staticmethod
    def export_filename(today: Optional[datetime] = None) -> str:
        today = today or datetime.now()
        return f"ecogreen360-chat-{today.strftime('%Y-%m-%d')}.txt"

    def _append(self, message: Message) -> Message:
        self._messages.append(message)
        return message
