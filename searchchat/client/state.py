"""
searchchat Chat State - the message list a chat UI renders

Only the last assistant message is ever mutated. Once it is marked failed
it is locked: later text deltas are ignored.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..constants import ERROR_PREFIX

logger = logging.getLogger(__name__)

USER = "user"
ASSISTANT = "assistant"


@dataclass
class ChatMessage:
    role: str
    content: str = ""
    failed: bool = False


UpdateListener = Callable[[ChatMessage], None]


class ChatSession:
    """
    Ordered chat messages plus the loading flag.

    Args:
        on_update: Called with the affected message after every mutation.
    """

    def __init__(self, on_update: Optional[UpdateListener] = None):
        self.messages: List[ChatMessage] = []
        self.is_loading = False
        self._on_update = on_update

    @property
    def last(self) -> Optional[ChatMessage]:
        return self.messages[-1] if self.messages else None

    def add_user_message(self, content: str) -> ChatMessage:
        return self._append(ChatMessage(role=USER, content=content))

    def start_assistant_message(self) -> ChatMessage:
        """Append the empty in-flight assistant message deltas will grow."""
        return self._append(ChatMessage(role=ASSISTANT))

    def append_delta(self, text: str) -> None:
        """Append *text* to the last message if it is a live assistant message."""
        last = self.last
        if last is None or last.role != ASSISTANT:
            logger.debug("Dropping delta: last message is not an assistant message")
            return
        if last.failed:
            logger.debug("Dropping delta: assistant message is locked after an error")
            return
        last.content += text
        self._notify(last)

    def set_content(self, content: str) -> None:
        """Replace the last message with a completed assistant message."""
        self._replace_last(ChatMessage(role=ASSISTANT, content=content))

    def fail(self, error: str) -> None:
        """Replace the last message with an error-prefixed, locked message."""
        self._replace_last(ChatMessage(role=ASSISTANT, content=f"{ERROR_PREFIX}{error}", failed=True))

    def fail_connection(self, message: str) -> None:
        """Replace the last message with a generic connection error, locked."""
        self._replace_last(ChatMessage(role=ASSISTANT, content=message, failed=True))

    def _append(self, message: ChatMessage) -> ChatMessage:
        self.messages.append(message)
        self._notify(message)
        return message

    def _replace_last(self, message: ChatMessage) -> None:
        if self.messages:
            self.messages[-1] = message
        else:
            self.messages.append(message)
        self._notify(message)

    def _notify(self, message: ChatMessage) -> None:
        if self._on_update is not None:
            self._on_update(message)
