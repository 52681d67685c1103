"""
searchchat Client - chat state, SSE stream consumer, and HTTP client
"""

from .state import ASSISTANT, USER, ChatMessage, ChatSession
from .consumer import StreamConsumer
from .api import ChatClient, normalize_response

__all__ = [
    "ASSISTANT",
    "USER",
    "ChatMessage",
    "ChatSession",
    "StreamConsumer",
    "ChatClient",
    "normalize_response",
]
