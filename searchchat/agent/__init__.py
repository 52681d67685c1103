"""
searchchat Agent - the chat agent and its event stream
"""

from .agent import Agent, AgentResult, Message
from .events import (
    AgentEvent,
    AgentEventType,
    AgentResultEvent,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    DeltaType,
    IGNORED_EVENT_TYPES,
    MessageStartEvent,
    MessageStopEvent,
    ToolResultEvent,
    ToolUseEvent,
    text_delta_of,
)

__all__ = [
    "Agent",
    "AgentResult",
    "Message",
    "AgentEvent",
    "AgentEventType",
    "AgentResultEvent",
    "ContentBlockDeltaEvent",
    "ContentBlockStartEvent",
    "ContentBlockStopEvent",
    "DeltaType",
    "IGNORED_EVENT_TYPES",
    "MessageStartEvent",
    "MessageStopEvent",
    "ToolResultEvent",
    "ToolUseEvent",
    "text_delta_of",
]
