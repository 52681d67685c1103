"""
searchchat Agent Events - Data structures for the agent event stream

This module defines:
- Event types and delta types
- AgentEvent and its specialized variants
- text_delta_of(): the single filter the SSE layer applies to events
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class AgentEventType(str, Enum):
    """Types of events the agent emits while streaming"""
    # Model events
    MODEL_MESSAGE_START = "model_message_start"
    MODEL_CONTENT_BLOCK_START = "model_content_block_start"
    MODEL_CONTENT_BLOCK_DELTA = "model_content_block_delta"
    MODEL_CONTENT_BLOCK_STOP = "model_content_block_stop"
    MODEL_MESSAGE_STOP = "model_message_stop"

    # Tool events
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"

    # Terminal event carrying the AgentResult
    AGENT_RESULT = "agent_result"


class DeltaType(str, Enum):
    """Kinds of content-block delta"""
    TEXT = "text"
    TOOL_USE_INPUT = "tool_use_input"
    REASONING = "reasoning"


@dataclass
class AgentEvent:
    """
    Base event structure for the agent stream.

    All events have:
    - type: The type of event
    - data: Event-specific data
    - timestamp: When the event occurred
    - sequence: Sequence number for ordering
    """
    type: AgentEventType
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)
    sequence: int = 0


@dataclass
class MessageStartEvent(AgentEvent):
    """Model started a new assistant message"""

    def __init__(self, **kwargs):
        super().__init__(
            type=AgentEventType.MODEL_MESSAGE_START,
            data={"role": "assistant"},
            **kwargs
        )


@dataclass
class ContentBlockStartEvent(AgentEvent):
    """Model opened a content block (text or tool use)"""

    def __init__(self, block_index: int, tool_name: Optional[str] = None, **kwargs):
        super().__init__(
            type=AgentEventType.MODEL_CONTENT_BLOCK_START,
            data={"block_index": block_index, "tool_name": tool_name},
            **kwargs
        )


@dataclass
class ContentBlockDeltaEvent(AgentEvent):
    """Incremental fragment of a content block"""

    def __init__(self, delta_type: DeltaType, text: str, block_index: int = 0, **kwargs):
        super().__init__(
            type=AgentEventType.MODEL_CONTENT_BLOCK_DELTA,
            data={
                "delta_type": delta_type,
                "text": text,
                "block_index": block_index,
            },
            **kwargs
        )


@dataclass
class ContentBlockStopEvent(AgentEvent):
    """Model closed a content block"""

    def __init__(self, block_index: int, **kwargs):
        super().__init__(
            type=AgentEventType.MODEL_CONTENT_BLOCK_STOP,
            data={"block_index": block_index},
            **kwargs
        )


@dataclass
class MessageStopEvent(AgentEvent):
    """Model finished the assistant message"""

    def __init__(self, stop_reason: str, **kwargs):
        super().__init__(
            type=AgentEventType.MODEL_MESSAGE_STOP,
            data={"stop_reason": stop_reason},
            **kwargs
        )


@dataclass
class ToolUseEvent(AgentEvent):
    """Agent is about to execute a tool"""

    def __init__(self, tool_name: str, tool_input: Dict[str, Any], call_id: str, **kwargs):
        super().__init__(
            type=AgentEventType.TOOL_USE,
            data={
                "tool_name": tool_name,
                "tool_input": tool_input,
                "call_id": call_id,
            },
            **kwargs
        )


@dataclass
class ToolResultEvent(AgentEvent):
    """Tool execution finished"""

    def __init__(self, tool_name: str, content: str, is_error: bool, call_id: str, **kwargs):
        super().__init__(
            type=AgentEventType.TOOL_RESULT,
            data={
                "tool_name": tool_name,
                "content": content,
                "is_error": is_error,
                "call_id": call_id,
            },
            **kwargs
        )


@dataclass
class AgentResultEvent(AgentEvent):
    """Last event of a stream, carries the final AgentResult"""

    def __init__(self, result: Any, **kwargs):
        super().__init__(
            type=AgentEventType.AGENT_RESULT,
            data={"result": result},
            **kwargs
        )


# Every event type except the content-block delta is dropped by the SSE layer.
IGNORED_EVENT_TYPES: FrozenSet[AgentEventType] = frozenset(
    t for t in AgentEventType if t is not AgentEventType.MODEL_CONTENT_BLOCK_DELTA
)


def text_delta_of(event: AgentEvent) -> Optional[str]:
    """
    Return the text fragment carried by *event*, or None.

    Only a MODEL_CONTENT_BLOCK_DELTA whose delta type is TEXT carries
    user-visible text. Tool-use input and reasoning deltas, and every other
    event type, are filtered out.
    """
    if event.type is AgentEventType.MODEL_CONTENT_BLOCK_DELTA:
        if event.data.get("delta_type") is DeltaType.TEXT:
            return event.data["text"]
        return None
    if event.type in IGNORED_EVENT_TYPES:
        return None
    raise ValueError(f"Unknown agent event type: {event.type!r}")
