"""Shared fakes for the searchchat test suite.

FakeAgent stands in for searchchat.agent.Agent behind the server;
FakeLLMClient stands in for the model behind a real Agent.
"""

from typing import Any, List, Optional

import pytest

from searchchat.agent import (
    AgentResult,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    DeltaType,
    Message,
    MessageStartEvent,
    MessageStopEvent,
)
from searchchat.app import AgentContext, Settings
from searchchat.llm.base import BaseLLMClient, LLMConfig


class FakeAgent:
    """Scripted agent: stream() yields *events* (raising any Exception item)."""

    def __init__(
        self,
        events: Optional[List[Any]] = None,
        result: Optional[AgentResult] = None,
        error: Optional[Exception] = None,
    ):
        self.events = list(events or [])
        self.result = result
        self.error = error
        self.invocations: List[str] = []
        self.stream_closed = False

    async def invoke(self, message: str) -> AgentResult:
        self.invocations.append(message)
        if self.error is not None:
            raise self.error
        return self.result

    async def stream(self, message: str):
        self.invocations.append(message)
        try:
            for event in self.events:
                if isinstance(event, Exception):
                    raise event
                yield event
        finally:
            self.stream_closed = True


class FakeLLMClient(BaseLLMClient):
    """Scripted model: pops one LLMResponse (or one list of StreamChunks) per call."""

    provider = "fake"

    def __init__(self, responses=None, stream_turns=None):
        super().__init__(LLMConfig(model="fake-model"))
        self.responses = list(responses or [])
        self.stream_turns = list(stream_turns or [])
        self.calls: List[dict] = []

    async def _call_api(self, messages, tools=None, **kwargs):
        self.calls.append({"messages": list(messages), "tools": tools})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def _stream_api(self, messages, tools=None, **kwargs):
        self.calls.append({"messages": list(messages), "tools": tools})
        for chunk in self.stream_turns.pop(0):
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


def text_events(*fragments: str) -> list:
    """The event sequence a model produces for one plain text answer."""
    events = [MessageStartEvent(), ContentBlockStartEvent(block_index=0)]
    events += [ContentBlockDeltaEvent(DeltaType.TEXT, f) for f in fragments]
    events += [ContentBlockStopEvent(block_index=0), MessageStopEvent("end_turn")]
    return events


def text_result(text: str) -> AgentResult:
    return AgentResult(last_message=Message(role="assistant", content=[{"text": text}]))


@pytest.fixture
def make_agent():
    return FakeAgent


@pytest.fixture
def make_llm():
    return FakeLLMClient


@pytest.fixture
def make_text_events():
    return text_events


@pytest.fixture
def make_text_result():
    return text_result


@pytest.fixture
def make_context():
    def _make(agent, settings: Optional[Settings] = None) -> AgentContext:
        return AgentContext(settings=settings or Settings(), agent=agent)
    return _make
