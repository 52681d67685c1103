"""
searchchat Agent - Tool-using chat agent over an LLM client

The agent is stateless between invocations: every call to invoke() or
stream() starts a fresh conversation of [system, user].
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from ..errors import AgentError, SearchError
from ..llm.base import BaseLLMClient, LLMResponse, StopReason, ToolCall, Usage
from ..tools.models import AgentTool, ToolResult
from .events import (
    AgentEvent,
    AgentResultEvent,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    DeltaType,
    MessageStartEvent,
    MessageStopEvent,
    ToolResultEvent,
    ToolUseEvent,
)

logger = logging.getLogger(__name__)


def _log_usage(usage: Optional[Usage]) -> None:
    if usage is not None:
        logger.info(f"Agent finished: tokens={usage.total_tokens}, cost={usage.cost}")


@dataclass
class Message:
    """Final assistant message; content is a list of ``{"text": ...}`` blocks"""
    role: str
    content: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(block.get("text") or "" for block in self.content)


@dataclass
class AgentResult:
    """Outcome of one agent invocation"""
    last_message: Message
    stop_reason: StopReason = StopReason.END_TURN
    usage: Optional[Usage] = None
    tool_calls_made: int = 0


class Agent:
    """
    Chat agent with a ReAct-style tool loop.

    Args:
        llm_client: Any BaseLLMClient implementation.
        system_prompt: System message prepended to every conversation.
        tools: Tools the model may call.
        max_iterations: Upper bound on model turns per invocation.

    Example:
        agent = Agent(llm_client, system_prompt="...", tools=[search_tool])
        result = await agent.invoke("東京の天気は？")
        async for event in agent.stream("東京の天気は？"):
            ...
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        system_prompt: str = "",
        tools: Optional[List[AgentTool]] = None,
        max_iterations: int = 10,
    ):
        if llm_client is None:
            raise ValueError("llm_client is required")
        self.llm_client = llm_client
        self.system_prompt = system_prompt
        self.tools = list(tools or [])
        self.max_iterations = max_iterations
        self._tools_by_name = {t.name: t for t in self.tools}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def invoke(self, message: str) -> AgentResult:
        """Run the tool loop to completion and return the final message."""
        messages = self._initial_messages(message)
        tool_calls_made = 0

        for iteration in range(self.max_iterations):
            logger.debug(f"Agent iteration {iteration + 1}/{self.max_iterations}")
            response = await self._complete(messages)

            if not response.has_tool_calls:
                _log_usage(response.usage)
                return AgentResult(
                    last_message=Message(role="assistant", content=[{"text": response.content}]),
                    stop_reason=response.stop_reason,
                    usage=response.usage,
                    tool_calls_made=tool_calls_made,
                )

            messages.append(self._build_assistant_message(response.content, response.tool_calls))
            for tool_call in response.tool_calls:
                result = await self._execute_tool(tool_call)
                messages.append(self._tool_result_to_message(result))
                tool_calls_made += 1

        raise AgentError(f"Tool loop exceeded {self.max_iterations} iterations")

    async def stream(self, message: str) -> AsyncIterator[AgentEvent]:
        """
        Run the tool loop, yielding events as the model produces them.

        The last event is an AgentResultEvent. Model or tool-loop failures
        are raised as AgentError from inside the iteration.
        """
        messages = self._initial_messages(message)
        sequence = 0
        tool_calls_made = 0

        def _seq() -> int:
            nonlocal sequence
            sequence += 1
            return sequence

        for iteration in range(self.max_iterations):
            logger.debug(f"Agent stream iteration {iteration + 1}/{self.max_iterations}")
            yield MessageStartEvent(sequence=_seq())

            text_parts: List[str] = []
            tool_calls: Optional[List[ToolCall]] = None
            stop_reason = StopReason.END_TURN
            usage: Optional[Usage] = None
            block_open = False

            try:
                async for chunk in self.llm_client.stream_completion(messages, tools=self.tools or None):
                    if chunk.reasoning_content:
                        yield ContentBlockDeltaEvent(
                            DeltaType.REASONING, chunk.reasoning_content, sequence=_seq(),
                        )
                    if chunk.content:
                        if not block_open:
                            block_open = True
                            yield ContentBlockStartEvent(block_index=0, sequence=_seq())
                        text_parts.append(chunk.content)
                        yield ContentBlockDeltaEvent(DeltaType.TEXT, chunk.content, sequence=_seq())
                    if chunk.tool_calls:
                        tool_calls = chunk.tool_calls
                    if chunk.stop_reason is not None:
                        stop_reason = chunk.stop_reason
                    if chunk.usage is not None:
                        usage = chunk.usage
            except AgentError:
                raise
            except Exception as e:
                raise AgentError(f"Model stream failed: {e}") from e

            if block_open:
                yield ContentBlockStopEvent(block_index=0, sequence=_seq())
            content = "".join(text_parts)

            if not tool_calls:
                yield MessageStopEvent(stop_reason.value, sequence=_seq())
                _log_usage(usage)
                result = AgentResult(
                    last_message=Message(role="assistant", content=[{"text": content}]),
                    stop_reason=stop_reason,
                    usage=usage,
                    tool_calls_made=tool_calls_made,
                )
                yield AgentResultEvent(result, sequence=_seq())
                return

            yield MessageStopEvent(StopReason.TOOL_USE.value, sequence=_seq())
            messages.append(self._build_assistant_message(content, tool_calls))

            for index, tool_call in enumerate(tool_calls, start=1):
                yield ContentBlockStartEvent(block_index=index, tool_name=tool_call.name, sequence=_seq())
                yield ContentBlockDeltaEvent(
                    DeltaType.TOOL_USE_INPUT,
                    json.dumps(tool_call.arguments, ensure_ascii=False),
                    block_index=index,
                    sequence=_seq(),
                )
                yield ContentBlockStopEvent(block_index=index, sequence=_seq())
                yield ToolUseEvent(tool_call.name, tool_call.arguments, tool_call.id, sequence=_seq())
                result = await self._execute_tool(tool_call)
                tool_calls_made += 1
                yield ToolResultEvent(
                    tool_call.name, result.content, result.is_error, tool_call.id, sequence=_seq(),
                )
                messages.append(self._tool_result_to_message(result))

        raise AgentError(f"Tool loop exceeded {self.max_iterations} iterations")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _initial_messages(self, message: str) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": message})
        return messages

    async def _complete(self, messages: List[Dict[str, Any]]) -> LLMResponse:
        try:
            return await self.llm_client.chat_completion(messages, tools=self.tools or None)
        except Exception as e:
            raise AgentError(f"Model call failed: {e}") from e

    async def _execute_tool(self, tool_call: ToolCall) -> ToolResult:
        """Execute a single tool call; failures become error results for the model"""
        tool = self._tools_by_name.get(tool_call.name)
        if not tool:
            return ToolResult(
                tool_call_id=tool_call.id,
                content=f"Error: Unknown tool '{tool_call.name}'",
                is_error=True,
            )

        try:
            result = await tool.executor(tool_call.arguments)
        except SearchError as e:
            logger.warning(f"Tool '{tool_call.name}' failed: {e}")
            return ToolResult(tool_call_id=tool_call.id, content=f"Error: {e}", is_error=True)
        except Exception as e:
            logger.error(f"Tool '{tool_call.name}' raised: {e}", exc_info=True)
            return ToolResult(tool_call_id=tool_call.id, content=f"Error: {e}", is_error=True)

        if isinstance(result, dict):
            content = json.dumps(result, ensure_ascii=False)
        else:
            content = str(result)

        logger.info(f"Tool '{tool_call.name}' executed")
        return ToolResult(tool_call_id=tool_call.id, content=content)

    @staticmethod
    def _build_assistant_message(content: str, tool_calls: List[ToolCall]) -> Dict[str, Any]:
        """OpenAI-format assistant message carrying tool calls"""
        return {
            "role": "assistant",
            "content": content or None,
            "tool_calls": [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.name,
                        "arguments": json.dumps(tc.arguments, ensure_ascii=False),
                    },
                }
                for tc in tool_calls
            ],
        }

    @staticmethod
    def _tool_result_to_message(result: ToolResult) -> Dict[str, Any]:
        return {
            "role": "tool",
            "tool_call_id": result.tool_call_id,
            "content": result.content,
        }
