"""
searchchat LLM Client Base - Base class and common types for LLM clients

This module provides:
- BaseLLMClient: Abstract base class for all LLM clients
- LLMConfig: Configuration dataclass
- LLMResponse: Standardized response format
- StreamChunk: Streaming chunk format
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import (
    Dict, Any, List, Optional, Union, AsyncIterator
)
from enum import Enum

from ..tools.models import AgentTool


class StopReason(str, Enum):
    """Reason why the LLM stopped generating"""
    END_TURN = "end_turn"           # Natural completion
    MAX_TOKENS = "max_tokens"       # Hit token limit
    STOP_SEQUENCE = "stop_sequence" # Hit stop sequence
    TOOL_USE = "tool_use"           # Model wants to use a tool
    CONTENT_FILTER = "content_filter"
    ERROR = "error"                 # Error occurred


@dataclass
class LLMConfig:
    """
    Configuration for LLM clients.

    Attributes:
        api_key: API key for the provider
        model: Model name (e.g., "gpt-4o", "us.anthropic.claude-haiku-4-5-20251001-v1:0")
        base_url: Optional base URL override for API
        temperature: Sampling temperature (0.0 - 2.0)
        max_tokens: Maximum tokens in response
        top_p: Nucleus sampling parameter
        timeout: Request timeout in seconds
        max_retries: Maximum number of retries on failure
    """
    api_key: Optional[str] = None
    model: str = "gpt-4o"
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 4096
    top_p: Optional[float] = None
    timeout: int = 60
    max_retries: int = 3

    # Extra provider-specific config (e.g., aws_region_name for Bedrock)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCall:
    """A tool call from the LLM"""
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class Usage:
    """Token usage information"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    # Cost in USD (if available)
    cost: Optional[float] = None


@dataclass
class LLMResponse:
    """
    Standardized LLM response format.

    All provider clients return this format for consistency.
    """
    content: str
    tool_calls: Optional[List[ToolCall]] = None
    stop_reason: StopReason = StopReason.END_TURN
    usage: Optional[Usage] = None
    model: Optional[str] = None

    # Raw response for debugging
    raw_response: Optional[Any] = None

    @property
    def has_tool_calls(self) -> bool:
        """Check if response contains tool calls"""
        return self.tool_calls is not None and len(self.tool_calls) > 0


@dataclass
class StreamChunk:
    """
    A chunk from streaming response.

    Used for real-time token-by-token streaming.
    """
    content: str = ""
    reasoning_content: str = ""
    tool_calls: Optional[List[ToolCall]] = None
    is_final: bool = False
    stop_reason: Optional[StopReason] = None
    usage: Optional[Usage] = None

    # Accumulated content (all chunks so far)
    accumulated_content: str = ""


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients.

    All provider-specific clients inherit from this class
    and implement the abstract methods.

    Example:
        class MyClient(BaseLLMClient):
            async def _call_api(self, messages, tools, **kwargs):
                # Provider-specific implementation
                pass
    """

    # Provider name (override in subclasses)
    provider: str = "unknown"

    def __init__(self, config: Optional[LLMConfig] = None, **kwargs):
        """
        Initialize the client.

        Args:
            config: LLMConfig instance
            **kwargs: Override config values
        """
        if config is None:
            config = LLMConfig(**kwargs)
        else:
            # Apply kwargs overrides
            for key, value in kwargs.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        self.config = config

    @abstractmethod
    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Make the actual API call (provider-specific).

        Args:
            messages: List of message dicts
            tools: Optional list of tool schemas
            **kwargs: Additional provider-specific params

        Returns:
            LLMResponse with standardized format
        """
        pass

    @abstractmethod
    async def _stream_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> AsyncIterator[StreamChunk]:
        """
        Make streaming API call (provider-specific).

        Yields:
            StreamChunk objects
        """
        pass

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Union[Dict[str, Any], AgentTool]]] = None,
        config: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'
            tools: Optional list of tools (dict or AgentTool)
            config: Optional config overrides
            **kwargs: Additional parameters

        Returns:
            LLMResponse with content, tool_calls, usage, etc.

        Example:
            response = await client.chat_completion([
                {"role": "system", "content": "You are helpful."},
                {"role": "user", "content": "Hello!"}
            ])
            print(response.content)
        """
        merged_kwargs = {**kwargs}
        if config:
            merged_kwargs.update(config)

        return await self._call_api(messages, self._tool_schemas(tools), **merged_kwargs)

    async def stream_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Union[Dict[str, Any], AgentTool]]] = None,
        config: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> AsyncIterator[StreamChunk]:
        """
        Send a streaming chat completion request.

        Yields chunks as they arrive from the API.

        Example:
            async for chunk in client.stream_completion(messages):
                print(chunk.content, end="", flush=True)
        """
        merged_kwargs = {**kwargs}
        if config:
            merged_kwargs.update(config)

        accumulated = ""
        async for chunk in self._stream_api(messages, self._tool_schemas(tools), **merged_kwargs):
            accumulated += chunk.content
            chunk.accumulated_content = accumulated
            yield chunk

    def _tool_schemas(
        self,
        tools: Optional[List[Union[Dict[str, Any], AgentTool]]],
    ) -> Optional[List[Dict[str, Any]]]:
        """Convert AgentTool instances to provider schemas, pass dicts through"""
        if not tools:
            return None
        schemas = []
        for tool in tools:
            if isinstance(tool, AgentTool):
                schemas.append(self._format_tool(tool))
            else:
                schemas.append(tool)
        return schemas

    def _format_tool(self, tool: AgentTool) -> Dict[str, Any]:
        """
        Format AgentTool to provider-specific schema.

        Default implementation uses OpenAI format.
        Override in subclasses for other formats.
        """
        return tool.to_openai_schema()

    def _model_params(self, **kwargs) -> Dict[str, Any]:
        """Sampling parameters from config, overridable per call"""
        params = {
            "temperature": kwargs.get("temperature", self.config.temperature),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
        }
        top_p = kwargs.get("top_p", self.config.top_p)
        if top_p is not None:
            params["top_p"] = top_p
        return params
