"""
searchchat LLM - Model clients used by the agent

Built-in LLM Client (powered by litellm):
    from searchchat.llm import LiteLLMClient, LLMConfig

    client = LiteLLMClient(config=LLMConfig(model="gpt-4o"), provider_name="openai")
"""

from .base import (
    BaseLLMClient,
    LLMConfig,
    LLMResponse,
    StreamChunk,
    StopReason,
    ToolCall,
    Usage,
)
from .litellm_client import LiteLLMClient, build_litellm_model_string

__all__ = [
    "BaseLLMClient",
    "LLMConfig",
    "LLMResponse",
    "StreamChunk",
    "StopReason",
    "ToolCall",
    "Usage",
    "LiteLLMClient",
    "build_litellm_model_string",
]
