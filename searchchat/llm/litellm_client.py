"""
searchchat LiteLLM Client - Unified LLM client powered by litellm

Supports all providers through a single client:
- AWS Bedrock (Claude on Bedrock, the default deployment)
- OpenAI
- Anthropic
- Azure OpenAI
- Google Gemini
- Ollama (local models)
"""

import json
import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional

from .base import (
    BaseLLMClient,
    LLMConfig,
    LLMResponse,
    StreamChunk,
    ToolCall,
    Usage,
    StopReason,
)

logger = logging.getLogger(__name__)

# Provider -> default environment variable for API key
_PROVIDER_ENV_VARS: Dict[str, Optional[str]] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_OPENAI_API_KEY",
    "gemini": "GOOGLE_API_KEY",
    "bedrock": None,  # AWS credential chain
    "ollama": None,
}


def build_litellm_model_string(provider: str, model: str) -> str:
    """Map provider + model to the litellm model string.

    litellm uses prefixed model strings to route to the correct provider.
    See https://docs.litellm.ai/docs/providers

    Args:
        provider: Provider name (bedrock, openai, anthropic, azure, gemini, ollama).
        model: Raw model name (e.g. "us.anthropic.claude-haiku-4-5-20251001-v1:0").

    Returns:
        litellm-compatible model string.
    """
    provider = provider.lower()
    if provider == "openai":
        return model  # no prefix needed
    if provider in ("anthropic", "azure", "gemini", "ollama", "bedrock"):
        return f"{provider}/{model}"
    # Fallback: pass through as-is
    return model


class LiteLLMClient(BaseLLMClient):
    """
    Unified LLM client powered by litellm.

    Example:
        from searchchat.llm import LiteLLMClient, LLMConfig

        config = LLMConfig(
            model="us.anthropic.claude-haiku-4-5-20251001-v1:0",
            extra={"aws_region_name": "us-east-1"},
        )
        client = LiteLLMClient(config=config, provider_name="bedrock")
        response = await client.chat_completion([
            {"role": "user", "content": "Hello!"}
        ])
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        provider_name: str = "openai",
        **kwargs,
    ):
        if config is None:
            if "model" not in kwargs:
                raise ValueError("model is required")
            model = kwargs.pop("model")
            config = LLMConfig(model=model, **kwargs)

        super().__init__(config, **kwargs)

        self.provider = provider_name.lower()
        self._litellm_model = build_litellm_model_string(self.provider, self.config.model)

        # Resolve API key: explicit config > env var
        api_key = self.config.api_key
        if not api_key:
            env_var = _PROVIDER_ENV_VARS.get(self.provider)
            if env_var:
                api_key = os.environ.get(env_var)

        # Base kwargs shared by _call_api and _stream_api
        self._base_kwargs: Dict[str, Any] = {
            "timeout": self.config.timeout,
            "num_retries": self.config.max_retries,
            **self.config.extra,
        }
        if self.config.base_url:
            self._base_kwargs["api_base"] = self.config.base_url
        if api_key:
            self._base_kwargs["api_key"] = api_key

        logger.info(
            f"LiteLLMClient initialized: provider={self.provider}, "
            f"litellm_model={self._litellm_model}"
        )

    # ------------------------------------------------------------------
    # Core API methods
    # ------------------------------------------------------------------

    def _build_params(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]],
        **kwargs,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "model": kwargs.get("model") or self._litellm_model,
            "messages": messages,
            **self._model_params(**kwargs),
            **self._base_kwargs,
        }
        if tools:
            params["tools"] = tools
            params["tool_choice"] = kwargs.get("tool_choice", "auto")
        if "stop" in kwargs:
            params["stop"] = kwargs["stop"]
        return params

    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> LLMResponse:
        """Make a non-streaming call via litellm.acompletion."""
        import litellm

        params = self._build_params(messages, tools, **kwargs)

        logger.info(
            f"[LiteLLM] model={params['model']}, tools={len(tools) if tools else 0}, "
            f"messages={len(messages)}"
        )

        response = await litellm.acompletion(**params)

        choice = response.choices[0]
        message = choice.message

        tool_calls = None
        if message.tool_calls:
            tool_calls = []
            for tc in message.tool_calls:
                arguments = tc.function.arguments
                if isinstance(arguments, str):
                    arguments = json.loads(arguments) if arguments else {}
                tool_calls.append(
                    ToolCall(id=tc.id, name=tc.function.name, arguments=arguments)
                )

        usage = None
        if getattr(response, "usage", None):
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
            try:
                usage.cost = litellm.completion_cost(completion_response=response)
            except Exception:
                # Unknown model pricing
                usage.cost = None

        return LLMResponse(
            content=message.content or "",
            tool_calls=tool_calls,
            stop_reason=self._parse_stop_reason(choice.finish_reason),
            usage=usage,
            model=getattr(response, "model", self.config.model),
            raw_response=response,
        )

    async def _stream_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ) -> AsyncIterator[StreamChunk]:
        """Make a streaming call via litellm.acompletion(stream=True)."""
        import litellm

        params = self._build_params(messages, tools, **kwargs)
        params["stream"] = True
        params["stream_options"] = {"include_usage": True}

        response = await litellm.acompletion(**params)

        # Track tool call deltas across chunks
        tool_call_deltas: Dict[int, Dict[str, Any]] = {}

        async for chunk in response:
            if not chunk.choices:
                # Final chunk may carry only usage
                usage = getattr(chunk, "usage", None)
                if usage:
                    yield StreamChunk(
                        is_final=True,
                        usage=Usage(
                            prompt_tokens=usage.prompt_tokens,
                            completion_tokens=usage.completion_tokens,
                            total_tokens=usage.total_tokens,
                        ),
                    )
                continue

            choice = chunk.choices[0]
            delta = choice.delta

            if delta.tool_calls:
                for tc_delta in delta.tool_calls:
                    idx = tc_delta.index
                    if idx not in tool_call_deltas:
                        tool_call_deltas[idx] = {"id": "", "name": "", "arguments": ""}
                    if tc_delta.id:
                        tool_call_deltas[idx]["id"] = tc_delta.id
                    if tc_delta.function:
                        if tc_delta.function.name:
                            tool_call_deltas[idx]["name"] = tc_delta.function.name
                        if tc_delta.function.arguments:
                            tool_call_deltas[idx]["arguments"] += tc_delta.function.arguments

            is_final = choice.finish_reason is not None
            stop_reason = None
            tool_calls = None
            if is_final:
                stop_reason = self._parse_stop_reason(choice.finish_reason)
                if tool_call_deltas:
                    tool_calls = self._assemble_tool_calls(tool_call_deltas)

            yield StreamChunk(
                content=delta.content or "",
                reasoning_content=getattr(delta, "reasoning_content", None) or "",
                tool_calls=tool_calls,
                is_final=is_final,
                stop_reason=stop_reason,
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _assemble_tool_calls(tool_call_deltas: Dict[int, Dict[str, Any]]) -> List[ToolCall]:
        tool_calls = []
        for idx in sorted(tool_call_deltas.keys()):
            tc = tool_call_deltas[idx]
            try:
                args = json.loads(tc["arguments"]) if tc["arguments"] else {}
            except json.JSONDecodeError:
                logger.warning(f"Unparsable arguments for tool call {tc['name']}: {tc['arguments']!r}")
                args = {}
            tool_calls.append(ToolCall(id=tc["id"], name=tc["name"], arguments=args))
        return tool_calls

    @staticmethod
    def _parse_stop_reason(finish_reason: Optional[str]) -> StopReason:
        """Map litellm/OpenAI finish_reason to StopReason enum."""
        if finish_reason is None:
            return StopReason.END_TURN
        mapping = {
            "stop": StopReason.END_TURN,
            "end_turn": StopReason.END_TURN,
            "length": StopReason.MAX_TOKENS,
            "max_tokens": StopReason.MAX_TOKENS,
            "tool_calls": StopReason.TOOL_USE,
            "tool_use": StopReason.TOOL_USE,
            "function_call": StopReason.TOOL_USE,
            "content_filter": StopReason.CONTENT_FILTER,
            "stop_sequence": StopReason.STOP_SEQUENCE,
        }
        return mapping.get(finish_reason, StopReason.END_TURN)
