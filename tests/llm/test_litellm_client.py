"""Tests for searchchat.llm.litellm_client with litellm.acompletion patched out"""

from types import SimpleNamespace

import litellm
import pytest

from searchchat.llm import LiteLLMClient, LLMConfig, StopReason
from searchchat.llm.litellm_client import build_litellm_model_string


def _fn(name=None, arguments=None):
    return SimpleNamespace(name=name, arguments=arguments)


def _delta(content=None, tool_calls=None, reasoning_content=None):
    return SimpleNamespace(content=content, tool_calls=tool_calls, reasoning_content=reasoning_content)


def _chunk(delta=None, finish_reason=None, usage=None):
    choices = [SimpleNamespace(delta=delta or _delta(), finish_reason=finish_reason)] if delta or finish_reason else []
    return SimpleNamespace(choices=choices, usage=usage)


async def _aiter(items):
    for item in items:
        yield item


@pytest.fixture
def bedrock_client():
    return LiteLLMClient(
        config=LLMConfig(
            model="us.anthropic.claude-haiku-4-5-20251001-v1:0",
            extra={"aws_region_name": "us-east-1"},
        ),
        provider_name="bedrock",
    )


class TestModelString:

    @pytest.mark.parametrize("provider,model,expected", [
        ("bedrock", "us.anthropic.claude-haiku-4-5-20251001-v1:0",
         "bedrock/us.anthropic.claude-haiku-4-5-20251001-v1:0"),
        ("openai", "gpt-4o", "gpt-4o"),
        ("Anthropic", "claude-sonnet-4-5", "anthropic/claude-sonnet-4-5"),
        ("custom", "my-model", "my-model"),
    ])
    def test_prefixes(self, provider, model, expected):
        assert build_litellm_model_string(provider, model) == expected


class TestInit:

    def test_model_required_without_config(self):
        with pytest.raises(ValueError, match="model"):
            LiteLLMClient(provider_name="openai")

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        client = LiteLLMClient(model="gpt-4o", provider_name="openai")
        assert client._base_kwargs["api_key"] == "sk-env"

    def test_bedrock_uses_credential_chain(self, bedrock_client):
        assert "api_key" not in bedrock_client._base_kwargs
        assert bedrock_client._base_kwargs["aws_region_name"] == "us-east-1"


class TestCallApi:

    @pytest.mark.asyncio
    async def test_plain_response(self, monkeypatch, bedrock_client):
        captured = {}

        async def fake_acompletion(**params):
            captured.update(params)
            return SimpleNamespace(
                choices=[SimpleNamespace(
                    message=SimpleNamespace(content="こんにちは", tool_calls=None),
                    finish_reason="stop",
                )],
                usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
                model="bedrock/x",
            )

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)
        monkeypatch.setattr(litellm, "completion_cost", lambda **kwargs: 0.001)

        response = await bedrock_client.chat_completion([{"role": "user", "content": "hi"}])

        assert response.content == "こんにちは"
        assert response.stop_reason == StopReason.END_TURN
        assert response.usage.total_tokens == 5
        assert response.usage.cost == 0.001
        assert captured["model"] == "bedrock/us.anthropic.claude-haiku-4-5-20251001-v1:0"
        assert captured["aws_region_name"] == "us-east-1"
        assert "top_p" not in captured
        assert "tools" not in captured

    @pytest.mark.asyncio
    async def test_tool_calls_parsed(self, monkeypatch, bedrock_client):
        async def fake_acompletion(**params):
            assert params["tool_choice"] == "auto"
            return SimpleNamespace(
                choices=[SimpleNamespace(
                    message=SimpleNamespace(
                        content=None,
                        tool_calls=[SimpleNamespace(
                            id="call_1",
                            function=_fn("tavily_search", '{"query": "天気"}'),
                        )],
                    ),
                    finish_reason="tool_calls",
                )],
                usage=None,
            )

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)
        tools = [{"type": "function", "function": {"name": "tavily_search"}}]

        response = await bedrock_client.chat_completion([{"role": "user", "content": "q"}], tools=tools)

        assert response.content == ""
        assert response.stop_reason == StopReason.TOOL_USE
        assert response.tool_calls[0].name == "tavily_search"
        assert response.tool_calls[0].arguments == {"query": "天気"}


class TestStreamApi:

    @pytest.mark.asyncio
    async def test_text_stream(self, monkeypatch, bedrock_client):
        captured = {}

        async def fake_acompletion(**params):
            captured.update(params)
            return _aiter([
                _chunk(_delta("Hi")),
                _chunk(_delta(" there")),
                _chunk(_delta(), finish_reason="stop"),
                _chunk(usage=SimpleNamespace(prompt_tokens=1, completion_tokens=2, total_tokens=3)),
            ])

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        chunks = [c async for c in bedrock_client.stream_completion([{"role": "user", "content": "hi"}])]

        assert captured["stream"] is True
        assert [c.content for c in chunks[:2]] == ["Hi", " there"]
        assert chunks[2].stop_reason == StopReason.END_TURN
        assert chunks[3].usage.total_tokens == 3
        assert chunks[-1].accumulated_content == "Hi there"

    @pytest.mark.asyncio
    async def test_tool_call_deltas_assembled(self, monkeypatch, bedrock_client):
        async def fake_acompletion(**params):
            return _aiter([
                _chunk(_delta(tool_calls=[SimpleNamespace(index=0, id="call_1", function=_fn("tavily_search", '{"que'))])),
                _chunk(_delta(tool_calls=[SimpleNamespace(index=0, id=None, function=_fn(None, 'ry": "q"}'))])),
                _chunk(_delta(), finish_reason="tool_calls"),
            ])

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        chunks = [c async for c in bedrock_client.stream_completion([{"role": "user", "content": "hi"}])]
        final = chunks[-1]

        assert final.stop_reason == StopReason.TOOL_USE
        assert len(final.tool_calls) == 1
        assert final.tool_calls[0].id == "call_1"
        assert final.tool_calls[0].arguments == {"query": "q"}

    @pytest.mark.asyncio
    async def test_reasoning_content(self, monkeypatch, bedrock_client):
        async def fake_acompletion(**params):
            return _aiter([_chunk(_delta(reasoning_content="hmm")), _chunk(_delta("ok"), finish_reason="stop")])

        monkeypatch.setattr(litellm, "acompletion", fake_acompletion)

        chunks = [c async for c in bedrock_client.stream_completion([{"role": "user", "content": "hi"}])]
        assert chunks[0].reasoning_content == "hmm"
        assert chunks[1].content == "ok"


class TestStopReason:

    @pytest.mark.parametrize("finish,expected", [
        ("stop", StopReason.END_TURN),
        ("length", StopReason.MAX_TOKENS),
        ("tool_calls", StopReason.TOOL_USE),
        ("content_filter", StopReason.CONTENT_FILTER),
        (None, StopReason.END_TURN),
        ("unknown", StopReason.END_TURN),
    ])
    def test_mapping(self, finish, expected):
        assert LiteLLMClient._parse_stop_reason(finish) == expected
