"""
Tests for searchchat.client.api — ChatClient against mocked and in-process servers
"""

import json

import httpx
import pytest

from searchchat.client import ChatClient, normalize_response
from searchchat.errors import AgentError
from searchchat.server import create_api

BASE_URL = "http://testserver"


def _mock_client(handler) -> ChatClient:
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return ChatClient(BASE_URL, http_client=http)


class TestNormalizeResponse:

    def test_string(self):
        assert normalize_response("hello") == "hello"

    def test_content_blocks(self):
        assert normalize_response([{"text": "a"}, {"text": "b"}]) == "ab"

    def test_blocks_without_text(self):
        assert normalize_response([{"text": "a"}, {}, {"text": None}, {"text": "b"}]) == "ab"

    def test_none(self):
        assert normalize_response(None) == ""


class TestStreamingPath:

    @pytest.mark.asyncio
    async def test_streams_into_session(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return httpx.Response(
                200,
                headers={"Content-Type": "text/event-stream"},
                content='data: {"text":"Hi"}\n\ndata: {"text":" there"}\n\ndata: [DONE]\n\n'.encode("utf-8"),
            )

        client = _mock_client(handler)
        await client.send_streaming("  hello  ")

        assert requests == [{"message": "hello", "stream": True}]
        assert [(m.role, m.content) for m in client.session.messages] == [
            ("user", "hello"),
            ("assistant", "Hi there"),
        ]
        assert not client.session.is_loading

    @pytest.mark.asyncio
    async def test_http_error_status_shows_server_error(self):
        client = _mock_client(lambda request: httpx.Response(400, json={"error": "message is required"}))
        await client.send_streaming("hello")

        assert client.session.last.content == "エラー: message is required"
        assert client.session.last.failed

    @pytest.mark.asyncio
    async def test_error_status_without_json_uses_reason(self):
        client = _mock_client(lambda request: httpx.Response(502, text="<html>bad gateway</html>"))
        await client.send_streaming("hello")

        assert client.session.last.content == "エラー: Bad Gateway"

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = _mock_client(handler)
        await client.send_streaming("hello")

        assert client.session.last.content == "通信エラーが発生しました"
        assert not client.session.is_loading

    @pytest.mark.asyncio
    async def test_read_failure_mid_stream(self):
        class BrokenStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b'data: {"text":"par"}\n\n'
                raise httpx.ReadError("connection reset")

        client = _mock_client(lambda request: httpx.Response(200, stream=BrokenStream()))
        await client.send_streaming("hello")

        assert client.session.last.content == "通信エラーが発生しました"
        assert not client.session.is_loading

    @pytest.mark.asyncio
    async def test_blank_message_not_sent(self):
        calls = []
        client = _mock_client(lambda request: calls.append(request) or httpx.Response(200))
        await client.send_streaming("   ")

        assert calls == []
        assert client.session.messages == []

    @pytest.mark.asyncio
    async def test_second_send_while_loading_ignored(self):
        calls = []
        client = _mock_client(lambda request: calls.append(request) or httpx.Response(200))
        client.session.is_loading = True
        await client.send_streaming("hello")

        assert calls == []
        assert client.session.messages == []


class TestNonStreamingPath:

    @pytest.mark.asyncio
    async def test_content_blocks_flattened(self):
        requests = []

        def handler(request):
            requests.append(json.loads(request.content))
            return httpx.Response(200, json={"response": [{"text": "a"}, {"text": "b"}]})

        client = _mock_client(handler)
        await client.send("hello")

        assert requests == [{"message": "hello", "stream": False}]
        assert client.session.last.content == "ab"

    @pytest.mark.asyncio
    async def test_string_response(self):
        client = _mock_client(lambda request: httpx.Response(200, json={"response": "plain"}))
        await client.send("hello")
        assert client.session.last.content == "plain"

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = _mock_client(lambda request: httpx.Response(500, json={"error": "Internal server error"}))
        await client.send("hello")

        assert client.session.last.content == "エラー: Internal server error"

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        client = _mock_client(lambda request: httpx.Response(200, text="not json"))
        await client.send("hello")

        assert client.session.last.content == "通信エラーが発生しました"


class TestAgainstServer:
    """Client and server wired together in-process."""

    @pytest.mark.asyncio
    async def test_streaming_end_to_end(self, make_agent, make_text_events, make_context):
        agent = make_agent(events=make_text_events("Hi", " there"))
        app = create_api(make_context(agent))
        http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app))

        async with ChatClient(BASE_URL, http_client=http) as client:
            await client.send_streaming("hello")

        assert agent.invocations == ["hello"]
        assert client.session.last.content == "Hi there"
        assert not client.session.last.failed
        await http.aclose()

    @pytest.mark.asyncio
    async def test_raw_stream_body(self, make_agent, make_text_events, make_context):
        app = create_api(make_context(make_agent(events=make_text_events("Hi", " there"))))

        async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app)) as http:
            response = await http.post("/api/agent", json={"message": "hello", "stream": True})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.text == 'data: {"text":"Hi"}\n\ndata: {"text":" there"}\n\ndata: [DONE]\n\n'

    @pytest.mark.asyncio
    async def test_streaming_agent_failure(self, make_agent, make_context):
        app = create_api(make_context(make_agent(events=[AgentError("boom")])))
        http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app))

        async with ChatClient(BASE_URL, http_client=http) as client:
            await client.send_streaming("hello")

        assert client.session.last.content == "エラー: ストリームエラー"
        await http.aclose()

    @pytest.mark.asyncio
    async def test_non_streaming_end_to_end(self, make_agent, make_text_result, make_context):
        app = create_api(make_context(make_agent(result=make_text_result("ab"))))
        http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app))

        async with ChatClient(BASE_URL, http_client=http) as client:
            await client.send("hello")

        assert client.session.last.content == "ab"
        await http.aclose()
