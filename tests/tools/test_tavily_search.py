"""
Tests for searchchat.tools.tavily_search
"""

import json

import httpx
import pytest

from searchchat.errors import SearchError
from searchchat.tools import TavilySearchClient, create_tavily_search_tool
from searchchat.tools.tavily_search import TAVILY_SEARCH_URL


def _client(handler, api_key="tvly-test"):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TavilySearchClient(api_key=api_key, http_client=http)


class TestTavilySearchClient:

    @pytest.mark.asyncio
    async def test_successful_search(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "answer": "晴れ",
                "results": [
                    {"title": "天気", "url": "https://example.com", "content": "晴れです", "score": 0.9},
                ],
            })

        result = await _client(handler).search("東京の天気", max_results=3)

        assert seen["url"] == TAVILY_SEARCH_URL
        assert seen["auth"] == "Bearer tvly-test"
        assert seen["body"] == {"query": "東京の天気", "max_results": 3, "include_answer": True}
        assert result == {
            "answer": "晴れ",
            "results": [{"title": "天気", "url": "https://example.com", "content": "晴れです"}],
        }

    @pytest.mark.asyncio
    async def test_missing_answer_becomes_empty_string(self):
        client = _client(lambda request: httpx.Response(200, json={"results": []}))
        assert await client.search("q") == {"answer": "", "results": []}

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        client = _client(lambda request: httpx.Response(401, json={"detail": "bad key"}))
        with pytest.raises(SearchError, match="401"):
            await client.search("q")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SearchError, match="failed"):
            await _client(handler).search("q")

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(SearchError, match="timed out"):
            await _client(handler).search("q")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = TavilySearchClient(api_key=None)
        with pytest.raises(SearchError, match="TAVILY_API_KEY"):
            await client.search("q")

    @pytest.mark.asyncio
    async def test_empty_query(self):
        client = TavilySearchClient(api_key="k")
        with pytest.raises(SearchError):
            await client.search("")


class TestTavilySearchTool:

    def test_tool_schema(self):
        search_tool = create_tavily_search_tool(TavilySearchClient(api_key="k"), default_max_results=7)

        assert search_tool.name == "tavily_search"
        props = search_tool.parameters["properties"]
        assert props["query"]["type"] == "string"
        assert props["max_results"]["default"] == 7
        assert search_tool.parameters["required"] == ["query"]

    @pytest.mark.asyncio
    async def test_executor_calls_client(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"answer": "a", "results": []})

        search_tool = create_tavily_search_tool(_client(handler), default_max_results=4)
        result = await search_tool.executor({"query": "python"})

        assert result == {"answer": "a", "results": []}
        assert bodies[0]["max_results"] == 4
