"""
Tavily Search Tool - Web search via the Tavily REST API

Requires:
- TAVILY_API_KEY (or ``search.api_key`` in config.yaml)
"""

import logging
from typing import Annotated, Any, Dict, List, Optional

import httpx

from ..errors import SearchError
from .decorator import tool
from .models import AgentTool

logger = logging.getLogger(__name__)

TAVILY_SEARCH_URL = "https://api.tavily.com/search"
DEFAULT_MAX_RESULTS = 5


class TavilySearchClient:
    """
    Thin async client for the Tavily ``/search`` endpoint.

    Args:
        api_key: Tavily API key.
        timeout: Request timeout in seconds.
        http_client: Optional shared httpx.AsyncClient (tests inject one
            with a MockTransport).
    """

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    async def search(
        self,
        query: str,
        max_results: int = DEFAULT_MAX_RESULTS,
        include_answer: bool = True,
    ) -> Dict[str, Any]:
        """Run a search and return ``{"answer": str, "results": [...]}``."""
        if not query:
            raise SearchError("No search query provided")
        if not self.api_key:
            raise SearchError(
                "Tavily API not configured. Set the TAVILY_API_KEY environment variable."
            )

        payload = {
            "query": query,
            "max_results": max_results,
            "include_answer": include_answer,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    TAVILY_SEARCH_URL, json=payload, headers=headers, timeout=self.timeout,
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        TAVILY_SEARCH_URL, json=payload, headers=headers, timeout=self.timeout,
                    )
        except httpx.TimeoutException as e:
            raise SearchError("Search request timed out") from e
        except httpx.HTTPError as e:
            raise SearchError(f"Search request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Tavily API error: {response.status_code} - {response.text}")
            raise SearchError(f"Search failed with status {response.status_code}")

        data = response.json()
        return {
            "answer": data.get("answer") or "",
            "results": _simplify_results(data.get("results", [])),
        }


def _simplify_results(items: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    return [
        {
            "title": item.get("title", ""),
            "url": item.get("url", ""),
            "content": item.get("content", ""),
        }
        for item in items
    ]


def create_tavily_search_tool(
    client: TavilySearchClient,
    default_max_results: int = DEFAULT_MAX_RESULTS,
) -> AgentTool:
    """Build the ``tavily_search`` AgentTool bound to *client*."""

    @tool(name="tavily_search", description="Web検索を実行して最新の情報を取得します。")
    async def tavily_search(
        query: Annotated[str, "検索クエリ"],
        max_results: Annotated[int, "取得する結果の最大数"] = default_max_results,
    ) -> Dict[str, Any]:
        logger.info(f"tavily_search: query={query!r}, max_results={max_results}")
        return await client.search(query, max_results=max_results)

    return tavily_search
