"""
searchchat Tools - Tool calling support for the agent

Provides:
- AgentTool: Tool definition with JSON schema and executor
- @tool decorator: Build AgentTool from type hints
- TavilySearchClient / create_tavily_search_tool: the web search tool
"""

from .models import AgentTool, ToolResult
from .decorator import tool
from .tavily_search import TavilySearchClient, create_tavily_search_tool

__all__ = [
    "AgentTool",
    "ToolResult",
    "tool",
    "TavilySearchClient",
    "create_tavily_search_tool",
]
