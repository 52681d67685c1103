"""
searchchat Tool Models - Data structures for LLM tool calling
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict


@dataclass
class AgentTool:
    """A tool the agent may call during its tool loop.

    Attributes:
        name: Tool function name (used in LLM tool_calls).
        description: What this tool does (shown to the LLM).
        parameters: JSON Schema for tool arguments.
        executor: Async function(args: dict) -> str | dict.
    """

    name: str
    description: str
    parameters: Dict[str, Any]
    executor: Callable

    def to_openai_schema(self) -> Dict[str, Any]:
        """Convert to OpenAI function-calling tool schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass
class ToolResult:
    """
    Result of a tool execution

    Attributes:
        tool_call_id: ID of the tool call this result is for
        content: String result content
        is_error: Whether execution failed
    """
    tool_call_id: str
    content: str
    is_error: bool = False
