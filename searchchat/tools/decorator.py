"""
@tool decorator — build AgentTool instances from typed async functions.

Inspects the function signature and type hints to build JSON Schema for
parameters, then wraps the function into the executor signature expected
by AgentTool (``async def executor(args: dict) -> str | dict``).

Usage::

    from typing import Annotated
    from searchchat.tools import tool

    @tool
    async def web_lookup(
        query: Annotated[str, "Search query"],
        max_results: Annotated[int, "Max results to return"] = 5,
    ) -> dict:
        \"\"\"Search the web.\"\"\"
        ...

    # web_lookup is now an AgentTool instance
    # web_lookup.parameters == {"type": "object", "properties": {...}, "required": ["query"]}
"""

from __future__ import annotations

import inspect
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .models import AgentTool

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_NoneType = type(None)


def _is_optional(annotation: Any) -> bool:
    """Return True if *annotation* is ``Optional[X]`` (i.e. ``Union[X, None]``)."""
    origin = get_origin(annotation)
    if origin is Union:
        return _NoneType in get_args(annotation)
    return False


def _unwrap_optional(annotation: Any) -> Any:
    """Given ``Optional[X]``, return ``X``."""
    non_none = [a for a in get_args(annotation) if a is not _NoneType]
    return non_none[0] if len(non_none) == 1 else annotation


def _extract_base_type(annotation: Any) -> Any:
    """Unwrap ``Annotated[T, ...]`` to get ``T``."""
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def _extract_annotated_description(annotation: Any) -> Optional[str]:
    """If *annotation* is ``Annotated[T, "desc"]``, return ``"desc"``."""
    if get_origin(annotation) is not Annotated:
        return None
    for a in get_args(annotation)[1:]:
        if isinstance(a, str):
            return a
    return None


def _python_type_to_json_schema(annotation: Any) -> Dict[str, Any]:
    """Map a Python type annotation to a JSON Schema dict."""
    base = _extract_base_type(annotation)

    if _is_optional(base):
        return _python_type_to_json_schema(_unwrap_optional(base))

    origin = get_origin(base)

    # Primitives
    if base is str:
        return {"type": "string"}
    if base is bool:
        return {"type": "boolean"}
    if base is int:
        return {"type": "integer"}
    if base is float:
        return {"type": "number"}

    if base is list or origin is list:
        schema: Dict[str, Any] = {"type": "array"}
        args = get_args(base)
        if args:
            schema["items"] = _python_type_to_json_schema(args[0])
        return schema

    if base is dict or origin is dict:
        return {"type": "object"}

    # Fallback
    return {"type": "string"}


def _build_json_schema(func: Callable) -> Dict[str, Any]:
    """Build a full JSON Schema ``{"type": "object", ...}`` from *func*'s signature."""
    sig = inspect.signature(func)
    hints = get_type_hints(func, include_extras=True)

    properties: Dict[str, Any] = {}
    required: List[str] = []

    for name, param in sig.parameters.items():
        if param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue

        annotation = hints.get(name, str)
        prop_schema = _python_type_to_json_schema(annotation)

        desc = _extract_annotated_description(annotation)
        if desc:
            prop_schema["description"] = desc

        has_default = param.default is not inspect.Parameter.empty
        if has_default and param.default is not None:
            prop_schema["default"] = param.default

        properties[name] = prop_schema

        # Required: no default AND not Optional
        if not has_default and not _is_optional(_extract_base_type(annotation)):
            required.append(name)

    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _build_wrapper(func: Callable) -> Callable:
    """Create an executor wrapper with the AgentTool-expected signature.

    Returns an ``async def wrapper(args: dict)`` that unpacks *args* into
    keyword arguments for *func*, ignoring keys the function does not accept.
    """
    sig = inspect.signature(func)
    accepted = [
        name for name, param in sig.parameters.items()
        if param.kind not in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        )
    ]

    async def wrapper(args: Dict[str, Any]) -> Any:
        kwargs = {name: args[name] for name in accepted if name in args}
        return await func(**kwargs)

    return wrapper


# ---------------------------------------------------------------------------
# Public decorator
# ---------------------------------------------------------------------------


def tool(
    func: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Any:
    """Decorator that converts a typed async function into an :class:`AgentTool`.

    Supports both bare ``@tool`` and parameterised ``@tool(name="...")``
    usage.  The decorated name is replaced by an ``AgentTool`` instance.
    """

    def _make_tool(fn: Callable) -> AgentTool:
        tool_name = name or fn.__name__
        # First line of docstring as description
        doc = inspect.getdoc(fn) or ""
        tool_description = description or (doc.split("\n")[0].strip() if doc else tool_name)

        return AgentTool(
            name=tool_name,
            description=tool_description,
            parameters=_build_json_schema(fn),
            executor=_build_wrapper(fn),
        )

    if func is not None:
        # Called as @tool (no parentheses)
        return _make_tool(func)

    return _make_tool
