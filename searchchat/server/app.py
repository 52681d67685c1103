"""FastAPI app creation, CORS, error handling, and the agent context dependency."""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..app import AgentContext, load_settings
from ..constants import METHOD_NOT_ALLOWED
from ..errors import ChatError, ServiceUnavailableError

logger = logging.getLogger(__name__)


def _try_load_context() -> Optional[AgentContext]:
    """Attempt to build the context from config. Returns None on failure."""
    try:
        return AgentContext.from_settings(load_settings())
    except Exception as e:
        logger.warning(f"Failed to load config: {e}")
        return None


def require_context(request: Request) -> AgentContext:
    """Dependency: the app's AgentContext, lazy-loaded on first request."""
    context = request.app.state.context
    if context is None:
        context = _try_load_context()
        request.app.state.context = context
    if context is None:
        raise ServiceUnavailableError("Not configured. Check config.yaml and credentials.")
    return context


async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, unregistered method) in the same {"error"} shape."""
    message = METHOD_NOT_ALLOWED if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


def create_api(context: Optional[AgentContext] = None) -> FastAPI:
    """Create and configure the FastAPI app with routes.

    Args:
        context: Pre-built agent context. When None it is loaded from
            config on the first request.
    """
    api = FastAPI(title="searchchat", version="0.1.0")
    api.state.context = context

    allowed_origins_str = os.getenv("SEARCHCHAT_ALLOWED_ORIGINS")
    if allowed_origins_str:
        allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    elif context is not None:
        allowed_origins = context.settings.server.allowed_origins
    else:
        allowed_origins = ["http://localhost:3000", "http://localhost:5173"]
    api.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api.add_exception_handler(ChatError, chat_error_handler)
    api.add_exception_handler(StarletteHTTPException, http_error_handler)

    from .routes import register_routes
    register_routes(api)
    return api


# --- Default app (after all helpers are defined to avoid circular imports) ---
# Context is lazy-loaded from config on the first request.

api = create_api()
