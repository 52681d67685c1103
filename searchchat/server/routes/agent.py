"""Agent chat route: JSON request/response and SSE streaming."""

import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from ...constants import AGENT_PATH, INTERNAL_SERVER_ERROR, MESSAGE_REQUIRED
from ...errors import AgentError, InvalidRequestError, MethodNotAllowedError
from ...streaming import SSE_HEADERS, SSE_MEDIA_TYPE, StreamHandler
from ..app import require_context
from ..models import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def parse_chat_request(request: Request) -> ChatRequest:
    """Validate the JSON body; any problem with it is a 400."""
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError(MESSAGE_REQUIRED)
    if not isinstance(body, dict):
        raise InvalidRequestError(MESSAGE_REQUIRED)
    try:
        return ChatRequest.model_validate(body)
    except ValidationError:
        raise InvalidRequestError(MESSAGE_REQUIRED)


@router.api_route(AGENT_PATH, methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"])
async def agent_endpoint(request: Request):
    if request.method != "POST":
        raise MethodNotAllowedError()

    req = await parse_chat_request(request)
    context = require_context(request)
    agent_settings = context.settings.agent

    if req.stream:
        handler = StreamHandler(context.agent, idle_timeout=agent_settings.stream_idle_timeout)
        return StreamingResponse(
            handler.stream_frames(req.message),
            media_type=SSE_MEDIA_TYPE,
            headers=SSE_HEADERS,
        )

    try:
        if agent_settings.request_timeout is not None:
            result = await asyncio.wait_for(
                context.agent.invoke(req.message), timeout=agent_settings.request_timeout,
            )
        else:
            result = await context.agent.invoke(req.message)
    except Exception as e:
        logger.error(f"Agent error: {e}", exc_info=True)
        raise AgentError(INTERNAL_SERVER_ERROR) from e

    body = ChatResponse(response=result.last_message.content)
    return JSONResponse(content=body.model_dump(exclude_none=True))


@router.get("/health")
async def health():
    return {"status": "ok"}
