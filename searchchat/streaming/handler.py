"""
searchchat Stream Handler - agent events to SSE frames

One StreamHandler call serves one request: it drives the agent's event
iterator and yields complete SSE frames, ending with either the DONE frame
or a single error frame.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from ..agent.agent import Agent
from ..agent.events import AgentEvent, text_delta_of
from ..constants import STREAM_ERROR_MESSAGE
from .sse import DONE_FRAME, error_frame, text_frame

logger = logging.getLogger(__name__)


class StreamHandler:
    """
    Re-emit an agent's event stream as SSE frames.

    Args:
        agent: The agent to stream from.
        idle_timeout: Optional max seconds to wait for each next event.

    Example:
        handler = StreamHandler(agent)
        return StreamingResponse(handler.stream_frames("hello"), media_type=SSE_MEDIA_TYPE)
    """

    def __init__(self, agent: Agent, idle_timeout: Optional[float] = None):
        self.agent = agent
        self.idle_timeout = idle_timeout

    async def stream_frames(self, message: str) -> AsyncIterator[str]:
        """Yield one frame per text delta, then DONE; one error frame on failure."""
        events = self.agent.stream(message)
        frames = 0
        try:
            while True:
                try:
                    event = await self._next_event(events)
                except StopAsyncIteration:
                    break
                text = text_delta_of(event)
                if text is None:
                    continue
                frames += 1
                yield text_frame(text)
            yield DONE_FRAME
            logger.info(f"Stream completed: {frames} text frames")
        except Exception as e:
            logger.error(f"Stream error: {e}", exc_info=True)
            yield error_frame(STREAM_ERROR_MESSAGE)
        finally:
            await events.aclose()

    async def _next_event(self, events: AsyncIterator[AgentEvent]) -> AgentEvent:
        if self.idle_timeout is None:
            return await events.__anext__()
        return await asyncio.wait_for(events.__anext__(), timeout=self.idle_timeout)
