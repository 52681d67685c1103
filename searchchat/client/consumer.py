"""
searchchat Stream Consumer - SSE byte stream to chat state updates

Chunks may split frames, JSON payloads and UTF-8 sequences anywhere; the
SSEFrameDecoder reassembles them, and each completed payload is applied
to the session in arrival order.
"""

import json
import logging
from typing import Any, AsyncIterable, Dict

from ..constants import CONNECTION_ERROR_MESSAGE
from ..errors import FrameDecodeError, TransportError
from ..streaming.sse import DONE, SSEFrameDecoder, decode_payload
from .state import ChatSession

logger = logging.getLogger(__name__)


class StreamConsumer:
    """
    Read an SSE byte stream and apply its deltas to a ChatSession.

    The decode buffer lives in the consumer and is touched only by
    consume()'s read loop.

    Example:
        consumer = StreamConsumer(session)
        async with client.stream("POST", url, json=body) as response:
            await consumer.consume(response.aiter_bytes())
    """

    def __init__(self, session: ChatSession):
        self.session = session
        self.done = False
        self.frames_applied = 0
        self._decoder = SSEFrameDecoder()

    async def consume(self, chunks: AsyncIterable[bytes]) -> None:
        """Drain *chunks* until the stream ends; a read failure ends it with an error message."""
        try:
            async for chunk in chunks:
                for payload in self._decoder.feed(chunk):
                    self._apply_payload(payload)
        except TransportError as e:
            logger.warning(f"Stream read failed: {e}")
            self.session.fail_connection(CONNECTION_ERROR_MESSAGE)
            return
        except Exception as e:
            logger.error(f"Stream read failed: {e}", exc_info=True)
            self.session.fail_connection(CONNECTION_ERROR_MESSAGE)
            return

        remainder = self._decoder.close()
        if remainder.strip():
            logger.debug(f"Discarding unterminated frame at end of stream: {remainder!r}")
        last = self.session.last
        if not self.done and not (last is not None and last.failed):
            logger.warning(f"Stream ended without [DONE] after {self.frames_applied} frames")

    def _apply_payload(self, payload: str) -> None:
        try:
            decoded = decode_payload(payload)
        except FrameDecodeError as e:
            logger.debug(f"Dropping frame: {e}")
            return

        if decoded is DONE:
            self.done = True
            return
        self._apply_message(decoded)

    def _apply_message(self, message: Dict[str, Any]) -> None:
        text = message.get("text")
        if text:
            # non-string values are appended in their JSON form
            if not isinstance(text, str):
                text = json.dumps(text, ensure_ascii=False)
            self.session.append_delta(text)
            self.frames_applied += 1

        error = message.get("error")
        if error:
            self.session.fail(str(error))
            self.frames_applied += 1
