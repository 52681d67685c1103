"""
searchchat Chat Client - sends messages to the agent endpoint

Two paths:
- send_streaming(): POST with stream=true, render SSE deltas as they arrive
- send(): POST with stream=false, render the whole response at once
"""

import logging
from typing import Any, AsyncIterator, List, Optional, Union

import httpx

from ..constants import AGENT_PATH, CONNECTION_ERROR_MESSAGE
from ..errors import TransportError
from .consumer import StreamConsumer
from .state import ChatSession

logger = logging.getLogger(__name__)


def normalize_response(response: Union[str, List[Any], None]) -> str:
    """Flatten a response that is a string or a list of ``{text?}`` content blocks."""
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    parts = []
    for block in response:
        text = block.get("text") if isinstance(block, dict) else None
        parts.append(text or "")
    return "".join(parts)


async def _error_detail(response: httpx.Response) -> str:
    """The ``error`` field of a non-2xx body, or the status text."""
    await response.aread()
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or str(response.status_code)
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase or str(response.status_code)


async def _read_chunks(response: httpx.Response) -> AsyncIterator[bytes]:
    """Raw body chunks; httpx read failures surface as TransportError."""
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        raise TransportError(f"Stream read failed: {e}") from e


class ChatClient:
    """
    Client for the agent endpoint, bound to one ChatSession.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        session: State to update; a new one is created if omitted.
        http_client: Optional httpx.AsyncClient (tests inject an ASGI or
            MockTransport client).
        timeout: Read timeout in seconds, None to wait indefinitely.

    Example:
        async with ChatClient("http://localhost:8000") as client:
            await client.send_streaming("こんにちは")
            print(client.session.last.content)
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[ChatSession] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.session = session or ChatSession()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(10.0, read=timeout),
        )

    async def send_streaming(self, message: str) -> None:
        """Send *message* and stream the reply into the session."""
        text = self._begin(message)
        if text is None:
            return
        try:
            async with self._http.stream(
                "POST", AGENT_PATH, json={"message": text, "stream": True},
            ) as response:
                if response.is_error:
                    self.session.fail(await _error_detail(response))
                    return
                await StreamConsumer(self.session).consume(_read_chunks(response))
        except httpx.HTTPError as e:
            logger.warning(f"Request failed: {e}")
            self.session.fail_connection(CONNECTION_ERROR_MESSAGE)
        finally:
            self.session.is_loading = False

    async def send(self, message: str) -> None:
        """Send *message* without streaming and render the full reply."""
        text = self._begin(message)
        if text is None:
            return
        try:
            response = await self._http.post(AGENT_PATH, json={"message": text, "stream": False})
            if response.is_error:
                self.session.fail(await _error_detail(response))
                return
            body = response.json()
            content = body.get("response") if isinstance(body, dict) else None
            self.session.set_content(normalize_response(content))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Request failed: {e}")
            self.session.fail_connection(CONNECTION_ERROR_MESSAGE)
        finally:
            self.session.is_loading = False

    def _begin(self, message: str) -> Optional[str]:
        """Record the user turn and the pending assistant turn.

        Returns the trimmed message, or None when there is nothing to send
        or a request is already in flight.
        """
        text = message.strip()
        if not text or self.session.is_loading:
            return None
        self.session.is_loading = True
        self.session.add_user_message(text)
        self.session.start_assistant_message()
        return text

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
