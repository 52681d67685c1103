"""
searchchat SSE - Server-Sent-Events framing shared by server and client

Wire format: every frame is one or more ``data: <payload>`` lines followed
by a blank line. Payload is ``{"text": ...}``, ``{"error": ...}`` or the
``[DONE]`` sentinel.
"""

import codecs
import json
import logging
from typing import Any, Dict, List, Optional, Union

from ..errors import FrameDecodeError

logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DONE_FRAME = f"{DATA_PREFIX}{DONE_SENTINEL}{FRAME_DELIMITER}"

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


# ---------------------------------------------------------------------------
# Encoding (server side)
# ---------------------------------------------------------------------------

def encode_frame(payload: Dict[str, Any]) -> str:
    """Serialize *payload* as one complete SSE frame (compact JSON, UTF-8 kept)."""
    data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return f"{DATA_PREFIX}{data}{FRAME_DELIMITER}"


def text_frame(text: str) -> str:
    return encode_frame({"text": text})


def error_frame(message: str) -> str:
    return encode_frame({"error": message})


# ---------------------------------------------------------------------------
# Decoding (client side)
# ---------------------------------------------------------------------------

class _Done:
    """Type of the DONE marker returned by decode_payload()"""

    def __repr__(self) -> str:
        return "DONE"


DONE = _Done()


def extract_payload(frame: str) -> Optional[str]:
    """
    Return the data payload of one complete frame, or None if the frame is
    not a data frame (comments, ``event:`` lines, blank keep-alives).

    Several ``data:`` lines in one frame are joined with newlines.
    """
    frame = frame.strip()
    if not frame.startswith(DATA_PREFIX):
        return None
    lines = [line for line in frame.split("\n") if line.startswith(DATA_PREFIX)]
    return "\n".join(line[len(DATA_PREFIX):] for line in lines)


def decode_payload(payload: str) -> Union[_Done, Dict[str, Any]]:
    """
    Decode a frame payload.

    Returns DONE for the sentinel (never parsed as JSON), otherwise the
    JSON object.

    Raises:
        FrameDecodeError: payload is not valid JSON or not a JSON object
    """
    if payload == DONE_SENTINEL:
        return DONE
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise FrameDecodeError(f"Malformed frame payload: {payload!r}") from e
    if not isinstance(parsed, dict):
        raise FrameDecodeError(f"Frame payload is not an object: {payload!r}")
    return parsed


class SSEFrameDecoder:
    """
    Incremental SSE frame reassembly.

    Bytes go in via feed() in whatever chunks the transport delivers; the
    decoder holds partial UTF-8 sequences and partial frames across calls
    and returns the payloads of the frames completed by each chunk.

    Example:
        decoder = SSEFrameDecoder()
        for chunk in chunks:
            for payload in decoder.feed(chunk):
                handle(payload)
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def buffer(self) -> str:
        """Text of the frame still being assembled"""
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        """Consume one chunk and return payloads of newly completed data frames."""
        self._buffer += self._decoder.decode(chunk)
        parts = self._buffer.split(FRAME_DELIMITER)
        self._buffer = parts.pop()

        payloads = []
        for part in parts:
            payload = extract_payload(part)
            if payload is None:
                logger.debug(f"Skipping non-data frame: {part!r}")
                continue
            payloads.append(payload)
        return payloads

    def close(self) -> str:
        """Flush the UTF-8 decoder and return the unterminated remainder."""
        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return remainder
