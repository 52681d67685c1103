"""
searchchat Streaming - SSE wire protocol and the server-side stream handler
"""

from .sse import (
    DATA_PREFIX,
    DONE,
    DONE_FRAME,
    DONE_SENTINEL,
    FRAME_DELIMITER,
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    SSEFrameDecoder,
    decode_payload,
    encode_frame,
    error_frame,
    extract_payload,
    text_frame,
)
from .handler import StreamHandler

__all__ = [
    "DATA_PREFIX",
    "DONE",
    "DONE_FRAME",
    "DONE_SENTINEL",
    "FRAME_DELIMITER",
    "SSE_HEADERS",
    "SSE_MEDIA_TYPE",
    "SSEFrameDecoder",
    "decode_payload",
    "encode_frame",
    "error_frame",
    "extract_payload",
    "text_frame",
    "StreamHandler",
]
