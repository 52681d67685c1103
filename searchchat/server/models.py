"""Pydantic request/response models for the searchchat API."""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, StrictStr, field_validator


class ChatRequest(BaseModel):
    message: StrictStr = Field(min_length=1)
    stream: bool = False

    @field_validator("stream", mode="before")
    @classmethod
    def _stream_truthiness(cls, value: Any) -> bool:
        # null, 0 and "" select the JSON path; any other value streams
        return bool(value)


class ContentBlock(BaseModel):
    text: Optional[str] = None


class ChatResponse(BaseModel):
    response: Union[str, List[ContentBlock]]
