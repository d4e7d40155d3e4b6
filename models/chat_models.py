"""Explicit schema for the chat completion body returned by OpenRouter.

The OpenAI SDK types do not know about `message.images`, so the response is
dumped to a dict and validated against these models once, at the boundary.
Fields the model may omit or send in an unexpected shape decode to empty
defaults instead of failing the whole response.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ImageUrl(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str = ""

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_url(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class ResponseImage(BaseModel):
    """One image entry attached to an assistant message."""

    model_config = ConfigDict(extra="ignore")

    image_url: ImageUrl = ImageUrl()

    @field_validator("image_url", mode="before")
    @classmethod
    def _coerce_image_url(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def reference(self) -> str:
        return self.image_url.url


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    content: Optional[str] = None
    images: List[ResponseImage] = []

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("images", mode="before")
    @classmethod
    def _coerce_images(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [item if isinstance(item, dict) else {} for item in value]


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatUsage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    @property
    def complete(self) -> bool:
        return None not in (self.prompt_tokens, self.completion_tokens, self.total_tokens)


class ChatError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = "unknown error"
    code: Optional[Any] = None


class ChatResult(BaseModel):
    """Decoded chat completion with only the fields the tools consume."""

    model_config = ConfigDict(extra="ignore")

    choices: List[ChatChoice] = []
    usage: Optional[ChatUsage] = None
    error: Optional[ChatError] = None

    @field_validator("error", mode="before")
    @classmethod
    def _coerce_error(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"message": value}
        return value

    @property
    def first_message(self) -> ChatMessage:
        return self.choices[0].message

    @property
    def images(self) -> List[ResponseImage]:
        return self.first_message.images
