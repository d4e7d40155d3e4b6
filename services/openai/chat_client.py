"""Multimodal chat completions against OpenRouter via the OpenAI SDK."""

import json
import logging
from typing import Any, Dict, List

from openai import APIError, APIStatusError, AsyncOpenAI

from models.chat_models import ChatResult
from services.openai.response_utils import parse_chat_result, serialize_response
from utils.config import AppConfig
from utils.errors import RemoteCallFailure

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7


def build_client(config: AppConfig) -> AsyncOpenAI:
    """Create the async client used for every tool invocation."""
    return AsyncOpenAI(
        api_key=config.api_key,
        base_url=config.base_url,
        default_headers=config.headers,
        max_retries=0,
    )


def text_part(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


class ImageChatService:
    """Send one user turn with text and image segments and decode the reply."""

    def __init__(self, client: AsyncOpenAI) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client

    async def complete(
        self,
        model: str,
        content: List[Dict[str, Any]],
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ChatResult:
        """Request a completion and return the decoded first-class fields.

        Raises:
            RemoteCallFailure: On non-2xx status, transport errors, or an
                unusable response body.
        """
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except APIStatusError as exc:
            LOGGER.error("Chat completion failed with status %s", exc.status_code)
            raise RemoteCallFailure(
                f"API request failed with status {exc.status_code}: {exc.message}"
            ) from exc
        except APIError as exc:
            LOGGER.error("Chat completion request failed: %s", exc)
            raise RemoteCallFailure(f"Request failed: {exc}") from exc

        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("API response: %s", json.dumps(serialize_response(response), default=str)[:2000])
        return parse_chat_result(response)
