"""Utilities for turning chat completion objects into `ChatResult`."""

from typing import Any, Dict

from pydantic import ValidationError

from models.chat_models import ChatResult
from utils.errors import RemoteCallFailure


def serialize_response(response: Any) -> Any:
    """Convert a response object into a serializable structure."""
    if hasattr(response, "model_dump"):
        return response.model_dump()
    if hasattr(response, "to_dict"):
        return response.to_dict()
    return response


def parse_chat_result(response: Any) -> ChatResult:
    """Validate a chat completion body and reject unusable responses.

    Args:
        response: SDK response object or an already decoded dict.

    Returns:
        The decoded result with at least one choice.

    Raises:
        RemoteCallFailure: If the body is malformed, carries an `error`
            field, or has no choices.
    """
    data: Dict[str, Any] = serialize_response(response)
    if not isinstance(data, dict):
        raise RemoteCallFailure("Failed to parse response: body is not a JSON object")
    try:
        result = ChatResult.model_validate(data)
    except ValidationError as exc:
        raise RemoteCallFailure(f"Failed to parse response: {exc}") from exc

    if result.error is not None:
        raise RemoteCallFailure(f"API returned an error: {result.error.message}")
    if "choices" not in data or not isinstance(data.get("choices"), list):
        raise RemoteCallFailure("Response is missing the 'choices' field or it is malformed")
    if not result.choices:
        raise RemoteCallFailure("Response 'choices' array is empty")
    return result
