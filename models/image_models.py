from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

DISPLAY_REFERENCE_LENGTH = 50


class ContentKind(str, Enum):
    """How an image travels inside an outbound chat request."""

    REMOTE_URL = "url"
    INLINE_ENCODED = "base64"


@dataclass(frozen=True)
class EncodedContent:
    """Normalized form of a caller-supplied image reference.

    Attributes:
        kind: Whether `payload` is a remote URL or an inline data URI.
        payload: The URL itself, or a `data:<mime>;base64,<data>` string.
        mime_type: Best-effort MIME type, `image/*` when unknown.
    """

    kind: ContentKind
    payload: str
    mime_type: str = "image/*"

    def as_content_part(self) -> Dict[str, Any]:
        """Return the `image_url` segment used in chat completion content."""
        return image_url_part(self.payload)


def image_url_part(url: str) -> Dict[str, Any]:
    """Build an `image_url` content segment for an arbitrary reference."""
    return {"type": "image_url", "image_url": {"url": url}}


@dataclass
class PersistedImage:
    """Outcome of materializing one response image on disk.

    Attributes:
        source_reference: Reference returned by the model, never truncated.
        saved_path: Absolute path of the written file, or None when the entry
            was a URL, no directory was configured, or the write failed.
    """

    source_reference: str
    saved_path: Optional[str] = None

    @property
    def display_reference(self) -> str:
        return self.source_reference[:DISPLAY_REFERENCE_LENGTH]

    @property
    def saved(self) -> bool:
        return self.saved_path is not None
