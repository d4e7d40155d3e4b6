"""Resolve caller-supplied image references into request content.

A reference may be an inline `data:image/...;base64,...` URI, an http(s)
URL, or a path to a local file. Inline markers and URL schemes are checked
before touching the filesystem so neither is ever mistaken for a path. Local
paths are looked up as given, then relative to the working directory, then
relative to the configured save directory, which lets a caller refer to a
previously saved result by its bare filename.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import aiofiles

from models.image_models import ContentKind, EncodedContent
from utils.errors import MalformedInline, UnrecognizedReference

LOGGER = logging.getLogger(__name__)

INLINE_PREFIX = "data:image/"
INLINE_SEPARATOR = ";base64,"
URL_SCHEMES = ("http://", "https://")
UNKNOWN_MIME_TYPE = "image/*"
DEFAULT_BASE_NAME = "image"

MIME_TYPES_BY_EXTENSION = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "svg": "image/svg+xml",
}


def is_inline_reference(reference: str) -> bool:
    return reference.startswith(INLINE_PREFIX)


def is_url_reference(reference: str) -> bool:
    return reference.startswith(URL_SCHEMES)


def is_local_reference(reference: str) -> bool:
    """Return True when the reference can only be a filesystem path."""
    return not (is_inline_reference(reference) or is_url_reference(reference))


def split_inline_reference(reference: str) -> tuple[str, str]:
    """Split a data URI into its declared MIME type and base64 payload.

    Raises:
        MalformedInline: If the URI does not split into exactly two non-empty
            parts or the declared type is not an `image/` type.
    """
    parts = reference.split(INLINE_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise MalformedInline(f"Invalid inline image data: {reference[:50]}")
    declared, data = parts
    if not declared.startswith(INLINE_PREFIX) or declared == INLINE_PREFIX:
        raise MalformedInline(f"Invalid inline image MIME type: {declared}")
    return declared[len("data:"):], data


def decode_inline_reference(reference: str) -> tuple[str, bytes]:
    """Split a data URI and decode its payload with strict base64 rules.

    Raises:
        MalformedInline: If the URI is malformed or the payload is not base64.
    """
    mime_type, data = split_inline_reference(reference)
    try:
        return mime_type, base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedInline(f"Invalid base64 in inline image data: {exc}") from exc


def mime_type_for_path(path: Union[str, Path]) -> str:
    """Look up the MIME type for a file from its extension."""
    extension = Path(path).suffix.lstrip(".").lower()
    return MIME_TYPES_BY_EXTENSION.get(extension, UNKNOWN_MIME_TYPE)


def extract_base_name(path: str) -> str:
    """Return the filename of `path` without its extension, or `image`."""
    return Path(path).stem or DEFAULT_BASE_NAME


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a base64 data URL."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type}{INLINE_SEPARATOR}{encoded}"


def candidate_paths(reference: str, fallback_directory: Optional[Path] = None) -> List[Path]:
    """Paths tried for a local reference, in lookup order."""
    candidates = [Path(reference), Path(os.getcwd()) / reference]
    if fallback_directory is not None:
        candidates.append(Path(fallback_directory) / reference)
    return candidates


def find_local_file(reference: str, fallback_directory: Optional[Path] = None) -> Optional[Path]:
    for candidate in candidate_paths(reference, fallback_directory):
        try:
            if candidate.is_file():
                return candidate
        except OSError:
            # e.g. ENAMETOOLONG for a long string that was never meant as a path
            continue
    return None


async def read_file_as_content(path: Path) -> EncodedContent:
    """Read a whole file and return it as inline encoded content."""
    async with aiofiles.open(path, "rb") as f:
        file_bytes = await f.read()
    mime_type = mime_type_for_path(path)
    return EncodedContent(
        kind=ContentKind.INLINE_ENCODED,
        payload=to_data_url(file_bytes, mime_type),
        mime_type=mime_type,
    )


async def resolve(reference: str, fallback_directory: Optional[Path] = None) -> EncodedContent:
    """Classify an image reference and normalize it to `EncodedContent`.

    Args:
        reference: Data URI, http(s) URL, or local file path.
        fallback_directory: Directory searched last for relative paths,
            normally the active save directory.

    Returns:
        The encoded content. URLs are returned unchanged without a fetch.

    Raises:
        MalformedInline: If an inline reference cannot be split or its
            payload is not valid base64.
        UnrecognizedReference: If nothing matches.
    """
    if is_inline_reference(reference):
        mime_type, _ = decode_inline_reference(reference)
        return EncodedContent(kind=ContentKind.INLINE_ENCODED, payload=reference, mime_type=mime_type)

    if is_url_reference(reference):
        return EncodedContent(kind=ContentKind.REMOTE_URL, payload=reference, mime_type=UNKNOWN_MIME_TYPE)

    if reference:
        path = find_local_file(reference, fallback_directory)
        if path is not None:
            LOGGER.debug("Resolved image reference %s to %s", reference, path)
            return await read_file_as_content(path)

    raise UnrecognizedReference(f"Unrecognized image input: {reference}")
