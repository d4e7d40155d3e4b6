"""Persist inline images returned by the chat API to the save directory.

Only `data:image/...` entries are written; URL entries are reported as-is.
Filenames are derived from a stem and the image subtype and are never reused:
`stem.png`, then `stem_2.png`, `stem_3.png` and so on. The chosen file is
created in exclusive mode, so two concurrent invocations racing for the same
name still end up with distinct files. A failure on one entry is logged and
leaves that entry unsaved without affecting the others.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import aiofiles

from models.chat_models import ResponseImage
from models.image_models import PersistedImage
from services.image_inputs import decode_inline_reference, is_inline_reference
from utils.errors import MalformedInline, PersistenceFailure

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSION = "png"
GENERATED_STEM = "generated_image"
EDITED_STEM = "edited_image"

EXTENSIONS_BY_SUBTYPE = {
    "x-icon": "ico",
    "vnd.microsoft.icon": "ico",
}
SUBTYPE_PATTERN = re.compile(r"[a-z0-9][a-z0-9.-]*")


def image_extension(mime_type: str) -> str:
    """Derive a file extension from an image MIME type.

    `image/png` gives `png`; structured suffixes are dropped so
    `image/svg+xml` gives `svg`. Dashed and dotted subtypes such as
    `image/x-portable-pixmap` are kept as-is unless a conventional extension
    is known for them.
    """
    subtype = mime_type.split("/", 1)[-1].split("+", 1)[0].strip().lower()
    if subtype in EXTENSIONS_BY_SUBTYPE:
        return EXTENSIONS_BY_SUBTYPE[subtype]
    if not SUBTYPE_PATTERN.fullmatch(subtype):
        return DEFAULT_EXTENSION
    return subtype


def build_stem(index: int, base_name: Optional[str], is_edit: bool) -> str:
    """Return the filename stem for the entry at `index` (zero based)."""
    if base_name:
        return f"{base_name}_edited" if is_edit else base_name
    default_name = EDITED_STEM if is_edit else GENERATED_STEM
    return f"{default_name}_{index + 1}"


def candidate_filename(stem: str, extension: str, counter: int) -> str:
    if counter == 1:
        return f"{stem}.{extension}"
    return f"{stem}_{counter}.{extension}"


def next_available_filename(stem: str, extension: str, directory: Union[str, Path], start: int = 1) -> Tuple[str, int]:
    """Find the first `stem[_N].ext` that does not exist in `directory`.

    Returns:
        The filename and the counter it was built from.
    """
    dir_path = Path(directory)
    counter = start
    while True:
        filename = candidate_filename(stem, extension, counter)
        if not (dir_path / filename).exists():
            return filename, counter
        counter += 1


def decode_inline_payload(reference: str) -> Tuple[str, bytes]:
    """Decode a data URI into its MIME type and raw bytes.

    Raises:
        PersistenceFailure: If the URI is malformed or not valid base64.
    """
    try:
        return decode_inline_reference(reference)
    except MalformedInline as exc:
        raise PersistenceFailure(str(exc)) from exc


async def write_exclusive(directory: Path, stem: str, extension: str, data: bytes) -> Path:
    """Write `data` to the first free `stem[_N].ext` in `directory`.

    A name found free by the existence check can still be taken by a
    concurrent writer before the open; exclusive creation detects that and
    the search continues from the next counter.
    """
    counter = 1
    while True:
        filename, counter = next_available_filename(stem, extension, directory, start=counter)
        path = directory / filename
        try:
            async with aiofiles.open(path, "xb") as f:
                await f.write(data)
            return path
        except FileExistsError:
            counter += 1


def resolve_directory(directory: Optional[Union[str, Path]]) -> Optional[Path]:
    """Return the canonical directory path, or None if it is unusable."""
    if directory is None:
        return None
    try:
        resolved = Path(directory).resolve(strict=True)
    except (OSError, RuntimeError):
        return None
    return resolved if resolved.is_dir() else None


async def save_entry(reference: str, directory: Path, stem: str) -> Optional[str]:
    """Decode and write a single inline reference; None on failure."""
    try:
        mime_type, image_bytes = decode_inline_payload(reference)
        path = await write_exclusive(directory, stem, image_extension(mime_type), image_bytes)
    except PersistenceFailure as exc:
        LOGGER.error("Failed to decode image %s: %s", stem, exc)
        return None
    except OSError as exc:
        LOGGER.error("Failed to write image %s to %s: %s", stem, directory, exc)
        return None
    return str(path)


async def persist(
    entries: Sequence[ResponseImage],
    directory: Optional[Union[str, Path]],
    base_name: Optional[str] = None,
    is_edit: bool = False,
) -> List[PersistedImage]:
    """Save the inline images of a chat response and report each outcome.

    Args:
        entries: Image entries from the assistant message, in response order.
        directory: Target directory; when missing or unusable nothing is written.
        base_name: Optional stem shared by all entries (edit source name).
        is_edit: Whether the images came from an edit request.

    Returns:
        One `PersistedImage` per entry, in the same order.
    """
    resolved = resolve_directory(directory)
    if resolved is None:
        if directory is not None:
            LOGGER.warning("Save directory %s is not available; images will not be saved", directory)
        return [PersistedImage(source_reference=entry.reference) for entry in entries]

    results: List[PersistedImage] = []
    for index, entry in enumerate(entries):
        reference = entry.reference
        result = PersistedImage(source_reference=reference)
        if is_inline_reference(reference):
            stem = build_stem(index, base_name, is_edit)
            result.saved_path = await save_entry(reference, resolved, stem)
            if result.saved_path:
                LOGGER.info("Saved image %d to %s", index + 1, result.saved_path)
        results.append(result)
    return results
