"""Controller implementing the `generate_image` and `edit_image` tools."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from models.chat_models import ChatResult
from models.image_models import PersistedImage, image_url_part
from models.tool_models import ToolResult
from services import image_inputs, image_store
from services.openai.chat_client import ImageChatService, text_part
from services.session_state import SessionState
from utils.errors import InvalidToolArguments, ResolutionError

LOGGER = logging.getLogger(__name__)

NO_CONTENT = "(no content)"
MISSING_IMAGES_MESSAGE = (
    "At least one image is required to edit.\n\n"
    "Provide images in one of these formats:\n"
    "- URL (http:// or https://)\n"
    "- base64 data (data:image/...)\n"
    "- local file path\n\n"
    "Examples:\n"
    "- URL: https://example.com/image.jpg\n"
    "- local file: C:\\Images\\photo.png\n"
    "- base64: data:image/jpeg;base64,/9j/4AAQ..."
)


def format_images(images: Sequence[PersistedImage]) -> List[str]:
    lines = [f"**Generated images:** {len(images)}"]
    for index, image in enumerate(images, start=1):
        lines.append(f"- Image {index}: {image.display_reference}...")
        if image.saved_path:
            lines.append(f"  Saved to: {image.saved_path}")
        elif image_inputs.is_inline_reference(image.source_reference):
            lines.append("  Not saved")
    return lines


def format_summary(header: List[str], result: ChatResult, images: Sequence[PersistedImage]) -> str:
    """Render the markdown text returned to the tool caller."""
    content = result.first_message.content or NO_CONTENT
    sections = ["\n".join(header + [f"**Response:** {content}"])]
    if images:
        sections.append("\n".join(format_images(images)))
    usage = result.usage
    if usage is not None and usage.complete:
        sections.append(
            "\n".join(
                [
                    "**Usage:**",
                    f"- Prompt tokens: {usage.prompt_tokens}",
                    f"- Completion tokens: {usage.completion_tokens}",
                    f"- Total tokens: {usage.total_tokens}",
                ]
            )
        )
    return "\n\n".join(sections)


class ImageToolController:
    """Coordinate input resolution, the chat call, and output persistence."""

    def __init__(self, session_state: SessionState, chat_service: ImageChatService) -> None:
        self.session_state = session_state
        self.chat_service = chat_service

    async def resolve_images(self, images: Sequence[str], fallback_directory: Optional[Path]) -> List[Dict[str, Any]]:
        """Build `image_url` segments, forwarding unresolvable references raw."""
        parts: List[Dict[str, Any]] = []
        for reference in images:
            try:
                content = await image_inputs.resolve(reference, fallback_directory)
            except ResolutionError as exc:
                LOGGER.warning("Failed to process image input '%s': %s", reference[:80], exc)
                parts.append(image_url_part(reference))
                continue
            parts.append(content.as_content_part())
        return parts

    async def generate_image(self, prompt: str) -> ToolResult:
        """Generate images from a text prompt."""
        if not prompt or not prompt.strip():
            raise InvalidToolArguments("A prompt is required to generate an image.")
        model, save_directory = await self.session_state.snapshot()

        result = await self.chat_service.complete(model, [text_part(prompt)])
        saved = await image_store.persist(result.images, save_directory, base_name=None, is_edit=False)

        header = [f"**Model:** {model}", f"**Prompt:** {prompt}"]
        return ToolResult(
            text=format_summary(header, result, saved),
            model=model,
            images=saved,
            usage=result.usage,
        )

    async def edit_image(self, instruction: str, images: Sequence[str]) -> ToolResult:
        """Edit or analyze one or more images following an instruction."""
        if not images:
            raise InvalidToolArguments(MISSING_IMAGES_MESSAGE)
        if not instruction or not instruction.strip():
            raise InvalidToolArguments("An instruction is required to edit an image.")
        model, save_directory = await self.session_state.snapshot()

        content = [text_part(instruction)]
        content.extend(await self.resolve_images(images, save_directory))
        result = await self.chat_service.complete(model, content)

        first = images[0]
        base_name = image_inputs.extract_base_name(first) if image_inputs.is_local_reference(first) else None
        saved = await image_store.persist(result.images, save_directory, base_name=base_name, is_edit=True)

        header = [
            f"**Model:** {model}",
            f"**Instruction:** {instruction}",
            f"**Input images:** {len(images)}",
        ]
        return ToolResult(
            text=format_summary(header, result, saved),
            model=model,
            images=saved,
            usage=result.usage,
        )
