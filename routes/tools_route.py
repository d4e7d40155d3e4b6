"""FastAPI routes exposing the image tools."""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from controllers.image_tool_controller import ImageToolController
from utils.errors import InvalidToolArguments, RemoteCallFailure

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/tools", tags=["tools"])

TOOL_DESCRIPTIONS = [
    {
        "name": "generate_image",
        "description": "Generate images from a text prompt.",
        "arguments": {"prompt": "string"},
    },
    {
        "name": "edit_image",
        "description": (
            "Edit or analyze one or more images with the image model. Images may be "
            "1) URLs 2) base64 data URIs 3) local file paths, including bare filenames "
            "of previously saved images."
        ),
        "arguments": {"instruction": "string", "images": "list[string]"},
    },
]


class GenerateImagePayload(BaseModel):
    prompt: str = Field(..., examples=["A cute kitten in a space suit walking on the moon, sci-fi style"])


class EditImagePayload(BaseModel):
    instruction: str = Field(..., examples=["Turn this picture into a sci-fi poster"])
    images: List[str] = Field(
        default_factory=list,
        examples=[["https://example.com/image.jpg", "C:\\Images\\photo.png", "data:image/jpeg;base64,/9j/4AAQ..."]],
    )


def _get_controller(request: Request) -> ImageToolController:
    """Retrieve the shared tool controller from the app state."""
    controller = getattr(request.app.state, "tool_controller", None)
    if controller is None:
        raise HTTPException(status_code=500, detail="Tool controller not initialized.")
    return controller


@router.get("")
async def list_tools():
    """Describe the tools this server exposes."""
    return {"tools": TOOL_DESCRIPTIONS}


@router.post("/generate_image")
async def generate_image_route(request: Request, payload: GenerateImagePayload):
    try:
        result = await _get_controller(request).generate_image(payload.prompt)
    except HTTPException:
        raise
    except InvalidToolArguments as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RemoteCallFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("generate_image failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return result.to_dict()


@router.post("/edit_image")
async def edit_image_route(request: Request, payload: EditImagePayload):
    try:
        result = await _get_controller(request).edit_image(payload.instruction, payload.images)
    except HTTPException:
        raise
    except InvalidToolArguments as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RemoteCallFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("edit_image failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return result.to_dict()
