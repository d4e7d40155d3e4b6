"""FastAPI routes for reading and changing session settings."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.settings_controller import get_settings, set_model, set_save_directory
from services.session_state import SessionState
from utils.errors import SettingsValidationError

router = APIRouter(prefix="/settings", tags=["settings"])


class ModelPayload(BaseModel):
	model: Optional[str] = None


class SaveDirectoryPayload(BaseModel):
	save_directory: Optional[str] = None


def _get_state(request: Request) -> SessionState:
	state = getattr(request.app.state, "session_state", None)
	if state is None:
		raise HTTPException(status_code=500, detail="Session state not initialized.")
	return state


@router.get("")
async def get_settings_route(request: Request):
	return await get_settings(_get_state(request))


@router.put("/model")
async def set_model_route(request: Request, payload: ModelPayload):
	"""Set the active model; an empty body returns the current one."""
	try:
		return await set_model(_get_state(request), payload.model)
	except HTTPException:
		raise
	except SettingsValidationError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.put("/save-directory")
async def set_save_directory_route(request: Request, payload: SaveDirectoryPayload):
	"""Set the absolute save directory; an empty body returns the current one."""
	try:
		return await set_save_directory(_get_state(request), payload.save_directory)
	except HTTPException:
		raise
	except SettingsValidationError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
