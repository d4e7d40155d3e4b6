"""Read and change the active model and save directory."""

from __future__ import annotations

from typing import Any, Dict, Optional

from services.session_state import SessionState
from utils.model_catalog import SUPPORTED_MODELS


async def get_settings(state: SessionState) -> Dict[str, Any]:
	"""Return the committed model, save directory, and allowed models."""
	model, save_directory = await state.snapshot()
	return {
		"model": model,
		"save_directory": str(save_directory),
		"supported_models": list(SUPPORTED_MODELS),
	}


async def set_model(state: SessionState, model: Optional[str]) -> Dict[str, Any]:
	"""Switch the active model, or report the current one when `model` is None."""
	if model is None:
		return {"model": await state.get_model(), "changed": False}
	return {"model": await state.set_model(model), "changed": True}


async def set_save_directory(state: SessionState, save_directory: Optional[str]) -> Dict[str, Any]:
	"""Switch the save directory, or report the current one when None."""
	if save_directory is None:
		return {"save_directory": str(await state.get_save_directory()), "changed": False}
	path = await state.set_save_directory(save_directory)
	return {"save_directory": str(path), "changed": True}
