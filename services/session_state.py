"""Process-wide mutable settings shared by every tool invocation."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, AsyncIterator, Tuple, Union

from utils.errors import CreateFailed, NotADirectory, NotAbsolute, UnsupportedModel
from utils.model_catalog import SUPPORTED_MODELS

if TYPE_CHECKING:
    from utils.config import AppConfig

LOGGER = logging.getLogger(__name__)


class ReadWriteLock:
    """Asyncio lock allowing many concurrent readers or a single writer.

    Waiting writers take priority over new readers so a settings change is
    not starved by a steady stream of tool invocations.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and not self._writers_waiting)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and not self._readers)
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


def validate_model(candidate: str) -> str:
    if candidate not in SUPPORTED_MODELS:
        raise UnsupportedModel(
            f"Unsupported model: {candidate}. Supported models: {', '.join(SUPPORTED_MODELS)}"
        )
    return candidate


def prepare_save_directory(candidate: Union[str, Path]) -> Path:
    """Validate a save directory, creating it when it does not exist yet.

    Raises:
        NotAbsolute: If the path is relative.
        CreateFailed: If the directory cannot be created.
        NotADirectory: If the path exists but is not a directory.
    """
    path = Path(candidate)
    if not path.is_absolute():
        raise NotAbsolute(
            f"Path '{candidate}' is relative. Provide an absolute path, "
            "e.g. C:\\Users\\YourName\\Pictures or /home/username/pictures"
        )
    if not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CreateFailed(f"Unable to create directory '{candidate}': {exc}") from exc
    if not path.is_dir():
        raise NotADirectory(f"'{candidate}' is not a valid directory")
    return path


class SessionState:
    """Active model and save directory, guarded by a reader/writer lock.

    Readers hold the lock only while copying values out; callers must not
    keep it across network or file I/O. Setters validate first and take the
    write lock only to commit, so a rejected change never disturbs the
    current value.
    """

    def __init__(self, active_model: str, save_directory: Union[str, Path]) -> None:
        self._lock = ReadWriteLock()
        self._active_model = validate_model(active_model)
        self._save_directory = prepare_save_directory(save_directory)

    @classmethod
    def from_config(cls, config: "AppConfig") -> "SessionState":
        return cls(config.model, config.save_directory)

    async def get_model(self) -> str:
        async with self._lock.read():
            return self._active_model

    async def get_save_directory(self) -> Path:
        async with self._lock.read():
            return self._save_directory

    async def snapshot(self) -> Tuple[str, Path]:
        """Return `(model, save_directory)` read under a single lock hold."""
        async with self._lock.read():
            return self._active_model, self._save_directory

    async def set_model(self, candidate: str) -> str:
        model = validate_model(candidate)
        async with self._lock.write():
            self._active_model = model
        LOGGER.info("Active model set to %s", model)
        return model

    async def set_save_directory(self, candidate: Union[str, Path]) -> Path:
        path = await asyncio.to_thread(prepare_save_directory, candidate)
        async with self._lock.write():
            self._save_directory = path
        LOGGER.info("Save directory set to %s", path)
        return path
