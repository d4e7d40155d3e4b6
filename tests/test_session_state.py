from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from services.session_state import ReadWriteLock, SessionState
from utils.config import AppConfig
from utils.errors import CreateFailed, NotADirectory, NotAbsolute, UnsupportedModel
from utils.model_catalog import DEFAULT_MODEL, SUPPORTED_MODELS


def test_relative_save_directory_is_rejected(save_dir: Path) -> None:
    async def run() -> None:
        state = SessionState(DEFAULT_MODEL, save_dir)
        with pytest.raises(NotAbsolute):
            await state.set_save_directory("relative/path")
        assert await state.get_save_directory() == save_dir

    asyncio.run(run())


def test_missing_save_directory_is_created(save_dir: Path, tmp_path: Path) -> None:
    target = tmp_path / "new" / "nested"

    async def run() -> None:
        state = SessionState(DEFAULT_MODEL, save_dir)
        assert await state.set_save_directory(str(target)) == target
        assert await state.get_save_directory() == target

    asyncio.run(run())
    assert target.is_dir()


def test_file_is_not_a_save_directory(save_dir: Path, tmp_path: Path) -> None:
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x")

    async def run() -> None:
        state = SessionState(DEFAULT_MODEL, save_dir)
        with pytest.raises(NotADirectory):
            await state.set_save_directory(str(not_a_dir))
        assert await state.get_save_directory() == save_dir

    asyncio.run(run())


def test_uncreatable_save_directory(save_dir: Path, tmp_path: Path) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("x")

    async def run() -> None:
        state = SessionState(DEFAULT_MODEL, save_dir)
        with pytest.raises(CreateFailed):
            await state.set_save_directory(str(blocker / "sub"))
        assert await state.get_save_directory() == save_dir

    asyncio.run(run())


def test_set_model_validates_against_allow_list(save_dir: Path) -> None:
    async def run() -> None:
        state = SessionState(DEFAULT_MODEL, save_dir)
        with pytest.raises(UnsupportedModel):
            await state.set_model("openai/gpt-4o")
        assert await state.get_model() == DEFAULT_MODEL

        await state.set_model(SUPPORTED_MODELS[1])
        assert await state.snapshot() == (SUPPORTED_MODELS[1], save_dir)

    asyncio.run(run())


def test_from_config_uses_configured_model_and_directory(save_dir: Path) -> None:
    config = AppConfig(api_key="sk-test", save_directory=save_dir, model=SUPPORTED_MODELS[1])

    state = SessionState.from_config(config)

    assert asyncio.run(state.snapshot()) == (SUPPORTED_MODELS[1], save_dir)


def test_initial_values_are_validated(save_dir: Path) -> None:
    with pytest.raises(UnsupportedModel):
        SessionState("not-a-model", save_dir)
    with pytest.raises(NotAbsolute):
        SessionState(DEFAULT_MODEL, "images")


def test_writer_waits_for_active_reader() -> None:
    async def run() -> list[str]:
        lock = ReadWriteLock()
        events: list[str] = []

        async def writer() -> None:
            async with lock.write():
                events.append("write")

        async with lock.read():
            task = asyncio.create_task(writer())
            await asyncio.sleep(0.01)
            assert not task.done()
            events.append("read")
        await task
        return events

    assert asyncio.run(run()) == ["read", "write"]


def test_readers_share_the_lock() -> None:
    async def run() -> int:
        lock = ReadWriteLock()
        inside = 0
        peak = 0

        async def reader() -> None:
            nonlocal inside, peak
            async with lock.read():
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                inside -= 1

        await asyncio.gather(reader(), reader(), reader())
        return peak

    assert asyncio.run(run()) == 3
