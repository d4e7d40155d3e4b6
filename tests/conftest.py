from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def save_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "saved"
    directory.mkdir()
    return directory


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "OPENROUTER_API_KEY",
        "MCP_MODEL",
        "MCP_SAVE_DIRECTORY",
        "MCP_HTTP_PORT",
        "MCP_HTTP_HOST",
        "OPENROUTER_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
