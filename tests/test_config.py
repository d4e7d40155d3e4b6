from __future__ import annotations

from pathlib import Path

import pytest

from utils.config import DEFAULT_BASE_URL, DEFAULT_HTTP_PORT, load_config, parse_args
from utils.errors import ConfigurationError
from utils.model_catalog import DEFAULT_MODEL, SUPPORTED_MODELS


def test_missing_api_key_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(parse_args(["--save-directory", str(tmp_path)]))


def test_cli_takes_precedence_over_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_dir = tmp_path / "env"
    cli_dir = tmp_path / "cli"
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
    monkeypatch.setenv("MCP_MODEL", SUPPORTED_MODELS[0])
    monkeypatch.setenv("MCP_SAVE_DIRECTORY", str(env_dir))

    config = load_config(
        parse_args(["--api-key", "cli-key", "--model", SUPPORTED_MODELS[1], "-s", str(cli_dir)])
    )

    assert config.api_key == "cli-key"
    assert config.model == SUPPORTED_MODELS[1]
    assert config.save_directory == cli_dir


def test_environment_used_when_flags_absent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
    monkeypatch.setenv("MCP_SAVE_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("MCP_HTTP_PORT", "7000")

    config = load_config(parse_args([]))

    assert config.api_key == "env-key"
    assert config.save_directory == tmp_path
    assert config.model == DEFAULT_MODEL
    assert config.base_url == DEFAULT_BASE_URL
    assert config.http_port == 7000
    assert config.headers["X-Title"]


def test_default_save_directory_is_created_under_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")

    config = load_config(parse_args([]))

    assert config.save_directory == tmp_path / "images"
    assert config.save_directory.is_dir()


def test_relative_save_directory_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
    with pytest.raises(ConfigurationError):
        load_config(parse_args(["--save-directory", "images"]))

    monkeypatch.setenv("MCP_SAVE_DIRECTORY", "images")
    with pytest.raises(ConfigurationError):
        load_config(parse_args([]))


def test_invalid_port_falls_back_to_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
    monkeypatch.setenv("MCP_HTTP_PORT", "not-a-port")
    config = load_config(parse_args(["-s", str(tmp_path)]))
    assert config.http_port == DEFAULT_HTTP_PORT
