"""Startup configuration resolved from command-line flags and environment.

Each setting follows the same precedence: command-line flag, then
environment variable (a `.env` file is loaded if present), then default.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from utils.errors import ConfigurationError
from utils.model_catalog import DEFAULT_MODEL

load_dotenv()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_HTTP_REFERER = "http://localhost:3000"
DEFAULT_X_TITLE = "OpenRouter MCP Server (Python)"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 6621
DEFAULT_SAVE_SUBDIR = "images"


@dataclass
class AppConfig:
    """Resolved settings for the server, the chat client and the session."""

    api_key: str
    save_directory: Path
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    http_referer: str = DEFAULT_HTTP_REFERER
    x_title: str = DEFAULT_X_TITLE
    host: str = DEFAULT_HOST
    http_port: int = DEFAULT_HTTP_PORT

    @property
    def headers(self) -> dict:
        """Attribution headers OpenRouter expects on every request."""
        return {"HTTP-Referer": self.http_referer, "X-Title": self.x_title}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nano-banana-server",
        description=(
            "Image generation and editing tools over the OpenRouter API. "
            "Images may be given as URLs, base64 data URIs or local file paths."
        ),
    )
    parser.add_argument("--api-key", default=None, help="OpenRouter API key (env: OPENROUTER_API_KEY)")
    parser.add_argument("--model", default=None, help="Model to use (env: MCP_MODEL)")
    parser.add_argument(
        "-s",
        "--save-directory",
        default=None,
        help="Absolute directory for saved images (env: MCP_SAVE_DIRECTORY)",
    )
    parser.add_argument("--host", default=None, help="Bind address (env: MCP_HTTP_HOST)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (env: MCP_HTTP_PORT)")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def _port_from_env() -> int:
    raw = os.getenv("MCP_HTTP_PORT")
    if not raw:
        return DEFAULT_HTTP_PORT
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_HTTP_PORT


def resolve_save_directory(cli_value: Optional[str]) -> Path:
    """Pick the save directory: CLI flag, then MCP_SAVE_DIRECTORY, then ./images.

    Explicitly configured directories must be absolute. The computed default
    is created when missing.
    """
    if cli_value:
        if not Path(cli_value).is_absolute():
            raise ConfigurationError(f"--save-directory must be an absolute path, got: {cli_value}")
        return Path(cli_value)
    env_value = os.getenv("MCP_SAVE_DIRECTORY")
    if env_value:
        if not Path(env_value).is_absolute():
            raise ConfigurationError(f"MCP_SAVE_DIRECTORY must be an absolute path, got: {env_value}")
        return Path(env_value)
    default_dir = Path(os.getcwd()) / DEFAULT_SAVE_SUBDIR
    default_dir.mkdir(parents=True, exist_ok=True)
    return default_dir


def load_config(args: Optional[argparse.Namespace] = None) -> AppConfig:
    """Build an `AppConfig` from parsed arguments and the environment.

    Raises:
        ConfigurationError: If no API key is available or a configured save
            directory is not absolute.
    """
    args = args if args is not None else parse_args([])
    api_key = _first(args.api_key, os.getenv("OPENROUTER_API_KEY"))
    if not api_key:
        raise ConfigurationError("OPENROUTER_API_KEY environment variable or --api-key argument is required")

    return AppConfig(
        api_key=api_key,
        save_directory=resolve_save_directory(args.save_directory),
        model=_first(args.model, os.getenv("MCP_MODEL")) or DEFAULT_MODEL,
        base_url=os.getenv("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
        http_referer=os.getenv("HTTP_REFERER", DEFAULT_HTTP_REFERER),
        x_title=os.getenv("X_TITLE", DEFAULT_X_TITLE),
        host=_first(args.host, os.getenv("MCP_HTTP_HOST")) or DEFAULT_HOST,
        http_port=args.port if args.port is not None else _port_from_env(),
    )
