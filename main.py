import inspect
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from controllers.image_tool_controller import ImageToolController
from routes.settings_route import router as settings_router
from routes.tools_route import router as tools_router
from services.openai.chat_client import ImageChatService, build_client
from services.session_state import SessionState
from utils.config import AppConfig, load_config, parse_args
from utils.errors import ConfigurationError, SettingsValidationError

LOGGER = logging.getLogger(__name__)

INSTRUCTIONS = (
    "nano banana - OpenRouter access to the google/gemini-2.5-flash-image model. "
    "Image inputs may be URLs, base64 data URIs or local file paths. "
    "Tools: generate_image, edit_image. Settings: model, save directory."
)


def build_lifespan(config: Optional[AppConfig] = None, openai_client: Optional[AsyncOpenAI] = None):
    """Return a lifespan that wires configuration, session state and the client."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Initialize on startup and attach to `app.state`:
          - the resolved configuration
          - the shared session state (model + save directory)
          - the OpenAI async client pointed at OpenRouter
          - the tool controller composing them
        """
        resolved = config or load_config()
        try:
            session_state = SessionState.from_config(resolved)
        except SettingsValidationError as exc:
            raise RuntimeError(f"Invalid startup settings: {exc}") from exc

        try:
            client = openai_client or build_client(resolved)
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc

        app.state.config = resolved
        app.state.session_state = session_state
        app.state.openai_client = client
        app.state.tool_controller = ImageToolController(session_state, ImageChatService(client))
        LOGGER.info("Saving images to %s using model %s", resolved.save_directory, resolved.model)

        try:
            yield
        finally:
            # Gracefully close the OpenAI client if it exposes a close/aclose method.
            aclose = getattr(client, "close", None) or getattr(client, "aclose", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception:
                    LOGGER.debug("Ignoring error while closing the OpenAI client", exc_info=True)

    return lifespan


def create_app(config: Optional[AppConfig] = None, openai_client: Optional[AsyncOpenAI] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(
        title="nano-banana",
        description=INSTRUCTIONS,
        lifespan=build_lifespan(config, openai_client),
    )

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports whether state and client are ready.
        """
        has_state = getattr(request.app.state, "session_state", None) is not None
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        return {"ok": True, "session_initialized": has_state, "openai_available": has_openai}

    app.include_router(tools_router)
    app.include_router(settings_router)

    return app


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Console entry point: parse flags, load configuration, serve over HTTP."""
    args = parse_args(argv)
    configure_logging()
    try:
        config = load_config(args)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        raise SystemExit(1) from exc

    LOGGER.info("Starting image tool server on http://%s:%d", config.host, config.http_port)
    uvicorn.run(create_app(config), host=config.host, port=config.http_port)


app = create_app()


if __name__ == "__main__":
    main()
