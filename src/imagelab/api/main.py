"""Classroom Image Lab - FastAPI Application.

This module is the single entry point for the web application.  It defines
the application factory, the REST routes, the exception handlers that turn
pipeline errors into ``{"error": ...}`` bodies, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :data:`imagelab.core.config.config`, read once
  at import time (API key and port included).
- **Generation** is delegated to a single
  :class:`~imagelab.core.pipeline.GenerationPipeline` stored on
  ``app.state.pipeline``.  The pipeline is blocking (synchronous OpenAI
  client), so the route runs it in a worker thread.
- **The chat UI** is a Gradio app mounted under ``ui_path`` (default
  ``/ui``); ``GET /`` redirects there.

Endpoints
---------
========  ==================  ==========================================
Method    Path                Purpose
========  ==================  ==========================================
GET       ``/``               Redirect to the chat UI
GET       ``/healthz``        Liveness probe
POST      ``/api/generate``   Enhance, screen, and generate one image
========  ==================  ==========================================

Usage
-----
CLI (installed entry point)::

    imagelab

Direct invocation::

    python -m imagelab.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial
from typing import Any

import anyio
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from imagelab import __version__
from imagelab.api.models import ErrorResponse, GenerateRequest, ImageResponse
from imagelab.core.config import ImageLabConfig, config
from imagelab.core.errors import GENERIC_GENERATION_MESSAGE, ImageLabError, ProviderNotConfiguredError
from imagelab.core.pipeline import GenerationPipeline
from imagelab.core.provider import create_openai_client

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body."

router = APIRouter()


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/healthz")
async def healthz() -> dict:
    """Liveness probe."""
    return {"status": "ok"}


@router.post(
    "/api/generate",
    response_model=ImageResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_image(payload: GenerateRequest, request: Request) -> dict:
    """Generate one image for a classroom prompt.

    The pipeline merges ``history`` into the prompt, screens the result with
    the configured prompt gate, and requests the image.

    Args:
        payload: Validated :class:`GenerateRequest` body.
        request: Incoming request (used to reach ``app.state``).

    Returns:
        ``{"b64": ...}`` for inline image data or ``{"url": ...}`` for a
        remote image.

    Raises:
        PromptRejectedError: 400 for too short/long or rejected prompts.
        GenerationError: 500 when the image provider fails.
    """
    pipeline: GenerationPipeline = request.app.state.pipeline
    run = partial(
        pipeline.run,
        payload.prompt,
        history=payload.history,
        size=payload.size,
        model=payload.model,
    )
    result = await anyio.to_thread.run_sync(run)
    return result.to_payload()


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ImageLabError)
    async def handle_image_lab_error(_request: Request, exc: ImageLabError):
        if exc.cause is not None:
            logger.error(f"{exc.__class__.__name__}: {exc.message} (cause: {exc.cause!r})")
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        logger.info(f"Invalid request body: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_request: Request, exc: Exception):
        # Never leak internal details to the client.
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": GENERIC_GENERATION_MESSAGE})


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def build_pipeline(settings: ImageLabConfig, client: Any | None = None) -> GenerationPipeline:
    """Create the shared pipeline, building the OpenAI client if none is given.

    A missing API key does not stop the server from starting: the pipeline
    is built without a client and every generation request fails with a
    500 until the key is configured.
    """
    if client is None:
        try:
            client = create_openai_client(settings)
        except ProviderNotConfiguredError as e:
            logger.warning(f"{e.setting} is not set; image generation will fail until it is configured")
    return GenerationPipeline.from_config(settings, client)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log the active pipeline configuration on startup and shutdown."""
    pipeline: GenerationPipeline = app.state.pipeline
    logger.info(
        f"Image Lab starting (gate={pipeline.gate.name}, "
        f"context_enhancement={pipeline.enhancer is not None}, "
        f"image_model={pipeline.config.default_image_model})"
    )

    yield  # Application runs here.

    logger.info("Image Lab shutting down.")


def create_app(settings: ImageLabConfig | None = None, client: Any | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration; defaults to the global ``config``.
        client: Provider client to share between pipeline stages.  ``None``
            builds one from ``settings``.

    Returns:
        The configured application, with the chat UI mounted when
        ``settings.ui_enabled`` is set.
    """
    settings = settings or config

    app = FastAPI(
        title="Classroom Image Lab",
        description="Classroom-safe image generation with context-aware prompts and moderation.",
        version=__version__,
        lifespan=lifespan,
    )

    # Allow cross-origin requests so a frontend can be served from another
    # port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.pipeline = build_pipeline(settings, client)

    register_exception_handlers(app)
    app.include_router(router)

    if settings.ui_enabled:
        from imagelab.ui.app import mount_chat_ui

        @app.get("/", include_in_schema=False)
        async def index() -> RedirectResponse:
            return RedirectResponse(url=settings.ui_path)

        app = mount_chat_ui(app, settings)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~imagelab.core.config.config` (which
    loads from ``IMAGELAB_SERVER_HOST`` and ``PORT`` / ``IMAGELAB_SERVER_PORT``).
    Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``imagelab`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Image Lab running on http://localhost:{config.server_port}")

    uvicorn.run(
        "imagelab.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
