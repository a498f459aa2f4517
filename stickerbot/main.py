"""Entry point for the sticker bot FastAPI application."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.responses import Response
from starlette.types import Scope

from stickerbot import __version__
from stickerbot.api import callback as callback_api, health as health_api
from stickerbot.config import AppConfig, load_config
from stickerbot.errors import install_exception_handlers
from stickerbot.export.runtime import ExportRuntime, build_export_runtime
from stickerbot.integrations.line_client import LineMessagingClient
from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event
from stickerbot.services.sticker_service import StickerRequestService

logger = get_logger("main")

EXPORT_MOUNT_PATH = "/export"


class ImmutableStaticFiles(StaticFiles):
    """Static files whose responses may be cached forever.

    Export archives are never rewritten once published.
    """

    cache_control_header = "max-age=86400, immutable"

    async def get_response(self, path: str, scope: Scope) -> Response:  # type: ignore[override]
        response = await super().get_response(path, scope)
        if response.status_code < 400:
            response.headers.setdefault("Cache-Control", self.cache_control_header)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    runtime: ExportRuntime = app.state.export_runtime
    log_event(
        logger,
        "app.started",
        scratch_dir=str(runtime.scratch_dir),
        export_dir=str(runtime.export_dir),
    )
    try:
        yield
    finally:
        service: StickerRequestService = app.state.sticker_service
        await service.shutdown()
        log_event(logger, "app.stopped")


def create_app(
    config: AppConfig | None = None,
    *,
    line_transport: httpx.AsyncBaseTransport | None = None,
    source_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application and its export runtime."""

    config = config or load_config()
    runtime = build_export_runtime(config.export, transport=source_transport)
    line_client = LineMessagingClient(
        channel_token=config.line.channel_token,
        base_url=config.line.api_base_url,
        transport=line_transport,
        timeout_ms=config.line.timeout_ms,
    )
    service = StickerRequestService(
        pipeline=runtime.orchestrator,
        replier=line_client,
        download_url=config.download_url,
    )

    app = FastAPI(
        title="Sticker Bot",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.config = config
    app.state.export_runtime = runtime
    app.state.line_client = line_client
    app.state.sticker_service = service

    install_exception_handlers(app)
    app.include_router(health_api.router)
    app.include_router(callback_api.router)
    app.mount(
        EXPORT_MOUNT_PATH,
        ImmutableStaticFiles(directory=runtime.export_dir),
        name="export",
    )
    return app


__all__ = ["EXPORT_MOUNT_PATH", "ImmutableStaticFiles", "create_app", "lifespan"]
