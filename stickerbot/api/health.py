"""Root greeting and liveness endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(include_in_schema=False)

GREETING = "Hello from sticker downloader"


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return GREETING


@router.get("/api/health/live")
async def live() -> dict[str, str]:
    """Return a lightweight liveness response without dependency checks."""

    return {"status": "ok"}


__all__ = ["GREETING", "router"]
