"""LINE webhook endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response, status
from pydantic import ValidationError

from stickerbot.errors import InvalidSignatureError, ValidationAppError
from stickerbot.integrations.line_client import SIGNATURE_HEADER, verify_signature
from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event
from stickerbot.schemas.line import WebhookPayload
from stickerbot.services.sticker_service import StickerRequestService

router = APIRouter(tags=["Webhook"])
logger = get_logger("api.callback")


@router.post("/callback")
async def callback(request: Request) -> Response:
    """Verify, parse and acknowledge a webhook delivery.

    Events are handed to the sticker service as a background task so the
    acknowledgement never waits for an export to finish.
    """

    body = await request.body()
    channel_secret: str = request.app.state.config.line.channel_secret
    if not verify_signature(channel_secret, body, request.headers.get(SIGNATURE_HEADER)):
        raise InvalidSignatureError()

    try:
        payload = WebhookPayload.model_validate_json(body)
    except ValidationError as exc:
        raise ValidationAppError(
            "Malformed webhook payload.", meta={"errors": exc.error_count()}
        ) from exc

    service: StickerRequestService = request.app.state.sticker_service
    log_event(logger, "webhook.received", events=len(payload.events))
    if payload.events:
        service.dispatch(payload.events)
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["router"]
