"""Turn LINE webhook events into sticker exports and replies."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
import re
from typing import Protocol

from stickerbot.export.pipeline import ExportPipeline, ExportPipelineError
from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event
from stickerbot.schemas.line import WebhookEvent

logger = get_logger("services.sticker")

STICKER_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"https://line\.me/S/sticker/(\d+)/"),
    re.compile(r"https://store\.line\.me/stickershop/product/(\d+)/"),
)

PROMPT_MESSAGE = "Please send me stickers or sticker shop URL!"
DOWNLOAD_HINT_MESSAGE = (
    "Copy the link below and open it in your browser "
    "(because Line browser prevents downloading files)"
)
FAILURE_MESSAGE_TEMPLATE = "An error occured when processing your stickers: {category}"


class ReplySender(Protocol):
    async def reply(self, reply_token: str, messages: Sequence[str]) -> None:
        ...


def find_sticker_id(text: str) -> str | None:
    """Return the package id of the first known sticker shop URL in *text*."""

    for pattern in STICKER_URL_PATTERNS:
        match = pattern.search(text)
        if match is not None:
            return match.group(1)
    return None


def success_messages(download_url: str) -> list[str]:
    return [DOWNLOAD_HINT_MESSAGE, download_url]


def failure_message(category: str) -> str:
    return FAILURE_MESSAGE_TEMPLATE.format(category=category)


class StickerRequestService:
    """Dispatch webhook events to the export pipeline in background tasks."""

    def __init__(
        self,
        *,
        pipeline: ExportPipeline,
        replier: ReplySender,
        download_url: Callable[[str], str],
    ) -> None:
        self._pipeline = pipeline
        self._replier = replier
        self._download_url = download_url
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, events: Iterable[WebhookEvent]) -> asyncio.Task[None]:
        """Schedule processing of *events* without awaiting the pipeline."""

        task = asyncio.create_task(self.process_events(list(events)), name="sticker-events")
        self._track(task)
        return task

    async def drain(self) -> None:
        """Wait for every dispatched batch of events to finish."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drain()

    async def process_events(self, events: Sequence[WebhookEvent]) -> None:
        for event in events:
            try:
                await self.handle_event(event)
            except Exception:
                logger.exception(
                    "Unhandled error while processing webhook event",
                    extra={"event": "webhook.event.crashed", "event_type": event.type},
                )

    async def handle_event(self, event: WebhookEvent) -> None:
        source_type = event.source.type if event.source is not None else None
        log_event(logger, "webhook.event", event_type=event.type, source_type=source_type)

        identifier = self._identifier_for(event)
        if identifier is None:
            await self._reply(event, [PROMPT_MESSAGE])
            return

        try:
            result = await self._pipeline.process(identifier)
        except ExportPipelineError as exc:
            logger.warning(
                "Error when processing sticker",
                extra={
                    "event": "webhook.export.failed",
                    "identifier": identifier,
                    "kind": exc.kind.value,
                },
            )
            await self._reply(event, [failure_message(exc.category)])
            return

        await self._reply(event, success_messages(self._download_url(result.identifier)))

    def _identifier_for(self, event: WebhookEvent) -> str | None:
        if not event.is_message:
            return None
        message = event.message
        if message is None:
            return None
        if message.type == "sticker":
            return message.package_id or None
        if message.type == "text" and message.text:
            return find_sticker_id(message.text)
        return None

    async def _reply(self, event: WebhookEvent, messages: list[str]) -> None:
        if not event.reply_token:
            log_event(logger, "webhook.reply.skipped", event_type=event.type)
            return
        try:
            await self._replier.reply(event.reply_token, messages)
        except Exception:
            logger.error(
                "Error replying to webhook event",
                extra={"event": "webhook.reply.failed", "event_type": event.type},
                exc_info=True,
            )

    def _track(self, task: asyncio.Task[None]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


__all__ = [
    "DOWNLOAD_HINT_MESSAGE",
    "PROMPT_MESSAGE",
    "STICKER_URL_PATTERNS",
    "StickerRequestService",
    "failure_message",
    "find_sticker_id",
    "success_messages",
]
