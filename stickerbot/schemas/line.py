"""Schema definitions for LINE Messaging API webhook payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _LineModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class EventSource(_LineModel):
    type: str
    user_id: str | None = Field(default=None, alias="userId")
    group_id: str | None = Field(default=None, alias="groupId")
    room_id: str | None = Field(default=None, alias="roomId")


class EventMessage(_LineModel):
    id: str
    type: str
    text: str | None = None
    package_id: str | None = Field(default=None, alias="packageId")
    sticker_id: str | None = Field(default=None, alias="stickerId")


class WebhookEvent(_LineModel):
    type: str
    reply_token: str | None = Field(default=None, alias="replyToken")
    timestamp: int | None = None
    source: EventSource | None = None
    message: EventMessage | None = None

    @property
    def is_message(self) -> bool:
        return self.type == "message" and self.message is not None


class WebhookPayload(_LineModel):
    destination: str | None = None
    events: list[WebhookEvent] = Field(default_factory=list)


class TextMessage(_LineModel):
    type: str = "text"
    text: str


class ReplyRequest(_LineModel):
    reply_token: str = Field(alias="replyToken")
    messages: list[TextMessage] = Field(min_length=1, max_length=5)


__all__ = [
    "EventMessage",
    "EventSource",
    "ReplyRequest",
    "TextMessage",
    "WebhookEvent",
    "WebhookPayload",
]
