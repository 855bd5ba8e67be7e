"""Data models: LINE webhook envelope, message variants and the canonical ingest record."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from line_ingest.errors import MalformedInput


UNKNOWN_USER = "Unknown User"


class MessageKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"
    LOCATION = "location"
    STICKER = "sticker"
    UNSUPPORTED = "unsupported"


# --- LINE transport models -------------------------------------------------


class LineSource(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str = "user"
    user_id: str | None = Field(None, alias="userId")


class LineEvent(BaseModel):
    """One entry of the webhook `events` array. Only `type` is required at this stage."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    timestamp: int | None = None
    source: LineSource | None = None
    message: dict[str, Any] | None = None
    webhook_event_id: str | None = Field(None, alias="webhookEventId")


class WebhookEnvelope(BaseModel):
    destination: str | None = None
    events: list[LineEvent]


# --- Message payload variants ----------------------------------------------


class _MessagePayload(BaseModel):
    model_config = ConfigDict(
        extra="allow", populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )


class TextMessage(_MessagePayload):
    type: Literal["text"] = "text"
    text: str | None = None


class ImageMessage(_MessagePayload):
    type: Literal["image"] = "image"


class VideoMessage(_MessagePayload):
    type: Literal["video"] = "video"


class AudioMessage(_MessagePayload):
    type: Literal["audio"] = "audio"


class FileMessage(_MessagePayload):
    type: Literal["file"] = "file"
    file_name: str | None = Field(None, alias="fileName")


class LocationMessage(_MessagePayload):
    type: Literal["location"] = "location"
    address: str | None = None


class StickerMessage(_MessagePayload):
    type: Literal["sticker"] = "sticker"
    sticker_id: str = Field("", alias="stickerId")
    package_id: str | None = Field(None, alias="packageId")


class UnsupportedMessage(_MessagePayload):
    type: str = "unknown"


Message = (
    TextMessage
    | ImageMessage
    | VideoMessage
    | AudioMessage
    | FileMessage
    | LocationMessage
    | StickerMessage
    | UnsupportedMessage
)

_MESSAGE_MODELS: dict[str, type[_MessagePayload]] = {
    "text": TextMessage,
    "image": ImageMessage,
    "video": VideoMessage,
    "audio": AudioMessage,
    "file": FileMessage,
    "location": LocationMessage,
    "sticker": StickerMessage,
}


def parse_message(payload: dict[str, Any]) -> Message:
    """Parse a LINE message payload into its variant. Never raises.

    Unknown types, and known types whose fields fail validation, become
    UnsupportedMessage.
    """
    msg_type = payload.get("type")
    model = _MESSAGE_MODELS.get(msg_type) if isinstance(msg_type, str) else None
    if model is not None:
        try:
            return model.model_validate(payload)
        except ValidationError:
            pass
    return UnsupportedMessage(type=msg_type if isinstance(msg_type, str) else "unknown")


class MessageEvent(BaseModel):
    """A validated `message` event: who sent what, when."""
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    timestamp: int
    sender_id: str
    message_id: str
    message: Message

    @classmethod
    def from_line_event(cls, event: LineEvent) -> "MessageEvent":
        raw = event.message or {}
        try:
            return cls(
                timestamp=event.timestamp,
                sender_id=(event.source.user_id if event.source else None) or "",
                message_id=raw.get("id"),
                message=parse_message(raw),
            )
        except ValidationError as e:
            raise MalformedInput(f"Invalid message event: {e.error_count()} validation error(s)") from e


# --- Canonical record --------------------------------------------------------


SHEET_COLUMNS = [
    "Timestamp",
    "User ID",
    "Display Name",
    "Message ID",
    "Message",
    "Message Type",
]


def format_timestamp(ms: int) -> str:
    """Epoch milliseconds -> ISO-8601 UTC with millisecond precision, e.g. 2023-11-14T22:13:20.000Z."""
    seconds, millis = divmod(ms, 1000)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


class IngestRecord(BaseModel):
    """Canonical unit written to the sink. Immutable; enrichment returns a copy."""
    model_config = ConfigDict(frozen=True)

    timestamp: int
    sender_id: str
    display_name: str | None = None
    message_id: str
    body: str
    kind: MessageKind

    def with_display_name(self, display_name: str) -> "IngestRecord":
        return self.model_copy(update={"display_name": display_name or UNKNOWN_USER})

    def to_row(self) -> list[str]:
        """Fixed 6-column sheet row, in SHEET_COLUMNS order."""
        if not self.display_name:
            raise ValueError(f"Record {self.message_id} has no display name")
        return [
            format_timestamp(self.timestamp),
            self.sender_id,
            self.display_name,
            self.message_id,
            self.body,
            self.kind.value,
        ]
